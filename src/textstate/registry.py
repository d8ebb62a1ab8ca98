"""
RegionRegistry: one controller per content path.

Only one controller may own a path's canonical value at a time. Hosts register
a controller on mount and unregister it on unmount; registering a second
controller for the same path tears the previous one down.
"""
import logging
from typing import Callable, Dict, List, Optional

from textstate.region import EditableRegionController

logger = logging.getLogger(__name__)


class RegionRegistry:
    """Singleton registry of mounted region controllers, keyed by path.

    Regions without a path are not tracked. Thread safety: not thread-safe
    (all operations expected on the UI thread).
    """
    _controllers: Dict[str, EditableRegionController] = {}

    # Callbacks receive (path, controller)
    _on_register_callbacks: List[Callable[[str, EditableRegionController], None]] = []
    _on_unregister_callbacks: List[Callable[[str, EditableRegionController], None]] = []

    @classmethod
    def add_register_callback(cls, callback: Callable[[str, EditableRegionController], None]) -> None:
        """Subscribe to controller registration events."""
        if callback not in cls._on_register_callbacks:
            cls._on_register_callbacks.append(callback)

    @classmethod
    def remove_register_callback(cls, callback: Callable[[str, EditableRegionController], None]) -> None:
        if callback in cls._on_register_callbacks:
            cls._on_register_callbacks.remove(callback)

    @classmethod
    def add_unregister_callback(cls, callback: Callable[[str, EditableRegionController], None]) -> None:
        """Subscribe to controller unregistration events."""
        if callback not in cls._on_unregister_callbacks:
            cls._on_unregister_callbacks.append(callback)

    @classmethod
    def remove_unregister_callback(cls, callback: Callable[[str, EditableRegionController], None]) -> None:
        if callback in cls._on_unregister_callbacks:
            cls._on_unregister_callbacks.remove(callback)

    @classmethod
    def _fire(cls, callbacks, path: str, controller: EditableRegionController) -> None:
        for callback in list(callbacks):
            try:
                callback(path, controller)
            except Exception as e:
                logger.warning(f"Error in registry callback: {e}")

    @classmethod
    def register(cls, controller: EditableRegionController) -> None:
        path = controller.path
        if not path:
            return

        existing = cls._controllers.get(path)
        if existing is controller:
            return
        if existing is not None:
            logger.warning(f"Second region mounted for path {path!r}, tearing down the previous one")
            existing.teardown()
            cls._fire(cls._on_unregister_callbacks, path, existing)

        cls._controllers[path] = controller
        logger.debug(f"Registered region: path={path}")
        cls._fire(cls._on_register_callbacks, path, controller)

    @classmethod
    def unregister(cls, controller: EditableRegionController) -> None:
        path = controller.path
        if not path or cls._controllers.get(path) is not controller:
            return
        del cls._controllers[path]
        logger.debug(f"Unregistered region: path={path}")
        cls._fire(cls._on_unregister_callbacks, path, controller)

    @classmethod
    def get(cls, path: str) -> Optional[EditableRegionController]:
        return cls._controllers.get(path)

    @classmethod
    def get_all(cls) -> List[EditableRegionController]:
        return list(cls._controllers.values())

    @classmethod
    def editing(cls) -> List[EditableRegionController]:
        """Controllers currently in the EDITING phase."""
        return [c for c in cls._controllers.values() if c.is_editing]

    @classmethod
    def clear(cls) -> None:
        """Tear down and drop every controller. For testing and page teardown."""
        for controller in cls._controllers.values():
            controller.teardown()
        cls._controllers.clear()
        logger.debug("Cleared all regions from registry")
