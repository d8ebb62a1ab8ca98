"""
Host-side content store addressed by dotted paths.

The edit callback target: ``apply_edit(path, value)`` writes a committed value
into the nested content tree, and the host re-supplies ``get(path)`` to the
region on its next render.
"""

import copy
import logging
from typing import Any, Callable, List, Optional

from langconf.tree import split_path, walk_path

logger = logging.getLogger(__name__)


class ContentStore:
    """Nested dict/list content tree with path-addressed edits."""

    def __init__(self, tree: Optional[dict] = None):
        self._tree = copy.deepcopy(tree) if tree else {}
        self._on_change_callbacks: List[Callable[[str, Any], None]] = []

    @property
    def tree(self) -> dict:
        return self._tree

    def on_change(self, callback: Callable[[str, Any], None]) -> None:
        """Subscribe to applied edits; callbacks receive (path, value)."""
        if callback not in self._on_change_callbacks:
            self._on_change_callbacks.append(callback)

    def off_change(self, callback: Callable[[str, Any], None]) -> None:
        if callback in self._on_change_callbacks:
            self._on_change_callbacks.remove(callback)

    def get(self, path: str, default: Any = None) -> Any:
        found, value = walk_path(self._tree, path)
        return value if found else default

    def apply_edit(self, path: str, value: Any) -> None:
        """Write ``value`` at ``path``, creating intermediate mappings as needed.

        Raises:
            KeyError: the path is empty or crosses a value that is neither a
                mapping nor a list, or a list index is out of range.
        """
        segments = split_path(path)
        if not segments:
            raise KeyError(f"Empty content path: {path!r}")

        node = self._tree
        for segment in segments[:-1]:
            node = self._child(node, segment, path)
        self._assign(node, segments[-1], value, path)
        logger.debug(f"Applied edit {path} = {value!r}")

        for callback in list(self._on_change_callbacks):
            try:
                callback(path, value)
            except Exception as e:
                logger.warning(f"Error in content change callback: {e}")

    @staticmethod
    def _child(node: Any, segment: str, path: str) -> Any:
        if isinstance(node, list):
            if not segment.isdigit() or int(segment) >= len(node):
                raise KeyError(f"No list item {segment!r} in {path!r}")
            return node[int(segment)]
        if isinstance(node, dict):
            if node.get(segment) is None:
                node[segment] = {}
            elif not isinstance(node[segment], (dict, list)):
                raise KeyError(f"{segment!r} in {path!r} holds a value, not a subtree")
            return node[segment]
        raise KeyError(f"Cannot descend into {type(node).__name__} at {segment!r} in {path!r}")

    @staticmethod
    def _assign(node: Any, segment: str, value: Any, path: str) -> None:
        if isinstance(node, list):
            if not segment.isdigit() or int(segment) >= len(node):
                raise KeyError(f"No list item {segment!r} in {path!r}")
            node[int(segment)] = value
        elif isinstance(node, dict):
            node[segment] = value
        else:
            raise KeyError(f"Cannot assign into {type(node).__name__} at {segment!r} in {path!r}")
