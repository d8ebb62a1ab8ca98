"""
Render-time composition of a region controller with translation resolution.

A RegionBinding is the mount point for one editable text. On every render the
host supplies (value, requested edit mode, style); the binding:

- gates edit mode on the language session (only the default language edits)
- computes the identity key (path, active language, edit mode)
- rebuilds the controller when the key changed, otherwise hands it the value

Non-editable display asks the resolver for the string first; the
canonicalizer only ever sees the resolved text. Editable display uses the
host value as-is, so a field is never shown translated while it is edited in
its source language.
"""

import logging
from typing import Any, Callable, Optional, Tuple

from langconf.resolver import TranslationResolver
from textstate.canonicalizer import RegionKind, SingleLine
from textstate.region import EditableRegionController, coerce_value
from textstate.registry import RegionRegistry
from textstate.settings import EditorSettings
from textstate.style import StyleHooks, TextStyle

logger = logging.getLogger(__name__)

IdentityKey = Tuple[str, str, bool]


class RegionBinding:
    """Mounts and rebuilds the controller for one content path."""

    def __init__(
        self,
        path: str,
        resolver: TranslationResolver,
        kind: Optional[RegionKind] = None,
        tag: str = 'span',
        on_edit: Optional[Callable[[str, str], None]] = None,
        on_blur: Optional[Callable[[], None]] = None,
        placeholder: Optional[str] = None,
        style_hooks: Optional[StyleHooks] = None,
        settings: Optional[EditorSettings] = None,
    ):
        self.path = path
        self.resolver = resolver
        self.kind = kind or SingleLine()
        self.tag = tag
        self._on_edit = on_edit
        self._on_blur = on_blur
        self.placeholder = placeholder
        self._style_hooks = style_hooks
        self._settings = settings
        self._controller: Optional[EditableRegionController] = None
        self._key: Optional[IdentityKey] = None

    @property
    def controller(self) -> Optional[EditableRegionController]:
        return self._controller

    @property
    def identity_key(self) -> Optional[IdentityKey]:
        return self._key

    def render(self, value: Any, editable: bool = False, style: Optional[TextStyle] = None) -> EditableRegionController:
        """Bring the controller in line with the host's latest props."""
        allowed = self.resolver.can_edit(editable)
        key = (self.path, self.resolver.session.current, allowed)

        if allowed:
            display = coerce_value(value)
        else:
            display = self.resolver.resolve(self.path, fallback=coerce_value(value))

        if self._controller is None or key != self._key:
            self._rebuild(key, display, allowed, style)
        else:
            self._controller.update_value(display)
            if style is not None and style != self._controller.style:
                self._controller.apply_style(style)
        return self._controller

    def display_text(self) -> str:
        return self._controller.display_text() if self._controller else (self.placeholder or '')

    def unmount(self) -> None:
        if self._controller is not None:
            self._controller.teardown()
            RegionRegistry.unregister(self._controller)
        self._controller = None
        self._key = None

    def _rebuild(self, key: IdentityKey, display: str, editable: bool, style: Optional[TextStyle]) -> None:
        if self._controller is not None:
            logger.debug(f"Identity of {self.path!r} changed {self._key} -> {key}, rebuilding region")
            self.unmount()
        self._controller = EditableRegionController(
            self.path,
            display,
            kind=self.kind,
            tag=self.tag,
            editable=editable,
            on_edit=self._on_edit,
            on_blur=self._on_blur,
            placeholder=self.placeholder,
            style=style,
            style_hooks=self._style_hooks,
            settings=self._settings,
        )
        self._key = key
        RegionRegistry.register(self._controller)
