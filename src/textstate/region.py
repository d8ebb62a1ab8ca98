"""
Editable Region Controller: owns one region's structure and edit lifecycle.

State machine:

    IDLE --focus--> EDITING
    EDITING --blur--> IDLE      (blur commit policy runs)
    EDITING --cancel--> IDLE    (structure reverted, no commit)

While EDITING the controller exclusively owns its region's structure: external
value updates are ignored so the caret and in-progress markup survive. While
IDLE, every external value change re-hydrates the structure.

The controller is never patched across a context switch. Whoever mounts it
tears it down and builds a new one when (path, language, edit mode) changes.
"""

import dataclasses
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

from textstate.canonicalizer import (
    RegionKind,
    SingleLine,
    decode_entities,
    from_canonical,
    insert_plain_text,
    rehydrate,
    flatten_whitespace,
    strip_formatting,
)
from textstate.commit_pipeline import CommitPipeline, CommitReason
from textstate.settings import EditorSettings, get_current_settings
from textstate.style import StyleHooks, TextStyle

logger = logging.getLogger(__name__)


class RegionPhase(Enum):
    IDLE = "idle"
    EDITING = "editing"


@dataclass
class RegionState:
    """Observable state of one region.

    is_editing spans focus to blur. is_suppressed holds while a companion
    style control is mid-interaction.
    """
    path: Optional[str]
    canonical_value: str = ''
    is_editing: bool = False
    is_suppressed: bool = False


def coerce_value(value: Any) -> str:
    """Host values may be missing or numeric; regions only hold text."""
    return '' if value is None else str(value)


class EditableRegionController:
    """Mediates between one region's structure and the host's canonical value.

    Args:
        path: Dotted content path (also the translation key).
        value: Canonical value supplied by the host.
        kind: Region kind; defaults to single-line.
        tag: Tag of the region root.
        editable: Whether the region accepts edits at all.
        on_edit: Host callback ``(path, value)`` for commits.
        on_change: Callback ``(value)`` for regions without a path.
        on_blur: Host notification after every blur or cancel.
        placeholder: Hint shown while the region is empty.
        style: Initial sibling style attributes.
        style_hooks: Optional host notifications for style changes.
        settings: Editor settings; the thread's current settings by default.
    """

    def __init__(
        self,
        path: Optional[str],
        value: Any = None,
        kind: Optional[RegionKind] = None,
        tag: str = 'span',
        editable: bool = False,
        on_edit: Optional[Callable[[str, str], None]] = None,
        on_change: Optional[Callable[[str], None]] = None,
        on_blur: Optional[Callable[[], None]] = None,
        placeholder: Optional[str] = None,
        style: Optional[TextStyle] = None,
        style_hooks: Optional[StyleHooks] = None,
        settings: Optional[EditorSettings] = None,
    ):
        settings = settings or get_current_settings()
        self.path = path
        self.kind = kind or SingleLine()
        self.tag = tag
        self.editable = editable
        self.placeholder = placeholder
        self._size_scale = settings.size_scale
        self._style_hooks = style_hooks or StyleHooks()
        self._on_blur = on_blur
        self._phase = RegionPhase.IDLE
        self._torn_down = False

        # Entities are decoded here only; re-decoding committed text would
        # turn a literal "&amp;" typed by the user into "&".
        supplied = coerce_value(value)
        initial = decode_entities(supplied)
        self.state = RegionState(path=path, canonical_value=initial)

        # Last raw host value and the text it hydrates to
        self._supplied_raw = supplied
        self._supplied_text = initial
        self._region = from_canonical(initial, self.kind, tag=tag, placeholder=placeholder)

        self._style = style or TextStyle()
        self._region.set('style', self._style.css())

        self._pipeline = CommitPipeline(
            path,
            self.kind,
            committed_value=initial,
            on_edit=on_edit if editable else None,
            on_change=on_change if editable else None,
            on_settled=self._rehydrate,
            structure_provider=lambda: self._region,
            live_excluded_prefixes=settings.live_commit_excluded_prefixes,
        )
        logger.debug(f"Mounted region path={path!r} kind={type(self.kind).__name__} editable={editable}")

    # ========== PROPERTIES ==========

    @property
    def phase(self) -> RegionPhase:
        return self._phase

    @property
    def is_editing(self) -> bool:
        return self._phase is RegionPhase.EDITING

    @property
    def region(self):
        """Current region handle, for a companion control to position against."""
        return self._region

    @property
    def value(self) -> str:
        return self.state.canonical_value

    @property
    def style(self) -> TextStyle:
        return self._style

    @property
    def torn_down(self) -> bool:
        return self._torn_down

    def display_text(self) -> str:
        """Text shown for the region: its canonical value, else the placeholder."""
        return self.state.canonical_value or self.placeholder or ''

    # ========== EDIT LIFECYCLE ==========

    def focus(self) -> None:
        if not self.editable or self._torn_down or self.is_editing:
            return
        self._phase = RegionPhase.EDITING
        self.state.is_editing = True
        logger.debug(f"Region {self.path!r}: IDLE -> EDITING")

    def blur(self) -> None:
        if not self.is_editing:
            return
        self._leave_editing()
        self._pipeline.commit(self._region, CommitReason.BLUR)
        self._notify_blur()

    def cancel(self) -> None:
        """Revert the live structure to the last committed value and leave editing."""
        if not self.is_editing:
            return
        self._pipeline.discard_pending()
        self._rehydrate(self._pipeline.revert())
        self._leave_editing()
        logger.debug(f"Region {self.path!r}: edit cancelled, reverted to {self.state.canonical_value!r}")
        self._notify_blur()

    def key_press(self, key: str) -> bool:
        """Handle a key while editing.

        Returns:
            True when the key was consumed (default action must be prevented).
        """
        if not self.is_editing:
            return False
        if key == 'Enter' and not self.kind.multiline:
            self.blur()
            return True
        if key == 'Escape':
            self.cancel()
            return True
        return False

    def observe_mutation(self) -> Optional[str]:
        """Platform changed the structure. Reads it, never writes it."""
        if not self.is_editing:
            return None
        return self._pipeline.commit(self._region, CommitReason.LIVE)

    def paste(self, plain: Optional[str], html: Optional[str] = None, replace: bool = False) -> Optional[str]:
        """Insert clipboard content as plain text only, then run the live policy.

        Args:
            plain: ``text/plain`` flavour of the clipboard.
            html: ``text/html`` flavour, used only when there is no plain text.
            replace: The whole content was selected and is replaced.
        """
        if not self.is_editing:
            return None
        text = strip_formatting(plain, html)
        if not self.kind.multiline:
            text = flatten_whitespace(text)
        insert_plain_text(self._region, text, self.kind, replace=replace)
        return self._pipeline.commit(self._region, CommitReason.PASTE)

    def update_value(self, value: Any) -> None:
        """Host supplied a (possibly new) canonical value.

        A raw value seen before hydrates to the same text as last time, so
        re-rendering an entity-bearing prop never re-hydrates it undecoded.
        A new raw value is decoded unless it echoes the region's own commit.
        """
        if self._torn_down:
            return
        raw = coerce_value(value)
        if self.is_editing or self._pipeline.has_pending:
            if raw != self._supplied_raw:
                logger.debug(f"Region {self.path!r} owns its structure, ignoring external value {raw!r}")
            return
        if raw != self._supplied_raw:
            self._supplied_raw = raw
            self._supplied_text = raw if raw == self.state.canonical_value else decode_entities(raw)
        if self._supplied_text != self.state.canonical_value:
            self._rehydrate(self._supplied_text)

    # ========== STYLE ==========

    def begin_style_interaction(self) -> None:
        self._pipeline.suppress()
        self.state.is_suppressed = True

    def end_style_interaction(self) -> None:
        self.state.is_suppressed = False
        # Focus came back before the control closed: the next blur commits
        self._pipeline.release(flush=not self.is_editing)

    def apply_style(self, style: TextStyle) -> None:
        """Host-supplied style attributes (no hooks fired)."""
        self._style = style
        self._region.set('style', style.css())

    def change_style(self, size: Optional[float] = None, color: Optional[str] = None,
                     bold: Optional[bool] = None, align: Optional[str] = None) -> TextStyle:
        """User changed a style attribute through a companion control."""
        if not self.editable or self._torn_down:
            return self._style
        changes = {}
        if size is not None:
            changes['size'] = self._size_scale.clamp(size)
        if color is not None:
            changes['color'] = color
        if bold is not None:
            changes['bold'] = bool(bold)
        if align is not None:
            changes['align'] = align
        self.apply_style(dataclasses.replace(self._style, **changes))
        for attribute, new_value in changes.items():
            self._style_hooks.fire(attribute, new_value)
        return self._style

    # ========== TEARDOWN ==========

    def teardown(self) -> None:
        """Release the region; a blur commit still deferred is flushed first."""
        if self._torn_down:
            return
        if self._pipeline.has_pending:
            self._pipeline.release(flush=True)
        self._pipeline.discard_pending()
        self._phase = RegionPhase.IDLE
        self.state.is_editing = False
        self.state.is_suppressed = False
        self._torn_down = True
        logger.debug(f"Tore down region path={self.path!r}")

    # ========== INTERNALS ==========

    def _leave_editing(self) -> None:
        self._phase = RegionPhase.IDLE
        self.state.is_editing = False
        logger.debug(f"Region {self.path!r}: EDITING -> IDLE")

    def _rehydrate(self, value: str) -> None:
        rehydrate(self._region, value, self.kind)
        self.state.canonical_value = value
        self._pipeline.reset(value)

    def _notify_blur(self) -> None:
        if self._on_blur is None:
            return
        try:
            self._on_blur()
        except Exception as e:
            logger.warning(f"Error in blur callback for {self.path!r}: {e}")
