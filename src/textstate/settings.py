"""
Editor settings with thread-local current-settings storage.

Settings are immutable dataclasses. A controller reads the current settings
once, at construction, so swapping settings never changes a live region.
"""

import threading
from dataclasses import dataclass, field
from typing import Optional, Tuple

from textstate.style import TextSizeScale


@dataclass(frozen=True)
class EditorSettings:
    """Editing behaviour shared by every region.

    Attributes:
        live_commit_excluded_prefixes: Paths under these prefixes never commit
            live; they report on blur only (e.g. menu items, whose re-render
            while typing is expensive).
        size_scale: Bounds and presets for the text size control.
    """
    live_commit_excluded_prefixes: Tuple[str, ...] = ('menu.',)
    size_scale: TextSizeScale = field(default_factory=TextSizeScale)


_current_settings = threading.local()


def set_current_settings(settings: EditorSettings) -> None:
    """Set the editor settings used by controllers created on this thread."""
    _current_settings.value = settings


def get_current_settings() -> EditorSettings:
    """Get the current editor settings, or defaults when none were set."""
    settings: Optional[EditorSettings] = getattr(_current_settings, 'value', None)
    return settings if settings is not None else EditorSettings()


def reset_settings() -> None:
    """Drop the thread's settings so defaults apply again."""
    if hasattr(_current_settings, 'value'):
        del _current_settings.value
