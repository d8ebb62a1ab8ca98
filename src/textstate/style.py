"""
Style attributes for editable regions.

Size, color, bold and alignment are sibling attributes of a region: they are
written onto the region root's ``style`` attribute and never embedded in the
content, so they never reach the canonical text.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

ALIGNMENTS = ('left', 'center', 'right')
MAX_RECENT_COLORS = 8
MAX_RECENT_FONTS = 5
FONT_SEPARATOR = {'value': '__separator__', 'label': '──────────'}


@dataclass(frozen=True)
class TextStyle:
    """Sibling style attributes of one region."""
    size: float = 1.0
    color: Optional[str] = None
    bold: bool = False
    align: str = 'center'

    def __post_init__(self):
        if self.align not in ALIGNMENTS:
            raise ValueError(f"align must be one of {ALIGNMENTS}, got {self.align!r}")

    def css(self) -> str:
        """Inline CSS declarations for the region root."""
        declarations = [f"font-size: {self.size:g}rem"]
        if self.color:
            declarations.append(f"color: {self.color}")
        if self.bold:
            declarations.append("font-weight: bold")
        declarations.append(f"text-align: {self.align}")
        return '; '.join(declarations)


@dataclass(frozen=True)
class TextSizeScale:
    """Presets and bounds offered by a text size control."""
    presets: Tuple[float, ...] = (0.75, 1.0, 1.25, 1.5)
    normal: float = 1.0
    minimum: float = 0.5
    maximum: float = 2.5

    def clamp(self, size: float) -> float:
        return max(self.minimum, min(self.maximum, float(size)))

    def label(self, size: float) -> str:
        if size == self.normal:
            return 'Normal'
        return f"{round(size * 100)}%"

    def options(self) -> List[Tuple[float, str]]:
        return [(size, self.label(size)) for size in self.presets]


@dataclass
class StyleHooks:
    """Optional host notifications for style changes."""
    on_size: Optional[Callable[[float], None]] = None
    on_color: Optional[Callable[[str], None]] = None
    on_bold: Optional[Callable[[bool], None]] = None
    on_align: Optional[Callable[[str], None]] = None

    def fire(self, attribute: str, value) -> None:
        """Invoke the hook for ``attribute`` if the host supplied one (best-effort)."""
        callback = getattr(self, f"on_{attribute}", None)
        if callback is None:
            return
        try:
            callback(value)
        except Exception as e:
            logger.warning(f"Error in {attribute} style hook: {e}")


class RecentStyles:
    """Most-recently-used colors and fonts, most recent first."""

    def __init__(self):
        self.colors: List[str] = []
        self.fonts: List[str] = []

    def add_color(self, color: str) -> None:
        if not color:
            return
        normalized = color.lower()
        remaining = [c for c in self.colors if c.lower() != normalized]
        self.colors = [color, *remaining][:MAX_RECENT_COLORS]

    def add_font(self, font: str) -> None:
        if not font:
            return
        remaining = [f for f in self.fonts if f != font]
        self.fonts = [font, *remaining][:MAX_RECENT_FONTS]

    def color_presets(self, base_presets: Sequence[str] = ()) -> List[str]:
        """Recent colors followed by base presets not already present."""
        combined = list(self.colors)
        for color in base_presets:
            if not any(c.lower() == color.lower() for c in combined):
                combined.append(color)
        return combined

    def reordered_fonts(self, options: Sequence[Dict[str, str]]) -> List[Dict[str, str]]:
        """Recent fonts first, a separator, then the rest with Default ("") on top."""
        if not self.fonts:
            return list(options)

        recent = []
        for font in self.fonts:
            option = next((o for o in options if o['value'] == font), None)
            if option and option['value'] != '':
                recent.append(option)

        others = []
        for option in options:
            if option['value'] == '':
                others.insert(0, option)
            elif option['value'] not in self.fonts:
                others.append(option)

        if not recent:
            return list(options)
        return [*recent, dict(FONT_SEPARATOR), *others]
