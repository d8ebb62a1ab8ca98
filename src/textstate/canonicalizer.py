"""
Conversion between an editable region's internal structure and its canonical text.

The structure is an lxml element (the region root). Editing platforms express
line breaks as a mix of ``<br>`` markers and block groupings (``<div>``/``<p>``),
and may leave inline formatting behind after a paste. The canonical text is a
plain string where ``\\n`` is the only structural marker.

Region kinds form a closed set of variants, each carrying its own rule:

    SingleLine  - all markup stripped, text content flattened
    Multiline   - ``<br>`` becomes ``\\n``; every block grouping after the first
                  contributes a preceding ``\\n``
    Anchor      - single-line rule, link attributes written onto the root

Extraction only ever reads the structure. Hydration regenerates ``<br>``
markers only, never block groupings, so hydrate/extract is idempotent.
"""

import logging
import re
from dataclasses import dataclass
from typing import ClassVar, Optional, Union

from lxml import etree
from lxml import html as lxml_html

logger = logging.getLogger(__name__)

BLOCK_TAGS = frozenset({'div', 'p'})

# Named references decoded once when a region is first hydrated
ENTITY_MAP = {
    '&amp;': '&',
    '&lt;': '<',
    '&gt;': '>',
    '&quot;': '"',
    '&ldquo;': '"',
    '&rdquo;': '"',
    '&#39;': "'",
    '&apos;': "'",
}

_ENTITY_RE = re.compile(r'&[a-zA-Z0-9#]+;')
_XML_INCOMPATIBLE_RE = re.compile(r'[\x00-\x08\x0b\x0c\x0e-\x1f]')
_SPACE_AROUND_NEWLINE_RE = re.compile(r'[ \t]*\n[ \t]*')
_EXCESS_NEWLINES_RE = re.compile(r'\n{3,}')
_WHITESPACE_RUN_RE = re.compile(r'\s+')


class StructuralExtractionFailure(Exception):
    """Region structure could not be read as canonical text."""


# ==================== REGION KINDS ====================

@dataclass(frozen=True)
class SingleLine:
    """Single-line region: markup is stripped, text is flattened."""

    multiline: ClassVar[bool] = False

    def extract(self, root) -> str:
        return _text_content(root)

    def hydrate(self, root, text: str) -> None:
        root.text = text or None


@dataclass(frozen=True)
class Multiline:
    """Multiline region: line breaks survive as ``\\n``."""

    multiline: ClassVar[bool] = True

    def extract(self, root) -> str:
        blocks = [el for el in root.iterdescendants() if _tag(el) in BLOCK_TAGS]
        first_block = blocks[0] if blocks else None
        parts = []
        _emit_multiline(root, parts, first_block)
        return ''.join(parts)

    def hydrate(self, root, text: str) -> None:
        lines = text.split('\n')
        root.text = lines[0] or None
        for line in lines[1:]:
            br = etree.SubElement(root, 'br')
            br.tail = line or None


@dataclass(frozen=True)
class Anchor(SingleLine):
    """Single-line link region; href/target/rel live on the region root."""

    href: Optional[str] = None
    target: Optional[str] = None
    rel: Optional[str] = None

    def hydrate(self, root, text: str) -> None:
        for name in ('href', 'target', 'rel'):
            value = getattr(self, name)
            if value:
                root.set(name, value)
        super().hydrate(root, text)


RegionKind = Union[SingleLine, Multiline, Anchor]


# ==================== TREE WALKS (read-only) ====================

def _tag(el) -> Optional[str]:
    """Lower-cased tag name, or None for comments and processing instructions."""
    return el.tag.lower() if isinstance(el.tag, str) else None


def _text_content(el) -> str:
    parts = [el.text or ''] if _tag(el) is not None else []
    for child in el:
        if _tag(child) is not None:
            parts.append(_text_content(child))
        parts.append(child.tail or '')
    return ''.join(parts)


def _text_with_breaks(el) -> str:
    parts = [el.text or '']
    for child in el:
        tag = _tag(child)
        if tag == 'br':
            parts.append('\n')
        elif tag is not None:
            parts.append(_text_with_breaks(child))
        parts.append(child.tail or '')
    return ''.join(parts)


def _emit_multiline(el, parts: list, first_block) -> None:
    if el.text:
        parts.append(el.text)
    for child in el:
        tag = _tag(child)
        if tag == 'br':
            parts.append('\n')
        elif tag in BLOCK_TAGS:
            if child is not first_block:
                parts.append('\n')
            # Nested groupings only contribute their text
            parts.append(_text_with_breaks(child))
        elif tag is not None:
            _emit_multiline(child, parts, first_block)
        if child.tail:
            parts.append(child.tail)


def _check_structure(structure) -> None:
    if structure is None or not etree.iselement(structure):
        raise StructuralExtractionFailure(f"Region structure is not an element: {structure!r}")
    if not isinstance(structure.tag, str):
        raise StructuralExtractionFailure(f"Region root is not a tag: {structure!r}")


# ==================== PUBLIC API ====================

def to_canonical(structure, kind: RegionKind) -> str:
    """Extract raw canonical text from a region structure (no trimming).

    Raises:
        StructuralExtractionFailure: the structure cannot be read.
    """
    _check_structure(structure)
    try:
        return kind.extract(structure)
    except (AttributeError, TypeError, ValueError) as e:
        raise StructuralExtractionFailure(f"Malformed region structure: {e}") from e


def from_canonical(text: str, kind: RegionKind, tag: str = 'span', placeholder: Optional[str] = None):
    """Build a fresh region structure from canonical text."""
    root = lxml_html.Element(tag)
    if placeholder:
        root.set('data-placeholder', placeholder)
    kind.hydrate(root, _xml_safe(text))
    return root


def rehydrate(structure, text: str, kind: RegionKind) -> None:
    """Replace a region's content in place, keeping the root and its attributes."""
    for child in list(structure):
        structure.remove(child)
    structure.text = None
    kind.hydrate(structure, _xml_safe(text))


def insert_plain_text(structure, text: str, kind: RegionKind, replace: bool = False) -> None:
    """Insert unformatted text at the caret (the end of the region).

    Args:
        structure: Region root to write into.
        text: Plain text, already stripped of formatting.
        kind: Region kind; only multiline regions turn ``\\n`` into ``<br>``.
        replace: Replace the whole content instead of appending (select-all paste).
    """
    text = _xml_safe(text)
    if replace:
        rehydrate(structure, '', kind)
    lines = text.split('\n') if kind.multiline else [text]
    _append_inline(structure, lines[0])
    for line in lines[1:]:
        br = etree.SubElement(structure, 'br')
        br.tail = line or None


def _append_inline(structure, text: str) -> None:
    if not text:
        return
    if len(structure):
        last = structure[-1]
        last.tail = (last.tail or '') + text
    else:
        structure.text = (structure.text or '') + text


def serialize(structure) -> str:
    """Markup for a region structure."""
    return lxml_html.tostring(structure, encoding='unicode')


def decode_entities(text: str) -> str:
    """Decode the fixed set of named character references; leave others as-is."""
    return _ENTITY_RE.sub(lambda m: ENTITY_MAP.get(m.group(0), m.group(0)), text)


def normalize_canonical(text: str) -> str:
    """One normalization pass: spaces around newlines, 3+ newlines, outer whitespace."""
    text = text.replace('\r\n', '\n').replace('\r', '\n').replace('\xa0', ' ')
    text = _SPACE_AROUND_NEWLINE_RE.sub('\n', text)
    text = _EXCESS_NEWLINES_RE.sub('\n\n', text)
    return text.strip()


def flatten_whitespace(text: str) -> str:
    """Collapse every whitespace run (newlines included) to one space."""
    return _WHITESPACE_RUN_RE.sub(' ', text).strip()


def strip_formatting(plain: Optional[str], html: Optional[str] = None) -> str:
    """Plain text of clipboard content: the plain flavour, else the HTML's text."""
    if plain:
        return plain
    if not html or not html.strip():
        return ''
    try:
        fragment = lxml_html.fragment_fromstring(html, create_parent='div')
    except (etree.ParserError, ValueError) as e:
        logger.debug(f"Could not parse pasted markup, dropping it: {e}")
        return ''
    return _text_content(fragment)


def _xml_safe(text: str) -> str:
    return _XML_INCOMPATIBLE_RE.sub('', text or '')
