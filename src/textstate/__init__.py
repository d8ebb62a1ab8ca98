"""
In-place editing engine for rendered page text.

Keeps a mutable, platform-controlled editable region in sync with the
canonical plain-text value owned by the host, without update loops, caret
loss or structural corruption.

Quick Start:
    >>> from textstate import EditableRegionController, Multiline
    >>>
    >>> edits = []
    >>> region = EditableRegionController(
    ...     'hero.headline', 'Welcome\\nHome', kind=Multiline(),
    ...     editable=True, on_edit=lambda path, value: edits.append((path, value)),
    ... )
    >>> region.focus()
    >>> # ... the platform mutates region.region ...
    >>> region.blur()
    >>> edits
    [('hero.headline', 'Welcome\\nHome')]

Architecture:
    Canonicalizer -> Commit Pipeline -> Editable Region Controller

    The canonicalizer converts between region structure (lxml elements) and
    canonical text. The commit pipeline decides when a change is reported.
    The controller owns the structure and runs the Idle/Editing state machine.
    RegionBinding composes a controller with langconf's TranslationResolver at
    render time.

Modules:
    - canonicalizer: structure <-> canonical text, region kinds
    - commit_pipeline: live/blur/paste commit policy and suppression
    - region: Editable Region Controller state machine
    - registry: one controller per content path
    - binding: render-time composition with translation resolution
    - style: sibling style attributes and recent style history
    - content: host content store addressed by dotted paths
    - hours: canonical business-hours values
    - settings: editor settings (thread-local current settings)
"""

from textstate.canonicalizer import (
    Anchor,
    Multiline,
    RegionKind,
    SingleLine,
    StructuralExtractionFailure,
    decode_entities,
    flatten_whitespace,
    from_canonical,
    normalize_canonical,
    serialize,
    strip_formatting,
    to_canonical,
)
from textstate.commit_pipeline import CommitPipeline, CommitReason
from textstate.region import EditableRegionController, RegionPhase, RegionState
from textstate.registry import RegionRegistry
from textstate.binding import RegionBinding
from textstate.style import RecentStyles, StyleHooks, TextSizeScale, TextStyle
from textstate.content import ContentStore
from textstate.hours import canonical_hours, format_hours, migrate_business_hours, toggle_closed
from textstate.settings import EditorSettings, get_current_settings, set_current_settings, reset_settings

__all__ = [
    # Canonicalizer
    'Anchor',
    'Multiline',
    'RegionKind',
    'SingleLine',
    'StructuralExtractionFailure',
    'decode_entities',
    'flatten_whitespace',
    'from_canonical',
    'normalize_canonical',
    'serialize',
    'strip_formatting',
    'to_canonical',
    # Commit pipeline
    'CommitPipeline',
    'CommitReason',
    # Controller
    'EditableRegionController',
    'RegionPhase',
    'RegionState',
    'RegionRegistry',
    'RegionBinding',
    # Style
    'RecentStyles',
    'StyleHooks',
    'TextSizeScale',
    'TextStyle',
    # Host helpers
    'ContentStore',
    'canonical_hours',
    'format_hours',
    'migrate_business_hours',
    'toggle_closed',
    # Settings
    'EditorSettings',
    'get_current_settings',
    'set_current_settings',
    'reset_settings',
]

__version__ = '1.0.0'
