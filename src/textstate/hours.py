"""
Canonical form for business-hours day values.

A day is one of:

    "closed"                                   closed all day
    "open24"                                   always open
    {"open": "9:00 AM", "close": "5:00 PM"}    a single opening range

Older content encodes "always open" three different ways; canonical_hours()
migrates all of them to "open24" so display code checks one form only.
"""

from typing import Any, Callable, Dict, Optional, Union

CLOSED = 'closed'
ALWAYS_OPEN = 'open24'
DEFAULT_RANGE = {'open': '9:00 AM', 'close': '5:00 PM'}

_LEGACY_ALWAYS_OPEN = {
    ('Open 24 hours', 'Open 24 hours'),
    ('12:00 AM', '11:59 PM'),
    ('00:00', '23:59'),
}

HoursValue = Union[str, Dict[str, str]]


def canonical_hours(value: Any) -> Optional[HoursValue]:
    """Canonical form of a stored day value (None when the day is unset)."""
    if value is None or value == '':
        return None
    if isinstance(value, dict):
        pair = (value.get('open'), value.get('close'))
        if pair in _LEGACY_ALWAYS_OPEN:
            return ALWAYS_OPEN
        return {'open': str(pair[0] or ''), 'close': str(pair[1] or '')}
    text = str(value).strip()
    if text.lower() == CLOSED:
        return CLOSED
    if text.lower() in (ALWAYS_OPEN, 'open 24 hours'):
        return ALWAYS_OPEN
    return text


def migrate_business_hours(hours: Optional[Dict[str, Any]]) -> Dict[str, HoursValue]:
    """Canonicalize every day of a business-hours mapping, dropping unset days."""
    migrated = {}
    for day, value in (hours or {}).items():
        canonical = canonical_hours(value)
        if canonical is not None:
            migrated[day] = canonical
    return migrated


def format_hours(value: Any, translate: Optional[Callable[[str, str], str]] = None) -> str:
    """Display text for a day value.

    Args:
        value: Stored day value, canonical or legacy.
        translate: ``(key, fallback) -> str``, typically ``TranslationResolver.resolve``.
    """
    translate = translate or (lambda key, fallback: fallback)
    canonical = canonical_hours(value)
    if canonical is None or canonical == CLOSED:
        return translate('contact.closed', 'Closed')
    if canonical == ALWAYS_OPEN:
        return translate('contact.open24Hours', 'Open 24 hours')
    if isinstance(canonical, dict):
        return f"{canonical['open']} - {canonical['close']}"
    return canonical


def toggle_closed(value: Any) -> HoursValue:
    """Closed days open with the default range; any other day closes."""
    if canonical_hours(value) == CLOSED:
        return dict(DEFAULT_RANGE)
    return CLOSED
