"""
Commit policy for editable regions.

Decides when a structural change is extracted and reported upward:

    kind         reason   action
    single-line  live     extract and report immediately
    single-line  blur     extract, trim, report, re-hydrate
    multiline    live     nothing (structure is ambiguous mid-edit)
    multiline    blur     extract, normalize, report, re-hydrate
    any          paste    proceed as live (formatting stripped by the caller)

Two values are tracked:
- last_committed: baseline the region returns to on cancel (set on hydration
  and on every blur commit)
- live value: last value sent by a live commit during the current edit

A blur commit issued while suppressed is queued and flushed on release. It is
never dropped except by an explicit cancel; teardown flushes it.
"""

import logging
from enum import Enum
from typing import Any, Callable, Optional, Sequence

from textstate.canonicalizer import (
    RegionKind,
    StructuralExtractionFailure,
    normalize_canonical,
    to_canonical,
)

logger = logging.getLogger(__name__)


class CommitReason(Enum):
    LIVE = "live"
    BLUR = "blur"
    PASTE = "paste"


class CommitPipeline:
    """Applies the commit policy for one region and reports to the host.

    Args:
        path: Dotted content path; reports go to ``on_edit(path, value)``.
        kind: Region kind (single-line, multiline, anchor).
        committed_value: Canonical value the region was hydrated from.
        on_edit: Host edit callback for path-addressed regions.
        on_change: Fallback callback for regions without a path.
        on_settled: Called with the canonical value the structure must be
            re-hydrated from after a blur commit (or after a failed one).
        structure_provider: Returns the live structure when a queued commit
            is flushed.
        live_excluded_prefixes: Path prefixes that only commit on blur.
    """

    def __init__(
        self,
        path: Optional[str],
        kind: RegionKind,
        committed_value: str = '',
        on_edit: Optional[Callable[[str, str], None]] = None,
        on_change: Optional[Callable[[str], None]] = None,
        on_settled: Optional[Callable[[str], None]] = None,
        structure_provider: Optional[Callable[[], Any]] = None,
        live_excluded_prefixes: Sequence[str] = (),
    ):
        self.path = path
        self.kind = kind
        self._last_committed = committed_value
        self._live_value: Optional[str] = None
        self._on_edit = on_edit
        self._on_change = on_change
        self._on_settled = on_settled
        self._structure_provider = structure_provider
        self._live_excluded = bool(path) and any(path.startswith(p) for p in live_excluded_prefixes)
        self._suppressed = False
        self._pending_blur = False

    @property
    def last_committed(self) -> str:
        return self._last_committed

    @property
    def suppressed(self) -> bool:
        return self._suppressed

    @property
    def has_pending(self) -> bool:
        return self._pending_blur

    def reset(self, value: str) -> None:
        """Adopt a freshly hydrated value as the committed baseline."""
        self._last_committed = value
        self._live_value = None

    # ========== POLICY ==========

    def commit(self, structure, reason) -> Optional[str]:
        """Apply the policy for ``reason``.

        Returns:
            The reported value, or None when nothing was reported (no-op,
            deferred, or recovered from an extraction failure).
        """
        reason = CommitReason(reason)
        if reason is CommitReason.BLUR:
            return self._commit_blur(structure)
        return self._commit_live(structure)

    def _commit_live(self, structure) -> Optional[str]:
        if self.kind.multiline or self._live_excluded:
            return None
        try:
            value = to_canonical(structure, self.kind)
        except StructuralExtractionFailure as e:
            logger.debug(f"Live extraction failed for {self.path!r}, keeping {self._last_committed!r}: {e}")
            return None
        self._live_value = value
        self._report(value)
        return value

    def _commit_blur(self, structure) -> Optional[str]:
        if self._suppressed:
            logger.debug(f"Blur commit deferred for {self.path!r} while style control is active")
            self._pending_blur = True
            return None

        self._pending_blur = False
        try:
            raw = to_canonical(structure, self.kind)
        except StructuralExtractionFailure as e:
            logger.debug(f"Blur extraction failed for {self.path!r}, reverting to {self._last_committed!r}: {e}")
            self._live_value = None
            self._settle(self._last_committed)
            return None

        value = normalize_canonical(raw) if self.kind.multiline else raw.strip()
        self._report(value)
        self.reset(value)
        self._settle(value)
        return value

    # ========== SUPPRESSION ==========

    def suppress(self) -> None:
        """Hold blur commits while a companion control is mid-interaction."""
        self._suppressed = True

    def release(self, flush: bool = True) -> Optional[str]:
        """End suppression and flush a queued blur commit against the current structure.

        With ``flush=False`` the queued commit stays pending; the next blur
        commits it together with whatever was typed in between.
        """
        self._suppressed = False
        if not self._pending_blur or not flush:
            return None
        structure = self._structure_provider() if self._structure_provider else None
        logger.debug(f"Flushing deferred blur commit for {self.path!r}")
        return self._commit_blur(structure)

    def discard_pending(self) -> None:
        self._pending_blur = False

    def revert(self) -> str:
        """Return the baseline for a cancel.

        If live commits already told the host about a different value during
        this edit, the baseline is reported once so the host store matches the
        reverted region again.
        """
        if self._live_value is not None and self._live_value != self._last_committed:
            self._report(self._last_committed)
        self._live_value = None
        return self._last_committed

    # ========== HOST CALLBACKS ==========

    def _report(self, value: str) -> None:
        try:
            if self.path and self._on_edit:
                self._on_edit(self.path, value)
            elif self._on_change:
                self._on_change(value)
        except Exception as e:
            logger.warning(f"Error in edit callback for {self.path!r}: {e}")

    def _settle(self, value: str) -> None:
        if self._on_settled:
            self._on_settled(value)
