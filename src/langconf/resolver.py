"""
TranslationResolver: path + active language -> display string.

Two ordered sources:

    1. Inline tree for the active language (shipped with the content, read
       synchronously so nothing flashes while the static tree loads)
    2. Merged tree: static tree as base, inline tree overriding at every level

If neither resolves every segment of the path to a string, the caller's
fallback is returned (or the path itself when no fallback is given).

The resolver also owns the edit gate: editing is permitted only while the
active language is the default language, so a translated view can never be
persisted over primary content.
"""

import logging
from typing import Any, Dict, Mapping, Optional

from langconf.loader import StaticTreeLoader, TranslationFetchFailure
from langconf.session import LanguageSession
from langconf.tree import deep_merge, walk_path

logger = logging.getLogger(__name__)


class TranslationResolver:
    """Resolves translation keys for one language session.

    Args:
        session: The language session to follow.
        inline_translations: Per-content trees keyed by language code.
        loader: Static tree loader; without one only inline trees are used.
    """

    def __init__(self, session: LanguageSession, inline_translations: Optional[Mapping[str, Any]] = None,
                 loader: Optional[StaticTreeLoader] = None):
        self.session = session
        self._inline: Dict[str, Any] = dict(inline_translations or {})
        self._loader = loader
        self._tree: Dict[str, Any] = self._initial_tree(session.current)
        self._loaded = False

        session.add_language_changed_callback(self._on_language_changed)
        if loader is not None:
            loader.add_loaded_callback(self._on_tree_loaded)

    @classmethod
    def from_site_data(cls, site: Optional[Mapping[str, Any]], session: LanguageSession,
                       loader: Optional[StaticTreeLoader] = None) -> 'TranslationResolver':
        i18n = (site or {}).get('i18n') or {}
        return cls(session, i18n.get('translations') or {}, loader)

    @property
    def tree(self) -> Dict[str, Any]:
        """The last merged tree for the active language."""
        return self._tree

    @property
    def loaded(self) -> bool:
        """Whether the static tree for the active language has been applied."""
        return self._loaded

    def inline_for(self, lang: str) -> Dict[str, Any]:
        tree = self._inline.get(lang)
        return tree if isinstance(tree, dict) else {}

    def _initial_tree(self, lang: str) -> Dict[str, Any]:
        return dict(self.inline_for(lang)) if self.session.enabled else {}

    # ========== RESOLUTION ==========

    def resolve(self, path: str, fallback: Optional[str] = None) -> str:
        """Display string for ``path`` in the active language."""
        if self.session.enabled:
            found, value = walk_path(self.inline_for(self.session.current), path)
            if found and isinstance(value, str):
                return value

            found, value = walk_path(self._tree, path)
            if found and isinstance(value, str):
                return value

            if self._loaded:
                logger.debug(f"No translation for {path!r} in {self.session.current}, using fallback")

        return fallback if fallback is not None else path

    t = resolve

    def can_edit(self, requested: bool = True) -> bool:
        """Whether a region may be editable right now, regardless of what was requested."""
        return bool(requested) and self.session.editing_allowed

    # ========== LOADING ==========

    def reload(self):
        """Request the static tree for the active language (last request wins)."""
        if not self.session.enabled or self._loader is None:
            return None
        return self._loader.request(self.session.current)

    async def refresh(self) -> Dict[str, Any]:
        """Fetch and merge the static tree for the active language, awaiting it."""
        lang = self.session.current
        if not self.session.enabled or self._loader is None:
            return self._tree
        try:
            tree = await self._loader.fetch(lang)
        except TranslationFetchFailure as e:
            logger.warning(f"Static tree for {lang} unavailable, using inline translations only: {e}")
            tree = None
        self._on_tree_loaded(lang, tree)
        return self._tree

    def _on_language_changed(self, previous: str, current: str) -> None:
        # Inline strings are available synchronously for the new language
        self._tree = self._initial_tree(current)
        self._loaded = False
        self.reload()

    def _on_tree_loaded(self, lang: str, tree: Optional[dict]) -> None:
        if lang != self.session.current:
            logger.debug(f"Ignoring static tree for {lang}, active language is {self.session.current}")
            return
        inline = self.inline_for(lang)
        self._tree = deep_merge(tree, inline) if tree is not None else dict(inline)
        self._loaded = True

    def close(self) -> None:
        self.session.remove_language_changed_callback(self._on_language_changed)
        if self._loader is not None:
            self._loader.remove_loaded_callback(self._on_tree_loaded)
