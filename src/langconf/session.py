"""
LanguageSession: active/default/available languages and text direction.

The session is an explicit object with a mount/teardown lifecycle, injected
into whatever needs the active language. It replaces ambient globals (a cached
tree, a stored preference) with:

- current / default / available (ordered, never empty)
- direction and lang document attributes
- a persisted preference behind PreferenceStorage
- language-changed callbacks (the resolver reloads its static tree on these)

Invariants: current is always in available; default falls back to
available[0] when it is not a member.
"""

import logging
from typing import Callable, Dict, Iterable, List, Optional

from langconf.settings import I18nSiteConfig, LocaleSettings, get_current_settings
from langconf.storage import InMemoryStorage, PreferenceStorage

logger = logging.getLogger(__name__)


class LanguageSession:
    """Language state for one host session.

    Args:
        available: Ordered language codes; empty means English only.
        default: Source language of the content (editing happens in it).
        storage: Durable storage for the preferred language.
        persist: Whether the preference is read at mount and written on change.
        enabled: When False the resolver uses no translation trees at all.
        settings: Locale settings; the thread's current settings by default.
    """

    def __init__(
        self,
        available: Optional[Iterable[str]] = None,
        default: Optional[str] = None,
        storage: Optional[PreferenceStorage] = None,
        persist: bool = True,
        enabled: bool = True,
        settings: Optional[LocaleSettings] = None,
    ):
        languages: List[str] = []
        for lang in available or ():
            if lang and lang not in languages:
                languages.append(lang)
        self.available = tuple(languages) or ('en',)
        self.default = default if default in self.available else self.available[0]
        self.current = self.default
        self.enabled = bool(enabled)
        self.persist = persist
        self._settings = settings or get_current_settings()
        self._storage = storage if storage is not None else InMemoryStorage()
        self._document_attributes: Dict[str, str] = {}
        self._language_changed_callbacks: List[Callable[[str, str], None]] = []
        self._apply_document_attributes(self.current)

    @classmethod
    def from_site_config(cls, config: I18nSiteConfig, storage: Optional[PreferenceStorage] = None,
                         persist: bool = True, settings: Optional[LocaleSettings] = None) -> 'LanguageSession':
        return cls(
            available=config.available_languages,
            default=config.default_language,
            storage=storage,
            persist=persist,
            enabled=config.enabled,
            settings=settings,
        )

    # ========== DERIVED STATE ==========

    @property
    def direction(self) -> str:
        return self._document_attributes['dir']

    @property
    def document_attributes(self) -> Dict[str, str]:
        """``dir`` and ``lang`` attributes for the document root."""
        return dict(self._document_attributes)

    @property
    def editing_allowed(self) -> bool:
        """Content may only be edited in its source language."""
        return self.current == self.default

    def is_rtl(self, lang: str) -> bool:
        return lang in self._settings.rtl_languages

    # ========== CALLBACKS ==========

    def add_language_changed_callback(self, callback: Callable[[str, str], None]) -> None:
        """Subscribe to language changes; callbacks receive (previous, current)."""
        if callback not in self._language_changed_callbacks:
            self._language_changed_callbacks.append(callback)

    def remove_language_changed_callback(self, callback: Callable[[str, str], None]) -> None:
        if callback in self._language_changed_callbacks:
            self._language_changed_callbacks.remove(callback)

    def _fire_language_changed(self, previous: str, current: str) -> None:
        for callback in list(self._language_changed_callbacks):
            try:
                callback(previous, current)
            except Exception as e:
                logger.warning(f"Error in language_changed callback: {e}")

    # ========== LIFECYCLE ==========

    def mount(self) -> None:
        """Restore a persisted language if it is still available."""
        if not self.enabled or not self.persist:
            return
        saved = self._read_preference()
        if saved and saved in self.available and saved != self.current:
            logger.info(f"Restoring persisted language: {saved}")
            self._switch(saved)

    def change_language(self, lang: str) -> None:
        """Switch the active language; unknown codes are ignored."""
        if lang not in self.available:
            logger.debug(f"Ignoring request for unavailable language {lang!r}")
            return
        if self.persist:
            self._write_preference(lang)
        if lang == self.current:
            self._apply_document_attributes(lang)
            return
        logger.info(f"Changing language: {self.current} -> {lang}")
        self._switch(lang)

    def teardown(self) -> None:
        self._language_changed_callbacks.clear()

    # ========== INTERNALS ==========

    def _switch(self, lang: str) -> None:
        previous = self.current
        self.current = lang
        self._apply_document_attributes(lang)
        self._fire_language_changed(previous, lang)

    def _apply_document_attributes(self, lang: str) -> None:
        self._document_attributes = {
            'dir': 'rtl' if self.is_rtl(lang) else 'ltr',
            'lang': lang,
        }

    def _read_preference(self) -> Optional[str]:
        try:
            return self._storage.get(self._settings.preference_key)
        except Exception as e:
            logger.warning(f"Could not read language preference: {e}")
            return None

    def _write_preference(self, lang: str) -> None:
        try:
            self._storage.set(self._settings.preference_key, lang)
        except Exception as e:
            logger.warning(f"Could not persist language preference: {e}")
