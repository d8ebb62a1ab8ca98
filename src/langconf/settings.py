"""
Localization settings and site i18n configuration.

Provides thread-local storage for the current LocaleSettings, used by sessions
and loaders created without explicit settings.

Site configuration follows the site.json layout:

    {
      "version": "2.0",
      "i18n": {
        "enabled": true,
        "defaultLanguage": "en",
        "availableLanguages": ["en", "es"],
        "translations": {"es": {"hero": {"headline": "Bienvenido"}}}
      }
    }

Only version 2.0 sites with i18n enabled get their language list; everything
else is English-only.
"""

import json
import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, FrozenSet, Mapping, Optional, Tuple, Union

logger = logging.getLogger(__name__)

RTL_LANGUAGES: FrozenSet[str] = frozenset({'ar', 'he', 'fa', 'ur'})
PREFERRED_LANGUAGE_KEY = 'preferredLanguage'
LOCALES_PATH = '/locales/{lang}/ui.json'


@dataclass(frozen=True)
class LocaleSettings:
    """Settings shared by language sessions and static tree loaders."""
    rtl_languages: FrozenSet[str] = RTL_LANGUAGES
    preference_key: str = PREFERRED_LANGUAGE_KEY
    locales_path: str = LOCALES_PATH
    fetch_timeout: float = 10.0

    def locale_url(self, lang: str) -> str:
        return self.locales_path.format(lang=lang)


@dataclass(frozen=True)
class I18nSiteConfig:
    """Language configuration read from site data."""
    default_language: str = 'en'
    available_languages: Tuple[str, ...] = ('en',)
    enabled: bool = False
    translations: Dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_site_data(cls, site: Optional[Mapping[str, Any]]) -> 'I18nSiteConfig':
        site = site or {}
        i18n = site.get('i18n') or {}
        translations = i18n.get('translations') or {}
        if not isinstance(translations, dict):
            translations = {}

        if site.get('version') != '2.0' or not i18n.get('enabled'):
            return cls(translations=translations)

        available = tuple(i18n.get('availableLanguages') or ('en',))
        return cls(
            default_language=i18n.get('defaultLanguage') or 'en',
            available_languages=available,
            enabled=True,
            translations=translations,
        )


def load_site_config(path: Union[str, Path]) -> I18nSiteConfig:
    """Read i18n configuration from a site.json file.

    A missing or unparsable file yields the English-only default.
    """
    path = Path(path)
    if not path.exists():
        return I18nSiteConfig()
    try:
        site = json.loads(path.read_text(encoding='utf-8'))
    except (OSError, ValueError) as e:
        logger.warning(f"Could not parse {path} for i18n config: {e}")
        return I18nSiteConfig()
    if not isinstance(site, dict):
        logger.warning(f"{path} does not hold a JSON object, using default i18n config")
        return I18nSiteConfig()
    return I18nSiteConfig.from_site_data(site)


_current_settings = threading.local()


def set_current_settings(settings: LocaleSettings) -> None:
    """Set the locale settings used on this thread."""
    _current_settings.value = settings


def get_current_settings() -> LocaleSettings:
    """Get the current locale settings, or defaults when none were set."""
    settings = getattr(_current_settings, 'value', None)
    return settings if settings is not None else LocaleSettings()


def reset_settings() -> None:
    if hasattr(_current_settings, 'value'):
        del _current_settings.value
