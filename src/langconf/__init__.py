"""
Layered translation resolution for editable page content.

Resolves which string to display for a content path given the active
language, an inline per-content translation tree and a static UI tree fetched
over the network, with the rule that content is only editable in its source
language.

Resolution order:
    inline tree (active language) -> merged tree (static base, inline
    overrides at every level) -> caller's fallback -> the path itself

Modules:
    - session: active/default/available languages, direction, preference
    - storage: durable preference storage (in-memory and JSON file)
    - loader: cancellable static tree fetch (last request wins)
    - tree: dotted path walks and deep merge
    - resolver: TranslationResolver and the edit gate
    - settings: locale settings and site i18n configuration
"""

from langconf.settings import (
    I18nSiteConfig,
    LocaleSettings,
    RTL_LANGUAGES,
    get_current_settings,
    load_site_config,
    reset_settings,
    set_current_settings,
)
from langconf.storage import InMemoryStorage, JsonFileStorage, PreferenceStorage
from langconf.session import LanguageSession
from langconf.tree import deep_merge, split_path, walk_path
from langconf.loader import StaticTreeLoader, TranslationFetchFailure
from langconf.resolver import TranslationResolver

__all__ = [
    'I18nSiteConfig',
    'LocaleSettings',
    'RTL_LANGUAGES',
    'get_current_settings',
    'load_site_config',
    'reset_settings',
    'set_current_settings',
    'InMemoryStorage',
    'JsonFileStorage',
    'PreferenceStorage',
    'LanguageSession',
    'deep_merge',
    'split_path',
    'walk_path',
    'StaticTreeLoader',
    'TranslationFetchFailure',
    'TranslationResolver',
]

__version__ = '1.0.0'
