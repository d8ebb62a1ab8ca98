"""Pytest configuration and shared fixtures."""
import pytest

import langconf.settings as locale_settings_module
import textstate.settings as editor_settings_module
from langconf import InMemoryStorage, LanguageSession, TranslationResolver
from textstate import RegionRegistry


@pytest.fixture(autouse=True)
def reset_registry_and_settings():
    """Reset the region registry and thread-local settings around each test."""
    original_register = list(RegionRegistry._on_register_callbacks)
    original_unregister = list(RegionRegistry._on_unregister_callbacks)

    yield

    RegionRegistry.clear()
    RegionRegistry._on_register_callbacks[:] = original_register
    RegionRegistry._on_unregister_callbacks[:] = original_unregister
    editor_settings_module.reset_settings()
    locale_settings_module.reset_settings()


class EditRecorder:
    """Host edit callback that records every (path, value) it receives."""

    def __init__(self):
        self.edits = []

    def __call__(self, path, value):
        self.edits.append((path, value))

    @property
    def values(self):
        return [value for _, value in self.edits]


@pytest.fixture
def recorder():
    """Provide a fresh edit recorder."""
    return EditRecorder()


@pytest.fixture
def storage():
    """Provide empty in-memory preference storage."""
    return InMemoryStorage()


@pytest.fixture
def session(storage):
    """Provide an English/Spanish/Arabic session with English as source language."""
    return LanguageSession(available=['en', 'es', 'ar'], default='en', storage=storage)


@pytest.fixture
def inline_translations():
    """Provide inline translations shipped with site content."""
    return {
        'es': {
            'hero': {'headline': 'Bienvenido'},
            'nav': {'home': 'Inicio'},
        },
        'ar': {
            'hero': {'headline': 'أهلا'},
        },
    }


@pytest.fixture
def resolver(session, inline_translations):
    """Provide a resolver without a static tree loader."""
    return TranslationResolver(session, inline_translations)
