"""Tests for render-time composition of regions with translation resolution."""
import pytest

from textstate import Multiline, RegionBinding, RegionRegistry, TextStyle


@pytest.fixture
def binding(resolver, recorder):
    """Provide a binding for the hero headline."""
    return RegionBinding('hero.headline', resolver, on_edit=recorder)


class TestSourceLanguage:

    def test_editable_in_default_language(self, binding):
        controller = binding.render('Welcome', editable=True)
        assert controller.editable
        assert controller.value == 'Welcome'
        assert binding.identity_key == ('hero.headline', 'en', True)

    def test_editable_display_is_never_translated(self, resolver, recorder):
        """Test that the host value is shown even when a translation exists."""
        resolver.session.default = 'es'
        resolver.session.current = 'es'
        binding = RegionBinding('hero.headline', resolver, on_edit=recorder)
        assert binding.render('Bienvenidos a casa', editable=True).value == 'Bienvenidos a casa'

    def test_commit_reaches_host(self, binding, recorder):
        controller = binding.render('Welcome', editable=True)
        controller.focus()
        controller.region.text = 'Welcome home'
        controller.blur()
        assert recorder.edits[-1] == ('hero.headline', 'Welcome home')


class TestTranslatedView:

    def test_non_default_language_is_read_only(self, binding, session, recorder):
        """Test that a translated view never reaches the edit callback."""
        session.change_language('es')
        controller = binding.render('Welcome', editable=True)

        assert not controller.editable
        assert controller.value == 'Bienvenido'

        controller.focus()
        controller.region.text = 'Changed'
        controller.observe_mutation()
        controller.blur()
        assert recorder.edits == []

    def test_missing_translation_shows_host_value(self, resolver, session):
        session.change_language('es')
        binding = RegionBinding('hero.subheadline', resolver)
        assert binding.render('Fresh bread daily').value == 'Fresh bread daily'

    def test_read_only_display_resolves_in_default_language(self, resolver):
        """Test that non-editable display still asks the resolver first."""
        binding = RegionBinding('nav.home', resolver)
        assert binding.render('Home').value == 'Home'


class TestIdentity:

    def test_language_change_rebuilds_controller(self, binding, session):
        first = binding.render('Welcome', editable=True)
        session.change_language('es')
        second = binding.render('Welcome', editable=True)

        assert second is not first
        assert first.torn_down
        assert RegionRegistry.get('hero.headline') is second
        assert binding.identity_key == ('hero.headline', 'es', False)

    def test_edit_mode_change_rebuilds_controller(self, binding):
        viewer = binding.render('Welcome', editable=False)
        editor = binding.render('Welcome', editable=True)
        assert editor is not viewer
        assert editor.editable

    def test_same_identity_keeps_controller(self, binding):
        first = binding.render('Welcome', editable=True)
        second = binding.render('Welcome back', editable=True)
        assert second is first
        assert second.value == 'Welcome back'

    def test_rerender_with_entities_keeps_decoded_text(self, resolver, recorder):
        """Test that rendering the same entity-bearing value twice shows it decoded."""
        binding = RegionBinding('about.title', resolver, on_edit=recorder)
        first = binding.render('Tom &amp; Jerry', editable=True)
        second = binding.render('Tom &amp; Jerry', editable=True)
        assert second is first
        assert second.value == 'Tom & Jerry'
        assert second.region.text == 'Tom & Jerry'

    def test_language_change_flushes_deferred_commit(self, binding, session, recorder):
        """Test that a rebuild never drops a blur deferred by a style control."""
        controller = binding.render('Welcome', editable=True)
        controller.focus()
        controller.region.text = 'Welcome home'
        controller.begin_style_interaction()
        controller.blur()

        session.change_language('es')
        binding.render('Welcome', editable=True)
        assert recorder.edits == [('hero.headline', 'Welcome home')]

    def test_rerender_while_editing_keeps_draft(self, binding):
        controller = binding.render('Welcome', editable=True)
        controller.focus()
        controller.region.text = 'Draft'
        binding.render('Host echo', editable=True)
        assert controller.region.text == 'Draft'

    def test_style_change_applied_without_rebuild(self, binding):
        controller = binding.render('Welcome', editable=True)
        same = binding.render('Welcome', editable=True, style=TextStyle(size=1.25, align='right'))
        assert same is controller
        assert controller.style.align == 'right'


def test_unmount_unregisters(binding):
    """Test that unmounting releases the path."""
    controller = binding.render('Welcome', editable=True)
    binding.unmount()
    assert controller.torn_down
    assert RegionRegistry.get('hero.headline') is None
    assert binding.controller is None
    assert binding.display_text() == ''


def test_multiline_kind_passed_through(resolver):
    binding = RegionBinding('about.body', resolver, kind=Multiline(), placeholder='About us')
    controller = binding.render(None)
    assert isinstance(controller.kind, Multiline)
    assert binding.display_text() == 'About us'
