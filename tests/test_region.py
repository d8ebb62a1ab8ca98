"""Tests for the Editable Region Controller state machine."""
import pytest
from lxml import etree

from textstate import (
    EditableRegionController,
    EditorSettings,
    Multiline,
    RegionPhase,
    SingleLine,
    StyleHooks,
    TextSizeScale,
    TextStyle,
    serialize,
    set_current_settings,
)


def type_blocks(root, *lines):
    """Simulate a platform that groups lines into block elements."""
    for child in list(root):
        root.remove(child)
    root.text = None
    for line in lines:
        etree.SubElement(root, 'div').text = line


@pytest.fixture
def headline(recorder):
    """Provide an editable multiline hero headline."""
    return EditableRegionController(
        'hero.headline', 'Welcome\nHome', kind=Multiline(), editable=True, on_edit=recorder
    )


class TestLifecycle:

    def test_initial_state(self, headline):
        assert headline.phase is RegionPhase.IDLE
        assert headline.value == 'Welcome\nHome'
        assert headline.state.path == 'hero.headline'
        assert not headline.state.is_editing

    def test_focus_enters_editing(self, headline):
        headline.focus()
        assert headline.is_editing
        assert headline.state.is_editing

    def test_non_editable_never_enters_editing(self, recorder):
        region = EditableRegionController('hero.headline', 'Welcome', on_edit=recorder)
        region.focus()
        assert region.phase is RegionPhase.IDLE
        region.blur()
        assert recorder.edits == []

    def test_blur_without_focus_is_noop(self, headline, recorder):
        headline.blur()
        assert recorder.edits == []


def test_multiline_block_edit_commits_once_on_blur(headline, recorder):
    """Test the headline scenario: typing a third line commits one normalized value."""
    headline.focus()
    type_blocks(headline.region, 'Welcome', 'Home', 'Friends')

    assert headline.observe_mutation() is None
    assert recorder.edits == []

    headline.blur()
    assert recorder.edits == [('hero.headline', 'Welcome\nHome\nFriends')]
    assert headline.value == 'Welcome\nHome\nFriends'

    markup = serialize(headline.region)
    assert '<div' not in markup
    assert markup.count('<br>') == 2
    assert headline.phase is RegionPhase.IDLE


def test_unchanged_headline_blur_commits_once(headline, recorder):
    """Test that a <br> between two lines commits as exactly one edit."""
    assert serialize(headline.region).count('<br>') == 1
    headline.focus()
    headline.blur()
    assert recorder.edits == [('hero.headline', 'Welcome\nHome')]


def test_cancel_discards_uncommitted_text(recorder):
    """Test that cancelling an edit nobody has committed yet reports nothing."""
    region = EditableRegionController('hero.cta', 'Hello', editable=True, on_edit=recorder)
    region.focus()
    region.region.text = 'Goodbye'
    region.cancel()
    assert region.region.text == 'Hello'
    assert region.value == 'Hello'
    assert recorder.edits == []


def test_escape_reverts_after_live_commit(recorder):
    """Test the cancel scenario on a single-line region."""
    blurs = []
    region = EditableRegionController(
        'hero.cta', 'Hello', editable=True, on_edit=recorder, on_blur=lambda: blurs.append(1)
    )
    region.focus()
    region.region.text = 'Hello world'
    assert region.observe_mutation() == 'Hello world'

    assert region.key_press('Escape') is True
    assert region.region.text == 'Hello'
    assert region.value == 'Hello'
    assert region.phase is RegionPhase.IDLE
    assert recorder.values == ['Hello world', 'Hello']
    assert blurs == [1]


def test_escape_on_multiline_issues_no_commit(headline, recorder):
    """Test that cancel without live commits reports nothing."""
    headline.focus()
    type_blocks(headline.region, 'Something', 'else')
    headline.cancel()
    assert recorder.edits == []
    assert serialize(headline.region).count('<br>') == 1
    assert headline.value == 'Welcome\nHome'


class TestKeys:

    def test_enter_on_single_line_commits(self, recorder):
        region = EditableRegionController('nav.home', 'Home', editable=True, on_edit=recorder)
        region.focus()
        region.region.text = ' Start '
        assert region.key_press('Enter') is True
        assert not region.is_editing
        assert recorder.values[-1] == 'Start'

    def test_enter_on_multiline_is_not_consumed(self, headline):
        headline.focus()
        assert headline.key_press('Enter') is False
        assert headline.is_editing

    def test_other_keys_pass_through(self, headline):
        headline.focus()
        assert headline.key_press('a') is False

    def test_keys_ignored_when_idle(self, headline):
        assert headline.key_press('Escape') is False


class TestPaste:

    def test_single_line_paste_flattens(self, recorder):
        region = EditableRegionController('hero.cta', 'Hi ', editable=True, on_edit=recorder)
        region.focus()
        assert region.paste('there\n  friend', html='<b>ignored</b>') == 'Hi there friend'
        assert recorder.values == ['Hi there friend']
        assert len(region.region) == 0

    def test_multiline_paste_keeps_lines_as_breaks(self, headline, recorder):
        headline.focus()
        assert headline.paste('\nFriends\nFamily') is None
        assert recorder.edits == []
        headline.blur()
        assert recorder.values == ['Welcome\nHome\nFriends\nFamily']

    def test_html_only_paste_drops_formatting(self, recorder):
        region = EditableRegionController('hero.cta', '', editable=True, on_edit=recorder)
        region.focus()
        region.paste(None, html='<p style="color:red"><b>Bold</b> claim</p>')
        assert region.region.text == 'Bold claim'
        assert region.region.find('.//b') is None

    def test_select_all_paste_replaces(self, recorder):
        region = EditableRegionController('hero.cta', 'Old text', editable=True, on_edit=recorder)
        region.focus()
        assert region.paste('New', replace=True) == 'New'

    def test_paste_when_idle_is_ignored(self, recorder):
        region = EditableRegionController('hero.cta', 'Hi', editable=True, on_edit=recorder)
        assert region.paste('x') is None
        assert region.region.text == 'Hi'


class TestExternalUpdates:

    def test_idle_update_rehydrates(self, headline):
        headline.update_value('One\nTwo\nThree')
        assert headline.value == 'One\nTwo\nThree'
        assert serialize(headline.region).count('<br>') == 2

    def test_update_while_editing_is_ignored(self, headline, recorder):
        """Test that the host cannot overwrite an in-progress edit."""
        headline.focus()
        type_blocks(headline.region, 'Draft')
        headline.update_value('Remote change')
        assert headline.region[0].text == 'Draft'

        headline.blur()
        assert recorder.values == ['Draft']

    def test_none_is_empty_text(self, recorder):
        region = EditableRegionController('hero.cta', None, placeholder='Call to action')
        assert region.value == ''
        assert region.display_text() == 'Call to action'
        region.update_value(42)
        assert region.value == '42'

    def test_torn_down_ignores_updates(self, headline):
        headline.teardown()
        headline.update_value('After teardown')
        assert headline.value == 'Welcome\nHome'
        headline.focus()
        assert not headline.is_editing


def test_entities_decoded_once(recorder):
    """Test that references are decoded at hydration but not in committed text."""
    region = EditableRegionController('about.title', 'Tom &amp; Jerry', editable=True, on_edit=recorder)
    assert region.value == 'Tom & Jerry'

    region.focus()
    region.region.text = 'Fish &amp; Chips'
    region.blur()
    assert recorder.values[-1] == 'Fish &amp; Chips'
    assert region.value == 'Fish &amp; Chips'


def test_rerender_with_same_entity_value_keeps_decoded_text(recorder):
    """Test that the host re-supplying its raw value never shows references."""
    region = EditableRegionController('about.title', 'Tom &amp; Jerry', editable=True, on_edit=recorder)
    region.update_value('Tom &amp; Jerry')
    region.update_value('Tom &amp; Jerry')
    assert region.value == 'Tom & Jerry'
    assert region.region.text == 'Tom & Jerry'

    region.focus()
    region.blur()
    assert recorder.values == ['Tom & Jerry']


def test_new_host_value_is_decoded(recorder):
    region = EditableRegionController('about.title', 'Tom &amp; Jerry', editable=True, on_edit=recorder)
    region.update_value('Salt &amp; Pepper')
    assert region.value == 'Salt & Pepper'


def test_echo_of_own_commit_is_not_decoded_again(recorder):
    """Test that the committed value coming back from the host stays literal."""
    region = EditableRegionController('about.title', 'Tom &amp; Jerry', editable=True, on_edit=recorder)
    region.focus()
    region.region.text = 'Fish &amp; Chips'
    region.blur()

    region.update_value(recorder.values[-1])
    region.update_value(recorder.values[-1])
    assert region.value == 'Fish &amp; Chips'


def test_extraction_failure_reverts_silently(recorder):
    """Test that an unreadable structure falls back to the last committed value."""
    class BrokenKind(SingleLine):
        def extract(self, root):
            raise TypeError('platform left garbage')

    region = EditableRegionController('hero.cta', 'Safe', kind=BrokenKind(), editable=True, on_edit=recorder)
    region.focus()
    region.region.text = 'Garbage'
    region.blur()
    assert recorder.edits == []
    assert region.region.text == 'Safe'
    assert not region.is_editing


class TestStyleInteraction:

    def test_blur_deferred_until_style_control_closes(self, recorder):
        region = EditableRegionController('hero.cta', 'Buy', editable=True, on_edit=recorder)
        region.focus()
        region.region.text = 'Buy now'
        region.begin_style_interaction()
        assert region.state.is_suppressed

        region.blur()
        assert recorder.values == []

        region.update_value('Stale host value')
        assert region.region.text == 'Buy now'

        region.end_style_interaction()
        assert recorder.values == ['Buy now']
        assert not region.state.is_suppressed

    def test_refocus_before_close_commits_on_next_blur(self, headline, recorder):
        headline.focus()
        headline.begin_style_interaction()
        headline.blur()
        headline.focus()
        headline.end_style_interaction()
        assert recorder.edits == []

        type_blocks(headline.region, 'Welcome', 'back')
        headline.blur()
        assert recorder.values == ['Welcome\nback']

    def test_teardown_flushes_deferred_blur(self, recorder):
        """Test that a rebuild while the style control is open keeps the edit."""
        region = EditableRegionController('hero.cta', 'Buy', editable=True, on_edit=recorder)
        region.focus()
        region.region.text = 'Buy today'
        region.begin_style_interaction()
        region.blur()
        assert recorder.values == []

        region.teardown()
        assert recorder.values == ['Buy today']
        assert region.torn_down

    def test_teardown_after_cancel_reports_nothing(self, recorder):
        region = EditableRegionController('hero.cta', 'Buy', editable=True, on_edit=recorder)
        region.focus()
        region.region.text = 'Buy today'
        region.cancel()
        region.teardown()
        assert recorder.values == []

    def test_change_style_clamps_and_fires_hooks(self, recorder):
        sizes, colors = [], []
        region = EditableRegionController(
            'hero.headline', 'Hi', editable=True, on_edit=recorder,
            style_hooks=StyleHooks(on_size=sizes.append, on_color=colors.append),
        )
        style = region.change_style(size=9, color='#ff0000', bold=True)
        assert style == TextStyle(size=2.5, color='#ff0000', bold=True)
        assert sizes == [2.5]
        assert colors == ['#ff0000']
        assert 'font-weight: bold' in region.region.get('style')
        assert region.value == 'Hi'
        assert recorder.edits == []

    def test_change_style_ignored_when_not_editable(self):
        region = EditableRegionController('hero.headline', 'Hi')
        assert region.change_style(size=2.0) == TextStyle()

    def test_apply_style_is_silent(self):
        sizes = []
        region = EditableRegionController(
            'hero.headline', 'Hi', editable=True, style_hooks=StyleHooks(on_size=sizes.append)
        )
        region.apply_style(TextStyle(size=1.5, align='left'))
        assert region.region.get('style') == 'font-size: 1.5rem; text-align: left'
        assert sizes == []


def test_settings_read_at_construction(recorder):
    """Test that thread-local editor settings configure new controllers."""
    set_current_settings(EditorSettings(
        live_commit_excluded_prefixes=('footer.',),
        size_scale=TextSizeScale(maximum=1.75),
    ))
    region = EditableRegionController('footer.note', 'a', editable=True, on_edit=recorder)
    region.focus()
    region.region.text = 'ab'
    assert region.observe_mutation() is None
    assert region.change_style(size=3).size == 1.75


def test_blur_callback_errors_are_contained(recorder):
    def broken():
        raise RuntimeError('host blur handler failed')

    region = EditableRegionController('hero.cta', 'x', editable=True, on_edit=recorder, on_blur=broken)
    region.focus()
    region.blur()
    assert recorder.values == ['x']
