"""
Template Resolver Tests

Verifies:
1. <data> substitution, masking of sensitive and redacted values
2. <list> consumes every remaining value
3. <msg:A,B> branches on the consumed choice, recursively
4. Repeated resolution is stateless
5. Indentation, sprite marker, trailing newlines and DEBUG markers
6. Missing catalog ids and exhausted values stay local to one entry
"""
import pytest

from report_engine.config import ResolverSettings
from report_engine.models import ReportEntry, Visibility
from report_engine.services.catalog import MessageCatalog, TranslationBundle
from report_engine.services.renderer import ResolutionContext, TemplateResolver


MISSING_999 = "[Reporting Error for message ID 999]"
EXHAUSTED = "[Reporting Error: see log for details]"


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def catalog():
    return MessageCatalog({
        100: "<data> took <data> damage.",
        200: "<msg:201,202>",
        201: "Hit!",
        202: "Miss.",
        300: "<list>",
        310: "<data>: <list>",
        400: "<data> and <data>",
        500: "<data> <msg:501,502>",
        501: "hits <data>",
        502: "misses",
        600: "<msg:600,600>",
        700: "<msg:701,702>",
        800: "A<newline>B",
        810: "<newline>Turn <data>",
        900: "a < b <data>",
        910: "<b>bold</b> <data>",
        920: "broken <data",
        930: "Roll: <data>",
    })


@pytest.fixture
def resolver(catalog):
    return TemplateResolver(catalog, settings=ResolverSettings(indent_pad=" "))


@pytest.fixture
def obscured():
    return ResolutionContext(recipient="Bob", obscured=True)


def make_entry(message_id, *values, obscure=False):
    entry = ReportEntry(message_id)
    for value in values:
        entry.append_value(value, obscure=obscure)
    return entry


# =============================================================================
# DATA / MASKING
# =============================================================================

class TestDataTag:

    def test_full_view_shows_every_value(self, resolver):
        entry = ReportEntry(100)
        entry.append_value("Atlas", obscure=False)
        entry.append_value("25", obscure=True)
        assert resolver.resolve_entry(entry) == "Atlas took 25 damage.\n"

    def test_obscured_pass_masks_sensitive_values(self, resolver, obscured):
        entry = ReportEntry(100)
        entry.append_value("Atlas", obscure=False)
        entry.append_value("25", obscure=True)
        assert resolver.resolve_entry(entry, obscured) == "Atlas took ???? damage.\n"

    def test_redacted_value_masked_even_in_full_view(self, resolver):
        entry = make_entry(100, "Atlas", "25")
        entry.redact(1)
        text = resolver.resolve_entry(entry)
        assert text == "Atlas took ???? damage.\n"
        assert "25" not in text

    def test_int_payload(self, resolver):
        entry = make_entry(100, "Atlas", 25)
        assert resolver.resolve_entry(entry) == "Atlas took 25 damage.\n"

    def test_explicit_template(self, resolver):
        entry = make_entry(12345, "x")
        assert resolver.resolve("[<data>]", entry) == "[x]\n"


# =============================================================================
# LIST
# =============================================================================

class TestListTag:

    def test_list_joins_all_values(self, resolver):
        entry = make_entry(300, "a", "b", "c")
        outcome = resolver.resolve_outcome(entry)
        assert outcome.text == "a, b, c\n"
        assert outcome.values_consumed == 3
        assert outcome.complete

    def test_list_takes_only_remaining_values(self, resolver):
        entry = make_entry(310, "x", "y", "z")
        assert resolver.resolve_entry(entry) == "x: y, z\n"

    def test_list_with_nothing_left_is_empty(self, resolver):
        entry = make_entry(310, "x")
        assert resolver.resolve_entry(entry) == "x: \n"

    def test_list_masks_sensitive_values(self, resolver, obscured):
        entry = ReportEntry(300)
        entry.append_value("a", obscure=False)
        entry.append_value("b", obscure=True)
        entry.append_value("c", obscure=False)
        assert resolver.resolve_entry(entry, obscured) == "a, ????, c\n"


# =============================================================================
# MSG
# =============================================================================

class TestMsgTag:

    def test_true_selects_first_message(self, resolver):
        entry = ReportEntry(200)
        entry.append_choice(True)
        assert resolver.resolve_entry(entry) == "Hit!\n"

    def test_false_selects_second_message(self, resolver):
        entry = ReportEntry(200)
        entry.append_choice(False)
        assert resolver.resolve_entry(entry) == "Miss.\n"

    def test_chosen_message_resolves_its_own_tags(self, resolver):
        entry = make_entry(500, "Atlas")
        entry.append_choice(True)
        entry.append_value("Locust", obscure=False)
        assert resolver.resolve_entry(entry) == "Atlas hits Locust\n"

    def test_redacted_choice_falls_to_second_message(self, resolver):
        entry = ReportEntry(200)
        entry.append_choice(True)
        entry.redact(0)
        assert resolver.resolve_entry(entry) == "Miss.\n"

    def test_missing_sub_message_gets_placeholder(self, resolver):
        entry = ReportEntry(700)
        entry.append_choice(True)
        assert resolver.resolve_entry(entry) == "[Reporting Error for message ID 701]\n"

    def test_self_referencing_message_stops_at_depth_limit(self, catalog):
        resolver = TemplateResolver(catalog, settings=ResolverSettings(max_msg_depth=2))
        entry = ReportEntry(600)
        for _ in range(5):
            entry.append_choice(True)
        outcome = resolver.resolve_outcome(entry)
        assert outcome.error == "msg_depth_exceeded"
        assert outcome.text == EXHAUSTED + "\n"


# =============================================================================
# LITERALS
# =============================================================================

class TestLiterals:

    def test_newline_tag(self, resolver):
        assert resolver.resolve_entry(ReportEntry(800)) == "A\nB\n"

    def test_literal_less_than(self, resolver):
        entry = make_entry(900, "c")
        assert resolver.resolve_entry(entry) == "a < b c\n"

    def test_unknown_tags_copied_through(self, resolver):
        entry = make_entry(910, "x")
        assert resolver.resolve_entry(entry) == "<b>bold</b> x\n"

    def test_unterminated_tag_is_literal(self, resolver):
        outcome = resolver.resolve_outcome(ReportEntry(920))
        assert outcome.text == "broken <data\n"
        assert outcome.error is None


# =============================================================================
# STATELESSNESS
# =============================================================================

class TestStatelessness:

    def test_resolving_twice_gives_same_text(self, resolver):
        entry = make_entry(310, "x", "y", "z")
        first = resolver.resolve_entry(entry)
        second = resolver.resolve_entry(entry)
        assert first == second == "x: y, z\n"

    def test_obscured_pass_does_not_change_entry(self, resolver, obscured):
        entry = ReportEntry(100)
        entry.append_value("Atlas", obscure=False)
        entry.append_value("25", obscure=True)
        resolver.resolve_entry(entry, obscured)
        assert resolver.resolve_entry(entry) == "Atlas took 25 damage.\n"


# =============================================================================
# LAYOUT
# =============================================================================

class TestLayout:

    def test_indentation_prefixes_text(self, resolver):
        entry = make_entry(930, "7")
        entry.indent()
        assert resolver.resolve_entry(entry) == "    Roll: 7\n"

    def test_indentation_follows_leading_line_breaks(self, resolver):
        entry = make_entry(810, "3")
        entry.indent(2)
        text = resolver.resolve_entry(entry)
        assert text == "\n        Turn 3\n"
        assert text.count(" " * 8) == 1

    def test_default_pad_is_html_space(self, catalog):
        entry = make_entry(930, "7")
        entry.indent()
        assert TemplateResolver(catalog).resolve_entry(entry) == "&nbsp;" * 4 + "Roll: 7\n"

    @pytest.mark.parametrize("blank_lines", [0, 1, 3])
    def test_trailing_newline_count(self, resolver, blank_lines):
        entry = make_entry(930, "7")
        for _ in range(blank_lines):
            entry.add_blank_line()
        text = resolver.resolve_entry(entry)
        assert text == "Roll: 7" + "\n" * (blank_lines + 1)

    def test_debug_markers_wrap_before_trailing_newlines(self, resolver):
        entry = ReportEntry(201, visibility=Visibility.DEBUG)
        entry.add_blank_line()
        assert resolver.resolve_entry(entry) == "<hidden>Hit!</hidden>\n\n"


class TestSpriteMarker:

    def test_marker_prepended(self, resolver):
        entry = make_entry(930, "7")
        entry.sprite_marker = "<span id='7'></span>"
        assert resolver.resolve_entry(entry) == "<span id='7'></span>Roll: 7\n"

    def test_marker_after_single_leading_line_break(self, resolver):
        entry = make_entry(810, "3")
        entry.sprite_marker = "<span id='7'></span>"
        assert resolver.resolve_entry(entry) == "\n<span id='7'></span>Turn 3\n"

    def test_marker_skipped_when_deeply_indented(self, resolver):
        entry = make_entry(930, "7")
        entry.sprite_marker = "<span id='7'></span>"
        entry.indent(2)
        assert "<span" not in resolver.resolve_entry(entry)

    def test_show_image_overrides_indentation(self, resolver):
        entry = make_entry(930, "7")
        entry.sprite_marker = "<span id='7'></span>"
        entry.indent(2)
        entry.show_image = True
        assert resolver.resolve_entry(entry) == "        <span id='7'></span>Roll: 7\n"

    def test_context_show_image(self, resolver):
        entry = make_entry(930, "7")
        entry.sprite_marker = "<span id='7'></span>"
        entry.indent(3)
        text = resolver.resolve_entry(entry, ResolutionContext(show_image=True))
        assert "<span id='7'></span>Roll: 7" in text


# =============================================================================
# TRANSLATION
# =============================================================================

class TestTranslation:

    @pytest.fixture
    def translating_resolver(self, catalog):
        bundle = TranslationBundle("Messages", {"weapon.lrm": "LRM 20"})
        return TemplateResolver(catalog, translations={"Messages": bundle})

    def test_keyed_value_is_translated(self, translating_resolver):
        entry = ReportEntry(930)
        entry.append_value("weapon.lrm", obscure=False, translation_key="Messages")
        assert translating_resolver.resolve_entry(entry) == "Roll: LRM 20\n"

    def test_missing_translation_is_flagged(self, translating_resolver):
        entry = ReportEntry(930)
        entry.append_value("weapon.ac", obscure=False, translation_key="Messages")
        assert translating_resolver.resolve_entry(entry) == "Roll: !weapon.ac!\n"

    def test_unkeyed_append_clears_key(self, translating_resolver):
        entry = ReportEntry(310)
        entry.append_value("weapon.lrm", obscure=False, translation_key="Messages")
        entry.append_value("plain", obscure=False)
        assert translating_resolver.resolve_entry(entry) == "weapon.lrm: plain\n"

    def test_unknown_bundle_leaves_value(self, resolver):
        entry = ReportEntry(930)
        entry.append_value("weapon.lrm", obscure=False, translation_key="Nope")
        assert resolver.resolve_entry(entry) == "Roll: weapon.lrm\n"

    def test_masked_value_not_translated(self, translating_resolver):
        entry = ReportEntry(930)
        entry.append_value("weapon.lrm", obscure=True, translation_key="Messages")
        text = translating_resolver.resolve_entry(entry, ResolutionContext(obscured=True))
        assert text == "Roll: ????\n"


# =============================================================================
# ERRORS
# =============================================================================

class TestErrors:

    def test_unknown_catalog_id(self, resolver):
        outcome = resolver.resolve_outcome(make_entry(999, "x"))
        assert outcome.text == MISSING_999
        assert "999" in outcome.text
        assert outcome.error == "missing_message"

    def test_unknown_catalog_id_debug_marked(self, resolver):
        entry = ReportEntry(999, visibility=Visibility.DEBUG)
        assert resolver.resolve_entry(entry) == "<hidden>" + MISSING_999 + "</hidden>"

    def test_batch_continues_after_unknown_id(self, resolver):
        entries = [make_entry(999), make_entry(930, "5")]
        texts = [resolver.resolve_entry(e) for e in entries]
        assert texts == [MISSING_999, "Roll: 5\n"]

    def test_exhausted_values_abort_entry(self, resolver):
        outcome = resolver.resolve_outcome(make_entry(400, "a"))
        assert outcome.text == "a and " + EXHAUSTED + "\n"
        assert outcome.error == "values_exhausted"
        assert outcome.values_consumed == 1

    def test_exhausted_before_msg(self, resolver):
        outcome = resolver.resolve_outcome(ReportEntry(200))
        assert outcome.text == EXHAUSTED + "\n"
        assert not outcome.complete

    def test_surplus_values_are_an_error(self, resolver):
        outcome = resolver.resolve_outcome(make_entry(930, "1", "2", "3"))
        assert outcome.text == "Roll: 1\n"
        assert outcome.error == "values_unconsumed"
        assert outcome.values_consumed == 1
        assert outcome.value_count == 3
        assert not outcome.complete

    def test_surplus_values_logged_at_error_level(self, resolver, caplog):
        with caplog.at_level("ERROR", logger="report_engine"):
            resolver.resolve_outcome(make_entry(930, "1", "2"))
        assert any("used 1 of 2 values" in r.getMessage() for r in caplog.records)
