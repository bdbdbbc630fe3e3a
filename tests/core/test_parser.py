# tests/core/test_parser.py
from contextualizer.core.translation.parser import (
    LiteralToken,
    MarkerToken,
    ParagraphBreakToken,
    parse_template,
    referenced_keys,
    split_paragraphs,
    tokenize,
)


class TestTokenize:
    def test_literals_and_markers_in_order(self):
        tokens = tokenize("{{student}} walked to {{square}}.")
        assert tokens == [
            MarkerToken(key="student", suffix=None, raw="{{student}}"),
            LiteralToken(" walked to "),
            MarkerToken(key="square", suffix=None, raw="{{square}}"),
            LiteralToken("."),
        ]

    def test_suffix(self):
        (token,) = tokenize("{{student:age}}")
        assert token.key == "student"
        assert token.suffix == "age"

    def test_hyphenated_keys(self):
        tokens = tokenize("on {{arrest-date}}")
        assert tokens[1].key == "arrest-date"

    def test_plain_text(self):
        assert tokenize("no markers here") == [LiteralToken("no markers here")]


class TestParseTemplate:
    def test_paragraph_breaks_between_paragraphs_only(self):
        result = parse_template("First {{a}}.\n\nSecond.\n  \nThird.")
        breaks = [t for t in result.tokens if isinstance(t, ParagraphBreakToken)]
        assert len(breaks) == 2
        assert not isinstance(result.tokens[0], ParagraphBreakToken)
        assert not isinstance(result.tokens[-1], ParagraphBreakToken)

    def test_single_newline_stays_in_paragraph(self):
        assert split_paragraphs("line one\nline two") == ["line one\nline two"]

    def test_empty_text(self):
        assert parse_template("").tokens == []

    def test_markers_property(self):
        result = parse_template("{{a}} and {{b:age}}\n\n{{a}}")
        assert [m.key for m in result.markers] == ["a", "b", "a"]


class TestMalformedSyntax:
    def test_unclosed_marker_stays_literal(self):
        """
        Scenario: An author forgot the closing braces.
        Expected: The text is kept verbatim and a diagnostic is recorded.
        """
        result = parse_template("Hello {{student and goodbye")
        assert result.tokens == [LiteralToken("Hello {{student and goodbye")]
        assert len(result.diagnostics) == 1
        assert result.diagnostics[0].offset == 6

    def test_illegal_key_characters(self):
        result = parse_template("{{ bad key }} then {{ok}}")
        assert result.tokens[0] == LiteralToken("{{ bad key }} then ")
        assert result.markers[0].key == "ok"
        assert result.diagnostics

    def test_diagnostic_records_paragraph(self):
        result = parse_template("fine\n\nbroken }}")
        assert result.diagnostics[0].paragraph == 1


class TestReferencedKeys:
    def test_first_seen_order_without_namespaces(self):
        text = "{{b}} {{a}} {{b:age}} {{source:s1}} {{image:i1}}"
        assert referenced_keys(text) == ["b", "a"]
