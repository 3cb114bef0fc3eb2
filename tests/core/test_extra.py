"""Tests for parsing directives out of the extra field."""

from bibexport.core.config import Dialect
from bibexport.core.extra import ExtraParser, braces_balanced
from bibexport.core.models import DirectiveFormat, OverrideDirective


class TestExtraParser:
    """Test directive recognition."""

    def test_empty(self) -> None:
        parsed = ExtraParser(Dialect.BIBTEX).parse("")

        assert parsed.directives == []
        assert parsed.note == ""

    def test_tex_lines(self) -> None:
        """Colon lines are plain, equals lines are raw."""
        parsed = ExtraParser(Dialect.BIBTEX).parse(
            "tex.howpublished: Privately printed\ntex.note= \\emph{raw}"
        )

        assert parsed.directives == [
            OverrideDirective(target_name="howpublished", payload="Privately printed"),
            OverrideDirective(
                target_name="note", payload="\\emph{raw}", format=DirectiveFormat.RAW
            ),
        ]
        assert parsed.note == ""

    def test_scoped_tex_line(self) -> None:
        parsed = ExtraParser(Dialect.BIBTEX).parse("tex.book.location: Berlin")

        directive = parsed.directives[0]
        assert directive.scope == "book"
        assert directive.field_name == "location"

    def test_dialect_prefixes(self) -> None:
        """bibtex. and biblatex. lines only apply to their dialect."""
        extra = "bibtex.address: Here\nbiblatex.location: There"

        bibtex = ExtraParser(Dialect.BIBTEX).parse(extra)
        biblatex = ExtraParser(Dialect.BIBLATEX).parse(extra)

        assert [d.target_name for d in bibtex.directives] == ["address"]
        assert [d.target_name for d in biblatex.directives] == ["location"]
        assert bibtex.note == biblatex.note == ""

    def test_remaining_lines_are_note(self) -> None:
        parsed = ExtraParser(Dialect.BIBTEX).parse(
            "First line\ntex.edition: 2\nRemember: this stays"
        )

        assert parsed.note == "First line\nRemember: this stays"

    def test_key_value_block(self) -> None:
        parsed = ExtraParser(Dialect.BIBLATEX).parse(
            "biblatex[location=Berlin;series=LNCS]"
        )

        assert [(d.target_name, d.payload) for d in parsed.directives] == [
            ("location", "Berlin"),
            ("series", "LNCS"),
        ]

    def test_key_value_block_other_dialect_dropped(self) -> None:
        parsed = ExtraParser(Dialect.BIBTEX).parse("biblatex[location=Berlin]")

        assert parsed.directives == []
        assert parsed.note == ""

    def test_starred_block_is_assembled(self) -> None:
        parsed = ExtraParser(Dialect.BIBTEX).parse("bibtex*[note={\\emph{x}}]")

        assert parsed.directives == [
            OverrideDirective(
                target_name="note",
                payload="{\\emph{x}}",
                format=DirectiveFormat.ASSEMBLED,
            )
        ]

    def test_unbalanced_assembled_value_degraded(self) -> None:
        parsed = ExtraParser(Dialect.BIBTEX).parse("bibtex*[note={x]")

        assert parsed.directives[0].format is DirectiveFormat.PLAIN
        assert len(parsed.warnings) == 1

    def test_unbalanced_raw_value_degraded(self) -> None:
        parsed = ExtraParser(Dialect.BIBTEX).parse("tex.note= \\emph{oops")

        assert parsed.directives == [
            OverrideDirective(
                target_name="note",
                payload="\\emph{oops",
                format=DirectiveFormat.PLAIN,
            )
        ]
        assert len(parsed.warnings) == 1

    def test_balanced_raw_value_kept(self) -> None:
        parsed = ExtraParser(Dialect.BIBTEX).parse("tex.note= \\emph{fine}")

        assert parsed.directives[0].format is DirectiveFormat.RAW
        assert parsed.warnings == []

    def test_json_block(self) -> None:
        parsed = ExtraParser(Dialect.BIBTEX).parse('bibtex{"edition": "2", "volume": 3}')

        assert [(d.target_name, d.payload) for d in parsed.directives] == [
            ("edition", "2"),
            ("volume", "3"),
        ]

    def test_inline_csl(self) -> None:
        parsed = ExtraParser(Dialect.BIBLATEX).parse("Seen {:original-date: 1867} here")

        assert parsed.directives == [
            OverrideDirective(target_name="original-date", payload="1867", csl=True)
        ]
        assert parsed.note == "Seen  here"

    def test_labelled_csl_line(self) -> None:
        parsed = ExtraParser(Dialect.BIBLATEX).parse("Original Date: 1867")

        assert parsed.directives == [
            OverrideDirective(target_name="original-date", payload="1867", csl=True)
        ]

    def test_identifier_lines(self) -> None:
        parsed = ExtraParser(Dialect.BIBTEX).parse("PMID: 12345\nMRNumber: 99")

        assert [(d.target_name, d.payload, d.csl) for d in parsed.directives] == [
            ("pmid", "12345", False),
            ("mrnumber", "99", False),
        ]


class TestBracesBalanced:
    """Test the brace balance check."""

    def test_balanced(self) -> None:
        assert braces_balanced("{a{b}c}")
        assert braces_balanced("plain")

    def test_unbalanced(self) -> None:
        assert not braces_balanced("{a")
        assert not braces_balanced("}{")

    def test_escaped_braces_ignored(self) -> None:
        assert braces_balanced("\\{a")
        assert braces_balanced("a\\}")
        assert not braces_balanced("\\\\{a")
