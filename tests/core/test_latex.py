"""Tests for LaTeX and verbatim escaping."""

import pytest

from bibexport.core.config import Dialect
from bibexport.core.latex import LatexEscaper, escape_verbatim


class TestLatexEscaper:
    """Test text to LaTeX conversion."""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("R&D", "R\\&D"),
            ("50%", "50\\%"),
            ("$5", "\\$5"),
            ("a_b", "a\\_b"),
            ("#1", "\\#1"),
            ("{x}", "\\{x\\}"),
            ("a~b", "a\\textasciitilde{}b"),
            ("a\\b", "a\\textbackslash{}b"),
        ],
    )
    def test_special_characters(self, text: str, expected: str) -> None:
        """Characters with meaning to LaTeX are escaped."""
        assert LatexEscaper().escape(text) == expected

    def test_accented_letters(self) -> None:
        """Accented letters become braced accent commands."""
        escaper = LatexEscaper()

        assert escaper.escape("Caf\u00e9") == "Caf{\\'e}"
        assert escaper.escape("Müller") == 'M{\\"u}ller'
        assert escaper.escape("Français") == "Fran{\\c c}ais"
        assert escaper.escape("Gödel") == 'G{\\"o}del'

    def test_dotless_i(self) -> None:
        """Accents on i use the dotless i."""
        assert LatexEscaper().escape("í") == "{\\'\\i}"

    def test_decomposed_input_is_composed_first(self) -> None:
        """Combining sequences encode like their precomposed form."""
        escaper = LatexEscaper()
        assert escaper.escape("e\u0301") == escaper.escape("\u00e9")

    def test_symbols(self) -> None:
        """Symbols without accents use their LaTeX commands."""
        escaper = LatexEscaper()

        assert escaper.escape("Straße") == "Stra{\\ss{}}e"
        assert escaper.escape("1–2") == "1{--}2"
        assert escaper.escape("a\u00a0b") == "a{~}b"

    def test_unicode_mode_keeps_non_ascii(self) -> None:
        """Unicode mode escapes only special characters."""
        escaper = LatexEscaper(unicode=True)

        assert escaper.escape("Caf\u00e9 & Co") == "Caf\u00e9 \\& Co"
        assert escaper.escape("Straße") == "Straße"

    def test_unmapped_characters_pass_through(self) -> None:
        """Characters without a LaTeX form are left alone."""
        assert LatexEscaper().escape("漢字") == "漢字"

    def test_empty_text(self) -> None:
        """Empty text stays empty."""
        assert LatexEscaper().escape("") == ""

    def test_output_is_brace_balanced(self) -> None:
        """Escaped text never unbalances braces."""
        text = "}{ weird {input} with \\ and ü } {"
        escaped = LatexEscaper().escape(text)

        depth = 0
        for char in escaped.replace("\\{", "").replace("\\}", ""):
            if char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
            assert depth >= 0
        assert depth == 0


class TestEscapeVerbatim:
    """Test escaping of verbatim fields."""

    def test_bibtex_escapes_structural_characters(self) -> None:
        """BibTeX needs #, %, & and braces escaped."""
        result = escape_verbatim("https://x.org/a%20b#frag", Dialect.BIBTEX)
        assert result == "https://x.org/a\\%20b\\#frag"

    def test_biblatex_keeps_percent_and_hash(self) -> None:
        """BibLaTeX verbatim fields only need backslash and braces escaped."""
        result = escape_verbatim("https://x.org/a%20b#frag", Dialect.BIBLATEX)
        assert result == "https://x.org/a%20b#frag"

    def test_non_ascii_is_percent_encoded(self) -> None:
        """Characters outside printable ASCII are percent-encoded."""
        result = escape_verbatim("https://x.org/über", Dialect.BIBLATEX)
        assert result == "https://x.org/%c3%bcber"

    def test_unicode_mode_keeps_non_ascii(self) -> None:
        """Unicode mode does not percent-encode."""
        result = escape_verbatim("https://x.org/über", Dialect.BIBLATEX, unicode=True)
        assert result == "https://x.org/über"

    def test_space_is_printable(self) -> None:
        """Spaces are printable ASCII and stay as they are."""
        assert escape_verbatim("a b", Dialect.BIBLATEX) == "a b"

    def test_bibtex_percent_escapes_follow_dialect(self) -> None:
        """Generated escapes are written like a literal percent sign."""
        result = escape_verbatim("https://x.org/caf\u00e9 100%", Dialect.BIBTEX)

        assert result == "https://x.org/caf\\%c3\\%a9 100\\%"
        assert "%" not in result.replace("\\%", "")
