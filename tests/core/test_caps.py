"""Tests for capitalization preservation."""

from bibexport.core.caps import CapitalizationEscaper
from bibexport.core.config import PreserveCaps


class TestCapitalizationEscaper:
    """Test brace protection of capitalized words."""

    def test_none_mode_is_identity(self) -> None:
        """NONE leaves text unchanged."""
        escaper = CapitalizationEscaper(PreserveCaps.NONE)
        assert escaper.escape("The iPhone and DNA") == "The iPhone and DNA"

    def test_inner_mode(self) -> None:
        """INNER protects words with capitals after the first letter."""
        escaper = CapitalizationEscaper(PreserveCaps.INNER)

        assert escaper.escape("The iPhone and DNA") == "The {iPhone} and {DNA}"
        assert escaper.escape("A study of McDonald") == "A study of {McDonald}"

    def test_inner_mode_leaves_sentence_case(self) -> None:
        """Capitalized first letters alone are not protected."""
        escaper = CapitalizationEscaper(PreserveCaps.INNER)
        assert escaper.escape("Gene Expression") == "Gene Expression"

    def test_all_mode(self) -> None:
        """ALL protects every word containing a capital."""
        escaper = CapitalizationEscaper(PreserveCaps.ALL)
        assert escaper.escape("The iPhone and DNA") == "{The} {iPhone} and {DNA}"

    def test_braced_text_untouched(self) -> None:
        """Text already inside braces is not wrapped again."""
        escaper = CapitalizationEscaper(PreserveCaps.ALL)
        assert escaper.escape("about {NASA} rockets") == "about {NASA} rockets"

    def test_command_names_untouched(self) -> None:
        """LaTeX command names are skipped."""
        escaper = CapitalizationEscaper(PreserveCaps.ALL)

        assert escaper.escape("\\textbf{Big} deal") == "\\textbf{Big} deal"
        assert escaper.escape("Caf{\\'e}") == "{Caf}{\\'e}"

    def test_escaped_brace_does_not_change_depth(self) -> None:
        """An escaped brace is a character, not a group."""
        escaper = CapitalizationEscaper(PreserveCaps.INNER)
        assert escaper.escape("\\{ DNA") == "\\{ {DNA}"

    def test_escaped_backslash_before_brace(self) -> None:
        """After an escaped backslash, a brace opens a group again."""
        escaper = CapitalizationEscaper(PreserveCaps.INNER)
        assert escaper.escape("\\\\{DNA}") == "\\\\{DNA}"
