"""Tests for date parsing."""

from bibexport.core.dates import DateParser
from bibexport.core.models import DateParts


class TestDateParser:
    """Test free-text date parsing."""

    def test_iso_dates(self) -> None:
        """ISO dates of every precision are understood."""
        parser = DateParser()

        assert parser.parse("2020") == DateParts(year=2020)
        assert parser.parse("2020-03") == DateParts(year=2020, month=3)
        assert parser.parse("2020-03-05") == DateParts(year=2020, month=3, day=5)

    def test_iso_datetime(self) -> None:
        """A time part is ignored."""
        parsed = DateParser().parse("2020-03-05T10:00:00Z")
        assert parsed == DateParts(year=2020, month=3, day=5)

    def test_numeric_order_follows_locale(self) -> None:
        """US locales put the month first."""
        assert DateParser("en-US").parse("03/05/2020") == DateParts(
            year=2020, month=3, day=5
        )
        assert DateParser("de-DE").parse("03.05.2020") == DateParts(
            year=2020, month=5, day=3
        )

    def test_month_names(self) -> None:
        """English and locale month names are understood."""
        assert DateParser().parse("5 March 2020") == DateParts(year=2020, month=3, day=5)
        assert DateParser().parse("March 5, 2020") == DateParts(
            year=2020, month=3, day=5
        )
        assert DateParser("de-DE").parse("Mai 2019") == DateParts(year=2019, month=5)

    def test_seasons(self) -> None:
        """Seasons map to their first month."""
        assert DateParser().parse("Spring 2019") == DateParts(year=2019, month=3)

    def test_ranges(self) -> None:
        """Ranges keep both ends."""
        parsed = DateParser().parse("2020-03/2020-05")

        assert parsed.is_range
        assert (parsed.year, parsed.month) == (2020, 3)
        assert (parsed.end_year, parsed.end_month) == (2020, 5)

    def test_no_date(self) -> None:
        """No-date markers become the n.d. literal."""
        assert DateParser().parse("n.d.").literal == "n.d."
        assert DateParser().parse("undated").literal == "n.d."

    def test_unparseable_is_literal(self) -> None:
        """Anything else is kept verbatim."""
        parsed = DateParser().parse("sometime in the 1990s")

        assert parsed.year is None
        assert parsed.literal == "sometime in the 1990s"

    def test_invalid_month_is_literal(self) -> None:
        """Out of range parts are not accepted."""
        assert DateParser().parse("2020-13").literal == "2020-13"
