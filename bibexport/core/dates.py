"""Locale-aware date parsing.

Item dates arrive as free text in whatever form the user typed them.
The parser recognizes ISO dates, numeric day/month/year dates in the
order customary for the locale, dates with month names in a few
languages, and ranges separated by ``/`` or ``--``. Anything else is
kept as a literal.
"""

import re

from .models import DateParts

MONTH_NAMES = {
    "en": [
        "january", "february", "march", "april", "may", "june",
        "july", "august", "september", "october", "november", "december",
    ],
    "de": [
        "januar", "februar", "märz", "april", "mai", "juni",
        "juli", "august", "september", "oktober", "november", "dezember",
    ],
    "fr": [
        "janvier", "février", "mars", "avril", "mai", "juin",
        "juillet", "août", "septembre", "octobre", "novembre", "décembre",
    ],
}

# Locales that write numeric dates month first
MONTH_FIRST_LOCALES = {"en-us", "en-ph", "en-ca"}

SEASONS = {"spring": 3, "summer": 6, "autumn": 9, "fall": 9, "winter": 12}

NO_DATE_LITERALS = {"n.d.", "n.d", "nd", "no date", "undated", "s.d.", "o.j."}


class DateParser:
    """Parse free-text dates into DateParts."""

    ISO_PATTERN = re.compile(r"^(-?\d{4})(?:-(\d{1,2})(?:-(\d{1,2}))?)?(?:T.*)?$")
    NUMERIC_PATTERN = re.compile(r"^(\d{1,2})[./](\d{1,2})[./](\d{4})$")
    YEAR_PATTERN = re.compile(r"^(\d{4})$")
    RANGE_SEPARATORS = re.compile(r"\s*(?:/|--|–)\s*")

    def __init__(self, locale: str = "en-US"):
        self.locale = locale.lower()
        self._months = self._build_month_table()

    def _build_month_table(self) -> dict[str, int]:
        language = self.locale.split("-", 1)[0]
        table: dict[str, int] = {}
        # English names are always understood
        for lang in ("en", language):
            for index, name in enumerate(MONTH_NAMES.get(lang, [])):
                table[name] = index + 1
                table[name[:3]] = index + 1
        table["sept"] = 9
        return table

    def parse(self, text: str) -> DateParts:
        """Parse a date, range, or literal.

        Args:
            text: The date as typed by the user.

        Returns:
            Parsed date; ``literal`` is set when nothing numeric could be
            recovered.
        """
        text = text.strip()
        if not text:
            return DateParts(literal="")
        if text.lower() in NO_DATE_LITERALS:
            return DateParts(literal="n.d.")

        single = self._parse_single(text)
        if single is not None:
            return single

        parts = self.RANGE_SEPARATORS.split(text)
        if len(parts) == 2:
            start = self._parse_single(parts[0])
            end = self._parse_single(parts[1])
            if start is not None and end is not None:
                return DateParts(
                    year=start.year,
                    month=start.month,
                    day=start.day,
                    end_year=end.year,
                    end_month=end.month,
                    end_day=end.day,
                )

        return DateParts(literal=text)

    def _parse_single(self, text: str) -> DateParts | None:
        text = text.strip()

        if match := self.ISO_PATTERN.match(text):
            year, month, day = match.groups()
            return self._validated(int(year), month, day)

        if match := self.NUMERIC_PATTERN.match(text):
            first, second, year = match.groups()
            if self.locale in MONTH_FIRST_LOCALES:
                month, day = first, second
            else:
                day, month = first, second
            return self._validated(int(year), month, day)

        return self._parse_named(text)

    def _parse_named(self, text: str) -> DateParts | None:
        """Parse dates like ``5 March 2020``, ``March 5, 2020``, ``Spring 2019``."""
        tokens = [t for t in re.split(r"[\s,.]+", text.lower()) if t]
        if not 2 <= len(tokens) <= 3:
            return None

        year = month = day = None
        for token in tokens:
            if self.YEAR_PATTERN.match(token) and year is None:
                year = int(token)
            elif token in self._months and month is None:
                month = self._months[token]
            elif token in SEASONS and month is None and len(tokens) == 2:
                month = SEASONS[token]
            elif re.match(r"^\d{1,2}(st|nd|rd|th)?$", token) and day is None:
                day = int(re.sub(r"\D", "", token))
            else:
                return None

        if year is None or month is None:
            return None
        return self._validated(year, month, day)

    @staticmethod
    def _validated(year: int, month, day) -> DateParts | None:
        month = int(month) if month is not None else None
        day = int(day) if day is not None else None
        if month is not None and not 1 <= month <= 12:
            return None
        if day is not None and not 1 <= day <= 31:
            return None
        return DateParts(year=year, month=month, day=day)
