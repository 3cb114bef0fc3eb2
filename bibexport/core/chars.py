"""Unicode character class predicates."""

import unicodedata


def is_letter(char: str) -> bool:
    """Check if a character is a letter in any script."""
    return unicodedata.category(char).startswith("L")


def is_uppercase(char: str) -> bool:
    """Check if a character is an uppercase or titlecase letter."""
    return unicodedata.category(char) in ("Lu", "Lt")


def is_punctuation(char: str) -> bool:
    return unicodedata.category(char).startswith("P")


def collation_key(text: str) -> tuple[str, str]:
    """Sort key ordering text case- and accent-insensitively.

    The key does not depend on the process locale; ties fall back to
    the exact text so the order is total.
    """
    folded = unicodedata.normalize("NFKD", text).casefold()
    return "".join(c for c in folded if not unicodedata.combining(c)), text
