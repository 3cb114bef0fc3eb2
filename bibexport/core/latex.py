"""LaTeX escaping for BibTeX field values.

This module converts plain text into LaTeX source suitable for a
braced BibTeX field. Characters with special meaning to LaTeX are
always escaped; in ASCII mode non-ASCII characters are additionally
rewritten as LaTeX accent and symbol commands.

Key components:
- LatexEscaper: Text to LaTeX conversion
- escape_verbatim: Escaping for verbatim fields (URLs, paths)
- braces_balanced: Brace structure check for LaTeX text
"""

import unicodedata

from .config import Dialect


class LatexEscaper:
    """Convert text to LaTeX.

    Every replacement is brace-balanced, so escaped text never changes
    the brace structure of the field it ends up in.
    """

    SPECIAL_CHARS = {
        "\\": "\\textbackslash{}",
        "{": "\\{",
        "}": "\\}",
        "$": "\\$",
        "&": "\\&",
        "#": "\\#",
        "_": "\\_",
        "%": "\\%",
        "~": "\\textasciitilde{}",
        "^": "\\textasciicircum{}",
    }

    # Combining marks produced by NFD decomposition
    ACCENTS = {
        "\u0300": "`",
        "\u0301": "'",
        "\u0302": "^",
        "\u0303": "~",
        "\u0304": "=",
        "\u0306": "u",
        "\u0307": ".",
        "\u0308": '"',
        "\u030a": "r",
        "\u030b": "H",
        "\u030c": "v",
        "\u0323": "d",
        "\u0327": "c",
        "\u0328": "k",
        "\u0331": "b",
    }

    SYMBOLS = {
        "\u00a0": "~",
        "§": "\\S{}",
        "©": "\\textcopyright{}",
        "«": "\\guillemotleft{}",
        "®": "\\textregistered{}",
        "°": "\\textdegree{}",
        "±": "\\textpm{}",
        "¶": "\\P{}",
        "»": "\\guillemotright{}",
        "¿": "?`",
        "¡": "!`",
        "£": "\\pounds{}",
        "×": "\\texttimes{}",
        "Æ": "\\AE{}",
        "æ": "\\ae{}",
        "Ø": "\\O{}",
        "ø": "\\o{}",
        "ß": "\\ss{}",
        "ı": "\\i{}",
        "Ł": "\\L{}",
        "ł": "\\l{}",
        "Œ": "\\OE{}",
        "œ": "\\oe{}",
        "Ð": "\\DH{}",
        "ð": "\\dh{}",
        "Þ": "\\TH{}",
        "þ": "\\th{}",
        "–": "--",
        "—": "---",
        "‘": "`",
        "’": "'",
        "“": "``",
        "”": "''",
        "…": "\\ldots{}",
        "€": "\\texteuro{}",
        "™": "\\texttrademark{}",
        "α": "$\\alpha$",
        "β": "$\\beta$",
        "γ": "$\\gamma$",
        "δ": "$\\delta$",
        "ε": "$\\epsilon$",
        "λ": "$\\lambda$",
        "μ": "$\\mu$",
        "π": "$\\pi$",
        "σ": "$\\sigma$",
        "ω": "$\\omega$",
        "Δ": "$\\Delta$",
        "Σ": "$\\Sigma$",
        "Ω": "$\\Omega$",
    }

    def __init__(self, unicode: bool = False):
        self.unicode = unicode

    def escape(self, text: str) -> str:
        """Escape text for use inside a braced field value.

        Args:
            text: Plain text.

        Returns:
            LaTeX source representing ``text``.
        """
        if not text:
            return text

        if self.unicode:
            return "".join(self.SPECIAL_CHARS.get(char, char) for char in text)

        result = []
        for char in unicodedata.normalize("NFC", text):
            if char in self.SPECIAL_CHARS:
                result.append(self.SPECIAL_CHARS[char])
            elif ord(char) < 128:
                result.append(char)
            else:
                result.append(self._encode_non_ascii(char))
        return "".join(result)

    def _encode_non_ascii(self, char: str) -> str:
        """Encode one non-ASCII character as a braced LaTeX command."""
        if char in self.SYMBOLS:
            return "{" + self.SYMBOLS[char] + "}"

        decomposed = unicodedata.normalize("NFD", char)
        base, marks = decomposed[0], decomposed[1:]
        if ord(base) < 128 and marks and all(m in self.ACCENTS for m in marks):
            if base == "i":
                base = "\\i"
            elif base == "j":
                base = "\\j"
            encoded = base
            for mark in marks:
                command = self.ACCENTS[mark]
                if command.isalpha() and not encoded.startswith("\\"):
                    encoded = f"\\{command} {encoded}"
                elif command.isalpha():
                    encoded = f"\\{command}{{{encoded}}}"
                else:
                    encoded = f"\\{command}{encoded}"
            return "{" + encoded + "}"

        # No LaTeX equivalent; leave it to the unicode-aware engines
        return char


VERBATIM_CHARS = {
    Dialect.BIBTEX: "#\\%&{}",
    Dialect.BIBLATEX: "\\{}",
}


def escape_verbatim(text: str, dialect: Dialect, unicode: bool = False) -> str:
    """Escape a value for a verbatim field such as ``url`` or ``file``.

    Only characters that would break the field structure are
    backslash-escaped. Unless ``unicode`` is set, anything outside
    printable ASCII is percent-encoded byte by byte; the generated
    escapes follow the dialect's rule for a literal ``%``.
    """
    structural = VERBATIM_CHARS[dialect]
    escaped = "".join("\\" + char if char in structural else char for char in text)
    if unicode:
        return escaped
    percent = "\\%" if "%" in structural else "%"
    return "".join(
        char
        if 0x20 <= ord(char) <= 0x7E
        else "".join(f"{percent}{byte:02x}" for byte in char.encode("utf-8"))
        for char in escaped
    )


def braces_balanced(text: str) -> bool:
    """Check that no prefix closes more braces than it opened.

    A backslash escapes the character after it, so ``\\{`` and ``\\}``
    do not count.
    """
    depth = 0
    escaped = False
    for char in text:
        if escaped:
            escaped = False
        elif char == "\\":
            escaped = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth < 0:
                return False
    return depth == 0
