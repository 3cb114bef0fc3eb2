"""Capitalization preservation for title-like fields.

BibTeX styles are free to change the case of field text, except for
text inside braces. The escaper wraps letter runs that carry
significant capitals in their own brace pair.
"""

from .chars import is_letter, is_uppercase
from .config import PreserveCaps


class CapitalizationEscaper:
    """Brace-wrap capitalized letter runs in LaTeX text.

    The scan is a heuristic, not a LaTeX tokenizer: a backslash escapes
    the character after it (so ``\\\\`` is an escaped backslash and a
    following brace is real), a backslash followed by letters is a
    command name, and only letter runs at brace depth zero are
    candidates for wrapping.

    Modes:
    - NONE: text is returned unchanged
    - ALL: every run containing an uppercase letter is wrapped
    - INNER: only runs with an uppercase letter after the first letter
      of a word are wrapped (``iPhone``, ``DNA``, ``McDonald``)
    """

    def __init__(self, mode: PreserveCaps = PreserveCaps.INNER):
        self.mode = mode

    def escape(self, text: str) -> str:
        """Wrap capitalized runs of ``text`` in braces."""
        if self.mode is PreserveCaps.NONE or not text:
            return text

        result = []
        depth = 0
        i = 0
        n = len(text)

        while i < n:
            char = text[i]

            if char == "\\":
                j = i + 1
                if j < n and text[j].isascii() and text[j].isalpha():
                    while j < n and text[j].isascii() and text[j].isalpha():
                        j += 1
                elif j < n:
                    j += 1
                result.append(text[i:j])
                i = j
                continue

            if char == "{":
                depth += 1
            elif char == "}":
                depth = max(0, depth - 1)
            elif depth == 0 and is_letter(char):
                j = i
                while j < n and is_letter(text[j]):
                    j += 1
                run = text[i:j]
                if self._protect(run, self._at_word_start(text, i)):
                    result.append("{" + run + "}")
                else:
                    result.append(run)
                i = j
                continue

            result.append(char)
            i += 1

        return "".join(result)

    @staticmethod
    def _at_word_start(text: str, pos: int) -> bool:
        if pos == 0:
            return True
        previous = text[pos - 1]
        return not (is_letter(previous) or previous == "}")

    def _protect(self, run: str, word_start: bool) -> bool:
        if self.mode is PreserveCaps.ALL:
            return any(is_uppercase(c) for c in run)

        if not word_start and is_uppercase(run[0]):
            return True
        return any(is_uppercase(c) for c in run[1:])
