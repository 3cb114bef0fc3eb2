"""Override directives embedded in an item's ``extra`` field.

Users steer the export from inside their library by writing
directives into the free-text ``extra`` field of an item:

    tex.howpublished: Privately printed
    tex.note= \\emph{verbatim} LaTeX
    biblatex.book.location: Berlin
    bibtex[edition=2;series=Lecture Notes]
    Original Date: 1867
    {:event-place: Vienna}
    PMID: 12345678

Everything that is not a directive remains as note text.
"""

import re
from typing import Any

import msgspec

from .config import Dialect
from .latex import braces_balanced
from .mapping import CSL_VARIABLES, IDENTIFIER_ALIASES, IDENTIFIER_KEYS
from .models import DirectiveFormat, OverrideDirective


class ParsedExtra(msgspec.Struct, kw_only=True):
    """Directives found in ``extra`` and the text left over."""

    directives: list[OverrideDirective] = msgspec.field(default_factory=list)
    note: str = ""
    warnings: list[str] = msgspec.field(default_factory=list)


class ExtraParser:
    """Parse directives out of ``extra`` text for one dialect."""

    TEX_LINE = re.compile(
        r"^(tex|bibtex|biblatex)\.([a-z][-a-z0-9_]*(?:\.[a-z][-a-z0-9_]*)?)\s*([:=])\s*(.*)$",
        re.IGNORECASE,
    )
    KEY_VALUE_BLOCK = re.compile(
        r"(biblatexdata|bibtex|biblatex)(\*)?\[([^\]]*)\]", re.IGNORECASE
    )
    JSON_BLOCK = re.compile(
        r"(biblatexdata|bibtex|biblatex)(\*)?(\{.*?\})(?=\s*$|\s*\n)",
        re.IGNORECASE | re.DOTALL,
    )
    CSL_INLINE = re.compile(r"\{:([^:{}]+):\s*([^{}]*)\}")
    LABELLED_LINE = re.compile(r"^([A-Za-z][A-Za-z -]*?)\s*:\s*(.+)$")

    def __init__(self, dialect: Dialect, csl_variables: dict[str, Any] | None = None):
        self.dialect = dialect
        self.csl_variables = CSL_VARIABLES if csl_variables is None else csl_variables

    def parse(self, extra: str) -> ParsedExtra:
        """Split ``extra`` into directives and note text."""
        result = ParsedExtra()
        if not extra or not extra.strip():
            return result

        text = self.JSON_BLOCK.sub(lambda m: self._json_block(m, result), extra)
        text = self.KEY_VALUE_BLOCK.sub(lambda m: self._key_value_block(m, result), text)
        text = self.CSL_INLINE.sub(lambda m: self._csl_inline(m, result), text)

        note = []
        for line in text.splitlines():
            if not self._parse_line(line.strip(), result):
                note.append(line)
        result.note = "\n".join(note).strip()
        return result

    def _applies(self, prefix: str) -> bool:
        prefix = prefix.lower()
        if prefix in ("tex", "biblatexdata"):
            return True
        return prefix == self.dialect.value

    def _block_format(self, starred: str | None) -> DirectiveFormat:
        return DirectiveFormat.ASSEMBLED if starred else DirectiveFormat.PLAIN

    def _key_value_block(self, match: re.Match, result: ParsedExtra) -> str:
        prefix, starred, body = match.groups()
        if not self._applies(prefix):
            return ""
        for assignment in body.split(";"):
            if "=" not in assignment:
                continue
            name, value = assignment.split("=", 1)
            self._add(result, name.strip(), value.strip(), self._block_format(starred))
        return ""

    def _json_block(self, match: re.Match, result: ParsedExtra) -> str:
        prefix, starred, body = match.groups()
        try:
            data = msgspec.json.decode(body.encode("utf-8"), type=dict[str, Any])
        except msgspec.DecodeError as e:
            result.warnings.append(f"ignoring malformed {prefix} block: {e}")
            return match.group(0)
        if self._applies(prefix):
            for name, value in data.items():
                self._add(result, name, str(value), self._block_format(starred))
        return ""

    def _csl_inline(self, match: re.Match, result: ParsedExtra) -> str:
        name, value = match.group(1).strip(), match.group(2).strip()
        result.directives.append(
            OverrideDirective(target_name=self._csl_name(name), payload=value, csl=True)
        )
        return ""

    @staticmethod
    def _csl_name(label: str) -> str:
        return re.sub(r"\s+", "-", label.strip().lower())

    def _parse_line(self, line: str, result: ParsedExtra) -> bool:
        if not line:
            return False

        if match := self.TEX_LINE.match(line):
            prefix, name, operator, value = match.groups()
            if self._applies(prefix):
                format = DirectiveFormat.RAW if operator == "=" else DirectiveFormat.PLAIN
                self._add(result, name, value.strip(), format)
            return True

        if match := self.LABELLED_LINE.match(line):
            label, value = match.group(1).strip(), match.group(2).strip()
            key = label.lower().replace(" ", "")
            if key in IDENTIFIER_KEYS or key in IDENTIFIER_ALIASES:
                self._add(result, key, value, DirectiveFormat.PLAIN)
                return True
            csl_name = self._csl_name(label)
            if csl_name in self.csl_variables:
                result.directives.append(
                    OverrideDirective(target_name=csl_name, payload=value, csl=True)
                )
                return True

        return False

    def _add(
        self, result: ParsedExtra, name: str, value: str, format: DirectiveFormat
    ) -> None:
        if format is not DirectiveFormat.PLAIN and not braces_balanced(value):
            result.warnings.append(
                f"unbalanced braces in {format.value} value for {name}, encoding it instead"
            )
            format = DirectiveFormat.PLAIN
        result.directives.append(
            OverrideDirective(target_name=name, payload=value, format=format)
        )
