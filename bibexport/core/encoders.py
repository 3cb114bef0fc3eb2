"""Encoders resolving field values to BibTeX text.

Each encoder takes a Field and returns the text to store, or None when
the value does not produce any output. ``EncoderRegistry.encode``
dispatches over ``EncoderKind`` exhaustively.
"""

import logging
import re
import threading
from typing import TYPE_CHECKING, Any

from .config import Dialect, ExportConfig
from .dates import DateParser
from .chars import collation_key
from .latex import LatexEscaper, escape_verbatim
from .models import Attachment, DateParts, EncoderKind, Field, ProtectedText, RawText
from .names import NameResolver, ParticleParser

if TYPE_CHECKING:
    from .record import Record

logger = logging.getLogger(__name__)

NO_DATE = "\\bibstring{nodate}"

TAG_SPECIAL_CHARS = {
    Dialect.BIBTEX: "#\\%&",
    Dialect.BIBLATEX: "#%\\",
}


class DocumentState:
    """State shared by all records of one export.

    Access is serialized so records may be built by concurrent workers.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._attachment_counter = 0
        self._junior_comma = False

    def next_attachment_number(self) -> int:
        """Get the next number for synthetic attachment paths."""
        with self._lock:
            self._attachment_counter += 1
            return self._attachment_counter

    def request_junior_comma(self) -> None:
        with self._lock:
            self._junior_comma = True

    @property
    def junior_comma(self) -> bool:
        """Check if any exported name needs a comma before its suffix."""
        with self._lock:
            return self._junior_comma


class EncoderRegistry:
    """Resolve field values according to their encoder kind.

    The registry holds only read-only configuration and services, plus
    the thread-safe DocumentState, so one instance serves all records
    of an export.
    """

    def __init__(
        self,
        config: ExportConfig,
        escaper: LatexEscaper | None = None,
        date_parser: DateParser | None = None,
        particle_parser: ParticleParser | None = None,
        state: DocumentState | None = None,
    ):
        self.config = config
        self.escaper = escaper or LatexEscaper(unicode=config.unicode)
        self.date_parser = date_parser or DateParser(config.locale)
        self.state = state or DocumentState()
        self.names = NameResolver(config.dialect, self.latex_value, particle_parser)

    def encode(
        self, kind: EncoderKind, field: Field, record: "Record", raw: bool | None = None
    ) -> str | None:
        """Resolve ``field`` with the encoder ``kind``.

        Raw mode applies to the LaTeX and creator encoders only; it
        follows the record unless ``raw`` is given.
        """
        if raw is None:
            raw = record.raw
        match kind:
            case EncoderKind.LATEX:
                return self.encode_latex(field, raw=raw)
            case EncoderKind.RAW:
                return self.encode_raw(field)
            case EncoderKind.DATE:
                return self.encode_date(field)
            case EncoderKind.URL:
                return self.encode_url(field)
            case EncoderKind.VERBATIM:
                return self.encode_verbatim(field)
            case EncoderKind.CREATORS:
                return self.encode_creators(field, record, raw=raw)
            case EncoderKind.TAGS:
                return self.encode_tags(field, record)
            case EncoderKind.ATTACHMENTS:
                return self.encode_attachments(field, record)
            case _:
                raise ValueError(f"Unknown encoder: {kind}")

    def encode_raw(self, field: Field) -> str | None:
        """Return the value unchanged."""
        if field.value is None:
            return None
        return str(field.value)

    def encode_latex(self, field: Field, raw: bool = False) -> str | None:
        if field.value is None:
            return None
        return self.latex_value(field.value, separator=field.separator, raw=raw)

    def latex_value(self, value: Any, separator: str = "", raw: bool = False) -> str:
        """LaTeX-encode a value.

        Lists are encoded element-wise and joined with ``separator``.
        ProtectedText gets an extra brace pair; RawText is not escaped.
        """
        if isinstance(value, bool):
            return str(value).lower()
        if isinstance(value, int | float):
            return str(value)
        if isinstance(value, list | tuple):
            return separator.join(self.latex_value(v, raw=raw) for v in value)
        if isinstance(value, RawText):
            return value.text
        if isinstance(value, ProtectedText):
            text = value.text if raw else self.escaper.escape(value.text)
            return "{" + text + "}"

        text = str(value)
        if raw:
            return text
        encoded = self.escaper.escape(text)
        if text[-1:].isspace() and not encoded[-1:].isspace():
            encoded += " "
        return encoded

    def encode_date(self, field: Field) -> str | None:
        """Encode a date as ``YYYY[-MM[-DD]]``, ranges joined with ``/``."""
        value = field.value
        if not value:
            return None
        if isinstance(value, str):
            value = self.date_parser.parse(value)
        if not isinstance(value, DateParts):
            return None

        if value.literal is not None:
            if value.literal == "n.d.":
                return NO_DATE
            if not value.literal.strip():
                return None
            return self.latex_value(value.literal)

        if value.year is None:
            return None

        date = self._iso(value.year, value.month, value.day)
        if value.end_year is not None:
            date += "/" + self._iso(value.end_year, value.end_month, value.end_day)
        return self.latex_value(date)

    @staticmethod
    def _iso(year: int, month: int | None, day: int | None) -> str:
        date = f"{year:04d}" if year >= 0 else f"-{-year:04d}"
        if month:
            date += f"-{month:02d}"
            if day:
                date += f"-{day:02d}"
        return date

    def encode_url(self, field: Field) -> str | None:
        value = self.encode_verbatim(field)
        if value and self.config.fancy_urls:
            return f"\\url{{{value}}}"
        return value

    def encode_verbatim(self, field: Field) -> str | None:
        """Escape structural characters only."""
        if field.value is None:
            return None
        return escape_verbatim(str(field.value), self.config.dialect, self.config.unicode)

    def encode_creators(
        self, field: Field, record: "Record", raw: bool = False
    ) -> str | None:
        """Encode a creator list joined with `` and ``."""
        if not field.value:
            return None

        encoded = []
        for creator in field.value:
            name, junior_comma = self.names.render(creator, raw=raw)
            if not name:
                continue
            if junior_comma:
                self.state.request_junior_comma()
                record.junior_comma = True
            encoded.append(name)

        if not encoded:
            return None
        return " and ".join(encoded)

    def encode_tags(self, field: Field, record: "Record") -> str | None:
        """Encode a tag list for the ``keywords`` field.

        Commas separate keywords, so commas inside a tag become
        semicolons. Tags whose braces do not balance after escaping get
        parentheses instead.
        """
        tags = [
            str(tag)
            for tag in field.value or []
            if tag and str(tag) != self.config.raw_latex_tag
        ]
        if not tags:
            return None
        if self.config.testing:
            tags.sort()

        special = TAG_SPECIAL_CHARS[self.config.dialect]
        encoded = []
        for tag in tags:
            tag = "".join("\\" + char if char in special else char for char in tag)
            tag = tag.replace(",", ";")

            balance = 0
            for char in tag:
                if char == "{":
                    balance += 1
                elif char == "}":
                    balance -= 1
                if balance < 0:
                    break
            if balance != 0:
                tag = tag.replace("{", "(").replace("}", ")")
            encoded.append(tag)

        return ",".join(encoded)

    def encode_attachments(self, field: Field, record: "Record") -> str | None:
        """Encode attachments for the ``file`` field.

        Each attachment renders as ``title:path:mimetype``, or just the
        path when metadata is suppressed; entries are joined with ``;``.
        HTML snapshots sort after other files.
        """
        if not field.value:
            return None

        attachments = []
        for attachment in field.value:
            resolved = self._resolve_attachment(attachment, record)
            if resolved is not None:
                attachments.append(resolved)

        if not attachments:
            return None

        attachments.sort(key=lambda a: (a.mime_type == "text/html", collation_key(a.path)))

        if self.config.attachments_no_metadata:
            return ";".join(_escape_file_part(a.path) for a in attachments)
        return ";".join(
            ":".join(_escape_file_part(part) for part in (a.title, a.path, a.mime_type))
            for a in attachments
        )

    def _resolve_attachment(
        self, attachment: Attachment, record: "Record"
    ) -> Attachment | None:
        save = bool(self.config.export_file_data and attachment.save_as)
        path = attachment.save_as if save else attachment.path
        if not path:
            logger.debug(f"{record.citekey}: skipping attachment without a path")
            return None

        if self.config.testing:
            number = self.state.next_attachment_number()
            path = f"files/{number}/{_basename(attachment.path or path)}"
        elif self.config.export_path and path.startswith(self.config.export_path):
            path = path[len(self.config.export_path) :].lstrip("/\\")

        if not path:
            return None

        if "{" in path or "}" in path:
            record.warn(f"BibTeX cannot handle file paths with braces: {path!r}")
            return None

        if save:
            record.request_copy(attachment.path, attachment.save_as)

        mime_type = attachment.mime_type
        if not mime_type and path.lower().endswith(".pdf"):
            mime_type = "application/pdf"

        return Attachment(
            title=attachment.title or _basename(path) or "attachment",
            path=path,
            mime_type=mime_type,
        )


def _basename(path: str) -> str:
    return re.sub(r".*[\\/]", "", path)


def _escape_file_part(text: str) -> str:
    return re.sub(r"([\\{}:;])", r"\\\1", text)
