"""Bibliography records.

A Record collects the fields exported for one item and serializes them
as a single ``@type{key, ...}`` block. Fields are encoded as they are
added; a record is serialized exactly once.
"""

import copy
import enum
import logging
import re
import unicodedata
from collections.abc import Callable
from typing import TYPE_CHECKING

import msgspec

from .caps import CapitalizationEscaper
from .config import DOIandURL, ExportConfig, PreserveCaps
from .exceptions import DuplicateFieldError, RecordStateError
from .latex import braces_balanced
from .models import EncoderKind, Field, Item, RawText

if TYPE_CHECKING:
    from .encoders import EncoderRegistry

logger = logging.getLogger(__name__)

BIBTEX_VARIABLE = re.compile(r"^[a-z][a-z0-9_]*$", re.IGNORECASE)

Postscript = Callable[["Record", Item], None]


class PostscriptStatus(enum.Enum):
    """Outcome of running a postscript hook."""

    SKIPPED = "skipped"
    APPLIED = "applied"
    FAILED = "failed"


class PostscriptOutcome(msgspec.Struct, frozen=True):
    """Result of a postscript hook, consumed by ``Record.complete``."""

    status: PostscriptStatus
    message: str | None = None


def run_postscript(postscript: Postscript | None, record: "Record") -> PostscriptOutcome:
    """Run a postscript hook, turning any failure into a FAILED outcome."""
    if postscript is None:
        return PostscriptOutcome(PostscriptStatus.SKIPPED)
    try:
        postscript(record, record.item)
    except Exception as e:
        logger.warning(
            f"Postscript failed for {record.citekey}: {e}", exc_info=True
        )
        return PostscriptOutcome(PostscriptStatus.FAILED, str(e))
    return PostscriptOutcome(PostscriptStatus.APPLIED)


class Record:
    """One bibliography entry under construction.

    Fields keep their insertion order, which is the serialization order
    unless the export runs in testing mode. Field names are unique
    ignoring case unless a field explicitly allows duplicates.
    """

    def __init__(
        self,
        item: Item,
        reference_type: str,
        config: ExportConfig,
        registry: "EncoderRegistry",
    ):
        self.item = item
        self.reference_type = reference_type
        self.config = config
        self.registry = registry
        self.raw = item.is_raw(config.raw_latex_tag)
        self.fields: list[Field] = []
        self.has: dict[str, Field] = {}
        self.warnings: list[str] = []
        self.copy_requests: list[tuple[str, str]] = []
        self.junior_comma = False
        self.text: str | None = None
        self._caps = CapitalizationEscaper(config.preserve_caps)

    @property
    def citekey(self) -> str:
        return self.item.citekey

    @property
    def serialized(self) -> bool:
        return self.text is not None

    def __contains__(self, name: str) -> bool:
        return name.lower() in self.has

    def get(self, name: str) -> Field | None:
        """Get a field by name, ignoring case."""
        return self.has.get(name.lower())

    def warn(self, message: str) -> None:
        """Record a non-fatal problem with this record."""
        logger.warning(f"{self.citekey}: {message}")
        self.warnings.append(message)

    def request_copy(self, source: str, destination: str) -> None:
        """Ask the caller to copy an attachment next to the export."""
        self.copy_requests.append((source, destination))

    def add(self, field: Field) -> Field | None:
        """Encode and add a field.

        Fields without a usable value are ignored, unless their text was
        resolved beforehand. A field flagged ``replace`` first removes
        any field of the same name.

        Returns:
            The added field, or None if nothing was added.

        Raises:
            DuplicateFieldError: If the name is taken and the field does
                not allow duplicates.
        """
        if self.serialized:
            raise RecordStateError(self.citekey, "add to")

        if field.resolved is None and field.is_empty():
            return None

        if field.replace:
            self.remove(field.name)

        if field.name.lower() in self.has and not field.allow_duplicates:
            raise DuplicateFieldError(field.name, self.item.item_id, self.citekey)

        if field.resolved is None:
            text = self._resolve(field)
            if not text:
                return None
            field.resolved = text

        if self.config.normalize:
            field.resolved = unicodedata.normalize("NFC", field.resolved)

        self.fields.append(field)
        self.has[field.name.lower()] = field
        return field

    def _resolve(self, field: Field) -> str | None:
        value = field.value
        if isinstance(value, int | float) and not isinstance(value, bool):
            return str(value)
        if (
            self.config.preserve_bibtex_variables
            and isinstance(value, str)
            and BIBTEX_VARIABLE.match(value)
        ):
            return value

        kind = field.encoder or self.config.encoder_for(field.name) or EncoderKind.LATEX
        text = self.registry.encode(kind, field, self)
        if not text:
            return None

        if self._unescaped(kind) and not braces_balanced(text):
            self.warn(f"unbalanced braces in {field.name}, escaping it instead")
            text = self._escaped(kind, field)
            if not text:
                return None

        if field.bare and not field.source_has_whitespace():
            return text

        if (
            self.config.preserve_caps is not PreserveCaps.NONE
            and field.preserve_caps
            and not self.raw
        ):
            text = self._caps.escape(text)
        return "{" + text + "}"

    def _unescaped(self, kind: EncoderKind) -> bool:
        if kind is EncoderKind.RAW:
            return True
        return self.raw and kind in (EncoderKind.LATEX, EncoderKind.CREATORS)

    def _escaped(self, kind: EncoderKind, field: Field) -> str | None:
        if kind is EncoderKind.CREATORS:
            return self.registry.encode(kind, field, self, raw=False)
        value = field.value
        if isinstance(value, RawText):
            value = value.text
        elif isinstance(value, list | tuple):
            value = [v.text if isinstance(v, RawText) else v for v in value]
        return self.registry.latex_value(value, separator=field.separator)

    def remove(self, name: str) -> Field | None:
        """Remove a field by name, ignoring case.

        Returns:
            The removed field, or None if there was no such field.
        """
        if self.serialized:
            raise RecordStateError(self.citekey, "remove from")

        key = name.lower()
        removed = self.has.pop(key, None)
        if removed is None:
            return None
        self.fields = [f for f in self.fields if f.name.lower() != key]
        return removed

    def _add_option(self, option: str) -> None:
        """Add a comma-separated entry to the ``options`` field."""
        existing = self.get("options")
        if existing is None:
            self.add(Field(name="options", value=option))
            return

        text = existing.resolved
        if text.startswith("{") and text.endswith("}"):
            text = text[1:-1]
        options = [o.strip() for o in text.split(",") if o.strip()]
        if option in options:
            return
        options.append(option)
        resolved = "{" + ",".join(options) + "}"
        self.add(Field(name="options", resolved=resolved, replace=True))

    def complete(self, postscript: Postscript | None = None) -> str:
        """Apply final policies and serialize the record.

        Returns:
            The record text, ending in a blank line.
        """
        if self.serialized:
            raise RecordStateError(self.citekey, "serialize")

        for name in self.config.skip_fields:
            self.remove(name)

        if "doi" in self and "url" in self:
            match self.config.doi_and_url:
                case DOIandURL.DOI:
                    self.remove("url")
                case DOIandURL.URL:
                    self.remove("doi")
                case DOIandURL.BOTH:
                    pass

        if self.junior_comma and self.config.is_biblatex:
            self._add_option("juniorcomma=true")

        if not self.fields:
            self.add(Field(name="type", value=self.reference_type, bare=True))

        snapshot = [copy.copy(f) for f in self.fields]
        outcome = run_postscript(postscript, self)
        if outcome.status is PostscriptStatus.FAILED:
            self.fields = snapshot
            self.has = {f.name.lower(): f for f in snapshot}
            self.warnings.append(f"postscript failed: {outcome.message}")

        if not self.fields:
            self.add(Field(name="type", value=self.reference_type, bare=True))

        rendered = [f.render() for f in self.fields]
        if self.config.testing:
            rendered.sort()

        self.text = (
            f"@{self.reference_type}{{{self.citekey},\n"
            + ",\n".join(f"  {line}" for line in rendered)
            + "\n}\n\n"
        )
        return self.text
