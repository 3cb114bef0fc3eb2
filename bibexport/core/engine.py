"""Export engine: turn one item into one serialized record.

The pipeline per item is strictly sequential: map the item through the
static field map, apply override directives, complete the record, then
emit it to the sink and cache. Engines hold only read-only tables and
thread-safe collaborators, so one engine may export items from several
worker threads at once.
"""

import logging
from typing import TYPE_CHECKING, Any

import msgspec

from .config import ExportConfig
from .dates import DateParser
from .encoders import DocumentState, EncoderRegistry
from .extra import ExtraParser
from .latex import LatexEscaper
from .mapping import (
    BABEL_LANGUAGES,
    CSL_VARIABLES,
    DEFAULT_REFERENCE_TYPE,
    FIELD_MAP,
    MONTHS,
    TYPE_MAP,
    CSLVariable,
    FieldTemplate,
)
from .models import Field, Item, RawText
from .names import ParticleParser
from .overrides import OverrideResolver
from .record import Postscript, Record

if TYPE_CHECKING:
    from ..storage.cache import RecordCache
    from ..storage.sink import Sink

logger = logging.getLogger(__name__)


class ExportedRecord(msgspec.Struct, kw_only=True):
    """The outcome of exporting one item."""

    item_id: int | str
    citekey: str
    reference_type: str
    text: str
    warnings: list[str] = msgspec.field(default_factory=list)
    copy_requests: list[tuple[str, str]] = msgspec.field(default_factory=list)
    junior_comma: bool = False
    cached: bool = False


class ExportEngine:
    """Build, complete and emit records for items.

    Args:
        config: Export switches.
        field_map: Static attribute to field templates.
        type_map: Item type to reference type, per dialect.
        csl_variables: CSL variable table for overrides.
        postscript: Optional hook run on every record before it is
            serialized.
        sink: Optional output target receiving each record's text.
        cache: Optional record cache, written when caching is enabled.
    """

    def __init__(
        self,
        config: ExportConfig | None = None,
        field_map: tuple[FieldTemplate, ...] = FIELD_MAP,
        type_map: dict | None = None,
        csl_variables: dict[str, CSLVariable] | None = None,
        escaper: LatexEscaper | None = None,
        date_parser: DateParser | None = None,
        particle_parser: ParticleParser | None = None,
        state: DocumentState | None = None,
        postscript: Postscript | None = None,
        sink: "Sink | None" = None,
        cache: "RecordCache | None" = None,
    ):
        self.config = config or ExportConfig()
        self.field_map = field_map
        self.type_map = TYPE_MAP if type_map is None else type_map
        self.csl_variables = CSL_VARIABLES if csl_variables is None else csl_variables
        self.date_parser = date_parser or DateParser(self.config.locale)
        self.state = state or DocumentState()
        self.registry = EncoderRegistry(
            self.config,
            escaper=escaper,
            date_parser=self.date_parser,
            particle_parser=particle_parser,
            state=self.state,
        )
        self.extra_parser = ExtraParser(self.config.dialect, self.csl_variables)
        self.overrides = OverrideResolver(self.config.dialect, self.csl_variables)
        self.postscript = postscript
        self.sink = sink
        self.cache = cache

    def reference_type(self, item: Item) -> str:
        """Get the reference type an item maps to in this dialect."""
        types = self.type_map.get(self.config.dialect, {})
        return types.get(item.item_type, DEFAULT_REFERENCE_TYPE)

    def build(self, item: Item) -> Record:
        """Map an item and its overrides into an uncompleted record.

        Raises:
            DuplicateFieldError: If two templates or overrides produce
                the same field name without allowing duplicates.
        """
        parsed = self.extra_parser.parse(item.extra)
        record = Record(item, self.reference_type(item), self.config, self.registry)
        for warning in parsed.warnings:
            record.warn(warning)

        for template in self.field_map:
            name = template.target(self.config.dialect)
            if not name:
                continue
            if name in record:
                logger.debug(
                    f"{item.citekey}: {name} already set, skipping {template.attribute}"
                )
                continue
            value = self._item_value(item, template.attribute, parsed.note)
            record.add(
                Field(
                    name=name,
                    value=value,
                    encoder=template.encoder,
                    bare=template.bare and not isinstance(value, str),
                    preserve_caps=template.preserve_caps,
                    separator=template.separator,
                )
            )

        self.overrides.apply(record, parsed.directives)
        return record

    def export(self, item: Item) -> ExportedRecord:
        """Export one item, emitting the record text.

        Raises:
            ExportError: If the record cannot be built. Sink and cache
                failures propagate unchanged.
        """
        record = self.build(item)
        text = record.complete(self.postscript)

        if self.sink is not None:
            self.sink.write(text)
        if self.config.caching and self.cache is not None:
            self.cache.store(item.item_id, self.config.dialect, record.citekey, text)

        logger.debug(f"Exported {record.citekey} as @{record.reference_type}")
        return ExportedRecord(
            item_id=item.item_id,
            citekey=record.citekey,
            reference_type=record.reference_type,
            text=text,
            warnings=list(record.warnings),
            copy_requests=list(record.copy_requests),
            junior_comma=record.junior_comma,
        )

    def _item_value(self, item: Item, attribute: str, extra_note: str) -> Any:
        if attribute.startswith("creators:"):
            return item.creators_for(attribute.split(":", 1)[1])

        match attribute:
            case "tags":
                return item.tags
            case "attachments":
                return item.attachments
            case "date":
                return item.fields.get("date")
            case "date:year" | "date:month":
                return self._date_part(item, attribute)
            case "accessed":
                return item.fields.get("accessDate")
            case "language":
                return item.language or item.fields.get("language")
            case "langid":
                return self._langid(item.language or item.fields.get("language"))
            case "modified":
                return item.date_modified[:10] if item.date_modified else None
            case "note":
                notes = [item.fields.get("note") or "", extra_note]
                return "\n\n".join(note for note in notes if note.strip())
            case _:
                return item.fields.get(attribute)

    def _date_part(self, item: Item, attribute: str) -> Any:
        date = item.fields.get("date")
        if not date:
            return None
        parts = self.date_parser.parse(str(date))

        if attribute == "date:month":
            if parts.month is None:
                return None
            return RawText(MONTHS[parts.month - 1])

        if parts.year is not None:
            return parts.year
        if parts.literal and parts.literal != "n.d.":
            return parts.literal
        return None

    @staticmethod
    def _langid(language: str | None) -> str | None:
        if not language:
            return None
        key = language.strip().lower()
        if key in BABEL_LANGUAGES:
            return BABEL_LANGUAGES[key]
        return BABEL_LANGUAGES.get(key.split("-", 1)[0], language.strip())
