"""Apply user override directives to a record.

Overrides are ordinary field insertions with replace semantics: every
directive that survives name resolution goes through ``Record.add``
with ``replace`` set, so it always wins over the statically mapped
value. A directive with an empty payload removes the field instead.
"""

import logging
import re
from typing import Any

from .config import Dialect
from .mapping import CSL_VARIABLES, IDENTIFIER_ALIASES, CSLVariable
from .models import (
    Creator,
    DirectiveFormat,
    EncoderKind,
    Field,
    OverrideDirective,
    RawText,
)
from .record import Record

logger = logging.getLogger(__name__)

REFERENCE_TYPE = "referencetype"

# Identifiers BibLaTeX expresses as eprinttype/eprint pairs
EPRINT_TYPES = {
    "pmid": "pmid",
    "arxiv": "arxiv",
    "jstor": "jstor",
    "hdl": "hdl",
    "googlebooksid": "googlebooks",
}

# Encoders that accept a plain string payload
TEXT_ENCODERS = {EncoderKind.DATE, EncoderKind.URL, EncoderKind.VERBATIM}


class OverrideResolver:
    """Resolve override directives into field insertions and removals."""

    def __init__(
        self, dialect: Dialect, csl_variables: dict[str, CSLVariable] | None = None
    ):
        self.dialect = dialect
        self.csl_variables = CSL_VARIABLES if csl_variables is None else csl_variables

    def apply(self, record: Record, directives: list[OverrideDirective]) -> None:
        """Apply all directives to ``record``.

        Reference type directives are applied first, so type-scoped
        directives see the final reference type.
        """
        rest = []
        for directive in directives:
            if directive.field_name.lower() == REFERENCE_TYPE:
                if self._in_scope(record, directive) and not directive.is_removal:
                    record.reference_type = directive.payload.strip()
            else:
                rest.append(directive)

        csl_creators: dict[str, list[Creator]] = {}
        for directive in rest:
            if not self._in_scope(record, directive):
                logger.debug(
                    f"{record.citekey}: skipping {directive.target_name}, "
                    f"record is {record.reference_type}"
                )
                continue
            if directive.csl:
                self._apply_csl(record, directive, csl_creators)
            else:
                self._apply_native(record, directive)

        for name, creators in csl_creators.items():
            record.add(
                Field(
                    name=name,
                    value=creators,
                    encoder=EncoderKind.CREATORS,
                    replace=True,
                )
            )

    @staticmethod
    def _in_scope(record: Record, directive: OverrideDirective) -> bool:
        scope = directive.scope
        return scope is None or scope == record.reference_type.lower()

    def _apply_csl(
        self,
        record: Record,
        directive: OverrideDirective,
        csl_creators: dict[str, list[Creator]],
    ) -> None:
        name = directive.field_name.lower()
        variable = self.csl_variables.get(name)
        target = variable.target(self.dialect) if variable else None
        if not target:
            logger.debug(f"{record.citekey}: unmapped CSL variable {name}")
            return

        if variable.kind == "creator":
            if directive.is_removal:
                return
            csl_creators.setdefault(target, []).append(parse_creator(directive.payload))
            return

        payload = directive.payload
        if variable.transform is not None and not directive.is_removal:
            payload = variable.transform(payload)
        encoder = EncoderKind.DATE if variable.kind == "date" else None
        self._set(record, target, payload, directive.format, encoder)

    def _apply_native(self, record: Record, directive: OverrideDirective) -> None:
        name = directive.field_name
        key = IDENTIFIER_ALIASES.get(name.lower(), name.lower())
        payload, format = directive.payload, directive.format

        match key:
            case "mr":
                self._set(record, "mrnumber", payload, format)
            case "zbl":
                self._set(record, "zmnumber", payload, format)
            case "lccn" | "pmcid" | "xref":
                self._set(record, key, payload, format)
            case "pmid" | "arxiv" | "jstor" | "hdl" | "googlebooksid":
                if self.dialect is Dialect.BIBLATEX:
                    self._set(
                        record,
                        "eprinttype",
                        EPRINT_TYPES[key],
                        DirectiveFormat.PLAIN,
                        removal=directive.is_removal,
                    )
                    self._set(record, "eprint", payload, format)
                elif key == "googlebooksid":
                    self._set(record, "googlebooks", payload, format)
                else:
                    self._set(record, key, payload, format)
            case _:
                self._set(record, name, payload, format)

    def _set(
        self,
        record: Record,
        name: str,
        payload: Any,
        format: DirectiveFormat,
        encoder: EncoderKind | None = None,
        removal: bool | None = None,
    ) -> None:
        if removal is None:
            removal = not str(payload).strip()
        if removal:
            record.remove(name)
            return

        # Plain overrides keep the text handling of the field they replace
        existing = record.get(name)
        if existing is not None and encoder is None and existing.encoder in TEXT_ENCODERS:
            encoder = existing.encoder

        match format:
            case DirectiveFormat.PLAIN:
                field = Field(
                    name=name,
                    value=payload,
                    encoder=encoder,
                    replace=True,
                    preserve_caps=existing.preserve_caps if existing else False,
                    bare=existing.bare if existing else False,
                )
            case DirectiveFormat.RAW:
                field = Field(
                    name=name,
                    value=RawText(payload),
                    encoder=EncoderKind.RAW,
                    replace=True,
                )
            case DirectiveFormat.ASSEMBLED:
                field = Field(name=name, value=payload, resolved=payload, replace=True)
        record.add(field)


def parse_creator(payload: str) -> Creator:
    """Parse a ``lastName||firstName`` creator payload.

    A payload without the separator is taken as a family name.
    """
    parts = re.split(r"\s*\|\|\s*", payload.strip())
    if len(parts) in (1, 2):
        given = parts[1] if len(parts) == 2 else ""
        return Creator(family_name=parts[0], given_name=given)
    return Creator(family_name=payload.strip())
