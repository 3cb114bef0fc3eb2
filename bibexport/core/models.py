"""Core data models for the export pipeline.

This module defines the value objects that flow through the exporter:
the host item being exported, its creators and attachments, parsed
dates, the Field a record is built from, and the override directives
users attach to items.

Key components:
- Item: Read-only description of one bibliographic item
- Field: One candidate name/value pair of an output record
- ProtectedText / RawText: Explicit markers for brace-kept and
  already-encoded string values
- OverrideDirective: User instruction to set, retype or delete a field
"""

import enum
import re
from typing import Any

import msgspec


@enum.unique
class EncoderKind(enum.Enum):
    """Encoders that can resolve a field value to BibTeX text."""

    LATEX = "latex"
    RAW = "raw"
    DATE = "date"
    URL = "url"
    VERBATIM = "verbatim"
    CREATORS = "creators"
    TAGS = "tags"
    ATTACHMENTS = "attachments"


@enum.unique
class DirectiveFormat(enum.Enum):
    """How the payload of an override directive is to be interpreted."""

    PLAIN = "plain"
    RAW = "raw"
    ASSEMBLED = "assembled"


class ProtectedText(msgspec.Struct, frozen=True):
    """Text that is escaped normally and then kept in its own brace pair."""

    text: str

    def __str__(self) -> str:
        return self.text


class RawText(msgspec.Struct, frozen=True):
    """Text that is already valid BibTeX and must not be escaped."""

    text: str

    def __str__(self) -> str:
        return self.text


class Creator(msgspec.Struct, kw_only=True):
    """A person or organization credited on an item.

    Organizations and other literal names use ``single_name``; personal
    names use ``family_name``/``given_name``. The particle fields are
    filled in by name parsing and are normally empty on input.
    """

    family_name: str = ""
    given_name: str = ""
    single_name: str = ""
    creator_role: str = "author"
    suffix: str = ""
    dropping_particle: str = ""
    non_dropping_particle: str = ""

    @property
    def is_literal(self) -> bool:
        """Check if this creator is a single, unparsed name."""
        return bool(self.single_name)

    @property
    def has_name_parts(self) -> bool:
        return bool(self.family_name or self.given_name)


class Attachment(msgspec.Struct, kw_only=True):
    """A file attached to an item."""

    title: str = ""
    path: str = ""
    mime_type: str = ""
    save_as: str | None = None


class DateParts(msgspec.Struct, kw_only=True):
    """A parsed, possibly ranged, date.

    A date that cannot be interpreted numerically is kept as
    ``literal``.
    """

    year: int | None = None
    month: int | None = None
    day: int | None = None
    end_year: int | None = None
    end_month: int | None = None
    end_day: int | None = None
    literal: str | None = None

    @property
    def is_range(self) -> bool:
        return self.end_year is not None


class Item(msgspec.Struct, kw_only=True):
    """A normalized bibliographic item as supplied by the host library.

    The item is never mutated by the exporter.
    """

    item_id: int | str
    item_type: str
    citekey: str
    fields: dict[str, Any] = msgspec.field(default_factory=dict)
    creators: list[Creator] = msgspec.field(default_factory=list)
    tags: list[str] = msgspec.field(default_factory=list)
    attachments: list[Attachment] = msgspec.field(default_factory=list)
    date_added: str | None = None
    date_modified: str | None = None
    language: str | None = None
    extra: str = ""

    def is_raw(self, marker_tag: str) -> bool:
        """Check if the item is tagged as containing raw LaTeX."""
        return marker_tag in self.tags

    def creators_for(self, role: str) -> list[Creator]:
        """Get the creators with the given role, in order."""
        return [c for c in self.creators if c.creator_role == role]


class Field(msgspec.Struct, kw_only=True):
    """One candidate entry of an output record.

    ``resolved`` holds the final BibTeX text once the field has been
    encoded; a field created with ``resolved`` already set skips
    encoding entirely.
    """

    name: str
    value: Any = None
    encoder: EncoderKind | None = None
    resolved: str | None = None
    allow_duplicates: bool = False
    replace: bool = False
    bare: bool = False
    preserve_caps: bool = False
    separator: str = ""

    def is_empty(self) -> bool:
        """Check if the field carries no usable value.

        Numeric zero counts as a value.
        """
        value = self.value
        if value is None:
            return True
        if isinstance(value, int | float):
            return False
        if isinstance(value, ProtectedText | RawText):
            return not value.text.strip()
        if isinstance(value, str):
            return not value.strip()
        if isinstance(value, list | tuple):
            return len(value) == 0
        return False

    def source_has_whitespace(self) -> bool:
        """Check if the unencoded value contains any whitespace.

        List values are checked element by element.
        """
        values = self.value if isinstance(self.value, list | tuple) else [self.value]
        return any(re.search(r"\s", str(v)) for v in values)

    def render(self) -> str:
        """Render as a ``name = text`` line body."""
        return f"{self.name} = {self.resolved}"


class OverrideDirective(msgspec.Struct, frozen=True, kw_only=True):
    """A user instruction to set, rename, retype or delete a field.

    ``target_name`` may be compound, ``type.field``, in which case the
    directive only applies to records of that reference type.
    """

    target_name: str
    payload: str
    format: DirectiveFormat = DirectiveFormat.PLAIN
    csl: bool = False

    @property
    def scope(self) -> str | None:
        """Get the reference type this directive is limited to, if any."""
        if "." in self.target_name:
            return self.target_name.split(".", 1)[0].lower()
        return None

    @property
    def field_name(self) -> str:
        """Get the field portion of the target name."""
        return self.target_name.split(".", 1)[-1]

    @property
    def is_removal(self) -> bool:
        return not self.payload.strip()
