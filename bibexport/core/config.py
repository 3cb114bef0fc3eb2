"""Export configuration.

The configuration is an immutable value handed to the engine at
construction; encoders never consult global state.
"""

import enum
from typing import Any

import msgspec

from .exceptions import ConfigurationError
from .models import EncoderKind


@enum.unique
class Dialect(enum.Enum):
    """Output grammars."""

    BIBTEX = "bibtex"
    BIBLATEX = "biblatex"


@enum.unique
class PreserveCaps(enum.Enum):
    """Capitalization preservation policies."""

    NONE = "none"
    ALL = "all"
    INNER = "inner"


@enum.unique
class DOIandURL(enum.Enum):
    """Which of ``doi`` and ``url`` survives when both are present."""

    DOI = "doi"
    URL = "url"
    BOTH = "both"


# Encoders for fields that must not be LaTeX-escaped, whatever set them
DEFAULT_FIELD_ENCODERS = {
    "url": EncoderKind.URL,
    "doi": EncoderKind.VERBATIM,
    "eprint": EncoderKind.VERBATIM,
    "file": EncoderKind.VERBATIM,
}


class ExportConfig(msgspec.Struct, frozen=True, kw_only=True, forbid_unknown_fields=True):
    """Switches controlling how records are encoded."""

    dialect: Dialect = Dialect.BIBTEX
    preserve_caps: PreserveCaps = PreserveCaps.INNER
    fancy_urls: bool = False
    unicode: bool = False
    testing: bool = False
    caching: bool = False
    export_file_data: bool = False
    export_path: str = ""
    doi_and_url: DOIandURL = DOIandURL.BOTH
    skip_fields: tuple[str, ...] = ()
    preserve_bibtex_variables: bool = False
    field_encoding: dict[str, EncoderKind] = msgspec.field(default_factory=dict)
    normalize: bool = False
    attachments_no_metadata: bool = False
    raw_latex_tag: str = "#LaTeX"
    locale: str = "en-US"

    @property
    def is_biblatex(self) -> bool:
        return self.dialect is Dialect.BIBLATEX

    def encoder_for(self, name: str) -> EncoderKind | None:
        """Get the encoder for a field name, if any.

        Configured encodings take precedence over the defaults.
        """
        key = name.lower()
        return self.field_encoding.get(key, DEFAULT_FIELD_ENCODERS.get(key))

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dictionary."""
        return msgspec.to_builtins(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ExportConfig":
        """Create a configuration from a plain dictionary.

        Raises:
            ConfigurationError: If a key is unknown or a value invalid.
        """
        data = dict(data)
        if "skip_fields" in data and isinstance(data["skip_fields"], str):
            data["skip_fields"] = [
                name.strip() for name in data["skip_fields"].split(",") if name.strip()
            ]
        if "field_encoding" in data and data["field_encoding"]:
            data["field_encoding"] = {
                str(name).lower(): kind for name, kind in data["field_encoding"].items()
            }
        try:
            return msgspec.convert(data, cls)
        except msgspec.ValidationError as e:
            raise ConfigurationError(f"Invalid export configuration: {e}") from e

    def replace(self, **changes: Any) -> "ExportConfig":
        """Return a copy with some switches changed."""
        return msgspec.structs.replace(self, **changes)
