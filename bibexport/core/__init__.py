"""Core encoding engine turning bibliographic items into BibTeX records."""

# Configuration
from bibexport.core.config import (
    Dialect,
    DOIandURL,
    ExportConfig,
    PreserveCaps,
)

# Encoding services
from bibexport.core.caps import CapitalizationEscaper
from bibexport.core.dates import DateParser
from bibexport.core.encoders import DocumentState, EncoderRegistry
from bibexport.core.latex import LatexEscaper, escape_verbatim
from bibexport.core.names import NameResolver, ParticleParser

# Engine
from bibexport.core.engine import ExportedRecord, ExportEngine

# Exceptions
from bibexport.core.exceptions import (
    ConfigurationError,
    DuplicateFieldError,
    ExportError,
    ItemFormatError,
    RecordStateError,
)

# Overrides
from bibexport.core.extra import ExtraParser, ParsedExtra
from bibexport.core.overrides import OverrideResolver

# Tables
from bibexport.core.mapping import (
    CSL_VARIABLES,
    FIELD_MAP,
    TYPE_MAP,
    CSLVariable,
    FieldTemplate,
)

# Models
from bibexport.core.models import (
    Attachment,
    Creator,
    DateParts,
    DirectiveFormat,
    EncoderKind,
    Field,
    Item,
    OverrideDirective,
    ProtectedText,
    RawText,
)

# Records
from bibexport.core.record import (
    PostscriptOutcome,
    PostscriptStatus,
    Record,
)

__all__ = [
    # Configuration
    "Dialect",
    "DOIandURL",
    "ExportConfig",
    "PreserveCaps",
    # Encoding services
    "CapitalizationEscaper",
    "DateParser",
    "DocumentState",
    "EncoderRegistry",
    "LatexEscaper",
    "escape_verbatim",
    "NameResolver",
    "ParticleParser",
    # Engine
    "ExportEngine",
    "ExportedRecord",
    # Exceptions
    "ExportError",
    "DuplicateFieldError",
    "RecordStateError",
    "ConfigurationError",
    "ItemFormatError",
    # Overrides
    "ExtraParser",
    "ParsedExtra",
    "OverrideResolver",
    # Tables
    "FIELD_MAP",
    "TYPE_MAP",
    "CSL_VARIABLES",
    "CSLVariable",
    "FieldTemplate",
    # Models
    "Attachment",
    "Creator",
    "DateParts",
    "DirectiveFormat",
    "EncoderKind",
    "Field",
    "Item",
    "OverrideDirective",
    "ProtectedText",
    "RawText",
    # Records
    "Record",
    "PostscriptOutcome",
    "PostscriptStatus",
]
