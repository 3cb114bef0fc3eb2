"""Field, type and CSL variable tables.

These tables are the default declarative configuration of the engine.
They are read-only and may be shared between concurrent exports;
callers can pass their own tables to ``ExportEngine``.
"""

from collections.abc import Callable

import msgspec

from .config import Dialect
from .models import EncoderKind


class FieldTemplate(msgspec.Struct, frozen=True, kw_only=True):
    """How one item attribute becomes a record field.

    ``attribute`` names a key of ``Item.fields`` or one of the derived
    attributes understood by the engine (``creators:<role>``, ``tags``,
    ``attachments``, ``date``, ``date:year``, ``date:month``,
    ``accessed``, ``language``, ``langid``, ``modified``, ``note``).
    A template without a name for the active dialect is skipped.
    """

    attribute: str
    bibtex: str | None = None
    biblatex: str | None = None
    encoder: EncoderKind | None = None
    preserve_caps: bool = False
    bare: bool = False
    separator: str = ""

    def target(self, dialect: Dialect) -> str | None:
        """Get the field name used in ``dialect``."""
        return self.biblatex if dialect is Dialect.BIBLATEX else self.bibtex


def _both(attribute: str, name: str, **kwargs) -> FieldTemplate:
    return FieldTemplate(attribute=attribute, bibtex=name, biblatex=name, **kwargs)


FIELD_MAP: tuple[FieldTemplate, ...] = (
    _both("creators:author", "author", encoder=EncoderKind.CREATORS),
    _both("creators:editor", "editor", encoder=EncoderKind.CREATORS),
    FieldTemplate(
        attribute="creators:translator",
        biblatex="translator",
        encoder=EncoderKind.CREATORS,
    ),
    FieldTemplate(
        attribute="creators:bookAuthor",
        biblatex="bookauthor",
        encoder=EncoderKind.CREATORS,
    ),
    FieldTemplate(
        attribute="creators:commentator",
        biblatex="commentator",
        encoder=EncoderKind.CREATORS,
    ),
    FieldTemplate(
        attribute="creators:annotator", biblatex="annotator", encoder=EncoderKind.CREATORS
    ),
    FieldTemplate(
        attribute="creators:introduction",
        biblatex="introduction",
        encoder=EncoderKind.CREATORS,
    ),
    FieldTemplate(
        attribute="creators:afterword", biblatex="afterword", encoder=EncoderKind.CREATORS
    ),
    FieldTemplate(
        attribute="creators:holder", biblatex="holder", encoder=EncoderKind.CREATORS
    ),
    _both("title", "title", preserve_caps=True),
    _both("shortTitle", "shorttitle", preserve_caps=True),
    FieldTemplate(
        attribute="publicationTitle",
        bibtex="journal",
        biblatex="journaltitle",
        preserve_caps=True,
    ),
    _both("bookTitle", "booktitle", preserve_caps=True),
    _both("proceedingsTitle", "booktitle", preserve_caps=True),
    FieldTemplate(attribute="conferenceName", biblatex="eventtitle", preserve_caps=True),
    _both("series", "series", preserve_caps=True),
    _both("volume", "volume"),
    _both("issue", "number"),
    _both("pages", "pages"),
    _both("edition", "edition"),
    FieldTemplate(attribute="numPages", biblatex="pagetotal"),
    _both("publisher", "publisher"),
    FieldTemplate(attribute="place", bibtex="address", biblatex="location"),
    FieldTemplate(attribute="university", bibtex="school", biblatex="institution"),
    _both("institution", "institution"),
    FieldTemplate(attribute="date:year", bibtex="year", bare=True),
    FieldTemplate(attribute="date:month", bibtex="month", bare=True),
    FieldTemplate(attribute="date", biblatex="date", encoder=EncoderKind.DATE),
    FieldTemplate(attribute="accessed", biblatex="urldate", encoder=EncoderKind.DATE),
    _both("DOI", "doi", encoder=EncoderKind.VERBATIM),
    _both("url", "url", encoder=EncoderKind.URL),
    _both("ISBN", "isbn"),
    _both("ISSN", "issn"),
    _both("abstractNote", "abstract"),
    FieldTemplate(attribute="language", bibtex="language"),
    FieldTemplate(attribute="langid", biblatex="langid"),
    _both("note", "note"),
    _both("tags", "keywords", encoder=EncoderKind.TAGS),
    _both("attachments", "file", encoder=EncoderKind.ATTACHMENTS),
    _both("modified", "timestamp"),
)


TYPE_MAP: dict[Dialect, dict[str, str]] = {
    Dialect.BIBTEX: {
        "journalArticle": "article",
        "magazineArticle": "article",
        "newspaperArticle": "article",
        "book": "book",
        "bookSection": "incollection",
        "conferencePaper": "inproceedings",
        "thesis": "phdthesis",
        "report": "techreport",
        "manuscript": "unpublished",
    },
    Dialect.BIBLATEX: {
        "journalArticle": "article",
        "magazineArticle": "article",
        "newspaperArticle": "article",
        "book": "book",
        "bookSection": "incollection",
        "conferencePaper": "inproceedings",
        "thesis": "thesis",
        "report": "report",
        "manuscript": "unpublished",
        "webpage": "online",
        "blogPost": "online",
        "forumPost": "online",
        "patent": "patent",
        "computerProgram": "software",
        "dataset": "dataset",
        "letter": "letter",
        "film": "movie",
        "artwork": "artwork",
        "audioRecording": "audio",
        "videoRecording": "video",
        "case": "jurisdiction",
        "statute": "legislation",
    },
}

DEFAULT_REFERENCE_TYPE = "misc"


class CSLVariable(msgspec.Struct, frozen=True, kw_only=True):
    """Target of a CSL variable in each dialect.

    ``kind`` is ``text``, ``date`` or ``creator``. ``transform`` is an
    optional function applied to the payload before it is stored.
    """

    bibtex: str | None = None
    biblatex: str | None = None
    kind: str = "text"
    transform: Callable[[str], str] | None = None

    def target(self, dialect: Dialect) -> str | None:
        return self.biblatex if dialect is Dialect.BIBLATEX else self.bibtex


CSL_VARIABLES: dict[str, CSLVariable] = {
    "abstract": CSLVariable(bibtex="abstract", biblatex="abstract"),
    "archive": CSLVariable(biblatex="library"),
    "call-number": CSLVariable(biblatex="library"),
    "collection-title": CSLVariable(bibtex="series", biblatex="series"),
    "collection-number": CSLVariable(biblatex="number"),
    "container-author": CSLVariable(biblatex="bookauthor", kind="creator"),
    "container-title": CSLVariable(bibtex="journal", biblatex="journaltitle"),
    "director": CSLVariable(biblatex="director", kind="creator"),
    "doi": CSLVariable(bibtex="doi", biblatex="doi"),
    "edition": CSLVariable(bibtex="edition", biblatex="edition"),
    "editor": CSLVariable(bibtex="editor", biblatex="editor", kind="creator"),
    "event": CSLVariable(biblatex="eventtitle"),
    "event-date": CSLVariable(biblatex="eventdate", kind="date"),
    "event-place": CSLVariable(biblatex="venue"),
    "genre": CSLVariable(bibtex="type", biblatex="type"),
    "isbn": CSLVariable(bibtex="isbn", biblatex="isbn"),
    "issn": CSLVariable(bibtex="issn", biblatex="issn"),
    "issued": CSLVariable(biblatex="date", kind="date"),
    "language": CSLVariable(bibtex="language", biblatex="language"),
    "medium": CSLVariable(biblatex="howpublished"),
    "note": CSLVariable(bibtex="note", biblatex="note"),
    "number-of-pages": CSLVariable(biblatex="pagetotal"),
    "number-of-volumes": CSLVariable(biblatex="volumes"),
    "original-author": CSLVariable(biblatex="origauthor", kind="creator"),
    "original-date": CSLVariable(biblatex="origdate", kind="date"),
    "original-publisher": CSLVariable(biblatex="origpublisher"),
    "original-publisher-place": CSLVariable(biblatex="origlocation"),
    "original-title": CSLVariable(biblatex="origtitle"),
    "publisher": CSLVariable(bibtex="publisher", biblatex="publisher"),
    "publisher-place": CSLVariable(bibtex="address", biblatex="location"),
    "status": CSLVariable(biblatex="pubstate", transform=str.lower),
    "title-short": CSLVariable(bibtex="shorttitle", biblatex="shorttitle"),
    "translator": CSLVariable(biblatex="translator", kind="creator"),
    "url": CSLVariable(bibtex="url", biblatex="url"),
    "version": CSLVariable(biblatex="version"),
}


# Identifier keys that carry special renames in overrides
IDENTIFIER_KEYS = {
    "mr",
    "zbl",
    "lccn",
    "pmcid",
    "pmid",
    "arxiv",
    "jstor",
    "hdl",
    "googlebooksid",
    "xref",
}

# Alternate spellings of identifier keys
IDENTIFIER_ALIASES = {
    "mrnumber": "mr",
    "zmnumber": "zbl",
}

MONTHS = (
    "jan",
    "feb",
    "mar",
    "apr",
    "may",
    "jun",
    "jul",
    "aug",
    "sep",
    "oct",
    "nov",
    "dec",
)

BABEL_LANGUAGES = {
    "en": "english",
    "en-us": "american",
    "en-gb": "british",
    "en-ca": "canadian",
    "en-au": "australian",
    "de": "ngerman",
    "de-de": "ngerman",
    "de-at": "naustrian",
    "de-ch": "nswissgerman",
    "fr": "french",
    "fr-ca": "canadien",
    "es": "spanish",
    "it": "italian",
    "nl": "dutch",
    "pt": "portuguese",
    "pt-br": "brazilian",
    "ru": "russian",
    "pl": "polish",
    "sv": "swedish",
    "da": "danish",
    "nb": "norsk",
    "fi": "finnish",
    "cs": "czech",
    "el": "greek",
    "tr": "turkish",
    "ja": "japanese",
    "zh": "chinese",
    "english": "english",
    "german": "ngerman",
    "french": "french",
    "spanish": "spanish",
    "italian": "italian",
    "dutch": "dutch",
}
