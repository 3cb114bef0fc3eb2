"""Shared fixtures for core module tests."""

from collections.abc import Callable
from typing import Any

import pytest

from bibexport.core.config import Dialect, ExportConfig
from bibexport.core.encoders import EncoderRegistry
from bibexport.core.models import Creator, Item
from bibexport.core.record import Record


@pytest.fixture
def bibtex_config() -> ExportConfig:
    """Deterministic BibTeX configuration."""
    return ExportConfig(dialect=Dialect.BIBTEX, testing=True)


@pytest.fixture
def biblatex_config() -> ExportConfig:
    """Deterministic BibLaTeX configuration."""
    return ExportConfig(dialect=Dialect.BIBLATEX, testing=True)


@pytest.fixture
def make_item() -> Callable[..., Item]:
    """Factory for items with sensible defaults."""

    def _make(**kwargs: Any) -> Item:
        kwargs.setdefault("item_id", 1)
        kwargs.setdefault("item_type", "journalArticle")
        kwargs.setdefault("citekey", "doe2020")
        return Item(**kwargs)

    return _make


@pytest.fixture
def sample_item(make_item) -> Item:
    """A journal article with the usual metadata."""
    return make_item(
        fields={
            "title": "Gene expression in DNA repair",
            "publicationTitle": "Nature",
            "volume": "12",
            "pages": "1--10",
            "date": "2020-03-05",
            "DOI": "10.1038/s41567-020-0001",
            "url": "https://example.org/paper",
        },
        creators=[
            Creator(family_name="Doe", given_name="Jane"),
            Creator(family_name="van Gogh", given_name="Vincent"),
        ],
        tags=["genetics", "repair"],
    )


@pytest.fixture
def make_record(make_item) -> Callable[..., Record]:
    """Factory for empty records bound to a configuration."""

    def _make(
        config: ExportConfig | None = None,
        reference_type: str = "article",
        item: Item | None = None,
        **item_kwargs: Any,
    ) -> Record:
        config = config or ExportConfig(testing=True)
        item = item or make_item(**item_kwargs)
        return Record(item, reference_type, config, EncoderRegistry(config))

    return _make
