"""Pytest configuration and fixtures for CLI tests."""

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from bibexport.cli.main import cli


class BibExportRunner:
    """CliRunner bound to the bibexport command group."""

    def __init__(self):
        self.runner = CliRunner()

    def invoke(self, args: list[str], **kwargs):
        return self.runner.invoke(cli, args, catch_exceptions=False, **kwargs)


@pytest.fixture
def cli_runner(tmp_path, monkeypatch) -> BibExportRunner:
    """Runner working in an empty directory."""
    monkeypatch.chdir(tmp_path)
    return BibExportRunner()


@pytest.fixture
def items_file(tmp_path) -> Path:
    """A JSON file with two items."""
    path = tmp_path / "items.json"
    items = [
        {
            "item_id": 1,
            "item_type": "journalArticle",
            "citekey": "doe2020",
            "fields": {"title": "Gene expression in DNA repair", "date": "2020-03-05"},
            "creators": [{"family_name": "Doe", "given_name": "Jane"}],
            "tags": ["genetics"],
        },
        {
            "item_id": 2,
            "item_type": "book",
            "citekey": "roe2019",
            "fields": {"title": "A Book", "publisher": "ACME"},
            "creators": [{"single_name": "ACME Editors", "creator_role": "editor"}],
            "extra": "tex.edition: 2",
        },
    ]
    path.write_text(json.dumps(items), encoding="utf-8")
    return path


@pytest.fixture
def config_file(tmp_path) -> Path:
    """A YAML configuration file selecting BibLaTeX."""
    path = tmp_path / "custom.yaml"
    path.write_text("dialect: biblatex\ntesting: true\nskip_fields: [keywords]\n")
    return path
