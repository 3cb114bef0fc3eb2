"""Tests for core data models."""

import msgspec
import pytest

from bibexport.core.models import (
    Creator,
    DirectiveFormat,
    Field,
    Item,
    OverrideDirective,
    ProtectedText,
    RawText,
)


class TestField:
    """Test field value checks."""

    @pytest.mark.parametrize(
        "value",
        [None, "", "  \n", [], (), ProtectedText(""), RawText("  ")],
    )
    def test_empty(self, value) -> None:
        assert Field(name="x", value=value).is_empty()

    @pytest.mark.parametrize("value", [0, 0.0, 1, "x", ["a"], ProtectedText("a")])
    def test_not_empty(self, value) -> None:
        assert not Field(name="x", value=value).is_empty()

    def test_source_whitespace(self) -> None:
        assert Field(name="x", value="two words").source_has_whitespace()
        assert not Field(name="x", value="one").source_has_whitespace()

    def test_list_whitespace_checks_elements(self) -> None:
        """List values are checked element by element, not as a repr."""
        assert not Field(name="x", value=["a", "b"]).source_has_whitespace()
        assert Field(name="x", value=["a", "b c"]).source_has_whitespace()

    def test_render(self) -> None:
        field = Field(name="title", value="x", resolved="{x}")
        assert field.render() == "title = {x}"


class TestOverrideDirective:
    """Test directive name handling."""

    def test_plain_name(self) -> None:
        directive = OverrideDirective(target_name="title", payload="x")

        assert directive.scope is None
        assert directive.field_name == "title"
        assert directive.format is DirectiveFormat.PLAIN

    def test_compound_name(self) -> None:
        directive = OverrideDirective(target_name="Book.title", payload="x")

        assert directive.scope == "book"
        assert directive.field_name == "title"

    def test_removal(self) -> None:
        assert OverrideDirective(target_name="title", payload=" ").is_removal
        assert not OverrideDirective(target_name="title", payload="x").is_removal


class TestItem:
    """Test item decoding and helpers."""

    def test_decode_json(self) -> None:
        data = b"""{
            "item_id": 7,
            "item_type": "book",
            "citekey": "knuth1984",
            "fields": {"title": "The TeXbook"},
            "creators": [{"family_name": "Knuth", "given_name": "Donald E."}],
            "tags": ["#LaTeX"]
        }"""

        item = msgspec.json.decode(data, type=Item)

        assert item.citekey == "knuth1984"
        assert item.creators[0].creator_role == "author"
        assert item.is_raw("#LaTeX")

    def test_creators_for(self) -> None:
        item = Item(
            item_id=1,
            item_type="book",
            citekey="x",
            creators=[
                Creator(family_name="A"),
                Creator(family_name="B", creator_role="editor"),
                Creator(family_name="C"),
            ],
        )

        assert [c.family_name for c in item.creators_for("author")] == ["A", "C"]

    def test_creator_kinds(self) -> None:
        assert Creator(single_name="ACME").is_literal
        assert not Creator().has_name_parts
        assert Creator(given_name="Jane").has_name_parts
