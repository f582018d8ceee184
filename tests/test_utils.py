"""
tests/test_utils.py
Comprehensive unit tests for apimodel.utils module.

Tests cover:
- Case conversion (snake, pascal, camel, convention dispatch)
- Pluralisation and singularisation
- Identifier sanitising and operation id synthesis
- JSON pointer helpers
- Literal rendering and import blocks
- File I/O helpers, checksums and the Timer
"""

from __future__ import annotations

import json
import pathlib

import pytest

from apimodel.utils import (
    Timer,
    build_import_block,
    convert_case,
    count_lines,
    escape_pointer_token,
    model_name_from_label,
    pointer_tokens,
    python_literal,
    safe_identifier,
    sha256_hex,
    split_ref,
    synthesize_operation_id,
    to_camel_case,
    to_pascal_case,
    to_plural,
    to_singular,
    to_snake_case,
    unescape_pointer_token,
    walk_pointer,
    write_file,
    write_json,
)


# ===========================================================================
# Case conversion
# ===========================================================================


class TestCaseConversion:
    """Tests for to_snake_case / to_pascal_case / to_camel_case."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("PetOwner", "pet_owner"),
            ("getHTTPResponse", "get_http_response"),
            ("already_snake", "already_snake"),
            ("first-name", "first_name"),
            ("", ""),
        ],
    )
    def test_snake_case(self, raw: str, expected: str) -> None:
        assert to_snake_case(raw) == expected

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("pet_owner", "PetOwner"),
            ("pet store", "PetStore"),
            ("petOwner", "PetOwner"),
            ("", ""),
        ],
    )
    def test_pascal_case(self, raw: str, expected: str) -> None:
        assert to_pascal_case(raw) == expected

    def test_camel_case(self) -> None:
        assert to_camel_case("owner_address") == "ownerAddress"
        assert to_camel_case("Category") == "category"

    def test_convert_case_dispatch(self) -> None:
        assert convert_case("pet_owner", "camel_case") == "petOwner"
        assert convert_case("pet_owner", "pascal_case") == "PetOwner"
        assert convert_case("petOwner", "snake_case") == "pet_owner"

    def test_convert_case_unknown_convention(self) -> None:
        with pytest.raises(ValueError, match="Unknown naming convention"):
            convert_case("pet", "kebab_case")


# ===========================================================================
# Plural / singular
# ===========================================================================


class TestInflection:
    """Tests for to_plural / to_singular."""

    @pytest.mark.parametrize(
        "word, plural",
        [
            ("pet", "pets"),
            ("category", "categories"),
            ("box", "boxes"),
            ("knife", "knives"),
            ("person", "people"),
            ("Person", "People"),
            ("news", "news"),
        ],
    )
    def test_plural(self, word: str, plural: str) -> None:
        assert to_plural(word) == plural

    @pytest.mark.parametrize(
        "word, singular",
        [
            ("pets", "pet"),
            ("Categories", "Category"),
            ("boxes", "box"),
            ("people", "person"),
            ("status", "status"),
            ("addresses", "address"),
        ],
    )
    def test_singular(self, word: str, singular: str) -> None:
        assert to_singular(word) == singular

    def test_model_name_from_label(self) -> None:
        assert model_name_from_label("pets") == "Pet"
        assert model_name_from_label("pet-categories") == "PetCategory"


# ===========================================================================
# Identifiers
# ===========================================================================


class TestIdentifiers:
    """Tests for safe_identifier and synthesize_operation_id."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("name", "name"),
            ("class", "class_"),
            ("fillable", "fillable_"),
            ("1st", "_1st"),
            ("first-name", "first_name"),
            ("", "_unnamed"),
            ("---", "_unnamed"),
        ],
    )
    def test_safe_identifier(self, raw: str, expected: str) -> None:
        assert safe_identifier(raw) == expected

    def test_synthesized_operation_id(self) -> None:
        assert synthesize_operation_id("GET", "/pets/{petId}") == "get_pets__petId"
        assert synthesize_operation_id("post", "/pets") == "post_pets"


# ===========================================================================
# JSON pointers
# ===========================================================================


class TestPointers:
    """Tests for ref splitting and pointer traversal."""

    def test_split_local_ref(self) -> None:
        assert split_ref("#/components/schemas/Pet") == ("", "/components/schemas/Pet")

    def test_split_external_ref(self) -> None:
        assert split_ref("common.yaml#/Error") == ("common.yaml", "/Error")
        assert split_ref("common.yaml") == ("common.yaml", "")

    def test_tokens_are_unescaped(self) -> None:
        assert pointer_tokens("/a~1b/c~0d") == ["a/b", "c~d"]
        assert pointer_tokens("/Pet%20Type") == ["Pet Type"]
        assert pointer_tokens("") == []

    def test_escape_roundtrip(self) -> None:
        token = "paths/~weird"
        assert unescape_pointer_token(escape_pointer_token(token)) == token

    def test_walk_dicts_and_lists(self) -> None:
        doc = {"a": [{"b": 1}, {"b": 2}]}
        assert walk_pointer(doc, "/a/1/b") == 2
        assert walk_pointer(doc, "") is doc

    def test_walk_missing_token_raises(self) -> None:
        with pytest.raises(LookupError):
            walk_pointer({"a": {}}, "/a/missing")
        with pytest.raises(LookupError):
            walk_pointer({"a": [1]}, "/a/5")


# ===========================================================================
# Rendering helpers
# ===========================================================================


class TestRendering:
    """Tests for python_literal and build_import_block."""

    def test_python_literal(self) -> None:
        assert python_literal({"a": [1, "x", None, True]}) == '{"a": [1, "x", None, True]}'
        assert python_literal("it's") == '"it\'s"'
        assert python_literal(1.5) == "1.5"

    def test_import_block_sorted(self) -> None:
        block = build_import_block({"typing": {"Optional", "List"}, "datetime": {"datetime"}})
        assert block == "from datetime import datetime\nfrom typing import List, Optional"

    def test_import_block_plain_import(self) -> None:
        assert build_import_block({"json": set()}) == "import json"


# ===========================================================================
# File I/O and metrics
# ===========================================================================


class TestFileHelpers:
    """Tests for write_file / write_json / sha256_hex / count_lines."""

    def test_write_file_creates_parents(self, tmp_path: pathlib.Path) -> None:
        target = tmp_path / "a" / "b" / "out.txt"
        size = write_file(target, "héllo")
        assert target.read_text(encoding="utf-8") == "héllo"
        assert size == 6

    def test_write_file_leaves_no_temp_files(self, tmp_path: pathlib.Path) -> None:
        write_file(tmp_path / "out.txt", "data")
        assert [p.name for p in tmp_path.iterdir()] == ["out.txt"]

    def test_write_file_non_atomic(self, tmp_path: pathlib.Path) -> None:
        target = tmp_path / "plain.txt"
        write_file(target, "x", atomic=False)
        assert target.read_text(encoding="utf-8") == "x"

    def test_write_json(self, tmp_path: pathlib.Path) -> None:
        target = tmp_path / "data.json"
        write_json(target, {"k": [1, 2]})
        assert json.loads(target.read_text(encoding="utf-8")) == {"k": [1, 2]}

    def test_sha256(self) -> None:
        assert sha256_hex("") == (
            "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
        )
        assert len(sha256_hex("petstore")) == 64

    @pytest.mark.parametrize(
        "content, lines",
        [("", 0), ("a", 1), ("a\nb", 2), ("a\nb\n", 2)],
    )
    def test_count_lines(self, content: str, lines: int) -> None:
        assert count_lines(content) == lines


class TestTimer:
    """Tests for the Timer context manager."""

    def test_elapsed_is_recorded(self) -> None:
        with Timer("work") as timer:
            sum(range(1000))
        assert timer.elapsed >= 0.0
        assert timer.end_time >= timer.start_time
        assert "work" in repr(timer)
