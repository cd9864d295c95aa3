"""Tests for identifier normalization and the NativeId / StringId variants."""

import pytest

from docbridge.core.identifiers import (
    is_native_id_format,
    normalize_id,
    to_presentation,
    to_storage,
)
from docbridge.core.models import IdType, NativeId, StringId

HEX_ID = "507f1f77bcf86cd799439011"


class TestNativeId:
    """Tests for the NativeId value type."""

    def test_accepts_24_hex_characters(self) -> None:
        assert NativeId(HEX_ID).value == HEX_ID

    def test_canonicalizes_to_lowercase(self) -> None:
        assert NativeId(HEX_ID.upper()).value == HEX_ID

    def test_str_is_hex(self) -> None:
        assert str(NativeId(HEX_ID)) == HEX_ID

    @pytest.mark.parametrize("value", ["", "abc", HEX_ID + "0", "z" * 24])
    def test_rejects_malformed_values(self, value: str) -> None:
        with pytest.raises(ValueError, match="Not a native identifier"):
            NativeId(value)

    def test_equality_and_hash(self) -> None:
        assert NativeId(HEX_ID) == NativeId(HEX_ID.upper())
        assert len({NativeId(HEX_ID), NativeId(HEX_ID)}) == 1


class TestIsNativeIdFormat:
    """Tests for lexical format detection."""

    def test_matches_hex_string(self) -> None:
        assert is_native_id_format(HEX_ID)

    @pytest.mark.parametrize("value", ["my-post", HEX_ID[:-1], None, 42, NativeId(HEX_ID)])
    def test_rejects_other_values(self, value: object) -> None:
        assert not is_native_id_format(value)


class TestNormalizeId:
    """Tests for normalize_id()."""

    def test_hex_string_becomes_native(self) -> None:
        assert normalize_id(HEX_ID) == NativeId(HEX_ID)

    def test_other_string_becomes_string_id(self) -> None:
        assert normalize_id("post-1") == StringId("post-1")

    def test_malformed_hex_falls_back_to_string_id(self) -> None:
        """A near-miss is not an error: it is treated as a plain string id."""
        assert normalize_id(HEX_ID[:-1]) == StringId(HEX_ID[:-1])

    def test_variants_pass_through(self) -> None:
        native = NativeId(HEX_ID)
        string = StringId("x")
        assert normalize_id(native) is native
        assert normalize_id(string) is string

    def test_non_string_values_are_stringified(self) -> None:
        assert normalize_id(42) == StringId("42")


class TestStorageAndPresentation:
    """Tests for to_storage() and to_presentation()."""

    def test_storage_keeps_native_ids(self) -> None:
        assert to_storage(HEX_ID) == NativeId(HEX_ID)

    def test_storage_unwraps_string_ids(self) -> None:
        assert to_storage(StringId("abc")) == "abc"
        assert to_storage("abc") == "abc"

    def test_native_schema_presents_native_id(self) -> None:
        assert to_presentation(NativeId(HEX_ID), IdType.NATIVE) == NativeId(HEX_ID)

    def test_string_schema_presents_plain_string(self) -> None:
        presented = to_presentation(NativeId(HEX_ID), IdType.STRING)
        assert presented == HEX_ID
        assert isinstance(presented, str)

    def test_none_stays_none(self) -> None:
        assert to_presentation(None, IdType.NATIVE) is None
