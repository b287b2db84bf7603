"""
Tests for numeric public id derivation.
"""

import pytest
from bson import ObjectId

from easel.helpers.numeric_id import numeric_id, parse_public_id

pytestmark = pytest.mark.unit


class TestNumericId:
    def test_single_character_is_its_code_unit(self):
        assert numeric_id("a") == 97

    def test_folds_with_multiplier_31(self):
        assert numeric_id("ab") == 97 * 31 + 98

    def test_empty_string_is_zero(self):
        assert numeric_id("") == 0

    def test_matches_known_string_hash(self):
        assert numeric_id("hello") == 99162322

    def test_negative_accumulator_is_made_positive(self):
        # Folds to -1 * 2**31 as a signed 32-bit value
        assert numeric_id("polygenelubricants") == 2**31

    def test_non_bmp_characters_fold_as_surrogate_pairs(self):
        high, low = 0xD83C, 0xDFA8  # U+1F3A8
        assert numeric_id("\U0001f3a8") == high * 31 + low

    def test_object_id_hashes_its_hex_form(self):
        oid = ObjectId("65a1f0c2e4b0a1b2c3d4e5f6")
        assert numeric_id(oid) == numeric_id("65a1f0c2e4b0a1b2c3d4e5f6")

    def test_deterministic(self):
        key = "Xk3p9QmZ2vLr8TtA"
        assert numeric_id(key) == numeric_id(key)

    def test_always_within_positive_range(self):
        for key in ("zzzzzzzzzzzzzzzz", "ZZZZZZZZZZZZZZZZ", "0123456789abcdef", "ffffffffffffffffffffffff"):
            assert 0 <= numeric_id(key) <= 2**31


class TestParsePublicId:
    def test_parses_digits(self):
        assert parse_public_id("12345") == 12345

    def test_strips_whitespace(self):
        assert parse_public_id(" 42 ") == 42

    @pytest.mark.parametrize("value", ["abc", "-5", "1.5", "", "12a", "\u00b2"])
    def test_rejects_non_integers(self, value):
        assert parse_public_id(value) is None

    def test_accepts_int(self):
        assert parse_public_id(7) == 7
