"""Tests for invite code generation, normalization and display helpers."""

import re
from datetime import UTC, datetime, timedelta

from tracker_api.core.invite_codes import (
    CODE_ALPHABET,
    CODE_LENGTH,
    code_prefix,
    format_code,
    format_expires_in,
    generate_code,
    is_valid_code_format,
    mask_code,
    normalize_code,
)

DISPLAY_PATTERN = re.compile(r"^[2-9A-HJKMNP-Z]{4}-[2-9A-HJKMNP-Z]{4}-[2-9A-HJKMNP-Z]{2}$")


class TestAlphabet:
    def test_excludes_confusable_characters(self):
        for ch in "01OIL":
            assert ch not in CODE_ALPHABET

    def test_has_no_duplicates(self):
        assert len(set(CODE_ALPHABET)) == len(CODE_ALPHABET)


class TestGenerateCode:
    def test_display_format(self):
        for _ in range(50):
            assert DISPLAY_PATTERN.match(generate_code())

    def test_generated_codes_are_valid(self):
        for _ in range(50):
            assert is_valid_code_format(generate_code())

    def test_codes_differ(self):
        codes = {generate_code() for _ in range(100)}
        assert len(codes) > 95


class TestNormalizeCode:
    def test_uppercases_and_strips_separators(self):
        assert normalize_code("a7k9-2qxm-4p") == "A7K92QXM4P"

    def test_strips_whitespace(self):
        assert normalize_code(" a7k9 2qxm\t4p ") == "A7K92QXM4P"

    def test_idempotent(self):
        once = normalize_code("ab-cd ef")
        assert normalize_code(once) == once


class TestFormatCode:
    def test_groups_four_four_two(self):
        assert format_code("a7k92qxm4p") == "A7K9-2QXM-4P"

    def test_format_of_formatted_code_is_stable(self):
        assert format_code("A7K9-2QXM-4P") == "A7K9-2QXM-4P"


class TestCodePrefix:
    def test_first_four_normalized_chars(self):
        assert code_prefix("a7k9-2qxm-4p") == "A7K9"

    def test_mask_code(self):
        assert mask_code("A7K9") == "A7K9-****-**"


class TestIsValidCodeFormat:
    def test_accepts_lowercase_with_separators(self):
        assert is_valid_code_format("a7k9-2qxm-4p")

    def test_rejects_wrong_length(self):
        assert not is_valid_code_format("A7K9-2QXM")
        assert not is_valid_code_format("A7K9-2QXM-4PP")
        assert not is_valid_code_format("")

    def test_rejects_excluded_characters(self):
        assert not is_valid_code_format("A7K9-2QXM-40")
        assert not is_valid_code_format("O7K9-2QXM-4P")
        assert not is_valid_code_format("A7K9-2QXM-4I")

    def test_length_is_ten(self):
        assert CODE_LENGTH == 10


class TestFormatExpiresIn:
    def setup_method(self):
        self.now = datetime(2026, 10, 19, 12, 0, tzinfo=UTC)

    def test_hours_and_minutes(self):
        expires = self.now + timedelta(hours=23, minutes=45, seconds=30)
        assert format_expires_in(expires, self.now) == "23h 45m"

    def test_minutes_only(self):
        assert format_expires_in(self.now + timedelta(minutes=12), self.now) == "12m"

    def test_expired(self):
        assert format_expires_in(self.now - timedelta(seconds=1), self.now) == "expired"
        assert format_expires_in(self.now, self.now) == "expired"

    def test_naive_timestamp_treated_as_utc(self):
        naive = (self.now + timedelta(hours=2)).replace(tzinfo=None)
        assert format_expires_in(naive, self.now) == "2h 0m"
