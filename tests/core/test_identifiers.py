"""
Unit tests for phone number normalization.
"""

import pytest

from call_transport.core.errors import InvalidIdentifier
from call_transport.core.identifiers import PhoneNumberResolver
from call_transport.core.models import CanonicalIdentifier


class TestResolve:
    """Tests for PhoneNumberResolver.resolve."""

    @pytest.mark.parametrize("text,expected", [
        ("+1 555-0100", "+15550100"),
        ("+15550100", "+15550100"),
        ("+1 (555) 010.0999", "+15550100999"),
        ("  +44 20 7946 0000 ", "+442079460000"),
        ("0044 20 7946 0000", "+442079460000"),
    ])
    def test_formatted_numbers_normalize_to_e164(self, text, expected):
        result = PhoneNumberResolver().resolve(text)
        assert result == expected
        assert isinstance(result, CanonicalIdentifier)

    @pytest.mark.parametrize("text", [
        "not-a-number", "", "   ", "+1 555 CALL NOW", "+0123456789", "+12", "+1234567890123456",
        "+1٥٥٥٠١٠٠",  # Arabic-Indic digits
        "+15550100\x00",
    ])
    def test_invalid_input_raises(self, text):
        with pytest.raises(InvalidIdentifier):
            PhoneNumberResolver().resolve(text)

    def test_non_ascii_digits_rejected_with_default_country_code(self):
        resolver = PhoneNumberResolver(default_country_code="1")
        with pytest.raises(InvalidIdentifier):
            resolver.resolve("٥٥٥٠١٠٠")

    def test_non_ascii_default_country_code_rejected(self):
        with pytest.raises(ValueError):
            PhoneNumberResolver(default_country_code="١")

    def test_missing_country_code_rejected_without_default(self):
        with pytest.raises(InvalidIdentifier) as excinfo:
            PhoneNumberResolver().resolve("555-0100")
        assert excinfo.value.reason == "missing country code"

    def test_default_country_code_applied(self):
        resolver = PhoneNumberResolver(default_country_code="+1")
        assert resolver.resolve("(555) 010-0999") == "+15550100999"

    def test_national_trunk_prefix_dropped(self):
        resolver = PhoneNumberResolver(default_country_code="44")
        assert resolver.resolve("020 7946 0000") == "+442079460000"

    def test_non_numeric_default_country_code_rejected(self):
        with pytest.raises(ValueError):
            PhoneNumberResolver(default_country_code="us")


class TestIsCanonical:

    def test_canonical_values(self):
        resolver = PhoneNumberResolver()
        assert resolver.is_canonical("+15550100") is True
        assert resolver.is_canonical("+1 555-0100") is False
        assert resolver.is_canonical("15550100") is False
        assert resolver.is_canonical("") is False

    @pytest.mark.parametrize("value", ["+15550100\n", "+15550100 ", "\n+15550100", "+1٥٥٥٠١٠٠", None])
    def test_trailing_newline_and_unicode_digits_are_not_canonical(self, value):
        assert PhoneNumberResolver().is_canonical(value) is False

    def test_digits_property(self):
        assert CanonicalIdentifier("+15550100").digits == "15550100"
