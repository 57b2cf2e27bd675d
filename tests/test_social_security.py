"""Tests for the social security number validator."""
import pytest

from field_validation.errors import ConfigurationError


class TestFrance:
    """Test the French NIR checksum."""

    @pytest.mark.parametrize(
        "number",
        [
            "188037424305025",
            "1 88 03 74 243 050 25",
            "1-88-03-74-243-050-25",
            "7 56 50 2B 233 042 82",
            "7 56 50 2b 233 042 82",
            "8 12 50 97 307 437 59",
        ],
    )
    def test_valid(self, engine, number):
        """Test numbers with a correct key, including Corsican departments."""
        assert engine.validate("social_security", number, {"country": "fr"}).passed

    @pytest.mark.parametrize(
        "number",
        [
            "1 88 03 74 243 050 57",
            "5 88 03 74 243 050 25",
            "1 88 03 74 243 050",
            "",
            "not a number",
        ],
    )
    def test_invalid(self, engine, number):
        """Test that wrong keys and malformed numbers fail without raising."""
        outcome = engine.validate("social_security", number, {"country": "FR"})
        assert outcome.first.kind == "social_security"
        assert outcome.first.message == "is not a valid social security number"

    def test_message_override(self, engine):
        """Test that the message option is used."""
        outcome = engine.validate(
            "social_security", "123", {"country": "fr", "message": "invalid NIR"}
        )
        assert outcome.first.message == "invalid NIR"


class TestCountries:
    """Test country handling."""

    def test_unknown_country_rejected(self, engine):
        """Test that countries without an algorithm fail every value."""
        outcome = engine.validate("social_security", "188037424305025", {"country": "de"})
        assert outcome.first.message == "is not a valid social security number"

    def test_missing_country(self, engine):
        """Test that the country option is required."""
        with pytest.raises(ConfigurationError, match="No country specified"):
            engine.validate("social_security", "188037424305025", {})

    def test_non_string_country(self, engine):
        """Test that the country must be a string."""
        with pytest.raises(ConfigurationError, match="must be a string"):
            engine.validate("social_security", "188037424305025", {"country": 33})
