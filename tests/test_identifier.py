import pytest

from launchpad.config import PHONE_IDENTIFIER_DOMAIN
from launchpad.errors import ValidationError
from launchpad.helpers.identifier import EMAIL, PHONE, normalize_identifier


def test_digits_are_phone_style():
    result = normalize_identifier("01712345678")
    assert result.classification == PHONE
    assert result.credential_id == "01712345678" + PHONE_IDENTIFIER_DOMAIN
    assert result.original == "01712345678"


def test_email_passes_through_unchanged():
    result = normalize_identifier("Player.One@Mail.com")
    assert result.classification == EMAIL
    assert result.credential_id == "Player.One@Mail.com"
    assert result.original == "Player.One@Mail.com"


def test_surrounding_whitespace_is_ignored():
    assert normalize_identifier("  12345 ").original == "12345"


@pytest.mark.parametrize(
    "raw", ["", "   ", "player", "12ab", "user@nodot", "+8801712", "১২৩৪৫"]
)
def test_other_input_is_rejected(raw):
    with pytest.raises(ValidationError) as exc:
        normalize_identifier(raw)
    assert "identifier" in exc.value.field_errors
