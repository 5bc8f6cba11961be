import re
from typing import NamedTuple

from launchpad.config import PHONE_IDENTIFIER_DOMAIN
from launchpad.errors import ValidationError

EMAIL = "email"
PHONE = "phone"

DIGITS_RE = re.compile(r"[0-9]+")

INVALID_IDENTIFIER_MESSAGE = "Please enter a valid email, or your Facebook number using digits only."


class NormalizedIdentifier(NamedTuple):
    classification: str
    credential_id: str
    original: str


def phone_credential_id(digits: str) -> str:
    return f"{digits}{PHONE_IDENTIFIER_DOMAIN}"


def normalize_identifier(raw: str) -> NormalizedIdentifier:
    """
    "someone@mail.com" -> (email, "someone@mail.com", "someone@mail.com")
    "01712345678"      -> (phone, "01712345678@phone.facebook.login", "01712345678")

    Anything else raises ValidationError.
    """
    original = (raw or "").strip()

    if "@" in original and "." in original:
        return NormalizedIdentifier(EMAIL, original, original)

    if DIGITS_RE.fullmatch(original):
        return NormalizedIdentifier(PHONE, phone_credential_id(original), original)

    raise ValidationError(INVALID_IDENTIFIER_MESSAGE, field_errors={"identifier": INVALID_IDENTIFIER_MESSAGE})
