"""
Phone number normalization.

Turns user formatted numbers (e.g. from a contacts entry) into canonical
E.164 identifiers that every downstream component consumes.
"""

import re
from typing import Optional, Protocol
import structlog

from .errors import InvalidIdentifier
from .models import CanonicalIdentifier

logger = structlog.get_logger(__name__)


class IdentifierResolver(Protocol):
    def resolve(self, user_text: str) -> CanonicalIdentifier:
        ...

    def is_canonical(self, value: str) -> bool:
        ...


class PhoneNumberResolver:
    """Resolves user specified phone number text to E.164."""

    # Formatting characters people type or paste from address books
    SEPARATORS = re.compile(r"[\s\-\.\(\)/]")

    # E.164: '+', no leading zero, at most 15 ASCII digits. Always fullmatch.
    E164_PATTERN = re.compile(r"\+[1-9][0-9]{6,14}")

    DIGITS_PATTERN = re.compile(r"\+?[0-9]+")

    def __init__(self, default_country_code: Optional[str] = None):
        code = (default_country_code or "").strip().lstrip("+")
        if code and not re.fullmatch(r"[0-9]+", code):
            raise ValueError(f"default_country_code must be numeric, got {default_country_code!r}")
        self.default_country_code = code or None

    def resolve(self, user_text: str) -> CanonicalIdentifier:
        """
        Normalize user text to a CanonicalIdentifier.

        Examples:
            "+1 555-0100"     -> "+15550100"
            "0044 20 7946 0000" -> "+442079460000"
            "(555) 010-0999" with default_country_code="1" -> "+15550100999"

        Raises:
            InvalidIdentifier: if the text is not a phone number
        """
        if not user_text or not user_text.strip():
            raise InvalidIdentifier(user_text or "", "empty input")

        text = self.SEPARATORS.sub("", user_text.strip())

        if not self.DIGITS_PATTERN.fullmatch(text):
            logger.warning("Unable to parse phone number", handle=user_text)
            raise InvalidIdentifier(user_text)

        if text.startswith("00"):
            text = "+" + text[2:]
        elif not text.startswith("+"):
            if not self.default_country_code:
                raise InvalidIdentifier(user_text, "missing country code")
            text = "+" + self.default_country_code + text.lstrip("0")

        if not self.E164_PATTERN.fullmatch(text):
            logger.warning("Phone number is not valid E.164", handle=user_text, normalized=text)
            raise InvalidIdentifier(user_text, "not a valid E.164 number")

        return CanonicalIdentifier(text)

    def is_canonical(self, value: str) -> bool:
        return isinstance(value, str) and self.E164_PATTERN.fullmatch(value) is not None
