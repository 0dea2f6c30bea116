"""Recipient query classification.

A query (already trimmed, leading '@' removed) is an email, a phone number
or a username. The external ledger prefix is checked before classification
by the resolver, so it never reaches here.
"""

import re

from src.zp_common.enums import SearchMethod
from src.zp_common.errors import InvalidRecipientFormatError

MIN_PHONE_DIGITS = 9
MIN_USERNAME_LENGTH = 2

_EMAIL = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]{2,}$")
_PHONE_CHARS = re.compile(r"^\+?[\d\s\-().]+$")
_NOT_USERNAME_CHARS = re.compile(r"[^a-z0-9_]")


def classify_query(query: str) -> SearchMethod:
    if "@" in query and _EMAIL.match(query):
        return SearchMethod.EMAIL
    if _PHONE_CHARS.match(query) and sum(c.isdigit() for c in query) >= MIN_PHONE_DIGITS:
        return SearchMethod.PHONE
    return SearchMethod.USERNAME


def clean_username(query: str) -> str:
    """Lowercase and validate a username query, returning it unchanged if clean.

    Raises InvalidRecipientFormatError when fewer than 2 usable characters
    remain, or when the query contains characters outside [a-z0-9_]; the
    latter carries the cleaned form as a suggestion.
    """
    lowered = query.lower()
    cleaned = _NOT_USERNAME_CHARS.sub("", lowered)
    if len(cleaned) < MIN_USERNAME_LENGTH:
        raise InvalidRecipientFormatError(
            f"Username must be at least {MIN_USERNAME_LENGTH} letters, numbers or underscores"
        )
    if cleaned != lowered:
        raise InvalidRecipientFormatError(
            "Usernames can only contain letters, numbers and underscores",
            suggestion=cleaned,
        )
    return cleaned
