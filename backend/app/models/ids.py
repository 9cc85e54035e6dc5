"""Prefixed opaque identifiers."""

import secrets
import string

_ALPHABET = string.ascii_letters + string.digits + "_-"
_ID_LENGTH = 21


def create_id(prefix: str) -> str:
    """Return ``<prefix>_`` followed by 21 URL-safe random characters."""

    token = "".join(secrets.choice(_ALPHABET) for _ in range(_ID_LENGTH))
    return f"{prefix}_{token}"


def link_id() -> str:
    return create_id("lnk")
