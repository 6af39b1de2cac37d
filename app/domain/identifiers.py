"""Record and owner identifiers — 24 lowercase hex characters."""

import re
from uuid import uuid4

from app.domain.exceptions import InvalidIdentityError

_HEX_ID = re.compile(r"^[0-9a-fA-F]{24}$")


def new_record_id() -> str:
    return uuid4().hex[:24]


def parse_identifier(raw: object, message: str = "invalid uid") -> str:
    """Canonicalize an identifier, raising InvalidIdentityError when malformed."""
    if not isinstance(raw, str) or not _HEX_ID.match(raw.strip()):
        raise InvalidIdentityError(message)
    return raw.strip().lower()
