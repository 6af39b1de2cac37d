"""Caller identity — resolved upstream by the auth gateway into the ``uid`` header."""

from fastapi import Request

from app.domain.identifiers import parse_identifier

IDENTITY_HEADER = "uid"


def extract_identity(request: Request) -> str:
    """FastAPI dependency — the caller's canonical user id.

    Raises InvalidIdentityError when the header is missing or malformed.
    """
    return parse_identifier(request.headers.get(IDENTITY_HEADER))
