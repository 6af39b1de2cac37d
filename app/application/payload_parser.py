"""Request-body decoding into a schema-free Payload."""

import json

from app.domain.entities.payload import Payload
from app.domain.exceptions import EmptyBodyError, MalformedPayloadError


def _reject_constant(name: str) -> None:
    # NaN / Infinity / -Infinity are accepted by json but are not JSON
    raise MalformedPayloadError(f"invalid JSON body: {name} is not a JSON value")


def parse_payload(body: bytes) -> Payload:
    """Decode raw request bytes into an order-preserving Payload.

    The length check runs before decoding so an empty body is reported as
    such rather than as invalid JSON. Only JSON objects are accepted.
    """
    if len(body) == 0:
        raise EmptyBodyError()

    try:
        decoded = json.loads(body, parse_constant=_reject_constant)
    except (ValueError, RecursionError) as exc:
        # ValueError covers JSONDecodeError, UnicodeDecodeError and oversized ints
        raise MalformedPayloadError(f"invalid JSON body: {exc}") from exc

    if not isinstance(decoded, dict):
        raise MalformedPayloadError(
            f"JSON body must be an object, got {type(decoded).__name__}"
        )
    return Payload(fields=decoded)
