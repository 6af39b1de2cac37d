"""Domain entity — schema-free record payload with typed system fields."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Union

JSONValue = Union[str, int, float, bool, None, list["JSONValue"], dict[str, "JSONValue"]]

FIELD_ID = "id"
FIELD_OWNER = "uid"
FIELD_CREATED_AT = "createAt"
FIELD_UPDATED_AT = "updateAt"
FIELD_DURATION = "deration"

SYSTEM_FIELDS = frozenset({
    FIELD_ID,
    "_id",
    FIELD_OWNER,
    FIELD_CREATED_AT,
    FIELD_UPDATED_AT,
    FIELD_DURATION,
})


@dataclass
class Payload:
    """Order-preserving mapping of client fields decoded from a request body.

    Client keys pass through untouched. The server-managed keys (``uid``,
    ``createAt``, ``updateAt``, ``deration``, ``id``) are only written through
    the ``stamp_*`` helpers so their wire format stays in one place.
    """

    fields: dict[str, JSONValue] = field(default_factory=dict)

    def __contains__(self, key: object) -> bool:
        return key in self.fields

    def get(self, key: str, default: Any = None) -> JSONValue:
        return self.fields.get(key, default)

    def discard(self, *keys: str) -> None:
        for key in keys:
            self.fields.pop(key, None)

    def discard_system_fields(self) -> None:
        """Drop every server-managed key a client may have sent."""
        self.discard(*SYSTEM_FIELDS)

    def pop_record_id(self) -> JSONValue:
        """Remove ``id`` from the field set and return its value."""
        self.fields.pop("_id", None)
        return self.fields.pop(FIELD_ID, None)

    def stamp_owner(self, uid: str) -> None:
        self.fields[FIELD_OWNER] = uid

    def stamp_created(self, at: datetime) -> None:
        self.fields[FIELD_CREATED_AT] = format_timestamp(at)

    def stamp_updated(self, at: datetime) -> None:
        self.fields[FIELD_UPDATED_AT] = format_timestamp(at)

    def stamp_duration(self, nanoseconds: int) -> None:
        self.fields[FIELD_DURATION] = nanoseconds

    def to_document(self) -> dict[str, JSONValue]:
        return dict(self.fields)


def format_timestamp(at: datetime) -> str:
    return at.isoformat()


def parse_timestamp(value: Any) -> datetime | None:
    """Decode a stored ``createAt``/``updateAt`` value; ``None`` if undecodable."""
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None
