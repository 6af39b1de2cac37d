"""Application service (use case) for owner-scoped record operations.

Each operation is a short fail-fast pipeline: every step either returns a
value for the next one or raises a ``RecordServiceError`` that ends the
request. Nothing is written until identity, body and required fields have
all been accepted.
"""

import logging
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Any

from app.application.interfaces.document_collection import DESCENDING, DocumentCollection
from app.application.payload_parser import parse_payload
from app.application.profiles import RecordProfile
from app.application.validation import require_fields
from app.domain.entities.payload import (
    FIELD_CREATED_AT,
    FIELD_DURATION,
    FIELD_ID,
    FIELD_OWNER,
    parse_timestamp,
)
from app.domain.identifiers import parse_identifier

logger = logging.getLogger(__name__)

UPDATED_MESSAGE = "updated"
DELETED_MESSAGE = "deleted"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


MAX_PAGE_PARAM = 2**63 - 1


def parse_page_param(raw: str | None) -> int:
    """Parse a ``limit``/``skip`` query value; anything unusable means 0.

    Values beyond the signed 64-bit range the store accepts are clamped.
    """
    if raw is None:
        return 0
    try:
        value = int(raw)
    except ValueError:
        return 0
    return min(max(value, 0), MAX_PAGE_PARAM)


class RecordService:
    """Create, update, list and remove records owned by the calling user."""

    def __init__(
        self,
        collection: DocumentCollection,
        profile: RecordProfile,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._collection = collection
        self._profile = profile
        self._clock = clock

    @property
    def profile(self) -> RecordProfile:
        return self._profile

    async def create_record(self, uid: str, body: bytes) -> str:
        """Validate the body, stamp server fields and insert. Returns the new id."""
        uid = parse_identifier(uid)
        payload = parse_payload(body)
        payload.discard_system_fields()
        require_fields(payload, self._profile.create_rules)

        now = self._clock()
        if self._profile.track_duration:
            payload.stamp_duration(await self._elapsed_since_previous(uid, now))
        payload.stamp_owner(uid)
        payload.stamp_created(now)

        record_id = await self._collection.insert_one(payload.to_document())
        logger.info(
            "Created %s %s for uid=%s", self._collection.name, record_id, uid
        )
        return record_id

    async def update_record(self, uid: str, body: bytes) -> str:
        """Merge the body's fields into the caller's record named by ``id``."""
        uid = parse_identifier(uid)
        payload = parse_payload(body)
        require_fields(payload, self._profile.update_rules)
        record_id = parse_identifier(payload.pop_record_id(), "invalid id")

        payload.discard(FIELD_CREATED_AT, FIELD_DURATION)
        payload.stamp_owner(uid)
        payload.stamp_updated(self._clock())

        await self._collection.update_one_and_return(
            {FIELD_ID: record_id, FIELD_OWNER: uid},
            payload.to_document(),
        )
        logger.info(
            "Updated %s %s for uid=%s", self._collection.name, record_id, uid
        )
        return UPDATED_MESSAGE

    async def remove_record(self, uid: str, record_id: str) -> str:
        uid = parse_identifier(uid)
        record_id = parse_identifier(record_id, "invalid id")
        await self._collection.delete_one_and_return(
            {FIELD_ID: record_id, FIELD_OWNER: uid}
        )
        logger.info(
            "Deleted %s %s for uid=%s", self._collection.name, record_id, uid
        )
        return DELETED_MESSAGE

    async def list_records(
        self, uid: str, *, limit: int = 0, skip: int = 0
    ) -> tuple[list[dict[str, Any]], int]:
        """Return one page of the caller's records and their total count."""
        uid = parse_identifier(uid)
        owner_filter = {FIELD_OWNER: uid}
        records = await self._collection.find_many(
            owner_filter,
            self._profile.sort,
            skip=skip,
            limit=limit,
        )
        total = await self._collection.count(owner_filter)
        logger.debug(
            "Listed %d/%d %s for uid=%s (skip=%d, limit=%d)",
            len(records), total, self._collection.name, uid, skip, limit,
        )
        return records, total

    async def _elapsed_since_previous(self, uid: str, now: datetime) -> int:
        """Nanoseconds since the caller's latest record was created, else 0."""
        previous = await self._collection.find_one(
            {FIELD_OWNER: uid}, [(FIELD_CREATED_AT, DESCENDING)]
        )
        if previous is None:
            return 0
        created_at = parse_timestamp(previous.get(FIELD_CREATED_AT))
        if created_at is None:
            logger.warning(
                "Previous %s %s has an undecodable createAt; duration left at 0",
                self._collection.name, previous.get(FIELD_ID),
            )
            return 0
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        delta = now - created_at
        return (delta // timedelta(microseconds=1)) * 1_000
