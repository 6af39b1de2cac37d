"""Unit tests for the RecordService."""

import json
from datetime import datetime, timedelta, timezone

import pytest

from app.application.interfaces import DocumentCollection
from app.application.interfaces.document_collection import DESCENDING
from app.application.profiles import RECORD_PROFILE, TASK_PROFILE
from app.application.services import RecordService
from app.application.services.record_service import parse_page_param
from app.domain.exceptions import (
    EmptyBodyError,
    InvalidIdentityError,
    RecordNotFoundError,
    StoreError,
    ValidationFailedError,
)
from app.domain.identifiers import new_record_id

ALICE = "a" * 24
BOB = "b" * 24
START = datetime(2024, 3, 1, 8, 0, tzinfo=timezone.utc)


# ── Fakes ──


class FakeDocumentCollection(DocumentCollection):
    """In-memory fake collection for unit testing."""

    def __init__(self, *, fail: bool = False):
        self.documents: dict[str, dict] = {}
        self._fail = fail

    @property
    def name(self) -> str:
        return "fake"

    def _check(self) -> None:
        if self._fail:
            raise StoreError("connection refused")

    def _matches(self, document: dict, filter: dict) -> bool:
        return all(document.get(k) == v for k, v in filter.items())

    def _sorted(self, documents: list[dict], sort) -> list[dict]:
        for field, direction in reversed(list(sort or ())):
            documents = sorted(
                documents,
                key=lambda d: d.get(field),
                reverse=direction == DESCENDING,
            )
        return documents

    async def insert_one(self, document: dict) -> str:
        self._check()
        record_id = new_record_id()
        self.documents[record_id] = {"id": record_id, **document}
        return record_id

    async def find_one(self, filter, sort=None):
        self._check()
        found = await self.find_many(filter, sort, limit=1)
        return found[0] if found else None

    async def find_many(self, filter, sort=None, *, skip=0, limit=0):
        self._check()
        matched = [d for d in self.documents.values() if self._matches(d, filter)]
        matched = self._sorted(matched, sort)[skip:]
        return matched[:limit] if limit else matched

    async def update_one_and_return(self, filter, set_fields):
        self._check()
        for document in self.documents.values():
            if self._matches(document, filter):
                document.update(set_fields)
                return dict(document)
        raise RecordNotFoundError(self.name, filter.get("id"))

    async def delete_one_and_return(self, filter):
        self._check()
        for record_id, document in list(self.documents.items()):
            if self._matches(document, filter):
                return self.documents.pop(record_id)
        raise RecordNotFoundError(self.name, filter.get("id"))

    async def count(self, filter) -> int:
        self._check()
        return len([d for d in self.documents.values() if self._matches(d, filter)])


class SteppingClock:
    """Returns START, then advances by ``step`` on every call."""

    def __init__(self, step: timedelta = timedelta(minutes=5)):
        self._now = START - step
        self._step = step

    def __call__(self) -> datetime:
        self._now += self._step
        return self._now


def _body(**fields) -> bytes:
    return json.dumps(fields).encode()


@pytest.fixture
def collection() -> FakeDocumentCollection:
    return FakeDocumentCollection()


@pytest.fixture
def task_service(collection: FakeDocumentCollection) -> RecordService:
    return RecordService(collection, TASK_PROFILE, clock=SteppingClock())


@pytest.fixture
def record_service(collection: FakeDocumentCollection) -> RecordService:
    return RecordService(collection, RECORD_PROFILE, clock=SteppingClock())


# ── Create ──


@pytest.mark.asyncio
async def test_create_stamps_owner_and_creation_time(task_service, collection):
    record_id = await task_service.create_record(
        ALICE, _body(title="buy milk", level=2)
    )

    stored = collection.documents[record_id]
    assert stored["uid"] == ALICE
    assert stored["title"] == "buy milk"
    assert stored["level"] == 2
    assert stored["createAt"] == START.isoformat()
    assert "updateAt" not in stored
    assert "deration" not in stored


@pytest.mark.asyncio
async def test_create_ignores_client_supplied_system_fields(task_service, collection):
    record_id = await task_service.create_record(
        ALICE,
        _body(id="f" * 24, uid=BOB, createAt="1999-01-01", title="t", level=1),
    )

    stored = collection.documents[record_id]
    assert record_id != "f" * 24
    assert stored["uid"] == ALICE
    assert stored["createAt"] == START.isoformat()


@pytest.mark.asyncio
async def test_create_reports_first_missing_field_and_writes_nothing(
    task_service, collection
):
    with pytest.raises(ValidationFailedError) as exc_info:
        await task_service.create_record(ALICE, _body(note="no title, no level"))

    assert exc_info.value.message == "Please enter a task name"
    assert collection.documents == {}


@pytest.mark.asyncio
async def test_create_rejects_bad_identity_before_reading_body(task_service):
    with pytest.raises(InvalidIdentityError):
        await task_service.create_record("not-an-id", b"")


@pytest.mark.asyncio
async def test_create_rejects_empty_body(task_service):
    with pytest.raises(EmptyBodyError):
        await task_service.create_record(ALICE, b"")


@pytest.mark.asyncio
async def test_first_record_has_zero_duration(record_service, collection):
    record_id = await record_service.create_record(
        ALICE, _body(event="woke up", tid=["t1"])
    )
    assert collection.documents[record_id]["deration"] == 0


@pytest.mark.asyncio
async def test_duration_measures_from_callers_previous_record(
    record_service, collection
):
    await record_service.create_record(ALICE, _body(event="start", tid=["t1"]))
    # Another user's record in between must not be used as the previous one
    await record_service.create_record(BOB, _body(event="other", tid=["t2"]))
    second = await record_service.create_record(
        ALICE, _body(event="next", tid=["t1"])
    )

    ten_minutes_ns = 10 * 60 * 1_000_000_000
    assert collection.documents[second]["deration"] == ten_minutes_ns


@pytest.mark.asyncio
async def test_undecodable_previous_creation_time_leaves_duration_zero(
    record_service, collection
):
    collection.documents["c" * 24] = {
        "id": "c" * 24,
        "uid": ALICE,
        "createAt": "yesterday-ish",
    }
    record_id = await record_service.create_record(
        ALICE, _body(event="e", tid=["t1"])
    )
    assert collection.documents[record_id]["deration"] == 0


@pytest.mark.asyncio
async def test_record_variant_requires_non_empty_tags(record_service, collection):
    with pytest.raises(ValidationFailedError) as exc_info:
        await record_service.create_record(ALICE, _body(event="e", tid=[]))
    assert exc_info.value.message == "Please choose at least one tag"
    assert collection.documents == {}


# ── Update ──


@pytest.mark.asyncio
async def test_update_merges_fields_and_keeps_identity(record_service, collection):
    record_id = await record_service.create_record(
        ALICE, _body(event="draft", tid=["t1"], mood="ok")
    )

    message = await record_service.update_record(
        ALICE, _body(id=record_id, event="done", tid=["t1", "t2"])
    )

    stored = collection.documents[record_id]
    assert message == "updated"
    assert stored["id"] == record_id
    assert stored["uid"] == ALICE
    assert stored["event"] == "done"
    assert stored["tid"] == ["t1", "t2"]
    assert stored["mood"] == "ok"
    assert stored["updateAt"] > stored["createAt"]


@pytest.mark.asyncio
async def test_update_cannot_rewrite_creation_fields(record_service, collection):
    record_id = await record_service.create_record(ALICE, _body(event="e", tid=["t"]))
    before = dict(collection.documents[record_id])

    await record_service.update_record(
        ALICE,
        _body(id=record_id, event="e2", tid=["t"], createAt="1999", deration=1),
    )

    stored = collection.documents[record_id]
    assert stored["createAt"] == before["createAt"]
    assert stored["deration"] == before["deration"]


@pytest.mark.asyncio
async def test_update_of_foreign_record_is_not_found(record_service, collection):
    record_id = await record_service.create_record(ALICE, _body(event="e", tid=["t"]))
    before = dict(collection.documents[record_id])

    with pytest.raises(RecordNotFoundError):
        await record_service.update_record(
            BOB, _body(id=record_id, event="hijack", tid=["t1"])
        )
    assert collection.documents[record_id] == before


@pytest.mark.asyncio
async def test_update_requires_id(record_service):
    with pytest.raises(ValidationFailedError) as exc_info:
        await record_service.update_record(ALICE, _body(event="e", tid=["t"]))
    assert exc_info.value.message == "ID must not be empty"


@pytest.mark.asyncio
async def test_update_rejects_malformed_id(record_service):
    with pytest.raises(InvalidIdentityError):
        await record_service.update_record(
            ALICE, _body(id="123", event="e", tid=["t"])
        )


# ── Remove ──


@pytest.mark.asyncio
async def test_remove_own_record(task_service, collection):
    record_id = await task_service.create_record(ALICE, _body(title="t", level=1))
    assert await task_service.remove_record(ALICE, record_id) == "deleted"
    assert collection.documents == {}


@pytest.mark.asyncio
async def test_remove_of_foreign_record_has_no_effect(task_service, collection):
    record_id = await task_service.create_record(ALICE, _body(title="t", level=1))
    with pytest.raises(RecordNotFoundError):
        await task_service.remove_record(BOB, record_id)
    assert record_id in collection.documents


@pytest.mark.asyncio
async def test_remove_rejects_malformed_path_id(task_service):
    with pytest.raises(InvalidIdentityError):
        await task_service.remove_record(ALICE, "zz")


# ── List ──


@pytest.mark.asyncio
async def test_task_list_sorted_by_level_descending(task_service):
    for level in (1, 3, 2):
        await task_service.create_record(ALICE, _body(title=f"L{level}", level=level))
    await task_service.create_record(BOB, _body(title="bob", level=9))

    records, total = await task_service.list_records(ALICE)

    assert [r["level"] for r in records] == [3, 2, 1]
    assert total == 3


@pytest.mark.asyncio
async def test_record_list_sorted_newest_first(record_service):
    for event in ("first", "second", "third"):
        await record_service.create_record(ALICE, _body(event=event, tid=["t"]))

    records, _ = await record_service.list_records(ALICE)

    assert [r["event"] for r in records] == ["third", "second", "first"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "limit, skip, expected",
    [(0, 0, 5), (2, 0, 2), (2, 4, 1), (0, 3, 2), (3, 10, 0)],
)
async def test_list_pagination(record_service, limit, skip, expected):
    for i in range(5):
        await record_service.create_record(ALICE, _body(event=str(i), tid=["t"]))

    records, total = await record_service.list_records(ALICE, limit=limit, skip=skip)

    assert len(records) == expected
    assert total == 5


@pytest.mark.asyncio
async def test_operations_log_the_collection_name(task_service, caplog):
    caplog.set_level("INFO", logger="app.application.services.record_service")

    record_id = await task_service.create_record(ALICE, _body(title="t", level=1))
    await task_service.remove_record(ALICE, record_id)

    messages = [r.getMessage() for r in caplog.records]
    assert f"Created fake {record_id} for uid={ALICE}" in messages
    assert f"Deleted fake {record_id} for uid={ALICE}" in messages


@pytest.mark.asyncio
async def test_store_failure_propagates():
    service = RecordService(FakeDocumentCollection(fail=True), TASK_PROFILE)
    with pytest.raises(StoreError) as exc_info:
        await service.list_records(ALICE)
    assert exc_info.value.message == "connection refused"


@pytest.mark.parametrize(
    "raw, expected",
    [
        (None, 0),
        ("", 0),
        ("abc", 0),
        ("-4", 0),
        ("7", 7),
        ("1.5", 0),
        ("9" * 30, 2**63 - 1),
        ("-" + "9" * 30, 0),
    ],
)
def test_parse_page_param(raw, expected):
    assert parse_page_param(raw) == expected
