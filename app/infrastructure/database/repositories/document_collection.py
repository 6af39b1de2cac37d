"""Concrete DocumentCollection backed by SQLAlchemy and a JSON column."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import Select, case, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.interfaces.document_collection import (
    DESCENDING,
    Document,
    DocumentCollection,
    Filter,
    SortSpec,
)
from app.domain.entities.payload import FIELD_CREATED_AT, FIELD_ID, FIELD_OWNER, parse_timestamp
from app.domain.exceptions import RecordNotFoundError, StoreError
from app.domain.identifiers import new_record_id
from app.infrastructure.database.models.document import DocumentModel

logger = logging.getLogger(__name__)

# Type names reported by json_typeof (PostgreSQL) and json_type (SQLite)
_JSON_KINDS = {
    "postgresql": {
        "number": ("number",),
        "string": ("string",),
        "boolean": ("boolean",),
        "object": ("object",),
        "array": ("array",),
    },
    "sqlite": {
        "number": ("integer", "real"),
        "string": ("text",),
        "boolean": ("true", "false"),
        "object": ("object",),
        "array": ("array",),
    },
}

# Cross-type sort order: missing/null, numbers, strings, objects, arrays, booleans
_KIND_RANK = ("number", "string", "object", "array", "boolean")


def _kinds(dialect_name: str) -> dict[str, tuple[str, ...]]:
    return _JSON_KINDS.get(dialect_name, _JSON_KINDS["sqlite"])


def json_type_of(field: str, dialect_name: str):
    """SQL expression naming the JSON type of ``body[field]`` (NULL if absent)."""
    if dialect_name == "postgresql":
        return func.json_typeof(DocumentModel.body[field])
    return func.json_type(DocumentModel.body, f'$."{field}"')


def typed_json_value(field: str, kind: str, dialect_name: str):
    """``body[field]`` cast to ``kind``, or NULL when the stored value is another type.

    The cast only runs on rows whose value already has that type, so a text
    value never reaches a numeric cast.
    """
    element = DocumentModel.body[field]
    casts = {
        "number": element.as_float,
        "string": element.as_string,
        "boolean": element.as_boolean,
    }
    return case(
        (json_type_of(field, dialect_name).in_(_kinds(dialect_name)[kind]), casts[kind]())
    )


def json_sort_keys(field: str, dialect_name: str) -> list:
    """Ordering keys for a body field: type rank, then the value within its type."""
    kinds = _kinds(dialect_name)
    kind = json_type_of(field, dialect_name)
    rank = case(
        *[(kind.in_(kinds[name]), position) for position, name in enumerate(_KIND_RANK, 1)],
        else_=0,
    )
    return [
        rank,
        typed_json_value(field, "number", dialect_name),
        typed_json_value(field, "string", dialect_name),
        typed_json_value(field, "boolean", dialect_name),
    ]


@contextmanager
def _store_errors() -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        logger.error("Document store failure: %s", exc)
        raise StoreError(str(exc)) from exc


class SQLAlchemyDocumentCollection(DocumentCollection):
    """Implements the DocumentCollection port on the shared ``documents`` table.

    Every statement is scoped to ``collection``. ``id``, ``uid`` and
    ``createAt`` resolve to indexed columns; any other field is read from the
    JSON body. Body fields sort by JSON type first (missing, numbers, strings,
    objects, arrays, booleans) and then by value, so mixed-type fields order
    without casting errors.
    """

    def __init__(self, session: AsyncSession, collection: str):
        self._session = session
        self._collection = collection

    @property
    def name(self) -> str:
        return self._collection

    @property
    def _dialect_name(self) -> str:
        return self._session.get_bind().dialect.name

    def _to_document(self, model: DocumentModel) -> Document:
        """Map ORM model → wire document, ``id`` first."""
        return {FIELD_ID: model.id, **model.body}

    def _column_for_filter(self, field: str, value: Any):
        if field in (FIELD_ID, "_id"):
            return DocumentModel.id == value
        if field == FIELD_OWNER:
            return DocumentModel.uid == value
        if isinstance(value, bool):
            kind = "boolean"
        elif isinstance(value, (int, float)):
            kind = "number"
        elif isinstance(value, str):
            kind = "string"
        else:
            raise ValueError(f"Unsupported filter value for '{field}': {value!r}")
        return typed_json_value(field, kind, self._dialect_name) == value

    def _columns_for_sort(self, field: str) -> list:
        if field == FIELD_CREATED_AT:
            return [DocumentModel.create_at]
        if field in (FIELD_ID, "_id"):
            return [DocumentModel.id]
        return json_sort_keys(field, self._dialect_name)

    def _conditions(self, filter: Filter) -> list:
        return [DocumentModel.collection == self._collection] + [
            self._column_for_filter(field, value) for field, value in filter.items()
        ]

    def _select(self, filter: Filter, sort: SortSpec | None = None) -> Select:
        stmt = select(DocumentModel).where(*self._conditions(filter))
        for field, direction in sort or ():
            for column in self._columns_for_sort(field):
                stmt = stmt.order_by(
                    column.desc() if direction == DESCENDING else column.asc()
                )
        return stmt

    async def insert_one(self, document: Document) -> str:
        body = {k: v for k, v in document.items() if k not in (FIELD_ID, "_id")}
        model = DocumentModel(
            id=new_record_id(),
            collection=self._collection,
            uid=body.get(FIELD_OWNER),
            create_at=parse_timestamp(body.get(FIELD_CREATED_AT)),
            body=body,
        )
        with _store_errors():
            self._session.add(model)
            await self._session.flush()
        return model.id

    async def find_one(
        self, filter: Filter, sort: SortSpec | None = None
    ) -> Document | None:
        with _store_errors():
            result = await self._session.execute(self._select(filter, sort).limit(1))
            model = result.scalars().first()
        return self._to_document(model) if model else None

    async def find_many(
        self,
        filter: Filter,
        sort: SortSpec | None = None,
        *,
        skip: int = 0,
        limit: int = 0,
    ) -> list[Document]:
        stmt = self._select(filter, sort)
        if skip > 0:
            stmt = stmt.offset(skip)
        if limit > 0:
            stmt = stmt.limit(limit)
        with _store_errors():
            result = await self._session.execute(stmt)
            return [self._to_document(row) for row in result.scalars().all()]

    async def update_one_and_return(
        self, filter: Filter, set_fields: Document
    ) -> Document:
        with _store_errors():
            result = await self._session.execute(
                self._select(filter).limit(1).with_for_update()
            )
            model = result.scalars().first()
            if model is None:
                raise RecordNotFoundError(self._collection, filter.get(FIELD_ID))
            # Reassign so the JSON column is flagged dirty
            model.body = {**model.body, **set_fields}
            if FIELD_OWNER in set_fields:
                model.uid = set_fields[FIELD_OWNER]
            await self._session.flush()
        return self._to_document(model)

    async def delete_one_and_return(self, filter: Filter) -> Document:
        with _store_errors():
            result = await self._session.execute(self._select(filter).limit(1))
            model = result.scalars().first()
            if model is None:
                raise RecordNotFoundError(self._collection, filter.get(FIELD_ID))
            document = self._to_document(model)
            await self._session.delete(model)
            await self._session.flush()
        return document

    async def count(self, filter: Filter) -> int:
        stmt = (
            select(func.count())
            .select_from(DocumentModel)
            .where(*self._conditions(filter))
        )
        with _store_errors():
            result = await self._session.execute(stmt)
            return int(result.scalar_one())
