"""Abstract collection interface (port) for schema-free document persistence."""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

Document = dict[str, Any]
Filter = dict[str, Any]
SortSpec = Sequence[tuple[str, int]]

ASCENDING = 1
DESCENDING = -1


class DocumentCollection(ABC):
    """Port for one entity collection — implemented in the infrastructure layer.

    Filters are equality maps over document fields (``id`` addresses the
    generated identifier). Sort specs are ordered ``(field, direction)``
    pairs. Store failures surface as ``StoreError``.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @abstractmethod
    async def insert_one(self, document: Document) -> str:
        """Persist a new document and return its generated id."""
        ...

    @abstractmethod
    async def find_one(
        self, filter: Filter, sort: SortSpec | None = None
    ) -> Document | None:
        """Return the first matching document in sort order, or None."""
        ...

    @abstractmethod
    async def find_many(
        self,
        filter: Filter,
        sort: SortSpec | None = None,
        *,
        skip: int = 0,
        limit: int = 0,
    ) -> list[Document]:
        """Return matching documents; ``limit=0`` means no limit."""
        ...

    @abstractmethod
    async def update_one_and_return(
        self, filter: Filter, set_fields: Document
    ) -> Document:
        """Merge ``set_fields`` into the first match and return it updated.

        Raises RecordNotFoundError when nothing matches.
        """
        ...

    @abstractmethod
    async def delete_one_and_return(self, filter: Filter) -> Document:
        """Delete the first match and return it. Raises RecordNotFoundError."""
        ...

    @abstractmethod
    async def count(self, filter: Filter) -> int:
        ...
