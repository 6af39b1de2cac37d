"""SQLAlchemy ORM model for schema-free documents."""

from datetime import datetime

from sqlalchemy import JSON, DateTime, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from app.infrastructure.database.base import Base


class DocumentModel(Base):
    """ORM model — maps to the 'documents' table.

    ``body`` holds the full document in insertion order. ``uid`` and
    ``create_at`` are copies of the owner and creation time, kept as real
    columns so owner filters and the default sort can use indexes.
    """

    __tablename__ = "documents"

    id: Mapped[str] = mapped_column(String(24), primary_key=True)
    collection: Mapped[str] = mapped_column(String(64), nullable=False)
    uid: Mapped[str | None] = mapped_column(String(24), nullable=True)
    create_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    body: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)

    __table_args__ = (
        Index("ix_documents_owner", "collection", "uid"),
        Index("ix_documents_owner_created", "collection", "uid", "create_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<DocumentModel(id={self.id}, "
            f"collection='{self.collection}', uid='{self.uid}')>"
        )
