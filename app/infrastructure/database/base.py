"""Declarative base shared by the document store tables."""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Metadata root; ``create_all`` at startup builds every table registered here."""
