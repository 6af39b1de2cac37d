from .document_collection import SQLAlchemyDocumentCollection

__all__ = [
    "SQLAlchemyDocumentCollection",
]
