"""Domain-specific exceptions — framework-independent.

Every failure of a record operation is terminal for the request and is
rendered by the API layer as ``{"ok": false, "msg": <message>}``.
"""


class RecordServiceError(Exception):
    """Base class for all failures surfaced to the client."""

    http_status: int = 400

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InvalidIdentityError(RecordServiceError):
    """Raised when the caller id or a record id is missing or malformed."""

    def __init__(self, message: str = "invalid uid"):
        super().__init__(message)


class EmptyBodyError(RecordServiceError):
    """Raised when a request that needs a body arrives without one."""

    def __init__(self, message: str = "not has body"):
        super().__init__(message)


class MalformedPayloadError(RecordServiceError):
    """Raised when the body is not a JSON object."""


class ValidationFailedError(RecordServiceError):
    """Raised with the message of the first unmet required-field rule."""

    http_status = 422

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(message)


class RecordNotFoundError(RecordServiceError):
    """Raised when no document matches an update or delete filter."""

    http_status = 404

    def __init__(self, collection: str, record_id: str | None = None):
        self.collection = collection
        self.record_id = record_id
        super().__init__("no document matched the filter")


class StoreError(RecordServiceError):
    """Raised when the underlying store fails; carries the driver message."""

    http_status = 500
