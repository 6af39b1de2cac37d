from .payload import JSONValue, Payload

__all__ = [
    "JSONValue",
    "Payload",
]
