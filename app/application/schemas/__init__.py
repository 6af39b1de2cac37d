from .envelope import ResultEnvelope

__all__ = [
    "ResultEnvelope",
]
