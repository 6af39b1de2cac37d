"""Pydantic DTO for the uniform result envelope returned by every record route."""

from typing import Any

from pydantic import BaseModel


class ResultEnvelope(BaseModel):
    """``{ok, data?, total?, msg?}`` — unset keys are left out of the JSON."""

    ok: bool
    data: Any = None
    total: int | None = None
    msg: str | None = None

    @classmethod
    def success(cls, data: Any, total: int | None = None) -> "ResultEnvelope":
        if total is None:
            return cls(ok=True, data=data)
        return cls(ok=True, data=data, total=total)

    @classmethod
    def failure(cls, msg: str) -> "ResultEnvelope":
        return cls(ok=False, msg=msg)

    def to_content(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)
