"""Required-field rules for schema-free payloads."""

from collections.abc import Sequence
from dataclasses import dataclass

from app.domain.entities.payload import Payload
from app.domain.exceptions import ValidationFailedError


@dataclass(frozen=True)
class FieldRule:
    """A field that must be present, with the message shown when it is not."""

    name: str
    message: str
    non_empty_list: bool = False

    def is_met(self, payload: Payload) -> bool:
        value = payload.get(self.name)
        if value is None:
            return False
        if self.non_empty_list:
            return isinstance(value, list) and len(value) > 0
        return True


def require_fields(payload: Payload, rules: Sequence[FieldRule]) -> None:
    """Raise ValidationFailedError for the first rule the payload does not meet."""
    for rule in rules:
        if not rule.is_met(payload):
            raise ValidationFailedError(rule.name, rule.message)
