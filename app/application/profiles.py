"""Deployment profiles — the task list and the time log share one engine."""

from dataclasses import dataclass

from app.application.interfaces.document_collection import DESCENDING, SortSpec
from app.application.validation import FieldRule
from app.domain.entities.payload import FIELD_CREATED_AT

_UPDATE_RULES = (
    FieldRule("event", "Please describe what happened"),
    FieldRule("tid", "Please choose at least one tag", non_empty_list=True),
    FieldRule("id", "ID must not be empty"),
)


@dataclass(frozen=True)
class RecordProfile:
    """Per-deployment collection, routes, validation rules and list order."""

    name: str
    collection: str
    route_prefix: str
    create_rules: tuple[FieldRule, ...]
    update_rules: tuple[FieldRule, ...]
    sort: SortSpec
    track_duration: bool = False


TASK_PROFILE = RecordProfile(
    name="task",
    collection="task",
    route_prefix="/task",
    create_rules=(
        FieldRule("title", "Please enter a task name"),
        FieldRule("level", "Please choose a priority"),
    ),
    update_rules=_UPDATE_RULES,
    sort=(("level", DESCENDING),),
)

RECORD_PROFILE = RecordProfile(
    name="record",
    collection="record",
    route_prefix="/record",
    create_rules=(
        FieldRule("event", "Please describe what happened"),
        FieldRule("tid", "Please choose at least one tag", non_empty_list=True),
    ),
    update_rules=_UPDATE_RULES,
    sort=((FIELD_CREATED_AT, DESCENDING),),
    track_duration=True,
)

_PROFILES = {p.name: p for p in (TASK_PROFILE, RECORD_PROFILE)}


def get_profile(name: str) -> RecordProfile:
    try:
        return _PROFILES[name]
    except KeyError:
        raise ValueError(
            f"Unknown deployment variant '{name}', expected one of {sorted(_PROFILES)}"
        ) from None
