"""Sort token parsing.

Tokens look like ``"createdAt:desc"`` or ``"title"``; they compose
left-to-right into a multi-key ordering (first token is the primary key).
Field names are checked against a per-entity whitelist at parse time.
"""

from dataclasses import dataclass
from typing import Iterable, Literal, Mapping, Optional

from sqlalchemy import asc, desc

from ..errors import InvalidSortField
from ..utils.logging import get_logger

logger = get_logger(__name__)

SORT_SEPARATOR = ":"

Direction = Literal["asc", "desc"]

# Public sort names (camelCase, as callers send them) mapped to model attributes.
TASK_SORT_FIELDS: Mapping[str, str] = {
    "id": "id",
    "title": "title",
    "priority": "priority",
    "columnId": "column_id",
    "startDate": "start_date",
    "endDate": "end_date",
    "createdAt": "created_at",
    "updatedAt": "updated_at",
}

EVENT_SORT_FIELDS: Mapping[str, str] = {
    "id": "id",
    "title": "title",
    "statusEvent": "status",
    "startTime": "start_time",
    "endTime": "end_time",
    "capacity": "capacity",
    "createdAt": "created_at",
    "updatedAt": "updated_at",
}


@dataclass(frozen=True)
class SortKey:
    field: str  # model attribute name
    direction: Direction = "asc"


def _resolve_field(name: str, whitelist: Mapping[str, str]) -> Optional[str]:
    if name in whitelist:
        return whitelist[name]
    # snake_case aliases (created_at) resolve to the same attribute
    if name in whitelist.values():
        return name
    return None


def parse_sort(
    tokens: Optional[Iterable[str]],
    whitelist: Mapping[str, str],
    entity: str = "entity",
) -> tuple[SortKey, ...]:
    """
    Parse sort tokens into an ordered tuple of sort keys.

    Args:
        tokens: Raw tokens such as ``["createdAt:desc", "title"]``; None or empty
            means unordered
        whitelist: Public field name -> model attribute mapping
        entity: Entity name used in error messages

    Returns:
        Tuple of SortKey, primary key first. Empty tuple when no tokens.

    Raises:
        InvalidSortField: If a token names a field outside the whitelist
    """
    if not tokens:
        return ()
    if isinstance(tokens, str):
        tokens = [tokens]

    keys = []
    for token in tokens:
        parts = token.split(SORT_SEPARATOR)
        name = parts[0].strip()
        direction: Direction = "asc"
        if len(parts) > 1 and parts[1].strip().lower() == "desc":
            direction = "desc"

        field = _resolve_field(name, whitelist)
        if field is None:
            logger.debug("Rejecting sort token %r for %s", token, entity)
            raise InvalidSortField(entity, name, whitelist.keys())
        keys.append(SortKey(field=field, direction=direction))
    return tuple(keys)


def parse_task_sort(tokens: Optional[Iterable[str]]) -> tuple[SortKey, ...]:
    return parse_sort(tokens, TASK_SORT_FIELDS, entity="Task")


def parse_event_sort(tokens: Optional[Iterable[str]]) -> tuple[SortKey, ...]:
    return parse_sort(tokens, EVENT_SORT_FIELDS, entity="Event")


def to_order_by(keys: Iterable[SortKey], model_class: type) -> list:
    """Build SQLAlchemy ORDER BY clauses for ``keys`` against ``model_class``."""
    clauses = []
    for key in keys:
        column = getattr(model_class, key.field)
        clauses.append(desc(column) if key.direction == "desc" else asc(column))
    return clauses
