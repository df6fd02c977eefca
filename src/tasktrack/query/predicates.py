"""Predicate composer.

Criteria become a small tree of tagged predicate nodes that the store
translates into a WHERE clause. Absent dimensions compose as ``MatchAll``
rather than being skipped, so every compose function is total and always
returns a valid expression.
"""

from collections.abc import Sequence
from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict
from sqlalchemy import ColumnElement, and_, false, func, or_, true
from sqlalchemy.orm import InstrumentedAttribute

from .criteria import EventCriteria, TaskCriteria

# Text fields searched by the keyword dimension, in match order.
TASK_KEYWORD_FIELDS = ("title", "description")
EVENT_KEYWORD_FIELDS = ("title", "description")


class PredicateBase(BaseModel):
    model_config = ConfigDict(frozen=True)


class MatchAll(PredicateBase):
    """Universally true predicate; the identity element for AND."""

    type: Literal["match_all"] = "match_all"


class KeywordMatch(PredicateBase):
    """Case-insensitive substring match OR-ed across ``fields``."""

    type: Literal["keyword"] = "keyword"
    keyword: str
    fields: tuple[str, ...]


class Equals(PredicateBase):
    type: Literal["equals"] = "equals"
    field: str
    value: Any


class Range(PredicateBase):
    """Inclusive one-sided bound: ``gte`` (field >= value) or ``lte`` (field <= value)."""

    type: Literal["range"] = "range"
    field: str
    op: Literal["gte", "lte"]
    value: datetime


class AndPredicate(PredicateBase):
    type: Literal["and"] = "and"
    operands: Sequence["MatchAll | KeywordMatch | Equals | Range | AndPredicate | OrPredicate"]


class OrPredicate(PredicateBase):
    type: Literal["or"] = "or"
    operands: Sequence["MatchAll | KeywordMatch | Equals | Range | AndPredicate | OrPredicate"]


Predicate = MatchAll | KeywordMatch | Equals | Range | AndPredicate | OrPredicate

AndPredicate.model_rebuild()
OrPredicate.model_rebuild()


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def keyword_match(keyword: Optional[str], fields: Sequence[str]) -> Predicate:
    if _is_blank(keyword) or not fields:
        return MatchAll()
    return KeywordMatch(keyword=keyword, fields=tuple(fields))


def equals(field: str, value: Any) -> Predicate:
    if _is_blank(value):
        return MatchAll()
    return Equals(field=field, value=value)


def at_least(field: str, value: Optional[datetime]) -> Predicate:
    if value is None:
        return MatchAll()
    return Range(field=field, op="gte", value=value)


def at_most(field: str, value: Optional[datetime]) -> Predicate:
    if value is None:
        return MatchAll()
    return Range(field=field, op="lte", value=value)


def all_of(*operands: Predicate) -> AndPredicate:
    return AndPredicate(operands=tuple(operands))


def compose_task_predicate(criteria: TaskCriteria) -> Predicate:
    """Combine every task search dimension with AND."""
    return all_of(
        keyword_match(criteria.keyword, TASK_KEYWORD_FIELDS),
        equals("column_id", criteria.column_id),
        equals("priority", criteria.priority),
        equals("event_id", criteria.event_id),
        at_least("start_date", criteria.start_after),
        at_most("end_date", criteria.end_before),
    )


def compose_event_predicate(criteria: EventCriteria) -> Predicate:
    """Combine every event search dimension with AND."""
    return all_of(
        keyword_match(criteria.keyword, EVENT_KEYWORD_FIELDS),
        equals("status", criteria.status),
        at_least("start_time", criteria.start_after),
        at_most("end_time", criteria.end_before),
    )


def simplify(predicate: Predicate) -> Predicate:
    """
    Flatten nested AND nodes and drop MatchAll operands.

    The result matches exactly the same rows as the input. An AND with no
    remaining operands becomes MatchAll; an OR containing MatchAll becomes
    MatchAll.
    """
    if isinstance(predicate, AndPredicate):
        operands = []
        for operand in predicate.operands:
            reduced = simplify(operand)
            if isinstance(reduced, MatchAll):
                continue
            if isinstance(reduced, AndPredicate):
                operands.extend(reduced.operands)
            else:
                operands.append(reduced)
        if not operands:
            return MatchAll()
        if len(operands) == 1:
            return operands[0]
        return AndPredicate(operands=tuple(operands))
    if isinstance(predicate, OrPredicate):
        operands = [simplify(operand) for operand in predicate.operands]
        if any(isinstance(operand, MatchAll) for operand in operands):
            return MatchAll()
        if len(operands) == 1:
            return operands[0]
        return OrPredicate(operands=tuple(operands))
    return predicate


def _get_column(model_class: type, field_name: str) -> InstrumentedAttribute:
    """
    Resolve a mapped column attribute on ``model_class``.

    Raises:
        ValueError: If the field is not a mapped attribute of the model
    """
    column = getattr(model_class, field_name, None)
    if not isinstance(column, InstrumentedAttribute):
        raise ValueError(f"Field '{field_name}' not found in model {model_class.__name__}")
    return column


def to_sqlalchemy(predicate: Predicate, model_class: type) -> ColumnElement[bool]:
    """
    Translate a predicate tree into a SQLAlchemy boolean clause.

    Args:
        predicate: Predicate tree (usually from a compose function)
        model_class: Mapped class whose columns the field names refer to

    Returns:
        Boolean clause suitable for ``Query.filter``

    Raises:
        ValueError: If a field name is not a column of ``model_class``
    """
    if isinstance(predicate, MatchAll):
        return true()
    if isinstance(predicate, KeywordMatch):
        needle = predicate.keyword.lower()
        return or_(
            *(
                func.lower(_get_column(model_class, field)).contains(needle, autoescape=True)
                for field in predicate.fields
            )
        )
    if isinstance(predicate, Equals):
        return _get_column(model_class, predicate.field) == predicate.value
    if isinstance(predicate, Range):
        column = _get_column(model_class, predicate.field)
        if predicate.op == "gte":
            return column >= predicate.value
        return column <= predicate.value
    if isinstance(predicate, AndPredicate):
        if not predicate.operands:
            return true()
        return and_(*(to_sqlalchemy(operand, model_class) for operand in predicate.operands))
    if isinstance(predicate, OrPredicate):
        if not predicate.operands:
            return false()
        return or_(*(to_sqlalchemy(operand, model_class) for operand in predicate.operands))
    raise ValueError(f"Unsupported predicate: {predicate!r}")
