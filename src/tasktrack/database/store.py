"""SQLAlchemy-backed store used by the aggregate loader.

The store exposes two capabilities:

- ``query``: filter + ordering against a root entity, with the requested
  associations eagerly populated
- ``query_by_ids``: child rows of a one-to-many association whose owner key
  is in a given key set
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from sqlalchemy.orm import Session, joinedload, raiseload

from ..query.predicates import Predicate, simplify, to_sqlalchemy
from ..query.sorting import SortKey, to_order_by
from ..utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Association:
    """A one-to-many association fetched separately from its owner."""

    name: str  # relationship attribute on the owner
    model: type  # child model
    owner_key: str  # child column holding the owner's primary key
    order_by: str = "id"


def _eager_option(model_class: type, path: str):
    """
    Build a chained ``joinedload`` for a dotted relationship path.

    ``"assignees.user"`` on Task becomes
    ``joinedload(Task.assignees).joinedload(UserTask.user)``.
    """
    option = None
    current = model_class
    for part in path.split("."):
        attr = getattr(current, part, None)
        if attr is None or not hasattr(attr, "property") or not hasattr(attr.property, "mapper"):
            raise ValueError(f"Relationship '{part}' not found in model {current.__name__}")
        option = joinedload(attr) if option is None else option.joinedload(attr)
        current = attr.property.mapper.class_
    return option


class SqlStore:
    """Executes predicate trees and sort keys against a SQLAlchemy session."""

    def __init__(self, session: Session):
        self.session = session

    def query(
        self,
        model_class: type,
        predicate: Predicate,
        ordering: Sequence[SortKey] = (),
        include: Iterable[str] = (),
        exclude: Iterable[str] = (),
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> list:
        """
        Fetch root rows matching ``predicate`` in ``ordering`` order.

        Args:
            model_class: Root mapped class
            predicate: Predicate tree
            ordering: Sort keys, primary first; empty means store order
            include: Relationship paths to load eagerly in the same query
            exclude: Relationships that must not be lazy-loaded from these rows
            limit: Optional maximum number of root rows
            offset: Number of root rows to skip

        Returns:
            List of root rows (may contain duplicates if the store joins)
        """
        q = self.session.query(model_class).filter(to_sqlalchemy(simplify(predicate), model_class))

        options = [_eager_option(model_class, path) for path in include]
        options.extend(raiseload(getattr(model_class, name)) for name in exclude)
        if options:
            q = q.options(*options)

        order_by = to_order_by(ordering, model_class)
        if order_by:
            q = q.order_by(*order_by)
        if offset:
            q = q.offset(offset)
        if limit is not None:
            q = q.limit(limit)
        return q.all()

    def query_by_ids(self, association: Association, ids: Iterable[int]) -> list:
        """
        Fetch child rows of ``association`` whose owner key is in ``ids``.

        Rows come back ordered by ``association.order_by`` (insertion order for
        autoincrement ids).
        """
        child = association.model
        owner_column = getattr(child, association.owner_key)
        return (
            self.session.query(child)
            .filter(owner_column.in_(list(ids)))
            .order_by(getattr(child, association.order_by))
            .all()
        )
