"""Two-phase aggregate loader.

Joining two one-to-many associations in one query multiplies rows (every
assignee repeated per link). The loader avoids that:

1. Phase 1 runs the filter + ordering, eagerly loading the single-valued
   associations and one collection; duplicate roots are dropped keeping the
   first-seen (sorted) position.
2. Phase 2 fetches the second collection for exactly the phase-1 keys. It is
   skipped entirely when phase 1 is empty.
3. Children are merged onto their roots by primary key; roots keep phase-1
   order.

Callers run ``load``/``load_one`` inside ``read_scope`` so both phases see
the same data.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Hashable, Iterable, Optional, Sequence

from ..database.schema import Event, Task, TaskLink
from ..database.store import Association, SqlStore
from ..errors import NotFoundError
from ..utils.logging import get_logger
from .predicates import Equals, Predicate
from .sorting import SortKey

logger = get_logger(__name__)


@dataclass(frozen=True)
class AggregatePlan:
    """What each phase loads for one root entity type."""

    entity: str
    model: type
    include: tuple[str, ...]  # phase 1 eager paths
    children: Association  # phase 2 collection
    key: str = "id"


@dataclass
class Aggregate:
    """A root row plus its separately loaded child collection."""

    root: Any
    children: list = field(default_factory=list)


TASK_PLAN = AggregatePlan(
    entity="Task",
    model=Task,
    include=("event", "created_by", "updated_by", "assignees.user"),
    children=Association(name="links", model=TaskLink, owner_key="task_id"),
)

EVENT_PLAN = AggregatePlan(
    entity="Event",
    model=Event,
    include=("created_by", "updated_by"),
    children=Association(name="tasks", model=Task, owner_key="event_id"),
)


def unique_by_key(rows: Iterable[Any], key: Callable[[Any], Hashable]) -> list:
    """Drop rows whose key was already seen, keeping first-seen order."""
    seen = set()
    unique = []
    for row in rows:
        k = key(row)
        if k in seen:
            continue
        seen.add(k)
        unique.append(row)
    return unique


class AggregateLoader:
    """Loads fully populated aggregates in at most two store round trips."""

    def __init__(self, store: SqlStore, plan: AggregatePlan):
        self.store = store
        self.plan = plan

    def _key(self, row: Any) -> Hashable:
        return getattr(row, self.plan.key)

    def load(
        self,
        predicate: Predicate,
        ordering: Sequence[SortKey] = (),
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> list[Aggregate]:
        """
        Load aggregates matching ``predicate`` in ``ordering`` order.

        Returns:
            Aggregates in phase-1 order; empty list when nothing matches
        """
        plan = self.plan
        rows = self.store.query(
            plan.model,
            predicate,
            ordering,
            include=plan.include,
            exclude=(plan.children.name,),
            limit=limit,
            offset=offset,
        )
        roots = unique_by_key(rows, self._key)
        if len(roots) != len(rows):
            logger.debug("Phase 1 dropped %d duplicate %s rows", len(rows) - len(roots), plan.entity)
        if not roots:
            logger.debug("Phase 1 returned no %s rows; skipping phase 2", plan.entity)
            return []

        keys = [self._key(root) for root in roots]
        children = self.store.query_by_ids(plan.children, keys)
        logger.debug(
            "Loaded %d %s roots with %d %s",
            len(roots),
            plan.entity,
            len(children),
            plan.children.name,
        )
        return self._merge(roots, children)

    def load_one(self, key: Hashable) -> Aggregate:
        """
        Load a single aggregate by primary key.

        Raises:
            NotFoundError: If phase 1 finds no row for ``key``
        """
        aggregates = self.load(Equals(field=self.plan.key, value=key))
        if not aggregates:
            logger.debug("No %s with %s=%r", self.plan.entity, self.plan.key, key)
            raise NotFoundError(self.plan.entity, key)
        return aggregates[0]

    def _merge(self, roots: list, children: list) -> list[Aggregate]:
        owner_key = self.plan.children.owner_key
        grouped: dict[Hashable, list] = {self._key(root): [] for root in roots}
        for child in unique_by_key(children, lambda c: c.id):
            owner = getattr(child, owner_key)
            if owner not in grouped:
                logger.debug("Discarding %s row %s owned by %s outside phase 1", self.plan.children.name, child.id, owner)
                continue
            grouped[owner].append(child)
        return [Aggregate(root=root, children=grouped[self._key(root)]) for root in roots]


def task_loader(store: SqlStore) -> AggregateLoader:
    return AggregateLoader(store, TASK_PLAN)


def event_loader(store: SqlStore) -> AggregateLoader:
    return AggregateLoader(store, EVENT_PLAN)
