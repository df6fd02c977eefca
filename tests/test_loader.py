"""Tests for the two-phase aggregate loader."""

from types import SimpleNamespace

import pytest

from tasktrack.database.schema import Task
from tasktrack.errors import NotFoundError
from tasktrack.query.criteria import TaskCriteria
from tasktrack.query.loader import TASK_PLAN, AggregateLoader, event_loader, task_loader, unique_by_key
from tasktrack.query.predicates import MatchAll, compose_task_predicate
from tasktrack.query.sorting import SortKey


class FakeStore:
    """Store double returning canned rows and recording phase-2 keys."""

    def __init__(self, roots, children):
        self.roots = roots
        self.children = children
        self.requested_ids = None

    def query(self, model_class, predicate, ordering=(), **kwargs):
        return list(self.roots)

    def query_by_ids(self, association, ids):
        self.requested_ids = list(ids)
        return list(self.children)


def _row(id, **fields):
    return SimpleNamespace(id=id, **fields)


def test_unique_by_key_keeps_first_seen_order():
    rows = [_row(3), _row(1), _row(3), _row(2), _row(1)]
    assert [r.id for r in unique_by_key(rows, lambda r: r.id)] == [3, 1, 2]


def test_duplicate_roots_are_collapsed_in_phase_one_order():
    store = FakeStore(
        roots=[_row(7), _row(5), _row(7)],
        children=[_row(1, task_id=5), _row(2, task_id=7)],
    )
    aggregates = AggregateLoader(store, TASK_PLAN).load(MatchAll())

    assert [a.root.id for a in aggregates] == [7, 5]
    assert store.requested_ids == [7, 5]
    assert [c.id for c in aggregates[0].children] == [2]
    assert [c.id for c in aggregates[1].children] == [1]


def test_merge_discards_foreign_and_duplicate_children():
    store = FakeStore(
        roots=[_row(1), _row(2)],
        children=[
            _row(10, task_id=1),
            _row(11, task_id=99),  # owner not in phase 1
            _row(10, task_id=1),
            _row(12, task_id=2),
        ],
    )
    aggregates = AggregateLoader(store, TASK_PLAN).load(MatchAll())

    assert [c.id for c in aggregates[0].children] == [10]
    assert [c.id for c in aggregates[1].children] == [12]


def test_roots_without_children_get_empty_collections():
    store = FakeStore(roots=[_row(1), _row(2)], children=[_row(10, task_id=2)])
    aggregates = AggregateLoader(store, TASK_PLAN).load(MatchAll())
    assert aggregates[0].children == []
    assert [c.id for c in aggregates[1].children] == [10]


def test_empty_phase_one_skips_phase_two(session, board, counting_store):
    predicate = compose_task_predicate(TaskCriteria(column_id="done"))
    assert task_loader(counting_store).load(predicate) == []
    assert counting_store.calls == [("query", "Task")]


def test_phase_two_requests_exactly_phase_one_keys(session, board, counting_store):
    predicate = compose_task_predicate(TaskCriteria(column_id="todo"))
    ordering = (SortKey(field="created_at", direction="desc"),)
    aggregates = task_loader(counting_store).load(predicate, ordering)

    expected = (board["tasks"]["snacks"], board["tasks"]["badges"], board["tasks"]["venue"])
    assert [a.root.id for a in aggregates] == list(expected)
    assert counting_store.calls == [
        ("query", "Task"),
        ("query_by_ids", "links", expected),
    ]


def test_phase_two_uses_paginated_keys_only(session, board, counting_store):
    ordering = (SortKey(field="created_at"),)
    aggregates = task_loader(counting_store).load(MatchAll(), ordering, limit=2)

    expected = (board["tasks"]["flyer"], board["tasks"]["venue"])
    assert [a.root.id for a in aggregates] == list(expected)
    assert counting_store.calls[-1] == ("query_by_ids", "links", expected)


def test_children_are_not_loaded_through_the_root(session, board, counting_store):
    aggregate = task_loader(counting_store).load_one(board["tasks"]["venue"])
    assert [link.url for link in aggregate.children] == ["a.com", "b.com"]
    # Single-valued associations and assignees come from phase 1
    assert aggregate.root.event.title == "Product launch"
    assert len(aggregate.root.assignees) == 2


def test_load_one_missing_raises_not_found(session, board, counting_store):
    with pytest.raises(NotFoundError, match="Task not found: 404"):
        task_loader(counting_store).load_one(404)
    assert counting_store.calls == [("query", "Task")]


def test_event_loader_attaches_tasks(session, board, counting_store):
    ordering = (SortKey(field="created_at"),)
    aggregates = event_loader(counting_store).load(MatchAll(), ordering)

    launch, retro = aggregates
    assert launch.root.title == "Product launch"
    assert sorted(task.title for task in launch.children) == ["Book venue", "Design poster"]
    assert all(isinstance(task, Task) for task in launch.children)
    assert retro.children == []
    assert counting_store.calls[-1] == (
        "query_by_ids",
        "tasks",
        (board["events"]["launch"], board["events"]["retro"]),
    )
