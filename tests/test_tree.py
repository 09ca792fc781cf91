"""Tests for flattening the ticket tree into display rows."""

import os
import sys
from datetime import date
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("DATA_DIR", str(ROOT / "data"))

from planner.domain.entities import Ticket
from planner.services.tree import (
    collect_descendant_ids,
    default_expanded,
    flatten_tickets,
    toggle_expanded,
    would_create_cycle,
)


def make_ticket(ticket_id, parent_id=None, sort_order=0, project_id="p1"):
    return Ticket(
        id=ticket_id,
        name=ticket_id,
        start_date=date(2024, 1, 1),
        end_date=date(2024, 1, 3),
        project_id=project_id,
        parent_id=parent_id,
        sort_order=sort_order,
    )


def rows(flat):
    return [(item.id, item.level, item.has_children) for item in flat]


def test_expanded_parent_lists_children_before_next_root():
    tickets = [make_ticket("A", sort_order=0), make_ticket("B", sort_order=1), make_ticket("C", "A", 0)]

    assert rows(flatten_tickets(tickets, {"A"})) == [
        ("A", 0, True),
        ("C", 1, False),
        ("B", 0, False),
    ]


def test_collapsed_parent_hides_subtree_but_keeps_child_flag():
    tickets = [make_ticket("A", sort_order=0), make_ticket("B", sort_order=1), make_ticket("C", "A", 0)]

    assert rows(flatten_tickets(tickets, set())) == [("A", 0, True), ("B", 0, False)]


def test_siblings_follow_sort_order_not_input_order():
    tickets = [
        make_ticket("late", sort_order=2),
        make_ticket("early", sort_order=0),
        make_ticket("middle", sort_order=1),
    ]

    assert [item.id for item in flatten_tickets(tickets, set())] == ["early", "middle", "late"]


def test_grandchildren_need_every_ancestor_expanded():
    tickets = [make_ticket("A"), make_ticket("C", "A"), make_ticket("G", "C")]

    assert [item.id for item in flatten_tickets(tickets, {"A"})] == ["A", "C"]
    assert rows(flatten_tickets(tickets, {"A", "C"})) == [("A", 0, True), ("C", 1, True), ("G", 2, False)]
    # Expanding only the inner ticket shows nothing below a collapsed root.
    assert [item.id for item in flatten_tickets(tickets, {"C"})] == ["A"]


def test_orphans_and_loops_are_left_out():
    tickets = [
        make_ticket("A"),
        make_ticket("stray", parent_id="other-project-ticket"),
        make_ticket("X", parent_id="Y"),
        make_ticket("Y", parent_id="X"),
    ]

    assert [item.id for item in flatten_tickets(tickets, {"A", "X", "Y"})] == ["A"]


def test_default_expanded_holds_every_parent():
    tickets = [make_ticket("A"), make_ticket("B"), make_ticket("C", "A"), make_ticket("D", "C")]

    assert default_expanded(tickets) == {"A", "C"}


def test_toggle_expanded_returns_new_set():
    start = frozenset({"A"})

    closed = toggle_expanded(start, "A")
    reopened = toggle_expanded(closed, "A")

    assert closed == frozenset()
    assert reopened == frozenset({"A"})
    assert start == frozenset({"A"})


def test_descendant_closure_and_cycle_check():
    tickets = [
        make_ticket("A"),
        make_ticket("B"),
        make_ticket("C", "A"),
        make_ticket("D", "C"),
        make_ticket("E", "B"),
    ]

    assert collect_descendant_ids(tickets, "A") == {"A", "C", "D"}
    assert collect_descendant_ids(tickets, "D") == {"D"}

    assert would_create_cycle(tickets, "A", "D") is True
    assert would_create_cycle(tickets, "A", "A") is True
    assert would_create_cycle(tickets, "A", "B") is False
    assert would_create_cycle(tickets, "A", None) is False
