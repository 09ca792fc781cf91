"""Turn the flat ticket arena into the indented list the ticket panel shows.

Tickets only know their ``parent_id``. The helpers here derive a
``parent_id -> children`` index on demand and walk it depth-first, so no
child-pointer object graph is ever stored.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import AbstractSet, Iterable

from ..domain.entities import Ticket

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FlatTicket:
    """A ticket positioned in the flattened tree."""

    ticket: Ticket
    level: int
    has_children: bool

    @property
    def id(self) -> str:
        return self.ticket.id


def build_children_index(tickets: Iterable[Ticket]) -> dict[str | None, list[Ticket]]:
    """Group tickets by ``parent_id`` with each group sorted by ``sort_order``.

    The sort is stable, so equal ``sort_order`` values keep input order.
    """
    index: dict[str | None, list[Ticket]] = {}
    for ticket in tickets:
        index.setdefault(ticket.parent_id, []).append(ticket)
    for children in index.values():
        children.sort(key=lambda t: t.sort_order)
    return index


def flatten_tickets(tickets: Iterable[Ticket], expanded: AbstractSet[str]) -> list[FlatTicket]:
    """Depth-first, pre-order flattening of one project's tickets.

    Collapsed tickets are listed without their descendants. Tickets whose
    parent is not part of ``tickets`` are never reached from a root and are
    left out together with their subtrees. A branch that loops back onto the
    current path is cut at the repeat.
    """
    ticket_list = list(tickets)
    known_ids = {t.id for t in ticket_list}
    index = build_children_index(ticket_list)
    result: list[FlatTicket] = []
    path: set[str] = set()

    def visit(ticket: Ticket, level: int) -> None:
        if ticket.id in path:
            logger.debug("tree.cycle_truncated", extra={"extra_data": {"ticket_id": ticket.id}})
            return
        children = index.get(ticket.id, [])
        result.append(FlatTicket(ticket=ticket, level=level, has_children=bool(children)))
        if ticket.id not in expanded:
            return
        path.add(ticket.id)
        for child in children:
            visit(child, level + 1)
        path.discard(ticket.id)

    for root in index.get(None, []):
        visit(root, 0)

    skipped = [t.id for t in ticket_list if t.parent_id is not None and t.parent_id not in known_ids]
    if skipped:
        logger.debug("tree.orphans_excluded", extra={"extra_data": {"ticket_ids": skipped}})
    return result


def default_expanded(tickets: Iterable[Ticket]) -> set[str]:
    """Every ticket that has at least one child starts out expanded."""
    ticket_list = list(tickets)
    ids = {t.id for t in ticket_list}
    return {t.parent_id for t in ticket_list if t.parent_id is not None and t.parent_id in ids}


def toggle_expanded(expanded: AbstractSet[str], ticket_id: str) -> frozenset[str]:
    if ticket_id in expanded:
        return frozenset(expanded - {ticket_id})
    return frozenset(expanded | {ticket_id})


def collect_descendant_ids(tickets: Iterable[Ticket], root_id: str) -> set[str]:
    """Breadth-first closure over ``parent_id``, including ``root_id`` itself."""
    index = build_children_index(tickets)
    found = {root_id}
    queue = deque([root_id])
    while queue:
        current = queue.popleft()
        for child in index.get(current, []):
            if child.id not in found:
                found.add(child.id)
                queue.append(child.id)
    return found


def would_create_cycle(tickets: Iterable[Ticket], ticket_id: str, new_parent_id: str | None) -> bool:
    """True when ``new_parent_id`` is ``ticket_id`` or one of its descendants."""
    if new_parent_id is None:
        return False
    return new_parent_id in collect_descendant_ids(tickets, ticket_id)


__all__ = [
    "FlatTicket",
    "build_children_index",
    "collect_descendant_ids",
    "default_expanded",
    "flatten_tickets",
    "toggle_expanded",
    "would_create_cycle",
]
