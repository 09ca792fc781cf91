"""Sibling ordering rules for the ticket list.

Every function returns a new list and replaces only the tickets whose
``sort_order`` actually changed; untouched tickets are the very same objects
that came in, and an input that needs no change comes back as-is.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Sequence

from ..domain.entities import Ticket

logger = logging.getLogger(__name__)


def sibling_group(tickets: Sequence[Ticket], project_id: str, parent_id: str | None) -> list[Ticket]:
    """Members of ``{project_id, parent_id}`` in ascending ``sort_order``."""
    group = [t for t in tickets if t.project_id == project_id and t.parent_id == parent_id]
    group.sort(key=lambda t: t.sort_order)
    return group


def next_sort_order(tickets: Sequence[Ticket], project_id: str, parent_id: str | None) -> int:
    return len(sibling_group(tickets, project_id, parent_id))


def _apply_order(tickets: list[Ticket], ordered: Sequence[Ticket]) -> list[Ticket]:
    changed: dict[str, Ticket] = {}
    for index, ticket in enumerate(ordered):
        if ticket.sort_order != index:
            changed[ticket.id] = dataclasses.replace(ticket, sort_order=index)
    if not changed:
        return tickets
    return [changed.get(t.id, t) for t in tickets]


def reorder(all_tickets: list[Ticket], dragged_id: str, target_id: str) -> list[Ticket]:
    """Move ``dragged_id`` to sit immediately before ``target_id``.

    Both tickets must exist and share a sibling group; anything else is
    ignored and the input list is returned unchanged.
    """
    dragged = next((t for t in all_tickets if t.id == dragged_id), None)
    target = next((t for t in all_tickets if t.id == target_id), None)
    if dragged is None or target is None:
        logger.debug("reorder.skipped_missing", extra={"extra_data": {"dragged": dragged_id, "target": target_id}})
        return all_tickets
    if dragged.sibling_key != target.sibling_key or dragged.id == target.id:
        return all_tickets

    siblings = sibling_group(all_tickets, dragged.project_id, dragged.parent_id)
    siblings = [t for t in siblings if t.id != dragged.id]
    target_index = next(i for i, t in enumerate(siblings) if t.id == target.id)
    siblings.insert(target_index, dragged)
    return _apply_order(all_tickets, siblings)


def normalize_sibling_orders(tickets: list[Ticket], project_id: str, parent_id: str | None) -> list[Ticket]:
    """Close gaps and duplicates in one sibling group, keeping relative order."""
    return _apply_order(tickets, sibling_group(tickets, project_id, parent_id))


def changed_tickets(before: Sequence[Ticket], after: Sequence[Ticket]) -> list[Ticket]:
    """Tickets in ``after`` that are not the same object as in ``before``."""
    previous = {t.id: t for t in before}
    return [t for t in after if previous.get(t.id) is not t]


__all__ = [
    "changed_tickets",
    "next_sort_order",
    "normalize_sibling_orders",
    "reorder",
    "sibling_group",
]
