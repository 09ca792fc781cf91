"""Pointer-drag handling for ticket bars on the timeline.

A drag is tracked in a single ``Interaction`` record. ``None`` means idle.
The transition functions below are pure: they take the current record and
return the next one, leaving ownership of that record to the caller. Nothing
is written to storage until ``release`` hands back the candidate.
"""

from __future__ import annotations

import dataclasses
import logging
import math
from dataclasses import dataclass
from datetime import date
from typing import Callable

from ..domain.entities import Ticket
from .dates import shift_days

logger = logging.getLogger(__name__)

GESTURE_MOVE = "move"
GESTURE_RESIZE_START = "resize-start"
GESTURE_RESIZE_END = "resize-end"

GESTURE_KINDS: tuple[str, ...] = (GESTURE_MOVE, GESTURE_RESIZE_START, GESTURE_RESIZE_END)


@dataclass(frozen=True)
class Interaction:
    kind: str
    ticket_id: str
    start_x: float
    original_start: date
    original_end: date
    candidate: Ticket

    def __post_init__(self) -> None:
        if self.kind not in GESTURE_KINDS:
            raise ValueError(f"Unsupported gesture kind: {self.kind}")


def days_moved(dx: float, day_width: int) -> int:
    """Whole days covered by a horizontal pointer delta.

    Exact half-day deltas snap forward (towards later dates).
    """
    if day_width <= 0:
        raise ValueError("day_width must be > 0")
    columns = dx / day_width
    if not math.isfinite(columns):
        raise ValueError("pointer offset must be finite")
    return math.floor(columns + 0.5)


def shift_dates(kind: str, original_start: date, original_end: date, days: int) -> tuple[date, date]:
    """Candidate ``(start, end)`` for a drag of ``days`` from the original range.

    Resizing never lets one edge cross the other: the moving edge stops on the
    original position of the opposite edge.
    Dates saturate at the ends of the calendar.
    """
    if kind == GESTURE_MOVE:
        return shift_days(original_start, days), shift_days(original_end, days)
    if kind == GESTURE_RESIZE_START:
        return min(shift_days(original_start, days), original_end), original_end
    if kind == GESTURE_RESIZE_END:
        return original_start, max(shift_days(original_end, days), original_start)
    raise ValueError(f"Unsupported gesture kind: {kind}")


def begin(state: Interaction | None, ticket: Ticket, kind: str, x: float) -> Interaction | None:
    """Pointer-down on a bar body or one of its edge handles.

    Only one ticket can be dragged at a time, so a second pointer-down while
    a drag is active leaves the active one in place.
    """
    if state is not None:
        logger.debug("gesture.begin_ignored", extra={"extra_data": {"active": state.ticket_id, "ticket_id": ticket.id}})
        return state
    return Interaction(
        kind=kind,
        ticket_id=ticket.id,
        start_x=x,
        original_start=ticket.start_date,
        original_end=ticket.end_date,
        candidate=ticket,
    )


def drag(state: Interaction | None, x: float, day_width: int) -> Interaction | None:
    """Pointer-move: recompute the candidate from the original dates."""
    if state is None:
        return None
    days = days_moved(x - state.start_x, day_width)
    start, end = shift_dates(state.kind, state.original_start, state.original_end, days)
    if (start, end) == (state.candidate.start_date, state.candidate.end_date):
        return state
    candidate = dataclasses.replace(state.candidate, start_date=start, end_date=end)
    return dataclasses.replace(state, candidate=candidate)


def release(state: Interaction | None) -> tuple[None, Ticket | None]:
    """Pointer-up: end the drag and return the candidate to commit.

    The candidate is returned even when the dates did not move; callers may
    skip no-op writes.
    """
    if state is None:
        return None, None
    return None, state.candidate


# Pointer leaving the tracking surface ends the drag exactly like a release.
pointer_leave = release


def display_ticket(state: Interaction | None, ticket: Ticket) -> Ticket:
    if state is not None and state.ticket_id == ticket.id:
        return state.candidate
    return ticket


def resolve(ticket: Ticket, kind: str, start_x: float, current_x: float, day_width: int) -> Ticket:
    """One-shot begin, drag and release for a complete pointer trace."""
    state = begin(None, ticket, kind, start_x)
    state = drag(state, current_x, day_width)
    _, candidate = release(state)
    return candidate if candidate is not None else ticket


class GestureSession:
    """Caller-side holder for the single active interaction.

    ``on_commit`` receives the candidate ticket when a drag ends.
    """

    def __init__(self, day_width: int, on_commit: Callable[[Ticket], None]) -> None:
        self.day_width = day_width
        self.on_commit = on_commit
        self.state: Interaction | None = None

    @property
    def is_dragging(self) -> bool:
        return self.state is not None

    def pointer_down(self, ticket: Ticket, kind: str, x: float) -> None:
        self.state = begin(self.state, ticket, kind, x)

    def pointer_move(self, x: float) -> Ticket | None:
        self.state = drag(self.state, x, self.day_width)
        return self.state.candidate if self.state else None

    def pointer_up(self) -> Ticket | None:
        state, self.state = self.state, None
        _, candidate = release(state)
        if candidate is not None:
            self.on_commit(candidate)
        return candidate

    pointer_leave = pointer_up

    def display(self, ticket: Ticket) -> Ticket:
        return display_ticket(self.state, ticket)


__all__ = [
    "GESTURE_KINDS",
    "GESTURE_MOVE",
    "GESTURE_RESIZE_END",
    "GESTURE_RESIZE_START",
    "GestureSession",
    "Interaction",
    "begin",
    "days_moved",
    "display_ticket",
    "drag",
    "pointer_leave",
    "release",
    "resolve",
    "shift_dates",
]
