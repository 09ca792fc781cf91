"""Geometry for the Gantt view.

The chart is a grid of fixed-width day columns and fixed-height rows. This
module works out which dates the grid covers, where each ticket bar sits on
it, and how the header splits into month spans and day cells.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Mapping, Sequence

from ..core.config import settings
from ..domain.entities import Ticket
from .dates import add_days, diff_in_days, shift_days


@dataclass(frozen=True)
class TimelineConfig:
    day_width: int = 40
    row_height: int = 50
    bar_height: int = 32
    range_padding_days: int = 2
    empty_range_days: int = 30

    def __post_init__(self) -> None:
        if self.day_width <= 0:
            raise ValueError("day_width must be > 0")
        if self.row_height <= 0:
            raise ValueError("row_height must be > 0")
        if not 0 < self.bar_height <= self.row_height:
            raise ValueError("bar_height must be within (0, row_height]")

    @property
    def bar_inset(self) -> int:
        return (self.row_height - self.bar_height) // 2

    @classmethod
    def from_settings(cls) -> "TimelineConfig":
        return cls(
            day_width=settings.DAY_WIDTH,
            row_height=settings.ROW_HEIGHT,
            bar_height=settings.BAR_HEIGHT,
            range_padding_days=settings.RANGE_PADDING_DAYS,
            empty_range_days=settings.EMPTY_RANGE_DAYS,
        )


@dataclass(frozen=True)
class DateRange:
    start: date
    end: date

    @property
    def total_days(self) -> int:
        return diff_in_days(self.end, self.start) + 1


@dataclass(frozen=True)
class MonthSegment:
    year: int
    month: int
    first_date: date
    days: int


@dataclass(frozen=True)
class DayCell:
    date: date
    day: int
    weekday: int
    is_weekend: bool


@dataclass(frozen=True)
class BarGeometry:
    ticket_id: str
    row: int
    left: int
    width: int
    top: int
    height: int
    start_date: date
    end_date: date
    is_subtask: bool


@dataclass(frozen=True)
class TimelineLayout:
    date_range: DateRange
    width: int
    height: int
    day_width: int
    row_height: int
    months: tuple[MonthSegment, ...] = ()
    days: tuple[DayCell, ...] = ()
    bars: tuple[BarGeometry, ...] = ()

    @property
    def total_days(self) -> int:
        return self.date_range.total_days


def compute_range(tickets: Sequence[Ticket], today: date, config: TimelineConfig | None = None) -> DateRange:
    """Visible window: earliest start and latest end, padded on both sides.

    With no tickets the window starts today (no padding) and runs
    ``empty_range_days`` ahead. Padding stops at the ends of the calendar.
    """
    config = config or TimelineConfig()
    if not tickets:
        return DateRange(start=today, end=shift_days(today, config.empty_range_days))
    earliest = min(t.start_date for t in tickets)
    latest = max(t.end_date for t in tickets)
    return DateRange(
        start=shift_days(earliest, -config.range_padding_days),
        end=shift_days(latest, config.range_padding_days),
    )


def date_to_x(value: date, range_start: date, config: TimelineConfig | None = None) -> int:
    config = config or TimelineConfig()
    return diff_in_days(value, range_start) * config.day_width


def x_to_day_offset(x: float, config: TimelineConfig | None = None) -> int:
    """Column index under a horizontal pixel position."""
    config = config or TimelineConfig()
    return int(x // config.day_width)


def x_to_date(x: float, range_start: date, config: TimelineConfig | None = None) -> date:
    return shift_days(range_start, x_to_day_offset(x, config))


def bar_geometry(
    ticket: Ticket,
    range_start: date,
    row: int,
    config: TimelineConfig | None = None,
) -> BarGeometry:
    config = config or TimelineConfig()
    duration = diff_in_days(ticket.end_date, ticket.start_date) + 1
    return BarGeometry(
        ticket_id=ticket.id,
        row=row,
        left=date_to_x(ticket.start_date, range_start, config),
        width=duration * config.day_width,
        top=row * config.row_height + config.bar_inset,
        height=config.bar_height,
        start_date=ticket.start_date,
        end_date=ticket.end_date,
        is_subtask=ticket.parent_id is not None,
    )


def month_segments(range_start: date, total_days: int) -> list[MonthSegment]:
    segments: list[MonthSegment] = []
    for offset in range(total_days):
        current = add_days(range_start, offset)
        if segments and (segments[-1].year, segments[-1].month) == (current.year, current.month):
            last = segments[-1]
            segments[-1] = MonthSegment(last.year, last.month, last.first_date, last.days + 1)
        else:
            segments.append(MonthSegment(current.year, current.month, current, 1))
    return segments


def day_cells(range_start: date, total_days: int) -> list[DayCell]:
    cells = []
    for offset in range(total_days):
        current = add_days(range_start, offset)
        weekday = current.weekday()
        cells.append(DayCell(date=current, day=current.day, weekday=weekday, is_weekend=weekday >= 5))
    return cells


def layout_timeline(
    tickets: Sequence[Ticket],
    today: date,
    config: TimelineConfig | None = None,
    *,
    overrides: Mapping[str, Ticket] | None = None,
) -> TimelineLayout:
    """Full chart geometry for ``tickets`` in display order.

    ``overrides`` maps a ticket id to the record to draw in its place, which
    is how an in-flight drag candidate is shown before it is committed. The
    visible window is still derived from the stored tickets.
    """
    config = config or TimelineConfig()
    overrides = overrides or {}
    date_range = compute_range(tickets, today, config)
    total = date_range.total_days
    bars = tuple(
        bar_geometry(overrides.get(ticket.id, ticket), date_range.start, row, config)
        for row, ticket in enumerate(tickets)
    )
    return TimelineLayout(
        date_range=date_range,
        width=total * config.day_width,
        height=len(tickets) * config.row_height,
        day_width=config.day_width,
        row_height=config.row_height,
        months=tuple(month_segments(date_range.start, total)),
        days=tuple(day_cells(date_range.start, total)),
        bars=bars,
    )


__all__ = [
    "BarGeometry",
    "DateRange",
    "DayCell",
    "MonthSegment",
    "TimelineConfig",
    "TimelineLayout",
    "bar_geometry",
    "compute_range",
    "date_to_x",
    "day_cells",
    "layout_timeline",
    "month_segments",
    "x_to_date",
    "x_to_day_offset",
]
