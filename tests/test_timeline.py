"""Tests for Gantt grid geometry."""

import os
import sys
from dataclasses import replace
from datetime import date
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("DATA_DIR", str(ROOT / "data"))

from planner.domain.entities import Ticket
from planner.services.timeline import (
    TimelineConfig,
    bar_geometry,
    compute_range,
    date_to_x,
    day_cells,
    layout_timeline,
    month_segments,
    x_to_date,
    x_to_day_offset,
)

TODAY = date(2024, 1, 15)


def make_ticket(ticket_id, start, end, parent_id=None):
    return Ticket(id=ticket_id, name=ticket_id, start_date=start, end_date=end, project_id="p1", parent_id=parent_id)


def test_empty_chart_starts_today_without_padding():
    layout = layout_timeline([], TODAY)

    assert layout.date_range.start == TODAY
    assert layout.date_range.end == date(2024, 2, 14)
    assert layout.total_days == 31
    assert layout.width == 31 * 40
    assert layout.height == 0
    assert layout.bars == ()


def test_range_pads_two_days_around_tickets():
    tickets = [
        make_ticket("A", date(2024, 1, 10), date(2024, 1, 12)),
        make_ticket("B", date(2024, 1, 15), date(2024, 1, 20)),
    ]

    date_range = compute_range(tickets, TODAY)

    assert date_range.start == date(2024, 1, 8)
    assert date_range.end == date(2024, 1, 22)
    assert date_range.total_days == 15


def test_bar_geometry_uses_inclusive_duration_and_row_inset():
    ticket = make_ticket("A", date(2024, 1, 10), date(2024, 1, 12), parent_id="root")

    bar = bar_geometry(ticket, date(2024, 1, 8), row=1)

    assert bar.left == 80
    assert bar.width == 120
    assert bar.top == 59
    assert bar.height == 32
    assert bar.is_subtask is True


def test_single_day_bar_is_one_column_wide():
    ticket = make_ticket("A", date(2024, 1, 10), date(2024, 1, 10))

    assert bar_geometry(ticket, date(2024, 1, 10), row=0).width == 40


def test_layout_rows_follow_input_order():
    tickets = [
        make_ticket("A", date(2024, 1, 10), date(2024, 1, 12)),
        make_ticket("B", date(2024, 1, 11), date(2024, 1, 11)),
    ]

    layout = layout_timeline(tickets, TODAY)

    assert [(bar.ticket_id, bar.row, bar.top) for bar in layout.bars] == [("A", 0, 9), ("B", 1, 59)]
    assert layout.height == 100
    assert layout.width == layout.total_days * 40


def test_overrides_draw_candidate_without_moving_window():
    stored = make_ticket("A", date(2024, 1, 10), date(2024, 1, 12))
    candidate = replace(stored, start_date=date(2024, 1, 13), end_date=date(2024, 1, 15))

    layout = layout_timeline([stored], TODAY, overrides={"A": candidate})

    assert layout.date_range.start == date(2024, 1, 8)
    assert layout.bars[0].left == 5 * 40
    assert layout.bars[0].end_date == date(2024, 1, 15)


def test_month_segments_split_at_month_boundary():
    segments = month_segments(date(2024, 1, 30), 5)

    assert [(s.year, s.month, s.days) for s in segments] == [(2024, 1, 2), (2024, 2, 3)]
    assert segments[1].first_date == date(2024, 2, 1)


def test_day_cells_flag_weekends():
    cells = day_cells(date(2024, 1, 5), 4)

    assert [c.day for c in cells] == [5, 6, 7, 8]
    assert [c.is_weekend for c in cells] == [False, True, True, False]


def test_pixel_and_date_conversions():
    start = date(2024, 1, 8)

    assert date_to_x(date(2024, 1, 10), start) == 80
    assert date_to_x(date(2024, 1, 6), start) == -80
    assert x_to_day_offset(79) == 1
    assert x_to_date(85, start) == date(2024, 1, 10)


def test_custom_config_changes_geometry():
    config = TimelineConfig(day_width=20, row_height=30, bar_height=20)
    ticket = make_ticket("A", date(2024, 1, 10), date(2024, 1, 11))

    bar = bar_geometry(ticket, date(2024, 1, 9), row=2, config=config)

    assert (bar.left, bar.width, bar.top, bar.height) == (20, 40, 65, 20)


def test_config_rejects_bad_dimensions():
    with pytest.raises(ValueError):
        TimelineConfig(day_width=0)
    with pytest.raises(ValueError):
        TimelineConfig(row_height=20, bar_height=32)


def test_padding_stops_at_calendar_ends():
    tickets = [
        make_ticket("first", date.min, date(1, 1, 3)),
        make_ticket("last", date(9999, 12, 30), date.max),
    ]

    date_range = compute_range(tickets[1:], TODAY)
    assert (date_range.start, date_range.end) == (date(9999, 12, 28), date.max)

    assert compute_range(tickets[:1], TODAY).start == date.min

    layout = layout_timeline(tickets[1:], TODAY)
    assert layout.total_days == 4
    assert layout.bars[0].left == 2 * 40
