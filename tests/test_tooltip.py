from __future__ import annotations

import pytest

from cyclist_scatter.mapper import map_records
from cyclist_scatter.scales import build_scales
from cyclist_scatter.tooltip import (
    EMPTY_TOOLTIP,
    TooltipController,
    TooltipState,
    enter_tooltip,
    leave_tooltip,
)

DATASET = [
    {"Year": 1994, "Seconds": 2175, "Doping": "", "Name": "A", "Nationality": "USA", "Place": 1, "URL": ""},
    {"Year": 1996, "Seconds": 2200, "Doping": "EPO", "Name": "B", "Nationality": "ITA", "Place": 2, "URL": ""},
]


@pytest.fixture()
def points():
    return map_records(DATASET)


def test_enter_populates_text_regions(points) -> None:
    scales = build_scales(points)

    state = enter_tooltip(EMPTY_TOOLTIP, points[0], scales)

    assert state.visible is True
    assert state.person == "A: USA"
    assert state.race_info == "Year: 1994, Time: 36:15"
    assert state.doping == ""


def test_enter_positions_by_percentage_of_chart(points) -> None:
    scales = build_scales(points)

    state = enter_tooltip(EMPTY_TOOLTIP, points[1], scales)

    assert state.left == pytest.approx(969 / 10.24)
    assert state.top == pytest.approx(545 / 6)
    assert state.doping == "EPO"


def test_leave_restores_empty_state(points) -> None:
    scales = build_scales(points)
    entered = enter_tooltip(EMPTY_TOOLTIP, points[1], scales)

    left = leave_tooltip(entered)

    assert left == EMPTY_TOOLTIP
    assert left.visible is False
    assert left.left is None and left.top is None
    assert (left.person, left.race_info, left.doping) == (None, None, None)


def test_controller_last_event_wins(points) -> None:
    controller = TooltipController(build_scales(points))

    controller.on_enter(points[0])
    controller.on_enter(points[1])
    assert controller.state.person == "B: ITA"

    controller.on_leave()
    assert controller.state == EMPTY_TOOLTIP


def test_leave_without_enter_is_harmless(points) -> None:
    controller = TooltipController(build_scales(points))

    controller.on_leave()

    assert controller.state == TooltipState()


def test_state_serializes_for_the_page(points) -> None:
    state = enter_tooltip(EMPTY_TOOLTIP, points[0], build_scales(points))

    payload = state.to_dict()

    assert set(payload) == {"visible", "left", "top", "person", "race_info", "doping"}
    assert payload["race_info"] == "Year: 1994, Time: 36:15"
