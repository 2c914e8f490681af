from __future__ import annotations

import pytest

from cyclist_scatter.mapper import PlotPoint, map_records
from cyclist_scatter.scales import ChartLayout
from cyclist_scatter.scatter import BASE_CLASS, FLAGGED_CLASS, MARKER_RADIUS, render_scatter
from cyclist_scatter.tooltip import EMPTY_TOOLTIP, TooltipController

DATASET = [
    {"Year": 1994, "Seconds": 2175, "Doping": "", "Name": "A", "Nationality": "USA", "Place": 1, "URL": ""},
    {"Year": 1996, "Seconds": 2200, "Doping": "EPO", "Name": "B", "Nationality": "ITA", "Place": 2, "URL": ""},
]


class RecordingHandlers:
    def __init__(self) -> None:
        self.events: list[tuple[str, str | None]] = []

    def on_enter(self, point: PlotPoint) -> None:
        self.events.append(("enter", point.name))

    def on_leave(self) -> None:
        self.events.append(("leave", None))


def test_end_to_end_two_record_scenario() -> None:
    surface = render_scatter(map_records(DATASET))

    markers = surface.markers
    assert len(markers) == 2
    first, second = markers
    assert first.flagged is False
    assert second.flagged is True
    assert first.cx < second.cx
    # Point A is faster, so it is drawn higher on the surface.
    assert surface.scales.elevation(first.point.time) > surface.scales.elevation(second.point.time)
    assert first.cy < second.cy


def test_surface_dimensions_and_marker_attributes() -> None:
    surface = render_scatter(map_records(DATASET))

    assert (surface.width, surface.height) == (1024, 600)
    first = surface.markers[0]
    assert first.r == MARKER_RADIUS == 5
    assert first.cx == pytest.approx(55)
    assert first.cy == pytest.approx(55)
    assert first.data_xvalue == "1994-01-01T00:00:00"
    assert first.data_yvalue == "1970-01-01T00:36:15"


def test_marker_classes() -> None:
    surface = render_scatter(map_records(DATASET))

    assert surface.markers[0].classes == (BASE_CLASS,)
    assert surface.markers[1].classes == (BASE_CLASS, FLAGGED_CLASS)
    assert surface.markers[1].class_name == "dot dot_background_red"


def test_custom_layout_sizes_surface() -> None:
    surface = render_scatter(map_records(DATASET), layout=ChartLayout(width=640, height=480, padding=40))

    assert (surface.width, surface.height) == (640, 480)
    assert surface.markers[1].cx == pytest.approx(600)


def test_injected_handlers_receive_pointer_events() -> None:
    handlers = RecordingHandlers()
    surface = render_scatter(map_records(DATASET), handlers=handlers)

    surface.enter(1)
    surface.leave()
    surface.enter(0)

    assert handlers.events == [("enter", "B"), ("leave", None), ("enter", "A")]


def test_default_handlers_drive_tooltip_state() -> None:
    surface = render_scatter(map_records(DATASET))
    controller = surface.handlers
    assert isinstance(controller, TooltipController)

    surface.enter(1)
    assert controller.state.visible is True
    assert controller.state.person == "B: ITA"

    surface.leave()
    assert controller.state == EMPTY_TOOLTIP


def test_render_scatter_rejects_empty_points() -> None:
    with pytest.raises(ValueError):
        render_scatter([])
