"""Axis and axis-label construction for the scatter plot."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Literal, Protocol

from .mapper import format_duration
from .scales import ChartLayout, ChartScales, TimeScale, date_tick_format, date_ticks, second_ticks

__all__ = [
    "Axis",
    "AxisLabel",
    "AxisTick",
    "ChartAxes",
    "X_AXIS_LABEL",
    "Y_AXIS_LABEL",
    "build_x_axis",
    "build_y_axis",
    "render_axes",
]

logger = logging.getLogger(__name__)

X_AXIS_LABEL = "Years"
Y_AXIS_LABEL = "Time in minutes"
Y_TICK_SECONDS = 15


@dataclass(frozen=True)
class AxisTick:
    value: datetime
    position: float
    label: str


@dataclass(frozen=True)
class Axis:
    """A rendered axis: its ticks and where it is translated on the surface."""

    id: str
    orient: Literal["bottom", "left"]
    translate: tuple[float, float]
    ticks: tuple[AxisTick, ...]

    @property
    def tick_values(self) -> list[datetime]:
        return [tick.value for tick in self.ticks]

    @property
    def tick_labels(self) -> list[str]:
        return [tick.label for tick in self.ticks]


@dataclass(frozen=True)
class AxisLabel:
    text: str
    x: float
    y: float
    dy: str
    rotate: float = 0.0
    anchor: str = "middle"


@dataclass(frozen=True)
class ChartAxes:
    x_axis: Axis
    y_axis: Axis
    x_label: AxisLabel
    y_label: AxisLabel


class Surface(Protocol):
    def append(self, element: object) -> None: ...


def _ticks(scale: TimeScale, values: List[datetime], fmt: Callable[[datetime], str]) -> tuple[AxisTick, ...]:
    return tuple(AxisTick(value=value, position=scale(value), label=fmt(value)) for value in values)


def build_x_axis(scales: ChartScales) -> Axis:
    layout = scales.layout
    values = date_ticks(scales.x_scale)
    return Axis(
        id="x-axis",
        orient="bottom",
        translate=(0, layout.bottom),
        ticks=_ticks(scales.x_scale, values, date_tick_format),
    )


def build_y_axis(scales: ChartScales) -> Axis:
    layout = scales.layout
    values = second_ticks(scales.y_scale, every=Y_TICK_SECONDS)
    return Axis(
        id="y-axis",
        orient="left",
        translate=(layout.left, 0),
        ticks=_ticks(scales.y_scale, values, format_duration),
    )


def _axis_labels(layout: ChartLayout) -> tuple[AxisLabel, AxisLabel]:
    y_label = AxisLabel(
        text=Y_AXIS_LABEL,
        x=-(layout.height / 2),
        y=0,
        dy="1em",
        rotate=-90,
    )
    x_label = AxisLabel(
        text=X_AXIS_LABEL,
        x=layout.width / 2,
        y=layout.height,
        dy="-1em",
    )
    return x_label, y_label


def render_axes(surface: Surface, scales: ChartScales) -> ChartAxes:
    """Append both axes and their labels to ``surface``.

    Every call appends a fresh set; calling twice on one surface duplicates them.
    """

    x_label, y_label = _axis_labels(scales.layout)
    x_axis = build_x_axis(scales)
    y_axis = build_y_axis(scales)

    surface.append(y_label)
    surface.append(x_label)
    surface.append(x_axis)
    surface.append(y_axis)
    logger.debug(
        "Rendered axes with %d date ticks and %d time ticks",
        len(x_axis.ticks),
        len(y_axis.ticks),
    )
    return ChartAxes(x_axis=x_axis, y_axis=y_axis, x_label=x_label, y_label=y_label)
