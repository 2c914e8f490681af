"""Scatter renderer: builds the drawing surface, markers and hover wiring."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from .axes import Axis, AxisLabel, ChartAxes, render_axes
from .mapper import PlotPoint
from .scales import ChartLayout, ChartScales, build_scales
from .tooltip import HoverHandlers, TooltipController

__all__ = [
    "BASE_CLASS",
    "FLAGGED_CLASS",
    "MARKER_RADIUS",
    "DrawingSurface",
    "Marker",
    "render_scatter",
]

logger = logging.getLogger(__name__)

MARKER_RADIUS = 5
BASE_CLASS = "dot"
FLAGGED_CLASS = "dot_background_red"


@dataclass(frozen=True)
class Marker:
    """One rendered point, with the raw values kept as inspectable attributes."""

    point: PlotPoint
    cx: float
    cy: float
    r: float
    classes: tuple[str, ...]
    data_xvalue: str
    data_yvalue: str

    @property
    def flagged(self) -> bool:
        return FLAGGED_CLASS in self.classes

    @property
    def class_name(self) -> str:
        return " ".join(self.classes)


def _marker_classes(point: PlotPoint) -> tuple[str, ...]:
    if point.doping:
        return (BASE_CLASS, FLAGGED_CLASS)
    return (BASE_CLASS,)


@dataclass
class DrawingSurface:
    """Toolkit-neutral stand-in for the SVG element the plot is drawn into.

    ``elements`` keeps insertion order, the way children of an SVG node would.
    """

    width: int
    height: int
    scales: ChartScales
    handlers: Optional[HoverHandlers] = None
    elements: List[object] = field(default_factory=list)
    chart_axes: Optional[ChartAxes] = None

    def append(self, element: object) -> None:
        self.elements.append(element)

    @property
    def layout(self) -> ChartLayout:
        return self.scales.layout

    @property
    def markers(self) -> List[Marker]:
        return [element for element in self.elements if isinstance(element, Marker)]

    @property
    def axes(self) -> List[Axis]:
        return [element for element in self.elements if isinstance(element, Axis)]

    @property
    def labels(self) -> List[AxisLabel]:
        return [element for element in self.elements if isinstance(element, AxisLabel)]

    def enter(self, index: int) -> None:
        """Dispatch a pointer-enter on the marker at ``index``."""

        marker = self.markers[index]
        if self.handlers is not None:
            self.handlers.on_enter(marker.point)

    def leave(self) -> None:
        """Dispatch a pointer-leave."""

        if self.handlers is not None:
            self.handlers.on_leave()


def render_scatter(
    points: Sequence[PlotPoint],
    *,
    layout: ChartLayout | None = None,
    handlers: HoverHandlers | None = None,
) -> DrawingSurface:
    """Lay out axes and one marker per point on a fresh drawing surface.

    When ``handlers`` is omitted, a :class:`TooltipController` bound to the
    surface scales receives the hover events.
    """

    layout = layout or ChartLayout()
    scales = build_scales(points, layout)
    surface = DrawingSurface(
        width=layout.width,
        height=layout.height,
        scales=scales,
        handlers=handlers if handlers is not None else TooltipController(scales),
    )
    surface.chart_axes = render_axes(surface, scales)

    for point in points:
        surface.append(
            Marker(
                point=point,
                cx=scales.x_scale(point.year),
                cy=scales.y_scale(point.time),
                r=MARKER_RADIUS,
                classes=_marker_classes(point),
                data_xvalue=point.year.isoformat(),
                data_yvalue=point.time.isoformat(),
            )
        )

    flagged = sum(1 for marker in surface.markers if marker.flagged)
    logger.info("Rendered %d markers (%d flagged)", len(points), flagged)
    return surface
