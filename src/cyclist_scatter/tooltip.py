"""Tooltip overlay state and the hover reducers that update it."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any, Optional, Protocol

from .mapper import PlotPoint
from .scales import ChartScales

__all__ = [
    "EMPTY_TOOLTIP",
    "HoverHandlers",
    "TooltipController",
    "TooltipState",
    "enter_tooltip",
    "leave_tooltip",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TooltipState:
    """Everything the host needs to show or hide the single tooltip overlay.

    ``left`` and ``top`` are percentages of the chart width and height.
    """

    visible: bool = False
    left: Optional[float] = None
    top: Optional[float] = None
    person: Optional[str] = None
    race_info: Optional[str] = None
    doping: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


EMPTY_TOOLTIP = TooltipState()


def enter_tooltip(state: TooltipState, point: PlotPoint, scales: ChartScales) -> TooltipState:
    """Reveal the tooltip next to ``point`` and fill in its three text regions."""

    layout = scales.layout
    return TooltipState(
        visible=True,
        left=scales.x_scale(point.year) / (layout.width / 100),
        top=scales.y_scale(point.time) / (layout.height / 100),
        person=f"{point.name}: {point.nationality}",
        race_info=f"Year: {point.calendar_year}, Time: {point.time_label}",
        doping=point.doping,
    )


def leave_tooltip(state: TooltipState) -> TooltipState:
    return EMPTY_TOOLTIP


class HoverHandlers(Protocol):
    def on_enter(self, point: PlotPoint) -> None: ...

    def on_leave(self) -> None: ...


class TooltipController:
    """Hover handlers that keep the shared tooltip state; last event wins."""

    def __init__(self, scales: ChartScales) -> None:
        self.scales = scales
        self.state: TooltipState = EMPTY_TOOLTIP

    def on_enter(self, point: PlotPoint) -> None:
        self.state = enter_tooltip(self.state, point, self.scales)
        logger.debug("Tooltip shown for %s (%s)", point.name, point.calendar_year)

    def on_leave(self) -> None:
        self.state = leave_tooltip(self.state)
