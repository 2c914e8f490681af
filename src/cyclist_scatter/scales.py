"""Time scales mapping plot points onto chart pixel coordinates."""

from __future__ import annotations

import bisect
import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterator, List, Sequence

from .mapper import PlotPoint

__all__ = [
    "ChartLayout",
    "ChartScales",
    "TimeScale",
    "build_scales",
    "date_tick_format",
    "date_ticks",
    "second_ticks",
    "tick_step",
]

logger = logging.getLogger(__name__)

_E10 = math.sqrt(50)
_E5 = math.sqrt(10)
_E2 = math.sqrt(2)

_DAY = 86400.0
_WEEK = 7 * _DAY
_MONTH = 30 * _DAY
_YEAR = 365 * _DAY

# (unit, step, approximate duration in seconds), ordered by duration.
_DATE_INTERVALS: tuple[tuple[str, int, float], ...] = (
    ("day", 1, _DAY),
    ("day", 2, 2 * _DAY),
    ("week", 1, _WEEK),
    ("month", 1, _MONTH),
    ("month", 3, 3 * _MONTH),
    ("year", 1, _YEAR),
)


@dataclass(frozen=True)
class ChartLayout:
    """Drawing surface dimensions shared by scales, axes and labels."""

    width: int = 1024
    height: int = 600
    padding: int = 55

    @property
    def left(self) -> int:
        return self.padding

    @property
    def right(self) -> int:
        return self.width - self.padding

    @property
    def top(self) -> int:
        return self.padding

    @property
    def bottom(self) -> int:
        return self.height - self.padding


@dataclass(frozen=True)
class TimeScale:
    """Linear mapping from a datetime domain onto a pixel range.

    The domain may be given in descending order; that is how the vertical
    scale flips so that smaller values land nearer the top.
    """

    domain: tuple[datetime, datetime]
    range: tuple[float, float]

    @property
    def _span_seconds(self) -> float:
        return (self.domain[1] - self.domain[0]).total_seconds()

    def __call__(self, value: datetime) -> float:
        r0, r1 = self.range
        span = self._span_seconds
        if span == 0:
            return (r0 + r1) / 2
        fraction = (value - self.domain[0]).total_seconds() / span
        return r0 + fraction * (r1 - r0)

    def invert(self, pixel: float) -> datetime:
        r0, r1 = self.range
        if r1 == r0:
            return self.domain[0]
        fraction = (pixel - r0) / (r1 - r0)
        return self.domain[0] + timedelta(seconds=fraction * self._span_seconds)

    @property
    def extent(self) -> tuple[datetime, datetime]:
        """Domain endpoints in ascending order."""

        return min(self.domain), max(self.domain)


@dataclass(frozen=True)
class ChartScales:
    x_scale: TimeScale
    y_scale: TimeScale
    layout: ChartLayout

    def elevation(self, time: datetime) -> float:
        """Distance of ``time`` above the bottom edge of the surface."""

        return self.layout.height - self.y_scale(time)


def build_scales(points: Sequence[PlotPoint], layout: ChartLayout | None = None) -> ChartScales:
    """Derive the horizontal year scale and the inverted vertical time scale."""

    if not points:
        raise ValueError("Cannot build scales from an empty dataset")

    layout = layout or ChartLayout()
    years = [point.year for point in points]
    times = [point.time for point in points]

    x_scale = TimeScale(domain=(min(years), max(years)), range=(layout.left, layout.right))
    y_scale = TimeScale(domain=(max(times), min(times)), range=(layout.bottom, layout.top))
    logger.debug(
        "Built scales: x %s..%s -> %s, y %s..%s -> %s",
        x_scale.domain[0].year,
        x_scale.domain[1].year,
        x_scale.range,
        y_scale.domain[0].time(),
        y_scale.domain[1].time(),
        y_scale.range,
    )
    return ChartScales(x_scale=x_scale, y_scale=y_scale, layout=layout)


def tick_step(start: float, stop: float, count: int) -> float:
    """Pick a 1, 2 or 5 times power-of-ten step giving roughly ``count`` ticks."""

    step0 = abs(stop - start) / max(count, 1)
    if step0 == 0:
        return 1.0
    step1 = 10 ** math.floor(math.log10(step0))
    error = step0 / step1
    if error >= _E10:
        step1 *= 10
    elif error >= _E5:
        step1 *= 5
    elif error >= _E2:
        step1 *= 2
    return step1


def _pick_interval(span: float, count: int) -> tuple[str, int]:
    target = span / max(count, 1)
    durations = [duration for _, _, duration in _DATE_INTERVALS]
    index = bisect.bisect_right(durations, target)
    if index == len(_DATE_INTERVALS):
        return "year", max(1, int(tick_step(0, span / _YEAR, count)))
    if index == 0:
        return "day", 1
    if target / durations[index - 1] < durations[index] / target:
        index -= 1
    unit, step, _ = _DATE_INTERVALS[index]
    return unit, step


def _first_month(lo: datetime) -> datetime:
    start = datetime(lo.year, lo.month, 1)
    if start < lo:
        start = datetime(lo.year + lo.month // 12, lo.month % 12 + 1, 1)
    return start


def _interval_range(unit: str, step: int, lo: datetime, hi: datetime) -> Iterator[datetime]:
    if unit == "year":
        first_year = lo.year if lo == datetime(lo.year, 1, 1) else lo.year + 1
        for year in range(first_year, hi.year + 1):
            if year % step == 0:
                yield datetime(year, 1, 1)
        return
    if unit == "month":
        current = _first_month(lo)
        while current <= hi:
            if (current.month - 1) % step == 0:
                yield current
            current = datetime(current.year + current.month // 12, current.month % 12 + 1, 1)
        return

    current = lo.replace(hour=0, minute=0, second=0, microsecond=0)
    if current < lo:
        current += timedelta(days=1)
    if unit == "week":
        # Weeks start on Sunday.
        current += timedelta(days=(6 - current.weekday()) % 7)
        step_delta = timedelta(weeks=step)
    else:
        step_delta = timedelta(days=1)
    while current <= hi:
        if unit == "week" or (current.day - 1) % step == 0:
            yield current
        current += step_delta


def date_ticks(scale: TimeScale, count: int = 10) -> List[datetime]:
    """Calendar-aligned ticks for roughly ``count`` intervals of the scale domain.

    The interval is the day, two-day, week, month or quarter whose length is
    nearest to ``span / count``. Longer spans use a 1, 2 or 5 times
    power-of-ten step in whole years.
    """

    lo, hi = scale.extent
    span = (hi - lo).total_seconds()
    if span == 0:
        return [lo]
    unit, step = _pick_interval(span, count)
    return list(_interval_range(unit, step, lo, hi))


def date_tick_format(value: datetime) -> str:
    """Label a calendar tick by the coarsest boundary it falls on."""

    if value.day != 1:
        return value.strftime("%b %d" if value.weekday() == 6 else "%a %d")
    if value.month != 1:
        return value.strftime("%B")
    return value.strftime("%Y")


def second_ticks(scale: TimeScale, every: int = 15) -> List[datetime]:
    """Whole-second ticks whose seconds component is a multiple of ``every``."""

    if every <= 0 or 60 % every:
        raise ValueError("Tick interval must be a positive divisor of 60 seconds")

    lo, hi = scale.extent
    midnight = lo.replace(hour=0, minute=0, second=0, microsecond=0)
    offset = (lo - midnight).total_seconds()
    first = math.ceil(offset / every) * every

    ticks: List[datetime] = []
    current = midnight + timedelta(seconds=first)
    while current <= hi:
        ticks.append(current)
        current += timedelta(seconds=every)
    return ticks
