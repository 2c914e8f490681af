"""Transform raw cyclist records into render-ready plot points."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, List, Mapping, Sequence, TypedDict

import pandas as pd

__all__ = [
    "DURATION_EPOCH",
    "PlotPoint",
    "RawRecord",
    "format_duration",
    "map_record",
    "map_records",
    "points_to_frame",
]

# Durations are stored as timestamps on this reference date.
DURATION_EPOCH = datetime(1970, 1, 1)

DURATION_FORMAT = "%M:%S"


class RawRecord(TypedDict, total=False):
    """Wire format of a single record in ``cyclist-data.json``."""

    Year: int
    Seconds: float
    Time: str
    Doping: str
    Name: str
    Nationality: str
    Place: int
    URL: str


def format_duration(value: datetime) -> str:
    """Format a duration timestamp as zero-padded ``minutes:seconds``."""

    return value.strftime(DURATION_FORMAT)


@dataclass(frozen=True)
class PlotPoint:
    """Normalized record ready for scaling and rendering."""

    year: datetime
    time: datetime
    doping: str
    name: str
    nationality: str
    place: int
    url: str

    @property
    def flagged(self) -> bool:
        return bool(self.doping)

    @property
    def calendar_year(self) -> int:
        return self.year.year

    @property
    def seconds(self) -> float:
        return (self.time - DURATION_EPOCH).total_seconds()

    @property
    def time_label(self) -> str:
        return format_duration(self.time)


def map_record(record: Mapping[str, object]) -> PlotPoint:
    doping = record.get("Doping")
    return PlotPoint(
        year=datetime(int(record["Year"]), 1, 1),
        time=DURATION_EPOCH + timedelta(seconds=float(record["Seconds"])),
        doping="" if doping is None else str(doping),
        name=record.get("Name"),
        nationality=record.get("Nationality"),
        place=record.get("Place"),
        url=record.get("URL"),
    )


def map_records(raw: Iterable[Mapping[str, object]]) -> List[PlotPoint]:
    """Map every raw record, keeping source order. Nothing is dropped."""

    return [map_record(record) for record in raw]


def points_to_frame(points: Sequence[PlotPoint]) -> pd.DataFrame:
    """Tabulate plot points, one row per point in source order."""

    columns = [
        "year",
        "time",
        "seconds",
        "time_label",
        "doping",
        "flagged",
        "name",
        "nationality",
        "place",
        "url",
    ]
    rows = [
        {
            "year": point.calendar_year,
            "time": point.time,
            "seconds": point.seconds,
            "time_label": point.time_label,
            "doping": point.doping,
            "flagged": point.flagged,
            "name": point.name,
            "nationality": point.nationality,
            "place": point.place,
            "url": point.url,
        }
        for point in points
    ]
    return pd.DataFrame(rows, columns=columns)
