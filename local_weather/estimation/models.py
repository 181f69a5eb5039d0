from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple, TypeVar

from .errors import ProgrammingError

T = TypeVar("T")

# The planar solve works on exactly three samples.
Triple = Tuple[T, T, T]


def as_triple(items: Sequence[T], what: str = "items") -> Triple[T]:
    """Return `items` as a 3-tuple, raising ProgrammingError on any other length."""
    items = tuple(items)
    if len(items) != 3:
        raise ProgrammingError(f"Expected exactly 3 {what}, got {len(items)}")
    return items  # type: ignore[return-value]


@dataclass(frozen=True)
class Station:
    id: str
    name: str
    lat: float
    lon: float

    def __str__(self) -> str:
        return f"Station {self.name} ({self.id}) on {self.lat}, {self.lon}"


@dataclass(frozen=True)
class Observation:
    """Single station reading.

    `observed_at` is a fixed-width, zero-padded timestamp string
    (e.g. ``2024-07-01T12:00:00``); lexicographic order is chronological order.
    Either metric may be missing in raw history.
    """

    station_id: str
    observed_at: str
    temperature: Optional[float]
    humidity: Optional[float]


@dataclass(frozen=True)
class QueryLocation:
    lat: float
    lon: float


@dataclass(frozen=True)
class AlignedPoint:
    lat: float
    lon: float
    value: float


@dataclass(frozen=True)
class EstimationResult:
    location: QueryLocation
    temperature: float
    humidity: float
    heat_index: float
    stations: Triple[Station]
