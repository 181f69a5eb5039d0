from __future__ import annotations

from typing import Sequence


class EstimationError(Exception):
    """Base class for failures that abort a single estimation."""


class InsufficientStations(EstimationError):
    def __init__(self, available: int):
        self.available = available
        super().__init__(
            f"Need 3 stations with distinct coordinates, catalog provides {available}"
        )


class NoObservation(EstimationError):
    def __init__(self, station_id: str):
        self.station_id = station_id
        super().__init__(f"No complete observation for station {station_id}")


class IncompleteObservationSet(EstimationError):
    def __init__(self, missing_station_ids: Sequence[str]):
        self.missing_station_ids = tuple(missing_station_ids)
        super().__init__(
            f"Only {3 - len(self.missing_station_ids)} of 3 stations have a usable observation "
            f"(missing: {', '.join(self.missing_station_ids)})"
        )


class DegenerateInterpolation(EstimationError):
    def __init__(self, message: str = "Stations are collinear in (lat, lon); plane is undefined"):
        super().__init__(message)


class ProgrammingError(EstimationError, RuntimeError):
    """Internal contract breach between estimation stages."""
