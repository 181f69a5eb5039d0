from __future__ import annotations

import time
from typing import Iterable, List, Protocol, Sequence

import structlog

from .aligner import Metric, align_values
from .errors import EstimationError
from .heat_index import heat_index
from .interpolation import interpolate
from .models import EstimationResult, Observation, QueryLocation, Station, Triple, as_triple
from .resolver import resolve_latest_observations

logger = structlog.get_logger()

DEFAULT_LOOKBACK = 12


class StationCatalog(Protocol):
    """Read access to the station catalog.

    Returns the 3 stations closest to `location`, nearest first; raises
    InsufficientStations when the catalog cannot supply them.
    """

    def find_nearest_stations(self, location: QueryLocation) -> Sequence[Station]:
        ...


class ObservationHistory(Protocol):
    """Read access to observation history.

    Returns at most `limit` rows over all `station_ids`, most recent first.
    """

    def recent_observations(self, station_ids: Iterable[str], limit: int) -> List[Observation]:
        ...


class EstimationEngine:
    """Query point -> interpolated temperature, humidity and heat index.

    Holds no mutable state; every call reads the collaborators afresh, so one
    instance can serve concurrent callers.
    """

    def __init__(
        self,
        stations: StationCatalog,
        observations: ObservationHistory,
        lookback: int = DEFAULT_LOOKBACK,
    ):
        if lookback < 3:
            raise ValueError("lookback must be >= 3")
        self.stations = stations
        self.observations = observations
        self.lookback = lookback

    def nearest_stations(self, location: QueryLocation) -> Triple[Station]:
        return as_triple(self.stations.find_nearest_stations(location), "stations")

    def latest_observations(self, stations: Triple[Station]) -> Triple[Observation]:
        history = self.observations.recent_observations([s.id for s in stations], self.lookback)
        return resolve_latest_observations(stations, history)

    def estimate(self, location: QueryLocation) -> EstimationResult:
        start = time.perf_counter()
        try:
            stations = self.nearest_stations(location)
            observations = self.latest_observations(stations)
            temperature = interpolate(location, align_values(stations, observations, Metric.TEMPERATURE))
            humidity = interpolate(location, align_values(stations, observations, Metric.HUMIDITY))
        except EstimationError as e:
            logger.warning(
                "estimation_failed",
                lat=location.lat,
                lon=location.lon,
                error_type=type(e).__name__,
                error=str(e),
            )
            raise

        result = EstimationResult(
            location=location,
            temperature=temperature,
            humidity=humidity,
            heat_index=heat_index(temperature, humidity),
            stations=stations,
        )
        logger.info(
            "estimation_completed",
            lat=location.lat,
            lon=location.lon,
            temperature=result.temperature,
            humidity=result.humidity,
            heat_index=result.heat_index,
            stations=[s.id for s in stations],
            duration_ms=int((time.perf_counter() - start) * 1000),
        )
        return result
