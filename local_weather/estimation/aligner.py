from __future__ import annotations

from enum import Enum
from typing import Dict

from .errors import ProgrammingError
from .models import AlignedPoint, Observation, Station, Triple, as_triple


class Metric(str, Enum):
    TEMPERATURE = "temperature"
    HUMIDITY = "humidity"


def metric_value(observation: Observation, metric: Metric) -> float:
    if metric is Metric.TEMPERATURE:
        value = observation.temperature
    elif metric is Metric.HUMIDITY:
        value = observation.humidity
    else:
        raise ProgrammingError(f"Unknown metric: {metric!r}")
    if value is None:
        raise ProgrammingError(
            f"Observation of {observation.station_id} at {observation.observed_at} has no {metric.value}"
        )
    return float(value)


def align_values(
    stations: Triple[Station], observations: Triple[Observation], metric: Metric
) -> Triple[AlignedPoint]:
    """Tag each station's location with one metric from its observation.

    Output order follows `stations`; observations are matched by station id.
    """
    by_station: Dict[str, Observation] = {obs.station_id: obs for obs in observations}
    points = []
    for station in stations:
        obs = by_station.get(station.id)
        if obs is None:
            raise ProgrammingError(f"No resolved observation for station {station.id}")
        points.append(AlignedPoint(lat=station.lat, lon=station.lon, value=metric_value(obs, metric)))
    return as_triple(points, "aligned points")
