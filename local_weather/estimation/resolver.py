from __future__ import annotations

from typing import Iterable, List, Optional

from .errors import IncompleteObservationSet, NoObservation
from .models import Observation, Station, Triple, as_triple


def is_complete(observation: Observation) -> bool:
    return observation.temperature is not None and observation.humidity is not None


def resolve_station_observation(station_id: str, observations: Iterable[Observation]) -> Observation:
    """Freshest complete observation for one station.

    Freshness is the lexicographic order of `observed_at`. On equal timestamps
    the first one in `observations` wins.
    """
    best: Optional[Observation] = None
    for obs in observations:
        if obs.station_id != station_id or not is_complete(obs):
            continue
        if best is None or obs.observed_at > best.observed_at:
            best = obs
    if best is None:
        raise NoObservation(station_id)
    return best


def resolve_latest_observations(
    stations: Triple[Station], observations: Iterable[Observation]
) -> Triple[Observation]:
    """Resolve one observation per station, in station order.

    Raises IncompleteObservationSet listing every station that has no complete
    observation in `observations`.
    """
    history = list(observations)
    resolved: List[Observation] = []
    missing: List[NoObservation] = []
    for station in stations:
        try:
            resolved.append(resolve_station_observation(station.id, history))
        except NoObservation as e:
            missing.append(e)

    if missing:
        raise IncompleteObservationSet([e.station_id for e in missing]) from missing[0]
    return as_triple(resolved, "observations")
