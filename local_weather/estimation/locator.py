"""Nearest-station selection.

Proximity is ranked with a pseudo-distance over absolute coordinates:
``(|lat_s| - |lat_q|)**2 + (|lon_s| - |lon_q|)**2``. There is no cosine-latitude
scaling and no antimeridian or pole handling. Existing callers depend on the
exact ranking, so the metric is kept as is; it is only meaningful for a
geographically compact station network.
"""
from __future__ import annotations

from typing import Dict, Iterable, List, Tuple

from .errors import InsufficientStations
from .models import QueryLocation, Station, Triple, as_triple


def pseudo_distance(lat: float, lon: float, location: QueryLocation) -> float:
    d_lat = abs(lat) - abs(location.lat)
    d_lon = abs(lon) - abs(location.lon)
    return d_lat * d_lat + d_lon * d_lon


def locate_nearest_stations(location: QueryLocation, stations: Iterable[Station]) -> Triple[Station]:
    """Return the 3 closest stations ordered by ascending pseudo-distance.

    Stations sharing identical coordinates collapse into one candidate, the one
    with the smallest id. Equal distances are ordered by ascending id.
    """
    by_coords: Dict[Tuple[float, float], Station] = {}
    for station in stations:
        key = (station.lat, station.lon)
        current = by_coords.get(key)
        if current is None or station.id < current.id:
            by_coords[key] = station

    if len(by_coords) < 3:
        raise InsufficientStations(len(by_coords))

    ranked: List[Tuple[float, str, Station]] = [
        (pseudo_distance(lat, lon, location), station.id, station)
        for (lat, lon), station in by_coords.items()
    ]
    ranked.sort(key=lambda item: (item[0], item[1]))
    return as_triple([station for _, _, station in ranked[:3]], "stations")
