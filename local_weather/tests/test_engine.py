from typing import Iterable, List

import pytest

from local_weather.estimation import (
    DegenerateInterpolation,
    ProgrammingError,
    EstimationEngine,
    IncompleteObservationSet,
    InsufficientStations,
    Observation,
    QueryLocation,
    Station,
    heat_index,
    locate_nearest_stations,
)

QUERY = QueryLocation(lat=36.6952842, lon=-4.4538607)

STATIONS = [
    Station("6155A", "MALAGA AEROPUERTO", 36.66612, -4.482307),
    Station("6156X", "MALAGA CMT", 36.717785, -4.48167),
    Station("6172O", "MALAGA PUERTO", 36.716663, -4.41972),
    Station("6000A", "MELILLA", 35.277779, -2.955278),
]


class FakeCatalog:
    def __init__(self, stations: List[Station]):
        self.stations = stations

    def find_nearest_stations(self, location: QueryLocation):
        return locate_nearest_stations(location, self.stations)


class FakeHistory:
    def __init__(self, observations: List[Observation]):
        self.observations = observations
        self.calls = []

    def recent_observations(self, station_ids: Iterable[str], limit: int) -> List[Observation]:
        ids = set(station_ids)
        self.calls.append((ids, limit))
        rows = [o for o in self.observations if o.station_id in ids]
        rows.sort(key=lambda o: (o.observed_at, o.station_id), reverse=True)
        return rows[:limit]


def _history() -> List[Observation]:
    return [
        Observation("6155A", "2024-07-01T11:00:00", 30.0, 10.0),
        Observation("6155A", "2024-07-01T12:00:00", 43.3, 40.0),
        Observation("6156X", "2024-07-01T12:00:00", 41.2, 40.0),
        Observation("6172O", "2024-07-01T13:00:00", 34.6, None),
        Observation("6172O", "2024-07-01T12:00:00", 34.6, 40.0),
        Observation("6000A", "2024-07-01T13:00:00", 25.0, 80.0),
    ]


def test_estimate_worked_example():
    history = FakeHistory(_history())
    engine = EstimationEngine(FakeCatalog(STATIONS), history)

    result = engine.estimate(QUERY)

    assert result.location == QUERY
    assert [s.id for s in result.stations] == ["6156X", "6172O", "6155A"]
    assert result.temperature == pytest.approx(39.10227, rel=1e-3)
    assert result.humidity == pytest.approx(40.0, rel=1e-6)
    assert result.heat_index == pytest.approx(heat_index(result.temperature, result.humidity))
    assert history.calls == [({"6155A", "6156X", "6172O"}, 12)]


def test_estimate_is_deterministic():
    engine = EstimationEngine(FakeCatalog(STATIONS), FakeHistory(_history()))
    assert engine.estimate(QUERY) == engine.estimate(QUERY)


def test_insufficient_stations():
    engine = EstimationEngine(FakeCatalog(STATIONS[:2]), FakeHistory(_history()))
    with pytest.raises(InsufficientStations):
        engine.estimate(QUERY)


def test_incomplete_observation_set():
    history = [o for o in _history() if o.station_id != "6156X"]
    engine = EstimationEngine(FakeCatalog(STATIONS), FakeHistory(history))
    with pytest.raises(IncompleteObservationSet) as ei:
        engine.estimate(QUERY)
    assert ei.value.missing_station_ids == ("6156X",)


def test_lookback_bounds_history():
    # Only the 3 newest rows are visible; 6156X falls outside the window
    history = _history() + [
        Observation("6155A", "2024-07-01T14:00:00", 40.0, 40.0),
        Observation("6172O", "2024-07-01T14:00:00", 40.0, 40.0),
    ]
    engine = EstimationEngine(FakeCatalog(STATIONS), FakeHistory(history), lookback=3)
    with pytest.raises(IncompleteObservationSet):
        engine.estimate(QUERY)


def test_collinear_stations():
    stations = [
        Station("A", "a", 36.0, -4.0),
        Station("B", "b", 36.1, -4.0),
        Station("C", "c", 36.2, -4.0),
    ]
    history = [Observation(s.id, "2024-07-01T12:00:00", 25.0, 50.0) for s in stations]
    engine = EstimationEngine(FakeCatalog(stations), FakeHistory(history))
    with pytest.raises(DegenerateInterpolation):
        engine.estimate(QueryLocation(lat=36.05, lon=-4.0))


def test_lookback_must_cover_three_stations():
    with pytest.raises(ValueError):
        EstimationEngine(FakeCatalog(STATIONS), FakeHistory([]), lookback=2)


def test_short_catalog_result_is_contract_breach():
    class PairCatalog:
        def find_nearest_stations(self, location):
            return STATIONS[:2]

    engine = EstimationEngine(PairCatalog(), FakeHistory(_history()))
    with pytest.raises(ProgrammingError):
        engine.estimate(QUERY)


def test_catalog_order_is_kept():
    class FixedCatalog:
        def find_nearest_stations(self, location):
            return [STATIONS[2], STATIONS[0], STATIONS[1]]

    result = EstimationEngine(FixedCatalog(), FakeHistory(_history())).estimate(QUERY)
    assert [s.id for s in result.stations] == ["6172O", "6155A", "6156X"]
    assert result.temperature == pytest.approx(39.10227, rel=1e-3)
