import pytest

from local_weather.estimation import (
    AlignedPoint,
    Metric,
    Observation,
    ProgrammingError,
    Station,
    align_values,
    metric_value,
)

STATIONS = (
    Station("A", "a", 1.0, 2.0),
    Station("B", "b", 3.0, 4.0),
    Station("C", "c", 5.0, 6.0),
)
OBSERVATIONS = (
    Observation("C", "2024-07-01T10:00:00", 30.0, 60.0),
    Observation("A", "2024-07-01T10:00:00", 10.0, 40.0),
    Observation("B", "2024-07-01T10:00:00", 20.0, 50.0),
)


def test_metric_value():
    o = OBSERVATIONS[0]
    assert metric_value(o, Metric.TEMPERATURE) == 30.0
    assert metric_value(o, Metric.HUMIDITY) == 60.0


def test_metric_value_missing_is_contract_breach():
    with pytest.raises(ProgrammingError):
        metric_value(Observation("A", "2024-07-01T10:00:00", None, 40.0), Metric.TEMPERATURE)


def test_aligns_by_station_id_in_station_order():
    temps = align_values(STATIONS, OBSERVATIONS, Metric.TEMPERATURE)
    assert temps == (
        AlignedPoint(1.0, 2.0, 10.0),
        AlignedPoint(3.0, 4.0, 20.0),
        AlignedPoint(5.0, 6.0, 30.0),
    )
    hums = align_values(STATIONS, OBSERVATIONS, Metric.HUMIDITY)
    assert [p.value for p in hums] == [40.0, 50.0, 60.0]


def test_unmatched_station_is_contract_breach():
    observations = OBSERVATIONS[:2] + (Observation("Z", "2024-07-01T10:00:00", 1.0, 1.0),)
    with pytest.raises(ProgrammingError):
        align_values(STATIONS, observations, Metric.TEMPERATURE)


def test_wrong_arity_is_contract_breach():
    with pytest.raises(ProgrammingError):
        align_values(STATIONS[:2], OBSERVATIONS[:2], Metric.TEMPERATURE)
