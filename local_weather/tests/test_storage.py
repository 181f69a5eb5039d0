import os
import tempfile
import unittest

import pandas as pd
from sqlalchemy import create_engine

from local_weather.estimation import Observation, QueryLocation
from local_weather.ingestion.models import create_tables
from local_weather.ingestion.storage import (
    SqlObservationHistory,
    SqlStationCatalog,
    upsert_observations,
    upsert_stations,
)


def _stations_df() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "id": ["6155A", "6156X", "6172O", "6000A"],
            "name": ["MALAGA AEROPUERTO", "MALAGA CMT", "MALAGA PUERTO", "MELILLA"],
            "lat": [36.66612, 36.717785, 36.716663, 35.277779],
            "lon": [-4.482307, -4.48167, -4.41972, -2.955278],
        }
    )


def _observations_df() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "station_id": ["6155A", "6155A", "6156X", "6172O", "6000A"],
            "observed_at": [
                "2024-07-01T11:00:00",
                "2024-07-01T12:00:00",
                "2024-07-01T12:00:00",
                "2024-07-01T10:00:00",
                "2024-07-01T13:00:00",
            ],
            "temperature": [30.0, 31.0, 29.5, 28.0, 25.0],
            "humidity": [40.0, 41.0, float("nan"), 50.0, 80.0],
        }
    )


class TestStorage(unittest.TestCase):
    def _make_engine(self):
        # Use a temporary sqlite file to avoid in-memory connection scoping issues
        td = tempfile.TemporaryDirectory()
        db_path = os.path.join(td.name, "test.db")
        engine = create_engine(f"sqlite:///{db_path}", future=True)
        self._tmpdir = td
        self._engine = engine
        create_tables(engine)
        return engine

    def tearDown(self) -> None:
        if hasattr(self, "_engine"):
            self._engine.dispose()
        if hasattr(self, "_tmpdir"):
            self._tmpdir.cleanup()

    def test_stations_insert_or_ignore(self) -> None:
        engine = self._make_engine()
        self.assertEqual(upsert_stations(engine, _stations_df()), 4)

        renamed = _stations_df().assign(name="RENAMED")
        self.assertEqual(upsert_stations(engine, renamed), 0)

        stations = SqlStationCatalog(engine).list_stations()
        self.assertEqual([s.id for s in stations], ["6000A", "6155A", "6156X", "6172O"])
        self.assertEqual(stations[1].name, "MALAGA AEROPUERTO")
        self.assertAlmostEqual(stations[1].lat, 36.66612, places=6)

    def test_missing_column_raises(self) -> None:
        engine = self._make_engine()
        with self.assertRaises(ValueError):
            upsert_stations(engine, _stations_df().drop(columns=["lat"]))
        with self.assertRaises(ValueError):
            upsert_observations(engine, _observations_df().drop(columns=["humidity"]))

    def test_find_nearest_stations(self) -> None:
        engine = self._make_engine()
        upsert_stations(engine, _stations_df())
        out = SqlStationCatalog(engine).find_nearest_stations(QueryLocation(36.6952842, -4.4538607))
        self.assertEqual({s.id for s in out}, {"6155A", "6156X", "6172O"})

    def test_recent_observations_order_and_limit(self) -> None:
        engine = self._make_engine()
        upsert_stations(engine, _stations_df())
        self.assertEqual(upsert_observations(engine, _observations_df()), 5)
        # Duplicate keys are ignored
        self.assertEqual(upsert_observations(engine, _observations_df()), 0)

        history = SqlObservationHistory(engine)
        rows = history.recent_observations(["6155A", "6156X", "6172O"], limit=3)
        self.assertEqual(
            [(o.station_id, o.observed_at) for o in rows],
            [
                ("6155A", "2024-07-01T12:00:00"),
                ("6156X", "2024-07-01T12:00:00"),
                ("6155A", "2024-07-01T11:00:00"),
            ],
        )
        self.assertIsInstance(rows[0], Observation)
        # NaN humidity is stored as NULL
        self.assertIsNone(rows[1].humidity)
        self.assertEqual(rows[1].temperature, 29.5)

    def test_recent_observations_empty_ids(self) -> None:
        engine = self._make_engine()
        self.assertEqual(SqlObservationHistory(engine).recent_observations([], limit=12), [])


if __name__ == "__main__":
    unittest.main()
