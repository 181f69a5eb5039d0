from __future__ import annotations

from typing import Iterable, List, Optional

import pandas as pd
from sqlalchemy import select
from sqlalchemy.orm import Session

from ..estimation.locator import locate_nearest_stations
from ..estimation.models import Observation, QueryLocation, Station, Triple
from .models import ObservationRecord, StationRecord

STATION_COLUMNS = ["id", "name", "lat", "lon"]
OBSERVATION_COLUMNS = ["station_id", "observed_at", "temperature", "humidity"]


def _require_columns(df: pd.DataFrame, required: List[str]) -> None:
    for col in required:
        if col not in df.columns:
            raise ValueError(f"Missing required column: {col}")


def _optional_float(value) -> Optional[float]:
    return float(value) if pd.notna(value) else None


def upsert_stations(engine, df: pd.DataFrame) -> int:
    """Insert stations that are not stored yet.

    Parameters
    ----------
    engine : sqlalchemy.Engine
        Database engine.
    df : pandas.DataFrame
        One row per station with columns `id`, `name`, `lat`, `lon`.

    Returns
    -------
    int
        Number of rows inserted.

    Notes
    -----
    Existing stations are left untouched, matching the catalog's
    insert-or-ignore contract. Rows with a duplicated id are inserted once.
    """
    _require_columns(df, STATION_COLUMNS)

    count = 0
    with Session(engine) as session:
        for row in df.drop_duplicates(subset="id").itertuples(index=False):
            station_id = str(row.id)
            if session.get(StationRecord, station_id) is not None:
                continue
            session.add(
                StationRecord(
                    id=station_id,
                    name=str(row.name) if pd.notna(row.name) else None,
                    lat=float(row.lat),
                    lon=float(row.lon),
                )
            )
            count += 1
        session.commit()
    return count


def upsert_observations(engine, df: pd.DataFrame) -> int:
    """Insert observations that are not stored yet, keyed by (station_id, observed_at).

    Parameters
    ----------
    engine : sqlalchemy.Engine
        Database engine.
    df : pandas.DataFrame
        Columns `station_id`, `observed_at` (normalised timestamp string),
        `temperature`, `humidity` (NaN when missing).

    Returns
    -------
    int
        Number of rows inserted.
    """
    _require_columns(df, OBSERVATION_COLUMNS)

    count = 0
    with Session(engine) as session:
        for row in df.drop_duplicates(subset=["station_id", "observed_at"]).itertuples(index=False):
            key = (str(row.station_id), str(row.observed_at))
            if session.get(ObservationRecord, key) is not None:
                continue
            session.add(
                ObservationRecord(
                    station_id=key[0],
                    observed_at=key[1],
                    temperature=_optional_float(row.temperature),
                    humidity=_optional_float(row.humidity),
                )
            )
            count += 1
        session.commit()
    return count


class SqlStationCatalog:
    """Station catalog backed by the `stations` table."""

    def __init__(self, engine):
        self.engine = engine

    def list_stations(self) -> List[Station]:
        with Session(self.engine) as session:
            rows = session.execute(select(StationRecord).order_by(StationRecord.id)).scalars().all()
            return [Station(id=r.id, name=r.name or "", lat=r.lat, lon=r.lon) for r in rows]

    def find_nearest_stations(self, location: QueryLocation) -> Triple[Station]:
        return locate_nearest_stations(location, self.list_stations())


class SqlObservationHistory:
    """Observation history backed by the `observations` table."""

    def __init__(self, engine):
        self.engine = engine

    def recent_observations(self, station_ids: Iterable[str], limit: int) -> List[Observation]:
        ids = sorted(set(station_ids))
        if not ids or limit <= 0:
            return []
        stmt = (
            select(ObservationRecord)
            .where(ObservationRecord.station_id.in_(ids))
            .order_by(ObservationRecord.observed_at.desc(), ObservationRecord.station_id.asc())
            .limit(limit)
        )
        with Session(self.engine) as session:
            rows = session.execute(stmt).scalars().all()
            return [
                Observation(
                    station_id=r.station_id,
                    observed_at=r.observed_at,
                    temperature=r.temperature,
                    humidity=r.humidity,
                )
                for r in rows
            ]
