from __future__ import annotations

from ..config import AppSettings
from ..estimation.engine import EstimationEngine
from ..estimation.models import EstimationResult, QueryLocation
from ..ingestion.storage import SqlObservationHistory, SqlStationCatalog
from .database import Database


class EstimationService:
    def __init__(self, settings: AppSettings, database: Database):
        self.settings = settings
        self.database = database

    def engine(self) -> EstimationEngine:
        db_engine = self.database.open()
        return EstimationEngine(
            SqlStationCatalog(db_engine),
            SqlObservationHistory(db_engine),
            lookback=self.settings.observation_lookback,
        )

    def estimate(self, lat: float, lon: float) -> EstimationResult:
        return self.engine().estimate(QueryLocation(lat=lat, lon=lon))
