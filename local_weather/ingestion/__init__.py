"""Ingestion subpackage.

Downloads station observations from AEMET OpenData, normalises them and keeps
them in a SQL store that the estimation engine reads from.
"""

from .client import AemetClient, AemetError
from .storage import SqlObservationHistory, SqlStationCatalog

__all__ = ["AemetClient", "AemetError", "SqlObservationHistory", "SqlStationCatalog"]
