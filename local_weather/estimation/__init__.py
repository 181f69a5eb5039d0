"""Estimation engine.

Resolves the three nearest stations to a point, their freshest complete
observations, and combines them into interpolated temperature, humidity and
heat index.
"""

from .aligner import Metric, align_values, metric_value
from .engine import EstimationEngine, ObservationHistory, StationCatalog
from .errors import (
    DegenerateInterpolation,
    EstimationError,
    IncompleteObservationSet,
    InsufficientStations,
    NoObservation,
    ProgrammingError,
)
from .heat_index import heat_index
from .interpolation import interpolate
from .locator import locate_nearest_stations, pseudo_distance
from .models import AlignedPoint, EstimationResult, Observation, QueryLocation, Station
from .resolver import resolve_latest_observations

__all__ = [
    "AlignedPoint",
    "DegenerateInterpolation",
    "EstimationEngine",
    "EstimationError",
    "EstimationResult",
    "IncompleteObservationSet",
    "InsufficientStations",
    "Metric",
    "NoObservation",
    "Observation",
    "ObservationHistory",
    "ProgrammingError",
    "QueryLocation",
    "Station",
    "StationCatalog",
    "align_values",
    "heat_index",
    "interpolate",
    "locate_nearest_stations",
    "metric_value",
    "pseudo_distance",
    "resolve_latest_observations",
]
