from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import pandas as pd
import requests
import structlog
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .storage import OBSERVATION_COLUMNS, STATION_COLUMNS

logger = structlog.get_logger()

# AEMET serves its datasets in Latin-9.
AEMET_ENCODING = "iso-8859-15"
DEFAULT_AEMET_URL = "https://opendata.aemet.es/opendata/api/observacion/convencional/todas"
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S"


class AemetError(RuntimeError):
    """Download or payload failure while talking to AEMET OpenData."""


@dataclass
class MeteoData:
    stations: pd.DataFrame
    observations: pd.DataFrame


def normalize_timestamp(value: str) -> str:
    """Render an AEMET `fint` as a fixed-width UTC string.

    ``2024-07-01T12:00:00+0000`` and ``2024-07-01T14:00:00+02:00`` both
    become ``2024-07-01T12:00:00``; naive inputs are taken as UTC.
    """
    ts = pd.Timestamp(value)
    if ts.tzinfo is None:
        ts = ts.tz_localize("UTC")
    return ts.tz_convert("UTC").strftime(TIMESTAMP_FORMAT)


def normalize_records(records: List[Dict[str, Any]]) -> MeteoData:
    """Map AEMET observation records to station and observation frames.

    Input keys considered:
    - idema -> station id, ubi -> station name, lat/lon -> coordinates
    - fint -> observed_at (normalised), ta -> temperature (C), hr -> humidity (%)

    Records without a station id or coordinates are dropped. Observations are
    kept only when both `ta` and `hr` are present.
    """
    if not records:
        return MeteoData(
            stations=pd.DataFrame(columns=STATION_COLUMNS),
            observations=pd.DataFrame(columns=OBSERVATION_COLUMNS),
        )

    raw = pd.DataFrame.from_records(records)
    for col in ["idema", "ubi", "lat", "lon", "fint", "ta", "hr"]:
        if col not in raw.columns:
            raw[col] = None
    raw = raw.dropna(subset=["idema", "lat", "lon"])

    stations = pd.DataFrame(
        {
            "id": raw["idema"].astype(str),
            "name": raw["ubi"],
            "lat": pd.to_numeric(raw["lat"], errors="coerce").astype(float),
            "lon": pd.to_numeric(raw["lon"], errors="coerce").astype(float),
        }
    )
    stations = stations.dropna(subset=["lat", "lon"]).drop_duplicates(subset="id").reset_index(drop=True)

    obs = raw.dropna(subset=["fint"])
    observations = pd.DataFrame(
        {
            "station_id": obs["idema"].astype(str),
            "observed_at": [normalize_timestamp(v) for v in obs["fint"]],
            "temperature": pd.to_numeric(obs["ta"], errors="coerce").astype(float),
            "humidity": pd.to_numeric(obs["hr"], errors="coerce").astype(float),
        }
    )
    observations = observations.dropna(subset=["temperature", "humidity"])
    observations = observations.drop_duplicates(subset=["station_id", "observed_at"]).reset_index(drop=True)
    return MeteoData(stations=stations, observations=observations)


@dataclass
class AemetClient:
    """AEMET OpenData client for the "all conventional observations" dataset.

    Notes and assumptions:
    - The API is a two-step download: the first response is a JSON envelope
      whose `datos` field points at the actual dataset.
    - The API key travels in the `api_key` header on both requests.
    - Retries are applied for transient HTTP errors (429/5xx) with exponential backoff.
    """

    api_key: str
    url: str = DEFAULT_AEMET_URL
    timeout_connect: float = 5.0
    timeout_read: float = 30.0
    max_retries: int = 3
    backoff_factor: float = 0.5

    def _session(self) -> requests.Session:
        s = requests.Session()
        retries = Retry(
            total=self.max_retries,
            backoff_factor=self.backoff_factor,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["GET"],
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retries)
        s.mount("https://", adapter)
        s.mount("http://", adapter)
        s.headers.update({"api_key": self.api_key})
        return s

    def _download(self, session: requests.Session, url: str) -> str:
        timeout = (self.timeout_connect, self.timeout_read)
        try:
            resp = session.get(url, timeout=timeout)
            resp.raise_for_status()
        except requests.RequestException as e:
            raise AemetError(f"Download of {url} failed: {e}") from e
        logger.debug("aemet_download", url=url, status=resp.status_code, size=len(resp.content))
        return resp.content.decode(AEMET_ENCODING)

    @staticmethod
    def _parse_envelope(content: str) -> str:
        try:
            envelope = json.loads(content)
        except ValueError as e:
            raise AemetError(f"Invalid AEMET envelope: {e}") from e
        datos: Optional[str] = envelope.get("datos") if isinstance(envelope, dict) else None
        if not datos:
            estado = envelope.get("estado") if isinstance(envelope, dict) else None
            raise AemetError(f"AEMET envelope without data url (estado={estado})")
        return datos

    @staticmethod
    def _parse_dataset(content: str) -> List[Dict[str, Any]]:
        if not content.strip():
            return []
        try:
            data = json.loads(content)
        except ValueError as e:
            raise AemetError(f"Invalid AEMET dataset: {e}") from e
        if not isinstance(data, list):
            raise AemetError("AEMET dataset is not a list of records")
        return data

    def fetch_records(self) -> List[Dict[str, Any]]:
        with self._session() as s:
            data_url = self._parse_envelope(self._download(s, self.url))
            return self._parse_dataset(self._download(s, data_url))

    def fetch(self) -> MeteoData:
        return normalize_records(self.fetch_records())
