from __future__ import annotations

import argparse
import time
from typing import Optional, Tuple

import structlog

from ..config import AppSettings
from ..logging import init_logging
from ..services.database import Database
from ..services.refresh_service import RefreshService
from .client import AemetClient
from .storage import upsert_observations, upsert_stations

logger = structlog.get_logger()


def client_from_settings(settings: AppSettings) -> AemetClient:
    if not settings.aemet_api_key:
        raise ValueError("APP_AEMET_API_KEY is not set")
    return AemetClient(
        api_key=settings.aemet_api_key,
        url=settings.aemet_url,
        timeout_connect=settings.http_timeout_connect,
        timeout_read=settings.http_timeout_read,
        max_retries=settings.http_max_retries,
        backoff_factor=settings.http_backoff_factor,
    )


def refresh_database(engine, client: AemetClient) -> Tuple[int, int]:
    """Download the latest AEMET observations and store them.

    Returns
    -------
    (int, int)
        Number of new stations and new observations written.
    """
    logger.info("refresh_started")
    start = time.perf_counter()
    data = client.fetch()
    logger.info(
        "refresh_downloaded",
        stations=len(data.stations),
        observations=len(data.observations),
        duration_ms=int((time.perf_counter() - start) * 1000),
    )

    start = time.perf_counter()
    n_stations = upsert_stations(engine, data.stations)
    n_observations = upsert_observations(engine, data.observations)
    logger.info(
        "refresh_finished",
        new_stations=n_stations,
        new_observations=n_observations,
        duration_ms=int((time.perf_counter() - start) * 1000),
    )
    return n_stations, n_observations


def _parse_args(argv=None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Download AEMET station observations into the local DB")
    p.add_argument("--db-url", default="", help="SQLAlchemy URL (default: APP_DATABASE_URL)")
    p.add_argument("--url", default="", help="AEMET dataset URL (default: APP_AEMET_URL)")
    p.add_argument("--api-key", default="", help="AEMET API key (default: APP_AEMET_API_KEY)")
    p.add_argument("--once", action="store_true", help="Run a single refresh and exit (default: refresh every APP_REFRESH_INTERVAL_S)")
    return p.parse_args(argv)


def main(argv=None, settings: Optional[AppSettings] = None) -> None:
    args = _parse_args(argv)
    settings = settings or AppSettings()
    init_logging(settings.log_level)

    update = {}
    if args.db_url:
        update["database_url"] = args.db_url
    if args.url:
        update["aemet_url"] = args.url
    if args.api_key:
        update["aemet_api_key"] = args.api_key
    settings = settings.model_copy(update=update)

    client = client_from_settings(settings)
    with Database(settings.database_url) as db:
        if args.once:
            refresh_database(db.engine, client)
            return
        service = RefreshService(
            job=lambda: refresh_database(db.engine, client),
            interval_s=settings.refresh_interval_s,
        )
        try:
            service.run()
        except KeyboardInterrupt:
            logger.info("refresh_interrupted")


if __name__ == "__main__":
    main()
