"""Local weather estimation service.

Subpackages:
- estimation: nearest-station selection and planar interpolation engine.
- ingestion: AEMET download, normalisation and SQL storage.
- services: database lifecycle, engine wiring and periodic refresh.
- api: FastAPI application.
"""

__all__ = [
    "estimation",
    "ingestion",
    "services",
    "api",
]
