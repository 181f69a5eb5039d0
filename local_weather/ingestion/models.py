from __future__ import annotations

from typing import Optional

from sqlalchemy import Float, ForeignKey, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """SQLAlchemy declarative base for ingestion models."""


class StationRecord(Base):
    """Monitoring station, keyed by its AEMET id (idema)."""

    __tablename__ = "stations"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    lat: Mapped[float] = mapped_column(Float, nullable=False)
    lon: Mapped[float] = mapped_column(Float, nullable=False)


class ObservationRecord(Base):
    """Station observation.

    Composite primary key: (station_id, observed_at)
    - observed_at: UTC, ``YYYY-MM-DDTHH:MM:SS`` (fixed width, sorts chronologically)
    - temperature: Celsius (optional)
    - humidity: relative humidity percent 0-100 (optional)
    """

    __tablename__ = "observations"

    station_id: Mapped[str] = mapped_column(
        String, ForeignKey("stations.id", ondelete="CASCADE"), primary_key=True
    )
    observed_at: Mapped[str] = mapped_column(String(19), primary_key=True, index=True)
    temperature: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    humidity: Mapped[Optional[float]] = mapped_column(Float, nullable=True)


def create_tables(engine) -> None:
    """Create all ingestion tables if they do not exist.

    Parameters
    ----------
    engine : sqlalchemy.Engine
        SQLAlchemy engine for the target database.
    """
    Base.metadata.create_all(bind=engine)
