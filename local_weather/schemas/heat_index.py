from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field

from ..estimation.models import EstimationResult


class Location(BaseModel):
    lat: float
    lon: float


class UsedStation(BaseModel):
    id: str
    name: str
    lat: float
    lon: float


class HeatIndexResponse(BaseModel):
    location: Location
    local_air_temperature: float = Field(description="Interpolated air temperature, Celsius")
    local_rel_humidity: float = Field(description="Interpolated relative humidity, percent")
    local_hi: float = Field(description="Heat index, Celsius")
    used_stations: List[UsedStation] = Field(min_length=3, max_length=3)
    generated_at: str

    @classmethod
    def from_result(cls, result: EstimationResult, generated_at: str) -> "HeatIndexResponse":
        return cls(
            location=Location(lat=result.location.lat, lon=result.location.lon),
            local_air_temperature=result.temperature,
            local_rel_humidity=result.humidity,
            local_hi=result.heat_index,
            used_stations=[
                UsedStation(id=s.id, name=s.name, lat=s.lat, lon=s.lon) for s in result.stations
            ],
            generated_at=generated_at,
        )


class ErrorDetail(BaseModel):
    code: str
    message: str
    request_id: str


class ErrorResponse(BaseModel):
    error: ErrorDetail
