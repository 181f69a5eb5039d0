from datetime import datetime, timezone
from fastapi import APIRouter, Request, Query

from ...schemas.heat_index import ErrorResponse, HeatIndexResponse

router = APIRouter()


@router.get(
    "/hi",
    response_model=HeatIndexResponse,
    summary="Local temperature, humidity and heat index",
    responses={
        200: {
            "description": "Values interpolated from the three nearest stations",
            "content": {
                "application/json": {
                    "example": {
                        "location": {"lat": 36.6952842, "lon": -4.4538607},
                        "local_air_temperature": 39.10227,
                        "local_rel_humidity": 21.4,
                        "local_hi": 37.8,
                        "used_stations": [
                            {"id": "6155A", "name": "MALAGA AEROPUERTO", "lat": 36.66612, "lon": -4.482307},
                            {"id": "6156X", "name": "MALAGA CMT", "lat": 36.717785, "lon": -4.48167},
                            {"id": "6172O", "name": "MALAGA PUERTO", "lat": 36.716663, "lon": -4.41972},
                        ],
                        "generated_at": "2024-07-01T12:00:05+00:00",
                    }
                }
            },
        },
        422: {"model": ErrorResponse, "description": "Invalid location or degenerate station geometry"},
        503: {"model": ErrorResponse, "description": "Not enough station data near the location"},
    },
)
def local_heat_index(
    request: Request,
    lat: float = Query(..., ge=-90, le=90),
    lon: float = Query(..., ge=-180, le=180),
) -> HeatIndexResponse:
    result = request.app.state.estimation_service.estimate(lat=lat, lon=lon)
    return HeatIndexResponse.from_result(
        result, generated_at=datetime.now(timezone.utc).isoformat(timespec="seconds")
    )
