# app/api/routes.py
# Query endpoints of the proxy. Each one resolves through the shared
# cache-aside service; failures surface as WeatherProxyError and are
# rendered by the exception handler registered in app.main.

from fastapi import APIRouter, Depends, Request, WebSocket, WebSocketDisconnect
import logging
from typing import List, Optional

# Local imports
from app.models.dto import ErrorEnvelope, LocationRecord, PingResponse, Query, QueryKind
from app.services.cache_aside import WeatherCacheService

router = APIRouter()
logger = logging.getLogger(__name__)

WEBSOCKET_GREETING = {"message": "Connected to WebSocket backend"}

ERROR_RESPONSES = {
    400: {"model": ErrorEnvelope},
    404: {"model": ErrorEnvelope},
    429: {"model": ErrorEnvelope},
    500: {"model": ErrorEnvelope},
    502: {"model": ErrorEnvelope},
}

# ----------------------------------------------------------------------
# Shared service dependency
# ----------------------------------------------------------------------
def get_weather_service(request: Request) -> WeatherCacheService:
    return request.app.state.context.weather

# ----------------------------------------------------------------------
# Liveness
# ----------------------------------------------------------------------
@router.get("/ping", response_model=PingResponse)
async def ping():
    return PingResponse()

# ----------------------------------------------------------------------
# Weather
# ----------------------------------------------------------------------
@router.get("/weather/current", responses=ERROR_RESPONSES)
async def current_weather(
    lat: Optional[str] = None,
    lon: Optional[str] = None,
    service: WeatherCacheService = Depends(get_weather_service),
):
    return await service.resolve(Query(kind=QueryKind.CURRENT, lat=lat, lon=lon))


@router.get("/weather/hourly", responses=ERROR_RESPONSES)
async def hourly_forecast(
    lat: Optional[str] = None,
    lon: Optional[str] = None,
    service: WeatherCacheService = Depends(get_weather_service),
):
    return await service.resolve(Query(kind=QueryKind.HOURLY, lat=lat, lon=lon))


@router.get("/weather/daily", responses=ERROR_RESPONSES)
async def daily_forecast(
    lat: Optional[str] = None,
    lon: Optional[str] = None,
    service: WeatherCacheService = Depends(get_weather_service),
):
    return await service.resolve(Query(kind=QueryKind.DAILY, lat=lat, lon=lon))


@router.get("/weather/alerts", responses=ERROR_RESPONSES)
async def weather_alerts(
    lat: Optional[str] = None,
    lon: Optional[str] = None,
    service: WeatherCacheService = Depends(get_weather_service),
):
    return await service.resolve(Query(kind=QueryKind.ALERTS, lat=lat, lon=lon))

# ----------------------------------------------------------------------
# Geocoding
# ----------------------------------------------------------------------
@router.get("/geocoding", response_model=List[LocationRecord], responses=ERROR_RESPONSES)
async def geocode_city(
    city: Optional[str] = None,
    service: WeatherCacheService = Depends(get_weather_service),
):
    """City name -> coordinates. An unknown city yields an empty list."""
    return await service.resolve(Query(kind=QueryKind.GEOCODE_FORWARD, city=city))


@router.get("/geocoding/reverse", response_model=List[LocationRecord], responses=ERROR_RESPONSES)
async def reverse_geocode(
    lat: Optional[str] = None,
    lon: Optional[str] = None,
    service: WeatherCacheService = Depends(get_weather_service),
):
    """Coordinates -> place name, "Unknown location" when nothing resolves."""
    return await service.resolve(Query(kind=QueryKind.GEOCODE_REVERSE, lat=lat, lon=lon))

# ----------------------------------------------------------------------
# Notification channel
# ----------------------------------------------------------------------
@router.websocket("/")
async def notifications(websocket: WebSocket):
    """Greets each subscriber once, then idles until it disconnects."""
    await websocket.accept()
    await websocket.send_json(WEBSOCKET_GREETING)
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.info("WebSocket client disconnected")
