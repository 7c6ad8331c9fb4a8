from enum import Enum
from pydantic import BaseModel, Field
from typing import Dict, Optional

# --- Query Models ---

class QueryKind(str, Enum):
    """Logical query kinds served by the proxy."""
    CURRENT = "current"
    HOURLY = "hourly"
    DAILY = "daily"
    ALERTS = "alerts"
    GEOCODE_FORWARD = "geocode_forward"
    GEOCODE_REVERSE = "geocode_reverse"

    @property
    def is_geocoding(self) -> bool:
        return self in (QueryKind.GEOCODE_FORWARD, QueryKind.GEOCODE_REVERSE)


class Query(BaseModel):
    """One client query, with parameters kept exactly as received."""
    kind: QueryKind
    lat: Optional[str] = Field(None, description="Latitude in decimal degrees, raw text.")
    lon: Optional[str] = Field(None, description="Longitude in decimal degrees, raw text.")
    city: Optional[str] = Field(None, description="Free-text place name for forward geocoding.")

# --- Public Data Transfer Objects (DTOs) ---

class LocationRecord(BaseModel):
    """Canonical geocoding result, whichever provider produced it."""
    name: str = Field(..., description="Display name of the place.")
    local_names: Dict[str, str] = Field(default_factory=dict, description="Localized names keyed by language code.")
    lat: float = Field(..., description="Latitude.")
    lon: float = Field(..., description="Longitude.")
    country: str = Field("", description="ISO 3166 alpha-2 country code, upper case, or empty.")
    state: str = Field("", description="State or region, or empty.")

class PingResponse(BaseModel):
    message: str = "pong"

# --- Error Response Model ---

class ErrorResponse(BaseModel):
    """Standardized error response model."""
    error: str = Field(..., description="A machine-readable error code.")
    detail: str = Field(..., description="A human-readable explanation.")
    error_id: Optional[str] = Field(None, description="Correlation id for unexpected failures.")

class ErrorEnvelope(BaseModel):
    """Body of every error reply: the error under a ``detail`` key."""
    detail: ErrorResponse
