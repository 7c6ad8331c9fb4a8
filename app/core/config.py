from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import List, Optional

class Settings(BaseSettings):
    PROJECT_NAME: str = "Weather Dashboard Proxy"
    VERSION: str = "1.0.0"
    BRIEF_DESCRIPTION: str = "Caching reverse-proxy in front of OpenWeatherMap and Nominatim for the weather dashboard."

    # --- Runtime ---
    ENV: str = Field("development", description="Application environment (e.g., production, development)")
    PORT: int = Field(5000, description="HTTP port the proxy listens on")
    CORS_ORIGINS: List[str] = Field(["*"], description="Origins allowed to call the proxy from a browser")

    # --- Credentials & backing store ---
    REDIS_URL: Optional[str] = Field(None, description="Redis URL for the response cache; in-process cache when unset")
    WEATHER_API_KEY: Optional[str] = Field(None, description="OpenWeatherMap One Call 3.0 API key")
    GEOCODING_API_KEY: Optional[str] = Field(None, description="OpenWeatherMap Geocoding API key")

    # --- Upstream providers ---
    OPENWEATHER_ONECALL_URL: str = "https://api.openweathermap.org/data/3.0/onecall"
    OPENWEATHER_GEO_URL: str = "https://api.openweathermap.org/geo/1.0"
    NOMINATIM_URL: str = "https://nominatim.openstreetmap.org"
    GEOCODING_PROVIDER: str = Field("nominatim", description="Geocoding backend: 'nominatim' or 'openweather'")
    # Nominatim usage policy requires an identifying User-Agent
    GEOCODING_USER_AGENT: str = "WeatherDashboard/1.0"
    WEATHER_UNITS: str = "metric"
    WEATHER_LANG: str = "fr"

    # Seconds, applies to every proxy -> provider call
    UPSTREAM_TIMEOUT: float = 15.0

    # --- Cache policy ---
    CACHE_TTL_CURRENT: int = Field(300, description="TTL in seconds for current conditions")
    CACHE_TTL_FORECAST: int = Field(3600, description="TTL in seconds for forecasts, alerts and geocoding")
    CACHE_SINGLE_FLIGHT: bool = Field(False, description="Share one upstream fetch between concurrent identical cache misses")

    # Pydantic configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore"
    )

settings = Settings()
