"""
Application configuration loaded from environment variables with sensible
defaults for local development.

All settings are validated at startup via Pydantic ``BaseSettings``.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Central configuration for the accessible map backend."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # -- Application --
    app_name: str = "Accessible Map API"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"

    # -- API --
    api_v1_prefix: str = "/api/v1"

    # -- External services --
    google_maps_api_key: str = ""
    what3words_api_key: str = ""
    data_layers_api_key: str = ""
    data_layers_api_url: str = "https://datalayersforaccessibilityapi.azurewebsites.net/v1"
    request_timeout_seconds: float = 10.0

    # -- Map defaults (central London) --
    default_latitude: float = Field(default=51.507401, ge=-90, le=90)
    default_longitude: float = Field(default=-0.127758, ge=-180, le=180)

    # -- Search --
    search_region: str = "gb"
    search_debounce_ms: int = Field(default=300, ge=0)

    # -- Overlay layers --
    initial_active_layers: dict[str, bool] = {
        "zebraCrossings": False,
        "wheelchairServices": False,
    }
    nearby_radius_meters: int = Field(default=500, gt=0)
    nearest_top_n: int = Field(default=3, ge=0)

    @property
    def search_debounce_seconds(self) -> float:
        return self.search_debounce_ms / 1000.0


settings = Settings()
