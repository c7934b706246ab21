"""Application settings loaded from environment variables."""
from typing import Dict, List
from pathlib import Path
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = Path(__file__).parent.parent / ".env"

class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    app_name: str = "Listing-Hub"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"
    cors_origins: List[str] = ["http://localhost:5173", "http://localhost:8000"]
    # Database
    database_url: str = "sqlite+aiosqlite:///./listing_hub.db"
    api_key: str = ""

    # Currency projection
    base_currency: str = "AED"
    default_currency: str = "AED"
    currency_rates: Dict[str, float] = {"AED": 1.0, "USD": 0.27, "EUR": 0.25}

    # Map markers
    marker_offset_distance: float = 0.0002   # degrees, ~22 m
    marker_coordinate_precision: int = 5
    default_map_center: List[float] = [25.2048, 55.2708]
    single_marker_zoom: int = 15

    # Pagination
    default_page_size: int = 6
    max_page_size: int = 100

    @field_validator('database_url')
    @classmethod
    def validate_database_url(cls, v):
        if not v.startswith(('postgresql+asyncpg://', 'sqlite+aiosqlite://')):
            raise ValueError('database_url must use async driver')
        return v

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            import json
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                return [origin.strip() for origin in v.split(",")]
        return v

    @field_validator("currency_rates")
    @classmethod
    def validate_currency_rates(cls, v: Dict[str, float]) -> Dict[str, float]:
        rates = {code.strip().upper(): float(rate) for code, rate in v.items()}
        if any(rate <= 0 for rate in rates.values()):
            raise ValueError("currency_rates must be positive")
        return rates

    @field_validator("default_map_center")
    @classmethod
    def validate_map_center(cls, v: List[float]) -> List[float]:
        if len(v) != 2:
            raise ValueError("default_map_center must be [lat, lng]")
        return v

    @field_validator("api_key")
    @classmethod
    def validate_api_key(cls, v: str) -> str:
        if not v:
            import warnings
            warnings.warn(
                "API_KEY not configured — endpoints are unprotected.",
                stacklevel=2,
            )
        return v


settings = Settings()
