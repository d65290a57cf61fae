"""
Application configuration for Reservoir Insights.
Settings are read from environment variables / a .env file.
"""

from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class InflectionSettings(BaseSettings):
    """Completion endpoint settings (INFLECTION_API_* variables)"""

    key: str = Field(..., repr=False)
    endpoint: str  # Full chat-completions URL, POSTed to as-is
    model: str = "inflection_3_pi"
    timeout: int = Field(30000, gt=0, description="Connect/read timeout, ms")

    @property
    def timeout_seconds(self) -> float:
        return self.timeout / 1000

    class Config:
        env_prefix = "INFLECTION_API_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


class Settings(BaseSettings):
    """Application settings"""

    # === Application ===
    app_name: str = "Reservoir Insights"
    debug: bool = False

    # === Reservoir data ===
    reservoirs_file: Optional[Path] = None
    critical_threshold_pct: float = 40.0  # Reservoirs below this level are critical

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


def load_settings() -> tuple[Settings, InflectionSettings]:
    """
    Reads both settings groups.

    Nothing is instantiated at import time; callers pass the result
    into the objects that need it.

    Raises:
        pydantic.ValidationError: if INFLECTION_API_KEY / INFLECTION_API_ENDPOINT are missing
    """
    return Settings(), InflectionSettings()
