"""
Runtime configuration for the weather proxy.

Settings are read from the environment (and a local .env file) exactly once,
at startup, and handed to the app and the upstream client.
"""

import os
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv


logger = logging.getLogger(__name__)

PLACEHOLDER_API_KEY = "YOUR_API_KEY"
DEFAULT_PORT = 3000
DEFAULT_BASE_URL = "https://api.openweathermap.org/data/2.5"
DEFAULT_GEO_URL = "https://api.openweathermap.org/geo/1.0"

# Known frontends
DEFAULT_ALLOWED_ORIGINS = [
    "http://localhost:5173",
    "https://main.d3erp14kpzu5wp.amplifyapp.com/",
    "https://weatherappication.maheshsivangi.tech",
]


@dataclass(frozen=True)
class Settings:
    port: int = DEFAULT_PORT
    api_key: str = PLACEHOLDER_API_KEY
    base_url: str = DEFAULT_BASE_URL
    geo_url: str = DEFAULT_GEO_URL
    allowed_origins: List[str] = field(default_factory=lambda: list(DEFAULT_ALLOWED_ORIGINS))
    log_level: str = "INFO"

    @property
    def uses_placeholder_key(self) -> bool:
        return self.api_key == PLACEHOLDER_API_KEY


def _parse_origins(raw: Optional[str]) -> List[str]:
    if not raw:
        return list(DEFAULT_ALLOWED_ORIGINS)
    return [o.strip() for o in raw.split(",") if o.strip()]


def load_settings(env_file: Optional[str] = None) -> Settings:
    """
    Build Settings from the process environment.

    A .env file is loaded first if present; real environment variables win.

    Raises:
        ValueError: If PORT is not an integer
    """
    load_dotenv(env_file)

    raw_port = os.getenv("PORT", str(DEFAULT_PORT))
    try:
        port = int(raw_port)
    except ValueError:
        raise ValueError(f"Invalid PORT: {raw_port!r}")

    settings = Settings(
        port=port,
        api_key=os.getenv("WEATHER_API_KEY") or PLACEHOLDER_API_KEY,
        base_url=os.getenv("WEATHER_BASE_URL", DEFAULT_BASE_URL).rstrip("/"),
        geo_url=os.getenv("WEATHER_GEO_URL", DEFAULT_GEO_URL).rstrip("/"),
        allowed_origins=_parse_origins(os.getenv("CORS_ALLOW_ORIGINS")),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )

    if settings.uses_placeholder_key:
        logger.warning(
            "WEATHER_API_KEY is not set; using the placeholder key. "
            "Set WEATHER_API_KEY before deploying."
        )
    return settings
