"""
config.py — Environment configuration for the API.

Values come from environment variables; a ``.env`` file at the repository
root seeds any that are not already set.
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Optional


# Load .env file if it exists
def _load_dotenv():
    env_path = Path(__file__).parent.parent.parent / ".env"
    if env_path.exists():
        with open(env_path) as f:
            for line in f:
                line = line.strip()
                if line and not line.startswith("#") and "=" in line:
                    key, value = line.split("=", 1)
                    key = key.strip()
                    value = value.strip()
                    if key and value and key not in os.environ:
                        os.environ[key] = value

_load_dotenv()


class Settings:
    """Application settings loaded from environment variables."""

    def __init__(self):
        self.app_name: str = "DocForge"
        self.app_version: str = "1.0.0"
        self.api_prefix: str = "/api/v1"

        # Server settings
        self.host: str = os.environ.get("HOST", "0.0.0.0")
        self.port: int = int(os.environ.get("PORT", "8000"))
        self.debug: bool = os.environ.get("DEBUG", "false").lower() == "true"
        self.log_level: str = os.environ.get("LOG_LEVEL", "INFO").upper()

        # CORS settings
        self.cors_origins: list = os.environ.get(
            "CORS_ORIGINS",
            "http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000,http://127.0.0.1:5173"
        ).split(",")

        # File storage
        self.output_dir: str = os.environ.get("OUTPUT_DIR", "./output")
        self.pattern_store_dir: Optional[str] = os.environ.get("PATTERN_STORE_DIR") or None

        # Rendering
        self.pdf_renderer_url: Optional[str] = os.environ.get("PDF_RENDERER_URL") or None
        self.render_timeout_seconds: float = float(os.environ.get("RENDER_TIMEOUT_SECONDS", "30"))
        self.lookup_timeout_seconds: float = float(os.environ.get("LOOKUP_TIMEOUT_SECONDS", "5"))
        self.default_quality: str = os.environ.get("DEFAULT_QUALITY", "standard")

        # Composition cache
        self.compose_cache_ttl_seconds: int = int(os.environ.get("COMPOSE_CACHE_TTL_SECONDS", "3600"))

    @property
    def uses_external_renderer(self) -> bool:
        return bool(self.pdf_renderer_url)


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
