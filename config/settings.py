from __future__ import annotations

import os
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv


load_dotenv()


class Settings:
    """Application settings loaded from environment variables.

    Keep all credentials and config centralized here.
    """

    def __init__(self) -> None:
        self.app_env: str = os.getenv("APP_ENV", "development")
        self.google_api_key: Optional[str] = os.getenv("GOOGLE_API_KEY") or None
        self.gemini_model: str = os.getenv("GEMINI_MODEL", "gemini-1.5-flash")
        self.temperature: float = float(os.getenv("MODEL_TEMPERATURE", "0.0"))
        self.top_p: float = float(os.getenv("MODEL_TOP_P", "0.9"))
        self.timeout: float = float(os.getenv("MODEL_TIMEOUT", "60"))
        self.max_image_bytes: int = int(os.getenv("MAX_IMAGE_BYTES", str(10 * 1024 * 1024)))
        self.max_stored_results: int = int(os.getenv("MAX_STORED_RESULTS", "1024"))
        self.log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()

    @property
    def is_dev(self) -> bool:
        return self.app_env.lower() in {"dev", "development", "local"}


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
