# codecheck/config.py
import logging
from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Service configuration for the repository markup checker.
    Loaded from environment variables and an optional .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── APP ──────────────────────────────────────────────────────────────────
    APP_NAME: str = "codecheck"
    APP_VERSION: str = "1.0.0"
    LOG_LEVEL: str = Field(default="INFO")
    PORT: int = Field(default=3000)

    # ── GITHUB (repository listing) ──────────────────────────────────────────
    GITHUB_API_URL: str = Field(default="https://api.github.com")
    GITHUB_PERSONAL_ACCESS_TOKEN: Optional[str] = Field(
        default=None,
        description="Raises the API rate limit and allows private repositories",
    )
    GITHUB_TIMEOUT_S: float = 15.0
    MAX_TREE_DEPTH: int = 32

    # ── W3C VALIDATOR ────────────────────────────────────────────────────────
    W3C_VALIDATOR_URL: str = Field(default="https://validator.w3.org/nu/?out=json")
    VALIDATOR_TIMEOUT_S: float = 30.0
    USER_AGENT: str = "Mozilla/5.0 (compatible; CodeCheck/1.0)"

    # ── BROWSER ──────────────────────────────────────────────────────────────
    BROWSER_HEADLESS: bool = True
    NAVIGATION_TIMEOUT_MS: int = 30000
    CHECK_TIMEOUT_S: float = 600.0

    # ── HTTP BOUNDARY ────────────────────────────────────────────────────────
    ALLOWED_HOSTS: List[str] = ["github.com", "www.github.com"]
    CORS_ORIGINS: List[str] = [
        "http://localhost:5173",
        "https://code-checker-ui.onrender.com",
    ]

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """
        Accepts 'debug', 'Info' etc. and falls back to INFO on unknown names.
        """
        level = str(v or "INFO").strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            return "INFO"
        return level

    @property
    def github_headers(self) -> dict:
        headers = {"Accept": "application/vnd.github.v3+json"}
        if self.GITHUB_PERSONAL_ACCESS_TOKEN:
            headers["Authorization"] = f"token {self.GITHUB_PERSONAL_ACCESS_TOKEN}"
        return headers


# Cached singleton to avoid repeated instantiation
@lru_cache()
def get_settings() -> Settings:
    return Settings()
