# region_driver/utils/config.py
from __future__ import annotations

import functools
from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# ---------- Enums ----------

class BrowserType(str, Enum):
    chromium = "chromium"
    firefox = "firefox"
    webkit = "webkit"


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


# ---------- Settings ----------

class Settings(BaseSettings):
    """
    Central configuration for the region driver.

    Values load in this order of precedence:
      1) Environment variables
      2) .env file in project root
      3) Defaults below
    """

    # ---- Application under test ----
    BASE_URL: str = Field(default="http://localhost", description="Prefix for RegionDriver.goto()")
    SELECTORS_FILE: Optional[Path] = Field(default=None, description="JSON/YAML region table")

    # ---- Waiting ----
    WAIT_TIMEOUT_MS: int = Field(default=1000, ge=0, description="Default wait_for_region budget")
    WAIT_ERROR_MSG: str = Field(default="Timeout")

    # ---- Browser configuration (CLI runs) ----
    HEADLESS: bool = Field(default=True, description="Run the browser headless")
    BROWSER_TYPE: BrowserType = Field(default=BrowserType.chromium, description="Playwright browser")
    VIEWPORT_WIDTH: int = Field(default=1366, ge=320, le=7680)
    VIEWPORT_HEIGHT: int = Field(default=768, ge=320, le=4320)
    SLOW_MO: int = Field(default=0, ge=0, description="Slow down actions (ms) for debugging")
    PAGE_LOAD_TIMEOUT: int = Field(default=30000, ge=1000)

    # ---- Logging ----
    LOG_LEVEL: LogLevel = Field(default=LogLevel.INFO)
    LOG_TO_FILE: bool = Field(default=False)
    LOG_FILE: Path = Field(default=Path("./region-driver.log"))
    COLORIZED_OUTPUT: bool = Field(default=True)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("SELECTORS_FILE", "LOG_FILE", mode="after")
    @classmethod
    def _absolutize(cls, v: Optional[Path]):
        if v is None:
            return v
        return v if v.is_absolute() else Path.cwd() / v

    @field_validator("BASE_URL")
    @classmethod
    def _strip_trailing_slash(cls, v: str) -> str:
        # goto() paths start with "/"
        return v.rstrip("/")

    # Convenience: Playwright launch options dict
    def playwright_launch_kwargs(self) -> dict:
        return {
            "headless": self.HEADLESS,
            "slow_mo": self.SLOW_MO,
        }

    # Convenience: Playwright new_context kwargs
    def playwright_context_kwargs(self) -> dict:
        return {"viewport": {"width": self.VIEWPORT_WIDTH, "height": self.VIEWPORT_HEIGHT}}


# --------- Public accessor (memoized) ---------

@functools.lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Load and cache settings once per process.
    Call `get_settings.cache_clear()` if you need to reload after changing env.
    """
    return Settings()
