from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from clients.rental_api_sdk.config import ConfigError

REFRESH_STRATEGIES = {"refetch", "optimistic"}
LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR"}


@dataclass(frozen=True)
class AppConfig:
    debounce_ms: int = 150
    notification_ttl_seconds: float = 4.0
    page_limit: int = 10
    refresh_strategy: str = "refetch"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env_file: str | None = ".env") -> "AppConfig":
        load_dotenv(env_file)
        try:
            config = cls(
                debounce_ms=int(os.getenv("RENTAL_DEBOUNCE_MS", "150")),
                notification_ttl_seconds=float(os.getenv("RENTAL_NOTIFICATION_TTL_SECONDS", "4")),
                page_limit=int(os.getenv("RENTAL_PAGE_LIMIT", "10")),
                refresh_strategy=os.getenv("RENTAL_REFRESH_STRATEGY", "refetch").strip().lower(),
                log_level=os.getenv("RENTAL_LOG_LEVEL", "INFO").strip().upper(),
            )
        except ValueError as exc:
            raise ConfigError(f"Invalid console configuration: {exc}") from exc
        config.validate()
        return config

    def validate(self) -> None:
        if self.debounce_ms < 0:
            raise ConfigError("RENTAL_DEBOUNCE_MS must be >= 0")
        if self.notification_ttl_seconds <= 0:
            raise ConfigError("RENTAL_NOTIFICATION_TTL_SECONDS must be greater than 0")
        if self.page_limit < 1:
            raise ConfigError("RENTAL_PAGE_LIMIT must be >= 1")
        if self.refresh_strategy not in REFRESH_STRATEGIES:
            raise ConfigError(f"RENTAL_REFRESH_STRATEGY must be one of {sorted(REFRESH_STRATEGIES)}")
        if self.log_level not in LOG_LEVELS:
            raise ConfigError(f"RENTAL_LOG_LEVEL must be one of {sorted(LOG_LEVELS)}")
