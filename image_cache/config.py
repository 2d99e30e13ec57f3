import logging
import os
from dataclasses import dataclass
from typing import Optional

USER_AGENT = "image-cache/1.0"

_TRUTHY = {"1", "true", "yes", "on"}


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in _TRUTHY


def _env_timeout(name: str) -> Optional[float]:
    raw = os.getenv(name, "").strip()
    return float(raw) if raw else None


@dataclass(frozen=True)
class CacheSettings:
    timeout: Optional[float]
    user_agent: str
    log_errors: bool
    cache_on_fetch: bool
    surface_errors: bool
    dedupe_inflight: bool
    fetch_workers: int
    delivery_timeout: float
    port: int
    log_level: str

    @classmethod
    def from_env(cls) -> "CacheSettings":
        return cls(
            timeout=_env_timeout("IMAGE_CACHE_TIMEOUT"),
            user_agent=os.getenv("IMAGE_CACHE_USER_AGENT", USER_AGENT),
            log_errors=_env_flag("IMAGE_CACHE_LOG_ERRORS"),
            cache_on_fetch=_env_flag("IMAGE_CACHE_CACHE_ON_FETCH"),
            surface_errors=_env_flag("IMAGE_CACHE_SURFACE_ERRORS"),
            dedupe_inflight=_env_flag("IMAGE_CACHE_DEDUPE_INFLIGHT"),
            fetch_workers=int(os.getenv("IMAGE_CACHE_FETCH_WORKERS", "4")),
            delivery_timeout=float(os.getenv("IMAGE_CACHE_DELIVERY_TIMEOUT", "30")),
            port=int(os.getenv("PORT", "5600")),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )


SETTINGS = CacheSettings.from_env()


def configure_logging() -> logging.Logger:
    logging.basicConfig(level=SETTINGS.log_level)
    return logging.getLogger("image-cache")
