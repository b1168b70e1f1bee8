from __future__ import annotations
import os
from dataclasses import dataclass
from typing import Tuple

from agent_ready.app.errors import ConfigError

SUPPORTED_LANGUAGES = ("en", "zh")


def _get_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if raw == "":
        return default
    try:
        v = int(raw)
    except ValueError as e:
        raise ConfigError(f"Env var {name} must be an integer, got {raw!r}") from e
    if v <= 0:
        raise ConfigError(f"Env var {name} must be positive, got {v}")
    return v


@dataclass(frozen=True)
class Settings:
    # Scan defaults
    default_profile: str
    default_language: str
    max_workers: int

    # Logging
    log_level: str

    # Mongo (optional; in-memory store when unset)
    mongo_uri: str | None
    mongo_db: str

    # Repo acquisition
    clone_timeout_s: int
    allowed_hosts: Tuple[str, ...]


def load_settings() -> Settings:
    language = os.getenv("AGENT_READY_LANGUAGE", "en").lower().strip()
    if language not in SUPPORTED_LANGUAGES:
        raise ConfigError(f"Unsupported AGENT_READY_LANGUAGE: {language}")

    hosts_raw = os.getenv("ALLOWED_HOSTS", "github.com,gitlab.com,bitbucket.org")
    allowed_hosts = tuple(h.strip().lower() for h in hosts_raw.split(",") if h.strip())

    return Settings(
        default_profile=os.getenv("AGENT_READY_PROFILE", "factory_compat").strip() or "factory_compat",
        default_language=language,
        max_workers=_get_int("AGENT_READY_MAX_WORKERS", 8),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper().strip() or "INFO",
        mongo_uri=os.getenv("MONGO_URI") or None,
        mongo_db=os.getenv("MONGO_DB", "agent_ready"),
        clone_timeout_s=_get_int("CLONE_TIMEOUT_S", 120),
        allowed_hosts=allowed_hosts,
    )
