from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import ValidationError

from agent_ready.app.errors import ConfigError, EmptyRubricError, ProfileNotFoundError
from agent_ready.schemas.check_schema import BaseCheck, level_rank, parse_check

logger = logging.getLogger(__name__)

PROFILES_DIR = Path(__file__).resolve().parent.parent / "profiles"
DEFAULT_PROFILE = "factory_compat"


@dataclass(frozen=True)
class Profile:
    """
    A named, versioned rubric: the ordered list of check definitions a scan runs.
    Keep this deterministic + versioned.
    """
    name: str
    version: str
    description: str
    checks: tuple  # Tuple[BaseCheck, ...], definition order

    def filter_to_level(self, level: Optional[str]) -> "Profile":
        """Copy restricted to checks at or below `level` (None keeps everything)."""
        if level is None:
            return self
        cap = level_rank(level)
        kept = tuple(c for c in self.checks if level_rank(c.level) <= cap)
        return Profile(name=self.name, version=self.version, description=self.description, checks=kept)

    def summary(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "version": self.version,
            "description": self.description,
            "check_count": len(self.checks),
        }


def profile_from_dict(data: Dict[str, Any], source: str = "<dict>") -> Profile:
    """
    Build a Profile from a parsed YAML/JSON mapping. Check entries are validated
    one by one; an entry that fails validation raises with its index.
    """
    if not isinstance(data, dict):
        raise ConfigError(f"Profile {source} must be a mapping")
    raw_checks = data.get("checks") or []
    if not isinstance(raw_checks, list):
        raise ConfigError(f"Profile {source}: 'checks' must be a list")

    checks: List[BaseCheck] = []
    for i, raw in enumerate(raw_checks):
        try:
            checks.append(parse_check(raw))
        except ValidationError as e:
            raise ConfigError(f"Profile {source}: invalid check #{i} ({raw.get('id', '?') if isinstance(raw, dict) else '?'}): {e}") from e

    return Profile(
        name=str(data.get("name") or Path(source).stem),
        version=str(data.get("version") or "0.0.0"),
        description=str(data.get("description") or ""),
        checks=tuple(checks),
    )


def load_profile_file(path: Path) -> Profile:
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Profile {path} could not be read: {e}") from e
    return profile_from_dict(data, source=str(path))


_REGISTRY: Dict[str, Profile] = {}
_REGISTRY_LOCK = threading.Lock()


def _discover() -> Dict[str, Path]:
    found: Dict[str, Path] = {}
    if PROFILES_DIR.is_dir():
        for p in sorted(PROFILES_DIR.iterdir()):
            if p.suffix in (".yaml", ".yml"):
                found[p.stem] = p
    return found


def register_profile(profile: Profile) -> None:
    """Add or replace an in-memory profile (takes precedence over shipped YAML)."""
    with _REGISTRY_LOCK:
        _REGISTRY[profile.name] = profile


def list_profiles() -> List[str]:
    with _REGISTRY_LOCK:
        names = set(_REGISTRY)
    return sorted(names | set(_discover()))


def maybe_get_profile(name: str) -> Optional[Profile]:
    with _REGISTRY_LOCK:
        hit = _REGISTRY.get(name)
    if hit is not None:
        return hit

    path = _discover().get(name)
    if path is None:
        return None
    profile = load_profile_file(path)
    with _REGISTRY_LOCK:
        _REGISTRY.setdefault(name, profile)
    logger.debug("profile loaded", extra={"profile": name, "checks": len(profile.checks)})
    return profile


def load_profile(name: str) -> Profile:
    """
    Fetch a profile by name. Raises ProfileNotFoundError if missing and
    EmptyRubricError if it defines no checks.
    """
    profile = maybe_get_profile(name)
    if profile is None:
        raise ProfileNotFoundError(f"Profile not found: {name} (available: {', '.join(list_profiles()) or 'none'})")
    if not profile.checks:
        raise EmptyRubricError(f"Profile {name} defines no checks")
    return profile


def clear_registry() -> None:
    with _REGISTRY_LOCK:
        _REGISTRY.clear()
