"""Helpers for loading configuration."""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable

PROJECT_ROOT = Path(__file__).resolve().parents[2]
DEFAULT_CONFIG_NAME = "config.toml"
CONFIG_ENV_VAR = "WIKIDESC_CONFIG"

DEFAULT_USER_AGENT = "wikidesc/0.1 (https://www.wikidata.org/wiki/Help:Description)"
DEFAULT_BLOCKED_LANGUAGES = ("en",)


@dataclass(slots=True)
class ApiSettings:
    scheme: str = "https"
    host: str = "www.wikidata.org"
    path: str = "/w/api.php"
    timeout: float = 30.0
    user_agent: str = DEFAULT_USER_AGENT

    @property
    def endpoint(self) -> str:
        return f"{self.scheme}://{self.host}{self.path}"


@dataclass(slots=True)
class PathSettings:
    state_dir: Path
    store_file: Path
    cookie_jar: Path


@dataclass(slots=True)
class PolicySettings:
    default_blocked_languages: frozenset[str] = field(
        default_factory=lambda: frozenset(DEFAULT_BLOCKED_LANGUAGES)
    )


@dataclass(slots=True)
class LoggingSettings:
    level: str = "INFO"
    structured: bool = True


@dataclass(slots=True)
class AppConfig:
    api: ApiSettings
    paths: PathSettings
    policy: PolicySettings
    logging: LoggingSettings
    source: Path | None = None


def _to_path(value: str | None, *, fallback: Path, base: Path = PROJECT_ROOT) -> Path:
    if not value:
        return fallback
    candidate = Path(value).expanduser()
    return candidate if candidate.is_absolute() else base / candidate


def _config_path(explicit: str | os.PathLike[str] | None = None) -> tuple[Path, bool]:
    """Return the config path and whether the caller asked for it explicitly."""

    if explicit:
        candidate = Path(explicit)
        required = True
    else:
        env_value = os.environ.get(CONFIG_ENV_VAR)
        candidate = Path(env_value) if env_value else PROJECT_ROOT / DEFAULT_CONFIG_NAME
        required = bool(env_value)
    path = candidate if candidate.is_absolute() else PROJECT_ROOT / candidate
    return path, required


def _load_toml(path: Path, *, required: bool) -> dict[str, Any]:
    if not path.exists():
        if required:
            raise FileNotFoundError(f"Config file not found: {path}")
        return {}
    with path.open("rb") as fp:
        return tomllib.load(fp)


def _ensure_directories(paths: Iterable[Path]) -> None:
    for directory in paths:
        directory.mkdir(parents=True, exist_ok=True)


def _as_language_set(value: Any) -> frozenset[str]:
    if value is None:
        return frozenset(DEFAULT_BLOCKED_LANGUAGES)
    if isinstance(value, str):
        value = [value]
    return frozenset(str(item).strip() for item in value if str(item).strip())


def _as_bool(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


def load_config(config_path: str | os.PathLike[str] | None = None) -> AppConfig:
    """Load ``config.toml`` (or an explicit/env path), filling defaults for absent keys."""

    path, required = _config_path(config_path)
    data = _load_toml(path, required=required)

    api_section = data.get("api", {})
    paths_section = data.get("paths", {})
    policy_section = data.get("policy", {})
    logging_section = data.get("logging", {})

    defaults = ApiSettings()
    api = ApiSettings(
        scheme=str(api_section.get("scheme", defaults.scheme)),
        host=str(api_section.get("host", defaults.host)),
        path=str(api_section.get("path", defaults.path)),
        timeout=float(api_section.get("timeout", defaults.timeout)),
        user_agent=str(api_section.get("user_agent", defaults.user_agent)),
    )

    state_dir = _to_path(paths_section.get("state_dir"), fallback=PROJECT_ROOT / "data" / "state")
    store_file = _to_path(
        paths_section.get("store_file"), fallback=state_dir / "key_value.json"
    )
    cookie_jar = _to_path(paths_section.get("cookie_jar"), fallback=state_dir / "cookies.txt")

    _ensure_directories((state_dir, store_file.parent, cookie_jar.parent))

    return AppConfig(
        api=api,
        paths=PathSettings(state_dir=state_dir, store_file=store_file, cookie_jar=cookie_jar),
        policy=PolicySettings(
            default_blocked_languages=_as_language_set(
                policy_section.get("default_blocked_languages")
            )
        ),
        logging=LoggingSettings(
            level=str(logging_section.get("level", "INFO")),
            structured=_as_bool(logging_section.get("structured"), True),
        ),
        source=path if path.exists() else None,
    )


def project_path(*parts: Any) -> Path:
    return PROJECT_ROOT.joinpath(*parts)
