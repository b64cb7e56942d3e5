"""Read ``heroku-provisioner.yaml`` into a validated :class:`Config`."""

from __future__ import annotations

import json
import logging
import os
from collections import Counter
from pathlib import Path
from typing import Any

from dotenv import dotenv_values
from pydantic import ValidationError
from ruamel.yaml import YAML
from ruamel.yaml.constructor import SafeConstructor

from heroku_provisioner.config.schema import Config

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """The configuration file is unreadable or invalid."""


# provider field -> environment variable
_PROVIDER_ENV_MAP: dict[str, str] = {
    "email": "HEROKU_EMAIL",
    "api_key": "HEROKU_API_KEY",
    "headers": "HEROKU_HEADERS",
    "url": "HEROKU_API_URL",
    "debug_http": "HEROKU_DEBUG_HTTP",
}


def parse_headers(value: Any, *, source: str = "headers") -> dict[str, str]:
    """Extra request headers from a JSON object string or a mapping of strings."""
    if isinstance(value, str):
        if not value.strip():
            return {}
        try:
            value = json.loads(value)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Invalid JSON in {source}: {exc}") from exc
    if not isinstance(value, dict):
        raise ConfigError(f"{source} must be a JSON object, got {type(value).__name__}")

    bad = sorted(
        str(k) for k, v in value.items() if not (isinstance(k, str) and isinstance(v, str))
    )
    if bad:
        raise ConfigError(f"{source} values must be strings: {', '.join(bad)}")
    return dict(value)


def _parse_bool(env_key: str, value: str) -> bool:
    try:
        return SafeConstructor.bool_values[value.lower()]
    except KeyError:
        raise ConfigError(f"Invalid boolean for {env_key}: {value!r}") from None


def _resolve_provider(raw_provider: dict[str, Any], config_dir: Path) -> dict[str, Any]:
    """Fill provider fields from YAML, then the environment, then ``<config_dir>/.env``."""
    env_file = config_dir / ".env"
    dotenv = dotenv_values(env_file, encoding="utf-8-sig") if env_file.is_file() else {}

    resolved: dict[str, Any] = {}
    for field, env_key in _PROVIDER_ENV_MAP.items():
        candidates = (raw_provider.get(field), os.environ.get(env_key), dotenv.get(env_key))
        value = next((c for c in candidates if c is not None), None)
        if value is None:
            continue
        if field == "debug_http" and isinstance(value, str):
            value = _parse_bool(env_key, value)
        elif field == "headers":
            value = parse_headers(value, source=f"provider.headers ({env_key})")
        resolved[field] = value
    return resolved


def load_config(path: Path | str) -> Config:
    """Parse, resolve and validate the configuration at *path*.

    A relative ``state_path`` is taken relative to the file's directory.
    Every failure surfaces as :class:`ConfigError`.
    """
    path = Path(path)
    try:
        raw = YAML(typ="safe").load(path)
    except Exception as exc:
        raise ConfigError(f"Failed to read {path}: {exc}") from exc

    raw = {} if raw is None else raw
    if not isinstance(raw, dict):
        raise ConfigError(f"{path}: top level must be a mapping")

    try:
        raw["provider"] = _resolve_provider(raw.get("provider") or {}, path.parent)
        config = Config.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc

    config.config_dir = path.parent
    if not config.state_path.is_absolute():
        config.state_path = config.config_dir / config.state_path

    counts = Counter(r.address for r in config.resources)
    dupes = [f"Duplicate resource address '{addr}'" for addr, n in counts.items() if n > 1]
    if dupes:
        raise ConfigError("\n".join(dupes))

    logger.info("Loaded config from %s (%d resources)", path, len(config.resources))
    return config
