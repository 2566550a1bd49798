from __future__ import annotations

import copy
import os
from pathlib import Path
from typing import Any

import yaml

from alumnisearch.utils.text import normalize_base_url

BASE_URL_ENV = "ALUMNI_DATABASE_URL"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

DEFAULTS: dict[str, Any] = {
    "base_url": "",
    "page_size": 20,
    "timeout_seconds": 30,
    "pagination_radius": 2,
    "log_dir": "data/logs",
    "log_level": "INFO",
    "locations": {
        "country_api_url": "https://restcountries.com/v3.1/all",
        "city_api_url": "https://countriesnow.space/api/v0.1/countries/cities",
    },
    "catalog": {"first_year": 1998, "last_year": 2026},
}


class ConfigError(RuntimeError):
    pass


def _merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(path: str | Path | None = None, environ: dict[str, str] | None = None) -> dict[str, Any]:
    loaded: dict[str, Any] = {}
    if path is not None:
        cfg_path = Path(path)
        if not cfg_path.exists():
            raise ConfigError(f"Config not found: {cfg_path}")
        with cfg_path.open("r", encoding="utf-8") as handle:
            loaded = yaml.safe_load(handle) or {}
        if not isinstance(loaded, dict):
            raise ConfigError("Config root must be a mapping")

    config = _merge(DEFAULTS, loaded)
    env = os.environ if environ is None else environ
    if env.get(BASE_URL_ENV):
        config["base_url"] = env[BASE_URL_ENV]
    config["base_url"] = normalize_base_url(str(config["base_url"] or ""))
    config["log_level"] = str(config["log_level"] or "INFO").upper()
    if config["log_level"] not in LOG_LEVELS:
        raise ConfigError(f"log_level must be one of {', '.join(LOG_LEVELS)}")

    for key in ("page_size", "timeout_seconds", "pagination_radius"):
        try:
            value = float(config[key]) if key == "timeout_seconds" else int(config[key])
        except (TypeError, ValueError):
            raise ConfigError(f"{key} must be a number") from None
        if value < 0 or (value == 0 and key != "pagination_radius"):
            raise ConfigError(f"{key} must be positive")
        config[key] = value
    return config
