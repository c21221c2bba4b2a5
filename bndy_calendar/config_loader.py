"""bndy_calendar.config_loader

Config loader for bndy_calendar.

- Reads YAML (PyYAML); JSON files load too since JSON is valid YAML.
- Exposes a typed dataclass `Config` and a `load_config()` helper that accepts
  an optional path override, falling back to the BNDY_CALENDAR_CONFIG env var.
- BNDY_API_BASE_URL and BNDY_LOG_LEVEL override the file values.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "bndy" / "calendar.yaml"


@dataclass
class Config:
    """Typed configuration for bndy_calendar.

    Fields:
        api_base_url: base URL of the bndy REST API
        request_timeout: HTTP timeout in seconds (1..120)
        uid_domain: domain suffix for exported UIDs
        organizer_email: address placed on exported ORGANIZER lines
        product_id: PRODID of exported calendars
        default_event_minutes: duration of timed events without an end time
        minimum_event_minutes: floor applied to timed event durations
        log_level: logging level name
    """

    api_base_url: str = "https://api.bndy.co.uk"
    request_timeout: float = 30.0
    uid_domain: str = "bndy.app"
    organizer_email: str = "noreply@bndy.app"
    product_id: str = "-//bndy//Band Calendar//EN"
    default_event_minutes: int = 120
    minimum_event_minutes: int = 60
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> Config:
        """Create Config from a plain mapping, applying defaults and validation.

        Numeric-like values are coerced, out-of-range values are clamped, and
        warnings are logged when coercions occur.
        """
        if data is None:
            data = {}
        defaults = cls()

        def _coerce_int(key: str, default: int) -> int:
            raw = data.get(key, default)
            try:
                return int(raw)
            except (TypeError, ValueError):
                logger.warning("Config %s=%r is not an int; using default %d", key, raw, default)
                return default

        def _coerce_str(key: str, default: str) -> str:
            raw = data.get(key, default)
            return str(raw) if raw is not None else default

        raw_timeout = data.get("request_timeout", defaults.request_timeout)
        try:
            timeout = float(raw_timeout)
        except (TypeError, ValueError):
            logger.warning(
                "Config request_timeout=%r is not a number; using default %s",
                raw_timeout,
                defaults.request_timeout,
            )
            timeout = defaults.request_timeout
        if timeout < 1:
            logger.warning("request_timeout %s below minimum; coercing to 1", timeout)
            timeout = 1.0
        elif timeout > 120:
            logger.warning("request_timeout %s above maximum; coercing to 120", timeout)
            timeout = 120.0

        minimum = _coerce_int("minimum_event_minutes", defaults.minimum_event_minutes)
        if minimum < 1:
            logger.warning("minimum_event_minutes %d below 1; coercing to 1", minimum)
            minimum = 1
        default_minutes = _coerce_int("default_event_minutes", defaults.default_event_minutes)
        if default_minutes < minimum:
            logger.warning(
                "default_event_minutes %d below minimum_event_minutes; coercing to %d",
                default_minutes,
                minimum,
            )
            default_minutes = minimum

        return cls(
            api_base_url=_coerce_str("api_base_url", defaults.api_base_url).rstrip("/"),
            request_timeout=timeout,
            uid_domain=_coerce_str("uid_domain", defaults.uid_domain),
            organizer_email=_coerce_str("organizer_email", defaults.organizer_email),
            product_id=_coerce_str("product_id", defaults.product_id),
            default_event_minutes=default_minutes,
            minimum_event_minutes=minimum,
            log_level=_coerce_str("log_level", defaults.log_level).upper(),
        )


def _load_yaml(path: Path) -> Any:
    """Load a YAML (or JSON) document; empty files give an empty mapping."""
    loaded = yaml.safe_load(path.read_text(encoding="utf-8"))
    return {} if loaded is None else loaded


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    merged = dict(data)
    base_url = os.environ.get("BNDY_API_BASE_URL")
    if base_url:
        merged["api_base_url"] = base_url
    log_level = os.environ.get("BNDY_LOG_LEVEL")
    if log_level:
        merged["log_level"] = log_level
    return merged


def load_config(path: str | None = None) -> Config:
    """Load configuration from a YAML file and return a Config instance.

    Args:
        path: Optional path to the config file. If not provided, the
              BNDY_CALENDAR_CONFIG env var is used, then ~/.config/bndy/calendar.yaml.

    Returns:
        Config dataclass instance with values from file (or defaults).

    Behavior:
    - If file is missing: returns defaults (plus env overrides).
    - If file exists but top-level is not a mapping: raises ValueError.
    """
    env_path = os.environ.get("BNDY_CALENDAR_CONFIG")
    p = Path(path) if path else Path(env_path) if env_path else DEFAULT_CONFIG_PATH
    logger.debug("Attempting to load config from %s", p)

    if not p.exists():
        logger.info("Config file %s not found; using defaults", p)
        return Config.from_dict(_apply_env_overrides({}))

    raw = _load_yaml(p)
    if not isinstance(raw, dict):
        logger.warning("Config file %s parsed but top-level is not a mapping: %r", p, raw)
        raise ValueError("Config file must contain a mapping at top level")  # noqa: TRY004
    cfg = Config.from_dict(_apply_env_overrides(raw))
    logger.info("Loaded configuration from %s", p)
    logger.debug("Configuration values: %s", cfg)
    return cfg
