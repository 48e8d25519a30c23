from __future__ import annotations

# ============================================================================
# CONFIGURATION & CONSTANTS
# ============================================================================
import logging
import os
from dataclasses import dataclass

import pytz
import streamlit as st

DEFAULT_API_BASE = "http://localhost:5000/api"
DEFAULT_TIMEZONE = "UTC"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AppConfig:
    """Runtime configuration sourced from Streamlit secrets or the environment.

    `request_timeout` of None leaves the timeout to the HTTP transport.
    """

    api_base: str
    request_timeout: float | None
    timezone: pytz.BaseTzInfo
    debug: bool


def get_secret(key: str, default: str = "") -> str:
    """Read a setting from Streamlit secrets, then the environment."""
    try:
        if key in st.secrets:
            return str(st.secrets[key])
    except FileNotFoundError:
        # No secrets.toml deployed; the environment is the only source left.
        pass
    return os.environ.get(key, default)


def parse_timeout(raw: str) -> float | None:
    raw = raw.strip()
    if not raw:
        return None
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Ignoring invalid REQUEST_TIMEOUT=%r", raw)
        return None
    return value if value > 0 else None


def parse_timezone(name: str) -> pytz.BaseTzInfo:
    try:
        return pytz.timezone(name.strip() or DEFAULT_TIMEZONE)
    except pytz.UnknownTimeZoneError:
        logger.warning("Unknown APP_TIMEZONE=%r, falling back to %s", name, DEFAULT_TIMEZONE)
        return pytz.timezone(DEFAULT_TIMEZONE)


@st.cache_resource
def get_config() -> AppConfig:
    """Load settings once per process.

    Why:
    - Streamlit reruns the script on every interaction; secrets and the
      environment do not change in between.
    """
    return AppConfig(
        api_base=get_secret("API_BASE", DEFAULT_API_BASE).rstrip("/"),
        request_timeout=parse_timeout(get_secret("REQUEST_TIMEOUT")),
        timezone=parse_timezone(get_secret("APP_TIMEZONE", DEFAULT_TIMEZONE)),
        debug=get_secret("DEBUG", "0") == "1",
    )
