"""Runtime settings, read from the environment at call time."""

import os
from typing import Dict, Optional

from ..exceptions import ConfigurationError

# Engine constants
EXCEL_SERIAL_THRESHOLD = 30000
EXCEL_UNIX_EPOCH_SERIAL = 25569
DECIDED_LEAD_MAX_DAYS = 10
DEALER_MIN_LENGTH = 3
PERCENT_NEUTRAL_BAND = 0.5
ABSOLUTE_NEUTRAL_BAND = 1.0

# Remote source key -> environment variable holding its URL
API_ENDPOINT_ENV = {
    "leads": "FUNNEL_LEADS_URL",
    "test_drives": "FUNNEL_TEST_DRIVES_URL",
    "complete_journey": "FUNNEL_COMPLETE_JOURNEY_URL",
    "billed": "FUNNEL_BILLED_URL",
}

DEFAULT_TIMEOUT_SECONDS = 360


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


def diagnostics_enabled() -> bool:
    return _env_flag("PROCESSOR_DIAG", "0")


def api_key() -> Optional[str]:
    return os.environ.get("PROCESSOR_API_KEY") or None


def request_timeout() -> float:
    raw = os.environ.get("PROCESSOR_TIMEOUT", "")
    try:
        return float(raw) if raw.strip() else float(DEFAULT_TIMEOUT_SECONDS)
    except ValueError:
        raise ConfigurationError(f"PROCESSOR_TIMEOUT must be a number, got {raw!r}") from None


def load_api_endpoints(overrides: Optional[Dict[str, str]] = None) -> Dict[str, str]:
    """
    Resolve the URL of each remote sheet.

    Args:
        overrides: Optional mapping of source key to URL, taking precedence over the environment

    Returns:
        Mapping of every source key in ``API_ENDPOINT_ENV`` to its URL

    Raises:
        ConfigurationError: if any endpoint is left unset
    """
    overrides = overrides or {}
    endpoints = {}
    missing = []
    for source, env_name in API_ENDPOINT_ENV.items():
        url = overrides.get(source) or os.environ.get(env_name, "").strip()
        if not url:
            missing.append(env_name)
            continue
        endpoints[source] = url
    if missing:
        raise ConfigurationError(f"Missing API endpoint configuration: {', '.join(missing)}")
    return endpoints
