"""CiviCRM REST configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import require_env_vars
from .http_resilience import NO_RETRY, RateLimit, ResilienceConfig

CIVICRM_TIMEOUT_SECONDS = 20.0


@dataclass(frozen=True, slots=True)
class CiviCrmConfig:
    """Endpoint and credentials for the CiviCRM APIv3 REST interface."""

    rest_url: str
    api_key: str
    site_key: str
    resilience: ResilienceConfig


def get_civicrm_config(*, resilience: ResilienceConfig | None = None) -> CiviCrmConfig:
    values = require_env_vars(("CIVICRM_REST_URL", "CIVICRM_API_KEY", "CIVICRM_SITE_KEY"))
    rest_url = values["CIVICRM_REST_URL"]
    return CiviCrmConfig(
        rest_url=rest_url,
        api_key=values["CIVICRM_API_KEY"],
        site_key=values["CIVICRM_SITE_KEY"],
        resilience=resilience
        or ResilienceConfig(
            name="civicrm",
            timeout_seconds=CIVICRM_TIMEOUT_SECONDS,
            # CRM calls are never retried automatically
            retry=NO_RETRY,
            ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
            default_headers={"X-Requested-With": "XMLHttpRequest"},
        ),
    )
