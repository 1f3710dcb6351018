"""Product catalog API configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var, positive_int_env_var
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig

CATALOG_TIMEOUT_SECONDS = 5.0
DEFAULT_CATALOG_RATE_LIMIT = 20


@dataclass(frozen=True)
class CatalogApiConfig:
    """Where to resolve supplier product codes when the catalog is remote."""

    base_url: str
    resilience: ResilienceConfig


def get_catalog_api_config(
    *,
    resilience: ResilienceConfig | None = None,
) -> CatalogApiConfig | None:
    """Return the remote catalog configuration, or ``None`` to use the local database."""

    base_url = optional_env_var("ORDERBRIDGE_CATALOG_API_URL")
    if base_url is None:
        return None
    max_calls = positive_int_env_var(
        "ORDERBRIDGE_CATALOG_RATE_LIMIT", default=DEFAULT_CATALOG_RATE_LIMIT
    )
    return CatalogApiConfig(
        base_url=base_url,
        resilience=resilience
        or ResilienceConfig(
            name="catalog",
            base_url=base_url,
            timeout_seconds=CATALOG_TIMEOUT_SECONDS,
            ratelimit=RateLimit(max_calls=max_calls, per_seconds=1.0),
            # product codes are immutable, so lookups are safe to cache
            cache=CacheConfig(backend="memory"),
        ),
    )
