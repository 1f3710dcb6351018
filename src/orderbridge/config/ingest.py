"""Ingestion and listing defaults."""

from __future__ import annotations

from dataclasses import dataclass

from .env import positive_int_env_var

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 10
DEFAULT_RESOLVER_CONCURRENCY = 1


@dataclass(frozen=True, slots=True)
class IngestConfig:
    resolver_concurrency: int = DEFAULT_RESOLVER_CONCURRENCY
    default_page_size: int = DEFAULT_PAGE_SIZE


def get_ingest_config() -> IngestConfig:
    return IngestConfig(
        resolver_concurrency=positive_int_env_var(
            "ORDERBRIDGE_RESOLVER_CONCURRENCY", default=DEFAULT_RESOLVER_CONCURRENCY
        ),
        default_page_size=positive_int_env_var(
            "ORDERBRIDGE_DEFAULT_PAGE_SIZE", default=DEFAULT_PAGE_SIZE
        ),
    )
