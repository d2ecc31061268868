"""Registry (label management backend) connection settings."""

from __future__ import annotations

from dataclasses import dataclass

from .env import require_env_vars
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy

REGISTRY_TIMEOUT_SECONDS = 20.0

_URL = "LABELSYNC_REGISTRY_URL"
_COMPANY = "LABELSYNC_REGISTRY_COMPANY"
_STORE = "LABELSYNC_REGISTRY_STORE"
_TOKEN = "LABELSYNC_REGISTRY_TOKEN"  # noqa: S105


@dataclass(frozen=True, slots=True)
class RegistryConfig:
    """Where the registry lives and which tenant the records belong to."""

    base_url: str
    company: str
    store: str
    token: str
    resilience: ResilienceConfig

    def __repr__(self) -> str:
        return (
            f"RegistryConfig(base_url={self.base_url!r}, company={self.company!r}, "
            f"store={self.store!r}, token='***')"
        )


def get_registry_config(*, resilience: ResilienceConfig | None = None) -> RegistryConfig:
    values = require_env_vars((_URL, _COMPANY, _STORE, _TOKEN))
    base_url = values[_URL].rstrip("/")
    return RegistryConfig(
        base_url=base_url,
        company=values[_COMPANY],
        store=values[_STORE],
        token=values[_TOKEN],
        resilience=resilience
        or ResilienceConfig(
            name="registry",
            base_url=base_url,
            timeout_seconds=REGISTRY_TIMEOUT_SECONDS,
            ratelimit=RateLimit(max_calls=5, per_seconds=1.0),
            retry=RetryPolicy(total=3),
        ),
    )
