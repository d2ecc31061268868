from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
import pytest

from labelsync.adapters.http_resilience import ResilientClient
from labelsync.adapters.registry import RegistryClient
from labelsync.config import RegistryConfig, ResilienceConfig, RetryPolicy

if TYPE_CHECKING:
    from collections.abc import Callable

BASE_URL = "https://registry.test"

type Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture
def registry_config() -> RegistryConfig:
    return RegistryConfig(
        base_url=BASE_URL,
        company="ACME",
        store="S01",
        token="secret-token",  # noqa: S106
        resilience=ResilienceConfig(name="registry-test", retry=RetryPolicy(total=0)),
    )


@pytest.fixture
def make_registry_client(
    registry_config: RegistryConfig,
) -> Callable[[Handler], RegistryClient]:
    def factory(handler: Handler) -> RegistryClient:
        def client_factory(config: ResilienceConfig) -> ResilientClient:
            return ResilientClient(config, transport=httpx.MockTransport(handler))

        return RegistryClient(config=registry_config, client_factory=client_factory)

    return factory
