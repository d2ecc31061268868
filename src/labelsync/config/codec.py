"""Record codec settings (pinned fields, addressing and naming fields)."""

from __future__ import annotations

import json
from types import MappingProxyType

from labelsync.domain.codec import CodecConfig
from labelsync.domain.pool import DEFAULT_POOL, PoolConfig

from .env import optional_env_var
from .errors import ConfigurationError


def _parse_constant_fields(raw: str | None) -> dict[str, str]:
    if raw is None:
        return {}
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"LABELSYNC_CONSTANT_FIELDS is not valid JSON: {exc}") from exc
    if not isinstance(parsed, dict):
        raise ConfigurationError("LABELSYNC_CONSTANT_FIELDS must be a JSON object")
    return {str(key): "" if value is None else str(value) for key, value in parsed.items()}


def get_pool_config() -> PoolConfig:
    prefix = optional_env_var("LABELSYNC_POOL_PREFIX")
    if prefix is None:
        return DEFAULT_POOL
    return PoolConfig(prefix=prefix)


def get_codec_config(*, pool: PoolConfig | None = None) -> CodecConfig:
    return CodecConfig(
        constant_fields=MappingProxyType(
            _parse_constant_fields(optional_env_var("LABELSYNC_CONSTANT_FIELDS"))
        ),
        slot_field=optional_env_var("LABELSYNC_SLOT_FIELD"),
        name_field=optional_env_var("LABELSYNC_NAME_FIELD"),
        pool=pool or get_pool_config(),
    )
