"""Connection settings for an Elasticsearch-compatible service.

A single base URL (not separate host / port) identifies the cluster, and
request signing targets AWS-hosted domains via SigV4.

All settings can be overridden via a ``.env`` file, environment variables,
or by passing values directly to ``ClientConfig`` / :func:`load_config`.
"""

from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from dotenv import load_dotenv

SERVICE_NAME = "elasticsearch"
DEFAULT_REGION = "eu-west-1"
DEFAULT_SERVICE = "es"


def _parse_bool(value: str) -> bool:
    normalized = value.strip().lower()
    if normalized in {"1", "true", "t", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "f", "no", "n", "off"}:
        return False
    raise ValueError(f"Invalid boolean value: {value!r}")


def _parse_indexes(value: str) -> tuple[str, ...]:
    return tuple(part.strip() for part in value.split(",") if part.strip())


@dataclass(frozen=True)
class ClientConfig:
    """Immutable configuration for one client instance."""

    url: str = "http://localhost:9200"
    sign_requests: bool = False
    aws_region: str = DEFAULT_REGION
    aws_service: str = DEFAULT_SERVICE
    aws_sdk_signer: bool = False
    service_name: str = SERVICE_NAME
    # informational only, never enforced
    indexes: tuple[str, ...] = ()
    max_retries: int = 3
    timeout: float = 30.0
    retry_backoff: float = 0.5
    retry_backoff_max: float = 8.0


_ENV_PARSERS = {
    "url": ("ELASTICSEARCH_URL", str),
    "sign_requests": ("ELASTICSEARCH_SIGN_REQUESTS", _parse_bool),
    "aws_region": ("ELASTICSEARCH_AWS_REGION", str),
    "aws_service": ("ELASTICSEARCH_AWS_SERVICE", str),
    "aws_sdk_signer": ("ELASTICSEARCH_AWS_SDK_SIGNER", _parse_bool),
    "max_retries": ("ELASTICSEARCH_MAX_RETRIES", int),
    "timeout": ("ELASTICSEARCH_TIMEOUT", float),
    "retry_backoff": ("ELASTICSEARCH_RETRY_BACKOFF", float),
    "retry_backoff_max": ("ELASTICSEARCH_RETRY_BACKOFF_MAX", float),
    "indexes": ("ELASTICSEARCH_INDEXES", _parse_indexes),
}


def load_config(
    env_path: Optional[Union[str, Path]] = None,
    **overrides,
) -> ClientConfig:
    """Build a ClientConfig with .env, env-var and keyword overrides.

    Resolution order (later wins):
      1. Dataclass defaults
      2. ``.env`` file at *env_path* (never overrides variables already set)
      3. Environment variables (``ELASTICSEARCH_URL``, etc.)
      4. Explicit keyword arguments

    Supported env vars:
      - ELASTICSEARCH_URL
      - ELASTICSEARCH_SIGN_REQUESTS  ("true"/"false")
      - ELASTICSEARCH_AWS_REGION / ELASTICSEARCH_AWS_SERVICE
      - ELASTICSEARCH_AWS_SDK_SIGNER  ("true"/"false")
      - ELASTICSEARCH_MAX_RETRIES
      - ELASTICSEARCH_TIMEOUT
      - ELASTICSEARCH_RETRY_BACKOFF / ELASTICSEARCH_RETRY_BACKOFF_MAX
      - ELASTICSEARCH_INDEXES  (comma-separated)
    """
    if env_path is not None:
        load_dotenv(env_path)

    values: dict = {}

    # Env-var layer
    for field_name, (env_name, parse) in _ENV_PARSERS.items():
        raw = os.getenv(env_name)
        if raw:
            values[field_name] = parse(raw)

    # Explicit overrides layer
    known = {f.name for f in dataclasses.fields(ClientConfig)}
    for key, value in overrides.items():
        if key not in known:
            raise TypeError(f"Unknown config key: {key!r}")
        if key == "indexes":
            value = tuple(value)
        values[key] = value

    return ClientConfig(**values)
