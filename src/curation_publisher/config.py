from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping
from urllib.parse import urlparse

from .errors import ConfigurationError

DEFAULT_TIMEOUT_SECS = 30.0
DEFAULT_MAX_WORKERS = 1


@dataclass(frozen=True)
class PublisherSettings:
    base_url: str
    token: str
    timeout_secs: float = DEFAULT_TIMEOUT_SECS
    max_workers: int = DEFAULT_MAX_WORKERS

    @property
    def masked_token(self) -> str:
        return "***"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "PublisherSettings":
        env = os.environ if environ is None else environ
        base_url = env.get("JF_URL", "").strip().rstrip("/")
        token = env.get("BEARER_TOKEN", "").strip()

        if not base_url:
            raise ConfigurationError("JF_URL environment variable is required")
        if not token:
            raise ConfigurationError("BEARER_TOKEN environment variable is required")

        parsed = urlparse(base_url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ConfigurationError(
                f"JF_URL must be an http(s) URL, got '{base_url}'",
                details={"JF_URL": base_url},
            )

        return cls(
            base_url=base_url,
            token=token,
            timeout_secs=_read_timeout(env),
            max_workers=_read_workers(env),
        )


def _read_timeout(env: Mapping[str, str]) -> float:
    raw = env.get("CURATION_TIMEOUT_SECS", "").strip()
    try:
        timeout = float(raw)
    except ValueError:
        return DEFAULT_TIMEOUT_SECS
    return timeout if timeout > 0 else DEFAULT_TIMEOUT_SECS


def _read_workers(env: Mapping[str, str]) -> int:
    raw = env.get("CURATION_MAX_WORKERS", "").strip()
    try:
        workers = int(raw)
    except ValueError:
        return DEFAULT_MAX_WORKERS
    return max(1, workers)
