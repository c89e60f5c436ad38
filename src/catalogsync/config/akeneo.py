"""Akeneo PIM configuration values."""

from __future__ import annotations

import os
from dataclasses import dataclass

from .env import require_env_vars
from .http_resilience import RateLimit, ResilienceConfig

AKENEO_TIMEOUT_SECONDS = 30.0
AKENEO_DEFAULT_LOCALE = "en_US"
TOKEN_REFRESH_SKEW_SECONDS = 300.0


@dataclass(frozen=True)
class AkeneoConfig:
    """Holds Akeneo API connection credentials."""

    base_url: str
    client_id: str
    client_secret: str
    username: str
    password: str
    resilience: ResilienceConfig
    locale: str = AKENEO_DEFAULT_LOCALE
    token_refresh_skew_seconds: float = TOKEN_REFRESH_SKEW_SECONDS


def get_akeneo_config(*, resilience: ResilienceConfig | None = None) -> AkeneoConfig:
    values = require_env_vars(
        (
            "AKENEO_BASE_URL",
            "AKENEO_CLIENT_ID",
            "AKENEO_CLIENT_SECRET",
            "AKENEO_USERNAME",
            "AKENEO_PASSWORD",
        )
    )
    base_url = values["AKENEO_BASE_URL"].rstrip("/")
    return AkeneoConfig(
        base_url=base_url,
        client_id=values["AKENEO_CLIENT_ID"],
        client_secret=values["AKENEO_CLIENT_SECRET"],
        username=values["AKENEO_USERNAME"],
        password=values["AKENEO_PASSWORD"],
        locale=os.getenv("AKENEO_LOCALE") or AKENEO_DEFAULT_LOCALE,
        resilience=resilience
        or ResilienceConfig(
            name="akeneo",
            base_url=base_url,
            timeout_seconds=AKENEO_TIMEOUT_SECONDS,
            ratelimit=RateLimit(max_calls=5, per_seconds=1.0),
        ),
    )
