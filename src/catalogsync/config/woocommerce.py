"""WooCommerce configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import require_env_vars
from .http_resilience import RateLimit, ResilienceConfig

WOOCOMMERCE_API_PATH = "/wp-json/wc/v3"
WOOCOMMERCE_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True)
class WooCommerceConfig:
    """Holds WooCommerce REST API credentials and client settings."""

    store_url: str
    consumer_key: str
    consumer_secret: str
    resilience: ResilienceConfig

    @property
    def api_url(self) -> str:
        return f"{self.store_url.rstrip('/')}{WOOCOMMERCE_API_PATH}"


def get_woocommerce_config(*, resilience: ResilienceConfig | None = None) -> WooCommerceConfig:
    values = require_env_vars(
        ("WOOCOMMERCE_STORE_URL", "WOOCOMMERCE_CONSUMER_KEY", "WOOCOMMERCE_CONSUMER_SECRET")
    )
    store_url = values["WOOCOMMERCE_STORE_URL"]
    return WooCommerceConfig(
        store_url=store_url,
        consumer_key=values["WOOCOMMERCE_CONSUMER_KEY"],
        consumer_secret=values["WOOCOMMERCE_CONSUMER_SECRET"],
        resilience=resilience
        or ResilienceConfig(
            name="woocommerce",
            timeout_seconds=WOOCOMMERCE_TIMEOUT_SECONDS,
            ratelimit=RateLimit(max_calls=3, per_seconds=1.0),
        ),
    )
