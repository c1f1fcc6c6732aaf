"""Runtime settings for the storefront, read from the environment.

Persistence, brokers and the event store are configured through Protean's
``domain.toml`` (with ``PROTEAN_ENV`` overlays). The values here cover the
business knobs that sit outside Protean's configuration.
"""

import os
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache


class StatusPolicy(Enum):
    PERMISSIVE = "permissive"
    FORWARD_ONLY = "forward_only"


@dataclass(frozen=True)
class Settings:
    environment: str
    currency: str
    status_policy: StatusPolicy
    log_dir: str


def _environment() -> str:
    return (os.getenv("ENVIRONMENT") or os.getenv("PROTEAN_ENV") or "development").lower()


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings once per process. Call ``get_settings.cache_clear()`` to reload."""
    raw_policy = os.getenv("STOREFRONT_STATUS_POLICY", StatusPolicy.PERMISSIVE.value).lower()
    try:
        policy = StatusPolicy(raw_policy)
    except ValueError as exc:
        raise ValueError(
            f"STOREFRONT_STATUS_POLICY must be one of {[p.value for p in StatusPolicy]}, got {raw_policy!r}"
        ) from exc

    return Settings(
        environment=_environment(),
        currency=os.getenv("STOREFRONT_CURRENCY", "NPR"),
        status_policy=policy,
        log_dir=os.getenv("LOG_DIR", "logs"),
    )
