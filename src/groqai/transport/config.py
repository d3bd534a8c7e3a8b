# src/groqai/transport/config.py

import logging
import os
from dataclasses import dataclass, field
from typing import Any

from groqai.errors import InvalidCredentialError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.groq.com/openai/v1/"
API_KEY_PREFIX = "gsk_"


def validate_api_key(api_key: str | None) -> str:
    """Reject obviously malformed keys before any request is made."""
    if api_key is None or not api_key.strip():
        raise InvalidCredentialError("API key is empty")
    if not api_key.strip().startswith(API_KEY_PREFIX):
        raise InvalidCredentialError(
            f"Invalid API key format: expected prefix '{API_KEY_PREFIX}'"
        )
    return api_key.strip()


@dataclass(frozen=True)
class ClientConfig:
    """Configuration for the Groq client.

    Immutable. Shared read-only by every request issued through one client.
    ``max_retries`` is the total number of attempts made for one request.
    """

    api_key: str = field(repr=False)
    base_url: str = DEFAULT_BASE_URL
    timeout: float = 30.0
    proxy: str | None = None
    max_retries: int = 3
    backoff_base: float = 1.0
    backoff_multiplier: float = 2.0
    backoff_cap: float = 60.0
    jitter_ratio: float = 0.1
    user_agent: str = "groqai-python/0.1.0"
    headers: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "api_key", validate_api_key(self.api_key))
        if not self.base_url.endswith("/"):
            # Relative request paths are joined onto the base URL.
            object.__setattr__(self, "base_url", self.base_url + "/")
        if self.timeout <= 0:
            raise ValueError("timeout must be > 0")
        if self.max_retries < 1:
            raise ValueError("max_retries must be >= 1")
        if self.backoff_base < 0 or self.backoff_cap < 0:
            raise ValueError("backoff_base and backoff_cap must be >= 0")
        if self.backoff_multiplier < 1:
            raise ValueError("backoff_multiplier must be >= 1")
        if not 0 <= self.jitter_ratio <= 1:
            raise ValueError("jitter_ratio must be within [0, 1]")

    @classmethod
    def from_env(cls, **overrides: Any) -> "ClientConfig":
        """Build a config from ``GROQ_*`` environment variables.

        Explicit keyword arguments take precedence over the environment.
        """
        values: dict[str, Any] = {"api_key": os.getenv("GROQ_API_KEY")}
        if base_url := os.getenv("GROQ_BASE_URL"):
            values["base_url"] = base_url
        if timeout := os.getenv("GROQ_TIMEOUT"):
            values["timeout"] = float(timeout)
        if proxy := os.getenv("GROQ_PROXY"):
            values["proxy"] = proxy
        if max_retries := os.getenv("GROQ_MAX_RETRIES"):
            values["max_retries"] = int(max_retries)
        values.update(overrides)
        logger.debug("Loaded client config from environment")
        return cls(**values)
