"""
slotkeeper.config.webhook – outbound appointment event delivery.

Env vars: APPOINTMENT_WEBHOOK_URL, APPOINTMENT_WEBHOOK_SECRET,
APPOINTMENT_WEBHOOK_TIMEOUT.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class WebhookConfig:
    """Delivery is disabled unless both url and secret are set."""

    url: Optional[str] = None
    secret: Optional[str] = None
    timeout_seconds: float = 10.0

    def __post_init__(self) -> None:
        if self.url and not self.url.startswith(("http://", "https://")):
            raise ValueError("APPOINTMENT_WEBHOOK_URL must start with http:// or https://")
        if self.timeout_seconds <= 0:
            raise ValueError(f"timeout_seconds must be > 0, got {self.timeout_seconds!r}")

    @property
    def enabled(self) -> bool:
        return bool(self.url and self.secret)

    @classmethod
    def from_env(cls, **overrides: object) -> WebhookConfig:
        url = overrides.get("url", os.environ.get("APPOINTMENT_WEBHOOK_URL"))
        secret = overrides.get("secret", os.environ.get("APPOINTMENT_WEBHOOK_SECRET"))
        timeout = overrides.get("timeout_seconds")
        if timeout is None:
            timeout = os.environ.get("APPOINTMENT_WEBHOOK_TIMEOUT", "10")
        return cls(
            url=(str(url).strip() or None) if url else None,
            secret=(str(secret).strip() or None) if secret else None,
            timeout_seconds=float(timeout),
        )


def load_webhook_config(**overrides: object) -> WebhookConfig:
    return WebhookConfig.from_env(**overrides)
