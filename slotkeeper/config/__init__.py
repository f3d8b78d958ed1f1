"""
slotkeeper config: load from env.

Load from env: load_postgres_config(), load_sweeper_config(), load_webhook_config().
"""
from slotkeeper.config.postgres import PostgresConfig, load_postgres_config
from slotkeeper.config.sweeper import SweeperConfig, load_sweeper_config
from slotkeeper.config.webhook import WebhookConfig, load_webhook_config

__all__ = [
    "PostgresConfig",
    "load_postgres_config",
    "SweeperConfig",
    "load_sweeper_config",
    "WebhookConfig",
    "load_webhook_config",
]
