"""
Immutable handler context.

Everything a gateway handler needs beyond the database (which is reached
through `DatabaseService`) is frozen here once at startup and injected into
the router. Handlers never read `Config` directly.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Type

from quakebot.core.config.config import Config
from quakebot.modules.relay.service import RelaySettings


@dataclass(frozen=True)
class BotContext:
    aoc_url: str
    aoc_token: str = field(repr=False)
    http_timeout_seconds: float
    relay: RelaySettings

    @classmethod
    def from_config(cls, config: Type[Config] = Config) -> "BotContext":
        """Snapshot a validated `Config`."""
        return cls(
            aoc_url=config.AOC_URL,
            aoc_token=config.AOC_TOKEN,
            http_timeout_seconds=float(config.HTTP_TIMEOUT_SECONDS),
            relay=RelaySettings(
                host=config.SMTP_HOST,
                port=config.SMTP_PORT,
                username=config.SMTP_USERNAME,
                password=config.SMTP_PASSWORD,
                sender=config.RELAY_FROM,
                recipients=tuple(config.RELAY_TO),
                subject=config.RELAY_SUBJECT,
                marker=config.BROADCAST_MARKER,
                replacement=config.BROADCAST_REPLACEMENT,
                timeout_seconds=float(config.HTTP_TIMEOUT_SECONDS),
            ),
        )
