"""Broadcast-message mail relay."""

from quakebot.modules.relay.service import MailRelay, RelaySettings

__all__ = ["MailRelay", "RelaySettings"]
