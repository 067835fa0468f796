"""
QuakeBot Shared Module

Domain-level foundations shared by the progle, advent and relay modules.
No Discord imports live here.

Usage
-----
    from quakebot.modules.shared import (
        MalformedUpstreamDataError,
        UpstreamFetchError,
    )
"""

from quakebot.modules.shared.exceptions import (
    MalformedUpstreamDataError,
    QuakeDomainException,
    UpstreamFetchError,
    is_transient_error,
)

__all__ = [
    "QuakeDomainException",
    "UpstreamFetchError",
    "MalformedUpstreamDataError",
    "is_transient_error",
]
