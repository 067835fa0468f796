"""
Progle results: share-message grammar, fact persistence, averages.
"""

from quakebot.modules.progle.grammar import parse
from quakebot.modules.progle.models import Averages, GameMode, GameResult, RecordOutcome
from quakebot.modules.progle.repository import FactStore
from quakebot.modules.progle.service import Phrasing, ProgleService

__all__ = [
    "parse",
    "Averages",
    "GameMode",
    "GameResult",
    "RecordOutcome",
    "FactStore",
    "Phrasing",
    "ProgleService",
]
