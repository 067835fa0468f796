"""
Progle share-message grammar.

A result message looks like::

    Found #progle language in 3 attempts! 💥 Try and beat me 💥
    Guess today's code snippet!
    ...anything...

Rules
-----
1. The message must start with ``Found #progle language in ``.
2. One or more ASCII digits follow: the attempt count. Leading zeros are fine.
3. Then either the plural or the singular suffix, each ending in a newline.
   The suffix is not checked against the number, so ``1 attempts!`` and
   ``4 attempt!`` are both accepted.
4. ``Guess today's code snippet!`` directly after the suffix marks a code
   game; otherwise it is classic.
5. Whatever follows is ignored.

A miss returns None. Most chat messages are misses, so this never raises.
"""

from __future__ import annotations

import re
from typing import Optional

from quakebot.modules.progle.models import GameMode, GameResult

PREFIX = "Found #progle language in "
PLURAL_SUFFIX = " attempts! 💥 Try and beat me 💥\n"
SINGULAR_SUFFIX = " attempt! 💥 Try and beat me 💥\n"
CODE_MARKER = "Guess today's code snippet!"

# Plural is tried first; the two literals differ before the "!" anyway.
PROGLE_REGEX = re.compile(
    re.escape(PREFIX)
    + r"(?P<attempts>[0-9]+)"
    + "(?:" + re.escape(PLURAL_SUFFIX) + "|" + re.escape(SINGULAR_SUFFIX) + ")"
    + "(?P<code>" + re.escape(CODE_MARKER) + ")?"
)


def parse(text: Optional[str]) -> Optional[GameResult]:
    """Return a GameResult if the text is a progle share message."""

    if not text:
        return None

    match = PROGLE_REGEX.match(text)
    if not match:
        return None

    mode = GameMode.CODE if match.group("code") else GameMode.CLASSIC
    return GameResult(mode=mode, attempts=int(match.group("attempts")))
