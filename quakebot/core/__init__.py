"""
Core infrastructure layer for QuakeBot.

- Configuration (`quakebot.core.config`)
- Database engine and sessions (`quakebot.core.database`)
- Structured logging (`quakebot.core.logging`)
- Infrastructure exceptions (`quakebot.core.exceptions`)

Submodules are imported directly; this package performs no side effects.
"""
