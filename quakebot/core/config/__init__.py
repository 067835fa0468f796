"""
Configuration subsystem for QuakeBot.

Static configuration only: values are read from the environment (with .env
support) once at startup via `Config.validate()`.

Usage
-----
```python
from quakebot.core.config import Config

Config.validate()
url = Config.DATABASE_URL
```
"""

from quakebot.core.config.config import Config, Environment

__all__ = ["Config", "Environment"]
