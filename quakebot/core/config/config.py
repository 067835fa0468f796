"""
Static configuration management for QuakeBot.

Purpose
-------
Provides centralized static configuration loaded from environment variables
with sensible defaults, type validation, and bounds checking. Everything here
is read once at startup; changing a value requires a restart.

Responsibilities
----------------
- Load configuration from environment variables with .env support
- Provide type-safe access to all static configuration values
- Fail fast with ConfigurationError when a required secret is missing
- Track which values came from the environment versus defaults

Non-Responsibilities
--------------------
- Per-handler runtime context (see quakebot.bot.context.BotContext)
- Secrets storage (use environment variables or a .env file)

Architecture Notes
------------------
- Singleton pattern via class methods (no instantiation)
- `validate()` is called explicitly by the entry point, never on import,
  so tests can patch the environment before loading
- Directory paths relative to project root for portability

Configuration Categories
------------------------
1. Discord: bot token
2. Database: connection URL and pool settings
3. Advent leaderboard: URL, session token, HTTP timeout
4. Mail relay: SMTP host/port/credentials, sender, recipients
5. Environment: environment type, logging

Environment Variables
---------------------
Required:
- DISCORD_TOKEN: Bot authentication token
- DATABASE_URL: SQLAlchemy async connection string
- AOC_URL: Private leaderboard JSON URL
- AOC_TOKEN: Session cookie for the leaderboard
- SMTP_PASSWORD: Mail relay password

See individual attributes for the optional ones.
"""

import logging
import os
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv

from quakebot.core.exceptions import ConfigurationError

# Load environment variables from .env file
load_dotenv()

# ============================================================================
# Enums and Constants
# ============================================================================


class Environment(Enum):
    """Deployment environment types."""

    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"

    @classmethod
    def from_string(cls, value: str) -> "Environment":
        """
        Parse environment string safely with fallback.

        Example
        -------
        >>> Environment.from_string("production") == Environment.PRODUCTION
        True
        >>> Environment.from_string("invalid") == Environment.DEVELOPMENT
        True
        """
        try:
            return cls(value.lower())
        except ValueError:
            # Structured logger is not configured yet during bootstrap
            logging.warning(
                f"Unknown environment '{value}', defaulting to development"
            )
            return cls.DEVELOPMENT


# ============================================================================
# Configuration Metrics Tracker
# ============================================================================


class _ConfigLoadMetrics:
    """
    Internal tracker for configuration loading.

    Records which configuration values came from environment variables
    versus defaults, and any validation errors encountered.
    """

    def __init__(self):
        self.env_vars_loaded: Dict[str, bool] = {}
        self.validation_errors: Dict[str, str] = {}
        self.defaults_used: Dict[str, Any] = {}

    def record_env_load(self, key: str, from_env: bool, default: Any):
        """Record whether a config value came from environment."""
        self.env_vars_loaded[key] = from_env
        if not from_env:
            self.defaults_used[key] = default

    def record_validation_error(self, key: str, error: str):
        """Record a validation error."""
        self.validation_errors[key] = error

    def get_summary(self) -> Dict[str, Any]:
        """Get configuration loading summary."""
        return {
            "total_configs": len(self.env_vars_loaded),
            "from_environment": sum(1 for v in self.env_vars_loaded.values() if v),
            "from_defaults": sum(1 for v in self.env_vars_loaded.values() if not v),
            "validation_errors": len(self.validation_errors),
            "defaults_used": list(self.defaults_used.keys()),
        }


# ============================================================================
# Main Configuration Class
# ============================================================================


class Config:
    """
    Centralized static configuration for the QuakeBot Discord bot.

    Usage
    -----
    >>> Config.validate()
    >>> token = Config.DISCORD_TOKEN
    >>> if Config.is_production():
    ...     logger.info("Running in production mode")
    """

    # =========================================================================
    # Internal State
    # =========================================================================

    _metrics: Optional[_ConfigLoadMetrics] = None
    _validated: bool = False

    REQUIRED_KEYS = (
        "DISCORD_TOKEN",
        "DATABASE_URL",
        "AOC_URL",
        "AOC_TOKEN",
        "SMTP_PASSWORD",
    )

    # =========================================================================
    # Discord Configuration
    # =========================================================================

    DISCORD_TOKEN: str = ""

    # =========================================================================
    # Database Configuration
    # =========================================================================

    DATABASE_URL: str = ""
    DATABASE_POOL_SIZE: int = 5
    DATABASE_MAX_OVERFLOW: int = 10
    DATABASE_POOL_RECYCLE: int = 1800
    DATABASE_POOL_TIMEOUT: int = 30
    DATABASE_STATEMENT_TIMEOUT_MS: int = 30_000
    DATABASE_ECHO: bool = False

    # =========================================================================
    # Advent Leaderboard
    # =========================================================================

    AOC_URL: str = ""
    AOC_TOKEN: str = ""
    HTTP_TIMEOUT_SECONDS: int = 15

    # =========================================================================
    # Mail Relay
    # =========================================================================

    SMTP_HOST: str = "smtp.gmail.com"
    SMTP_PORT: int = 465
    SMTP_USERNAME: str = "earthquakersdiscord@gmail.com"
    SMTP_PASSWORD: str = ""
    RELAY_FROM: str = "EarthQuakers <earthquakersdiscord@gmail.com>"
    RELAY_TO: List[str] = []
    RELAY_SUBJECT: str = "EarthQuakers announcement"
    BROADCAST_MARKER: str = "@everyone"
    BROADCAST_REPLACEMENT: str = "everyone"

    # =========================================================================
    # Environment Configuration
    # =========================================================================

    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    LOG_JSON: Optional[bool] = None

    # =========================================================================
    # Directory Configuration
    # =========================================================================

    PROJECT_ROOT = Path(__file__).resolve().parents[3]
    LOGS_DIR = PROJECT_ROOT / "logs"

    # =========================================================================
    # Helper Methods
    # =========================================================================

    @classmethod
    def _init_metrics(cls):
        if cls._metrics is None:
            cls._metrics = _ConfigLoadMetrics()

    @classmethod
    def _safe_int(
        cls,
        key: str,
        default: int,
        min_val: Optional[int] = None,
        max_val: Optional[int] = None,
    ) -> int:
        """
        Safely parse integer from environment with validation.

        Out-of-bounds or non-numeric values fall back to `default` with a
        warning rather than failing startup.

        Example
        -------
        >>> Config._safe_int("DATABASE_POOL_SIZE", 5, min_val=1, max_val=200)
        5
        """
        cls._init_metrics()

        raw_value = os.getenv(key)

        if raw_value is None:
            cls._metrics.record_env_load(key, False, default)
            return default

        try:
            value = int(raw_value)
        except ValueError:
            error = f"{key}='{raw_value}' is not a valid integer, using default {default}"
            logging.warning(error)
            cls._metrics.record_validation_error(key, error)
            return default

        if min_val is not None and value < min_val:
            error = f"{key}={value} is below minimum {min_val}, using default {default}"
            logging.warning(error)
            cls._metrics.record_validation_error(key, error)
            return default

        if max_val is not None and value > max_val:
            error = f"{key}={value} exceeds maximum {max_val}, using default {default}"
            logging.warning(error)
            cls._metrics.record_validation_error(key, error)
            return default

        cls._metrics.record_env_load(key, True, default)
        return value

    @classmethod
    def _safe_bool(cls, key: str, default: Optional[bool]) -> Optional[bool]:
        """
        Safely parse boolean from environment.

        Recognizes: true/false, yes/no, 1/0, on/off (case-insensitive).
        """
        cls._init_metrics()

        raw_value = os.getenv(key)

        if raw_value is None:
            cls._metrics.record_env_load(key, False, default)
            return default

        normalized = raw_value.lower().strip()

        if normalized in {"true", "yes", "1", "on"}:
            value = True
        elif normalized in {"false", "no", "0", "off"}:
            value = False
        else:
            error = f"{key}='{raw_value}' is not a valid boolean, using default {default}"
            logging.warning(error)
            cls._metrics.record_validation_error(key, error)
            return default

        cls._metrics.record_env_load(key, True, default)
        return value

    @classmethod
    def _safe_str(cls, key: str, default: str) -> str:
        """Get string from environment, recording where it came from."""
        cls._init_metrics()

        value = os.getenv(key, default)
        cls._metrics.record_env_load(key, key in os.environ, default)
        return value

    @classmethod
    def _safe_list(cls, key: str, default: List[str]) -> List[str]:
        """Parse a comma-separated list, dropping empty items."""
        raw_value = cls._safe_str(key, "")
        if not raw_value:
            return list(default)
        return [item.strip() for item in raw_value.split(",") if item.strip()]

    # =========================================================================
    # Configuration Loading
    # =========================================================================

    @classmethod
    def load(cls) -> None:
        """Load all configuration from environment variables."""
        cls._metrics = _ConfigLoadMetrics()

        # Discord
        cls.DISCORD_TOKEN = cls._safe_str("DISCORD_TOKEN", "")

        # Database
        cls.DATABASE_URL = cls._safe_str("DATABASE_URL", "")
        cls.DATABASE_POOL_SIZE = cls._safe_int(
            "DATABASE_POOL_SIZE", 5, min_val=1, max_val=200
        )
        cls.DATABASE_MAX_OVERFLOW = cls._safe_int(
            "DATABASE_MAX_OVERFLOW", 10, min_val=0, max_val=200
        )
        cls.DATABASE_POOL_RECYCLE = cls._safe_int(
            "DATABASE_POOL_RECYCLE", 1800, min_val=60
        )
        cls.DATABASE_POOL_TIMEOUT = cls._safe_int(
            "DATABASE_POOL_TIMEOUT", 30, min_val=1
        )
        cls.DATABASE_STATEMENT_TIMEOUT_MS = cls._safe_int(
            "DATABASE_STATEMENT_TIMEOUT_MS", 30_000, min_val=100
        )
        cls.DATABASE_ECHO = bool(cls._safe_bool("DATABASE_ECHO", False))

        # Advent leaderboard
        cls.AOC_URL = cls._safe_str("AOC_URL", "")
        cls.AOC_TOKEN = cls._safe_str("AOC_TOKEN", "")
        cls.HTTP_TIMEOUT_SECONDS = cls._safe_int(
            "HTTP_TIMEOUT_SECONDS", 15, min_val=1, max_val=300
        )

        # Mail relay
        cls.SMTP_HOST = cls._safe_str("SMTP_HOST", "smtp.gmail.com")
        cls.SMTP_PORT = cls._safe_int("SMTP_PORT", 465, min_val=1, max_val=65535)
        cls.SMTP_USERNAME = cls._safe_str(
            "SMTP_USERNAME", "earthquakersdiscord@gmail.com"
        )
        cls.SMTP_PASSWORD = cls._safe_str("SMTP_PASSWORD", "")
        cls.RELAY_FROM = cls._safe_str(
            "RELAY_FROM", "EarthQuakers <earthquakersdiscord@gmail.com>"
        )
        cls.RELAY_TO = cls._safe_list("RELAY_TO", [])
        cls.RELAY_SUBJECT = cls._safe_str("RELAY_SUBJECT", "EarthQuakers announcement")
        cls.BROADCAST_MARKER = cls._safe_str("BROADCAST_MARKER", "@everyone")
        cls.BROADCAST_REPLACEMENT = cls._safe_str("BROADCAST_REPLACEMENT", "everyone")

        # Environment
        cls.ENVIRONMENT = cls._safe_str("ENVIRONMENT", "development")
        cls.LOG_LEVEL = cls._safe_str("LOG_LEVEL", "INFO")
        cls.LOG_JSON = cls._safe_bool("LOG_JSON", None)

        logs_dir = os.getenv("LOGS_DIR")
        cls.LOGS_DIR = Path(logs_dir) if logs_dir else cls.PROJECT_ROOT / "logs"

    @classmethod
    def validate(cls) -> None:
        """
        Load and validate configuration.

        Raises
        ------
        ConfigurationError
            If any required value is missing. Startup must not continue.
        """
        if cls._validated:
            return

        logger = logging.getLogger(__name__)
        cls.load()

        missing = [key for key in cls.REQUIRED_KEYS if not getattr(cls, key)]
        for key in missing:
            cls._metrics.record_validation_error(key, "missing")
        if missing:
            names = ", ".join(missing)
            raise ConfigurationError(
                names, f"{names} environment variable(s) required"
            )

        if not cls.RELAY_TO:
            logger.warning("RELAY_TO is empty; broadcast messages will not be relayed")

        valid_log_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if cls.LOG_LEVEL.upper() not in valid_log_levels:
            logger.warning(f"Invalid LOG_LEVEL '{cls.LOG_LEVEL}', using INFO")
            cls.LOG_LEVEL = "INFO"

        if cls.is_production() and "localhost" in cls.DATABASE_URL:
            logger.warning(
                "Production environment using localhost database - "
                "this may be incorrect"
            )

        cls._validated = True

        summary = cls._metrics.get_summary()
        logger.info(f"Configuration loaded: {summary}")
        if cls._metrics.validation_errors:
            logger.warning(f"Configuration warnings: {cls._metrics.validation_errors}")

    @classmethod
    def reset(cls) -> None:
        """Forget validation state so the next validate() reloads."""
        cls._validated = False
        cls._metrics = None

    # =========================================================================
    # Environment Checks
    # =========================================================================

    @classmethod
    def is_production(cls) -> bool:
        """Check if running in production environment."""
        return Environment.from_string(cls.ENVIRONMENT) is Environment.PRODUCTION

    @classmethod
    def is_testing(cls) -> bool:
        """Check if running in testing environment."""
        return Environment.from_string(cls.ENVIRONMENT) is Environment.TESTING

    # =========================================================================
    # Metrics & Summary
    # =========================================================================

    @classmethod
    def get_config_summary(cls) -> Dict[str, Any]:
        """
        Get non-sensitive configuration summary for debugging.

        Example
        -------
        >>> Config.get_config_summary()["discord_token_set"]
        True
        """
        return {
            "environment": cls.ENVIRONMENT,
            "log_level": cls.LOG_LEVEL,
            "database_pool_size": cls.DATABASE_POOL_SIZE,
            "database_max_overflow": cls.DATABASE_MAX_OVERFLOW,
            "smtp_host": cls.SMTP_HOST,
            "relay_recipients": len(cls.RELAY_TO),
            "discord_token_set": bool(cls.DISCORD_TOKEN),
            "database_url_set": bool(cls.DATABASE_URL),
            "aoc_token_set": bool(cls.AOC_TOKEN),
            "smtp_password_set": bool(cls.SMTP_PASSWORD),
        }
