"""
Configuration Management Module

Provides ledger configuration from the environment using pydantic-settings.
Variables use the LEDGER_ prefix, e.g. LEDGER_DB_PATH=/var/lib/ledger.db.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LedgerConfig(BaseSettings):
    """Account ledger configuration"""

    # Storage
    db_path: str = "ledger.db"
    store_timeout: float = Field(default=5.0, gt=0)  # SQLite busy timeout, seconds

    # Concurrency
    lock_timeout: float = Field(default=10.0, gt=0)  # per-account lock wait, seconds

    # Business rules
    max_generation_attempts: int = Field(default=5, ge=1)

    # Logging
    log_level: str = "WARNING"

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


# Global configuration instance
config = LedgerConfig()


def get_config() -> LedgerConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> LedgerConfig:
    """Reload configuration from environment"""
    global config
    config = LedgerConfig()
    return config
