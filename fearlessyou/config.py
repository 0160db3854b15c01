"""
Configuration management for FearlessYou.
"""

from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Config(BaseSettings):
    """Application configuration."""

    model_config = SettingsConfigDict(env_prefix="FEARLESS_", env_file=".env", extra="ignore")

    # Logging
    log_level: str = Field(default="INFO", description="Log level name")
    log_to_file: bool = Field(default=False, description="Write JSON logs to a file")
    logs_dir: Path = Field(default=Path("logs"), description="Directory for log files")

    # Challenge rules
    countdown_seconds: int = Field(default=24 * 60 * 60, ge=1, description="Length of a challenge countdown")
    tick_interval: float = Field(default=1.0, gt=0, description="Seconds between countdown ticks")
    initial_coins: int = Field(default=0, ge=0, description="Wallet balance at session start")


class StoreConfig(BaseSettings):
    """Progress store configuration."""

    model_config = SettingsConfigDict(env_prefix="FEARLESS_STORE_", env_file=".env", extra="ignore")

    backend: str = Field(default="file", description="Store backend: file, mongodb or memory")
    key: str = Field(default="EarnedCoinsChallenges", description="Key holding the completed days")

    # File backend
    path: Path = Field(default=Path("data/progress.json"), description="JSON key-value file")

    # MongoDB backend
    mongodb_url: str = Field(default="mongodb://localhost:27017", description="MongoDB connection URL")
    database_name: str = Field(default="fearlessyou", description="MongoDB database name")
    collection: str = Field(default="progress", description="Collection holding key-value documents")
    connection_timeout: int = Field(default=5, ge=1, description="Server selection timeout in seconds")


_config: Optional[Config] = None
_store_config: Optional[StoreConfig] = None


def get_config() -> Config:
    """Get the global application configuration."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def get_store_config() -> StoreConfig:
    """Get the global store configuration."""
    global _store_config
    if _store_config is None:
        _store_config = StoreConfig()
    return _store_config


def reset_config():
    """Drop cached configuration so the next call re-reads the environment."""
    global _config, _store_config
    _config = None
    _store_config = None


def setup_directories():
    """Create directories the application writes to."""
    config = get_config()
    store_config = get_store_config()

    if config.log_to_file:
        config.logs_dir.mkdir(parents=True, exist_ok=True)

    if store_config.backend == "file":
        store_config.path.parent.mkdir(parents=True, exist_ok=True)
