"""Configuration management for mongo-backup."""

import os
from dataclasses import dataclass, field
from typing import Optional

from ._utils import mask_url

SYSTEM_DATABASES = ("admin", "config", "local")
VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR"}


@dataclass(frozen=True)
class MongoConfig:
    """MongoDB connection configuration."""
    url: str = "mongodb://localhost:27017"
    server_selection_timeout_ms: int = 5000
    connect_timeout_ms: int = 10000
    include_system_databases: bool = False  # admin, config, local

    @classmethod
    def from_env(cls, **overrides) -> 'MongoConfig':
        """Create config from environment variables.

        Keyword overrides replace environment values before validation.
        """
        values = dict(
            url=os.getenv("MONGO_URL", "mongodb://localhost:27017"),
            server_selection_timeout_ms=int(os.getenv("MONGO_SERVER_SELECTION_TIMEOUT_MS", "5000")),
            connect_timeout_ms=int(os.getenv("MONGO_CONNECT_TIMEOUT_MS", "10000")),
            include_system_databases=os.getenv("MONGO_INCLUDE_SYSTEM_DATABASES", "false").lower() == "true"
        )
        values.update(overrides)
        return cls(**values)

    def __post_init__(self):
        """Validate configuration."""
        if not self.url.startswith(("mongodb://", "mongodb+srv://")):
            raise ValueError(f"url must use the mongodb:// or mongodb+srv:// scheme, got {mask_url(self.url)}")
        if self.server_selection_timeout_ms <= 0:
            raise ValueError(f"server_selection_timeout_ms must be positive, got {self.server_selection_timeout_ms}")
        if self.connect_timeout_ms <= 0:
            raise ValueError(f"connect_timeout_ms must be positive, got {self.connect_timeout_ms}")


@dataclass(frozen=True)
class BackupConfig:
    """Backup directory and logging configuration."""
    backup_root: str = "./backup"
    debug: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, **overrides) -> 'BackupConfig':
        """Create config from environment variables, then apply overrides."""
        values = dict(
            backup_root=os.getenv("MONGO_BACKUP_ROOT", "./backup"),
            debug=os.getenv("MONGO_BACKUP_DEBUG", "false").lower() == "true",
            log_level=os.getenv("MONGO_BACKUP_LOG_LEVEL", "INFO").upper()
        )
        values.update(overrides)
        return cls(**values)

    def __post_init__(self):
        """Validate configuration."""
        if not self.backup_root or not self.backup_root.strip():
            raise ValueError("backup_root must not be empty")
        if self.log_level not in VALID_LOG_LEVELS:
            raise ValueError(f"Unknown log level: {self.log_level}. Available: {VALID_LOG_LEVELS}")

    @property
    def effective_log_level(self) -> str:
        return "DEBUG" if self.debug else self.log_level


@dataclass(frozen=True)
class AppConfig:
    """Main mongo-backup configuration."""
    mongo: MongoConfig = field(default_factory=MongoConfig)
    backup: BackupConfig = field(default_factory=BackupConfig)

    @classmethod
    def from_env(cls, mongo_overrides: Optional[dict] = None, backup_overrides: Optional[dict] = None) -> 'AppConfig':
        """Create complete config from environment variables and optional overrides."""
        return cls(
            mongo=MongoConfig.from_env(**(mongo_overrides or {})),
            backup=BackupConfig.from_env(**(backup_overrides or {}))
        )

    def to_dict(self) -> dict:
        """Convert config to a dictionary safe for logging."""
        return {
            'mongo_url': mask_url(self.mongo.url),
            'server_selection_timeout_ms': self.mongo.server_selection_timeout_ms,
            'connect_timeout_ms': self.mongo.connect_timeout_ms,
            'include_system_databases': self.mongo.include_system_databases,
            'backup_root': self.backup.backup_root,
            'debug': self.backup.debug,
            'log_level': self.backup.effective_log_level,
        }
