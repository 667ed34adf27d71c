"""Backup and restore functionality for MongoDB projects."""

from .manager import BackupManager, RestoreManager
from .models import RunReport, UnitOutcome, UnitStatus

__all__ = ["BackupManager", "RestoreManager", "RunReport", "UnitOutcome", "UnitStatus"]
