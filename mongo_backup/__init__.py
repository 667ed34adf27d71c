from ._codec import decode_documents, decode_value, encode_documents, encode_value
from ._selection import Selection, resolve_selection, resolve_single, select_all
from .backup import BackupManager, RestoreManager, RunReport, UnitOutcome, UnitStatus
from .config import AppConfig, BackupConfig, MongoConfig
from .connection import MongoConnection
from .exceptions import (
    ConnectionUnavailableError,
    MalformedExtendedValueError,
    MalformedSnapshotFileError,
    MongoBackupError,
)

__version__ = "0.1.0"
__author__ = "mongo-backup contributors"
__url__ = "https://github.com/mongo-backup/mongo-backup"
