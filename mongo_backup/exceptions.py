"""Errors raised by the codec, the connection handle and the snapshot helpers."""

from pathlib import Path
from typing import Optional, Union


class MongoBackupError(Exception):
    """Base exception for mongo-backup errors."""
    pass


class ConnectionUnavailableError(MongoBackupError):
    """The liveness check against the server failed."""

    def __init__(self, detail: str):
        super().__init__(f"MongoDB connection unavailable: {detail}")
        self.detail = detail


class MalformedExtendedValueError(MongoBackupError, ValueError):
    """An extended JSON tag carried a payload that cannot be converted."""

    def __init__(self, path: str, tag: str, detail: str):
        super().__init__(f"Malformed {tag} value at {path}: {detail}")
        self.path = path
        self.tag = tag
        self.detail = detail


class MalformedSnapshotFileError(MongoBackupError):
    """A collection snapshot file does not hold a JSON array."""

    def __init__(self, path: Union[str, Path], detail: Optional[str] = None):
        message = f"Snapshot file {path} does not contain an array of documents"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.path = Path(path)
        self.detail = detail
