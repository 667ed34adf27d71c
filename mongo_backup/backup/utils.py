"""Path and file helpers for backup/restore operations."""

import json
from pathlib import Path
from typing import Any, List, Union

from .._utils import logger
from ..exceptions import MalformedSnapshotFileError

SNAPSHOT_SUFFIX = ".json"

PathLike = Union[str, Path]


def project_dir(backup_root: PathLike, project: str) -> Path:
    return Path(backup_root) / project


def database_dir(backup_root: PathLike, project: str, database: str) -> Path:
    return project_dir(backup_root, project) / database


def collection_file(backup_root: PathLike, project: str, database: str, collection: str) -> Path:
    """Return ``<root>/<project>/<database>/<collection>.json``.

    Names are used verbatim; callers must avoid characters the OS reserves.
    """
    return database_dir(backup_root, project, database) / f"{collection}{SNAPSHOT_SUFFIX}"


def ensure_directory(path: Path) -> Path:
    """Create a directory (and parents) if it does not exist yet."""
    path.mkdir(parents=True, exist_ok=True)
    return path


async def save_snapshot(documents: List[Any], output_path: Path) -> None:
    """Write encoded documents as a pretty-printed JSON array.

    Any previous file at ``output_path`` is overwritten. Values the encoder
    left untouched are written through ``str``.

    Args:
        documents: Extended JSON documents
        output_path: Snapshot file path
    """
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(documents, f, indent=2, ensure_ascii=False, default=str)
        f.write("\n")

    logger.debug(f"Snapshot saved: {output_path} ({len(documents)} documents)")


async def load_snapshot(snapshot_path: Path) -> List[Any]:
    """Load a snapshot file.

    Args:
        snapshot_path: Snapshot file path

    Returns:
        Parsed (still encoded) documents

    Raises:
        MalformedSnapshotFileError: If the file is not a JSON array
    """
    with open(snapshot_path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise MalformedSnapshotFileError(snapshot_path, f"invalid JSON ({e})") from e

    if not isinstance(data, list):
        raise MalformedSnapshotFileError(snapshot_path, f"top-level value is {type(data).__name__}")

    logger.debug(f"Snapshot loaded: {snapshot_path} ({len(data)} documents)")
    return data


def _sorted_subdirectories(directory: Path) -> List[str]:
    if not directory.is_dir():
        return []
    return sorted(entry.name for entry in directory.iterdir() if entry.is_dir())


def list_projects(backup_root: PathLike) -> List[str]:
    """List backup projects (sub-directories of the backup root)."""
    return _sorted_subdirectories(Path(backup_root))


def list_database_dirs(project_path: Path) -> List[str]:
    """List database folders inside a project."""
    return _sorted_subdirectories(project_path)


def list_collection_files(database_path: Path) -> List[str]:
    """List collection names that have a snapshot file in a database folder."""
    if not database_path.is_dir():
        return []
    return sorted(
        entry.name[: -len(SNAPSHOT_SUFFIX)]
        for entry in database_path.iterdir()
        if entry.is_file() and entry.name.endswith(SNAPSHOT_SUFFIX) and len(entry.name) > len(SNAPSHOT_SUFFIX)
    )
