"""Tests for backup utility functions."""

import json
import pytest
from pathlib import Path

from mongo_backup.backup.utils import (
    collection_file,
    ensure_directory,
    list_collection_files,
    list_database_dirs,
    list_projects,
    load_snapshot,
    save_snapshot,
)
from mongo_backup.exceptions import MalformedSnapshotFileError


def test_collection_file_layout(temp_backup_dir):
    """Test the <root>/<project>/<database>/<collection>.json layout."""
    path = collection_file(temp_backup_dir, "nightly", "shop", "orders")
    assert path == temp_backup_dir / "nightly" / "shop" / "orders.json"


def test_ensure_directory_is_idempotent(temp_backup_dir):
    target = temp_backup_dir / "nightly" / "shop"
    ensure_directory(target)
    ensure_directory(target)
    assert target.is_dir()


@pytest.mark.asyncio
async def test_save_and_load_snapshot(temp_backup_dir):
    """Test snapshot save and load."""
    snapshot_path = temp_backup_dir / "users.json"
    documents = [{"_id": {"$oid": "65a1f0c2e4b0a1b2c3d4e5f6"}, "name": "Zoë"}]

    await save_snapshot(documents, snapshot_path)

    text = snapshot_path.read_text(encoding="utf-8")
    assert text.startswith("[\n  {")
    assert "Zoë" in text
    assert await load_snapshot(snapshot_path) == documents


@pytest.mark.asyncio
async def test_save_empty_snapshot(temp_backup_dir):
    snapshot_path = temp_backup_dir / "logs.json"
    await save_snapshot([], snapshot_path)
    assert snapshot_path.read_text(encoding="utf-8").strip() == "[]"


@pytest.mark.asyncio
async def test_save_snapshot_stringifies_unknown_values(temp_backup_dir):
    snapshot_path = temp_backup_dir / "misc.json"
    await save_snapshot([{"path": Path("a/b")}], snapshot_path)
    assert json.loads(snapshot_path.read_text(encoding="utf-8")) == [{"path": str(Path("a/b"))}]


@pytest.mark.asyncio
async def test_load_snapshot_rejects_non_array(temp_backup_dir):
    snapshot_path = temp_backup_dir / "users.json"
    snapshot_path.write_text('{"name": "Ada"}')

    with pytest.raises(MalformedSnapshotFileError, match="does not contain an array"):
        await load_snapshot(snapshot_path)


@pytest.mark.asyncio
async def test_load_snapshot_rejects_invalid_json(temp_backup_dir):
    snapshot_path = temp_backup_dir / "users.json"
    snapshot_path.write_text("[{")

    with pytest.raises(MalformedSnapshotFileError, match="invalid JSON"):
        await load_snapshot(snapshot_path)


def test_listings(temp_backup_dir):
    """Test project, database and collection listings."""
    (temp_backup_dir / "weekly" / "shop").mkdir(parents=True)
    (temp_backup_dir / "nightly" / "crm").mkdir(parents=True)
    (temp_backup_dir / "nightly" / "shop").mkdir(parents=True)
    (temp_backup_dir / "notes.txt").write_text("not a project")
    shop = temp_backup_dir / "nightly" / "shop"
    (shop / "users.json").write_text("[]")
    (shop / "orders.json").write_text("[]")
    (shop / "readme.md").write_text("ignored")
    (shop / "nested.json").mkdir()

    assert list_projects(temp_backup_dir) == ["nightly", "weekly"]
    assert list_database_dirs(temp_backup_dir / "nightly") == ["crm", "shop"]
    assert list_collection_files(shop) == ["orders", "users"]
    assert list_collection_files(temp_backup_dir / "nightly" / "crm") == []


def test_listings_of_missing_directories(temp_backup_dir):
    assert list_projects(temp_backup_dir / "absent") == []
    assert list_database_dirs(temp_backup_dir / "absent") == []
    assert list_collection_files(temp_backup_dir / "absent") == []
