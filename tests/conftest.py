"""Global pytest configuration and fixtures."""

import sys
import tempfile
from datetime import datetime, timezone
from pathlib import Path

import pytest
from bson import ObjectId

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from tests.utils import FakeConnection


@pytest.fixture
def temp_backup_dir():
    """Create temporary backup root directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def users_and_logs():
    """A database with two users and an empty logs collection."""
    return {
        "db": {
            "users": [
                {
                    "_id": ObjectId("65a1f0c2e4b0a1b2c3d4e5f6"),
                    "name": "Ada",
                    "created": datetime(2024, 1, 12, 9, 30, 0, 250000, tzinfo=timezone.utc),
                },
                {"_id": ObjectId("65a1f0c2e4b0a1b2c3d4e5f7"), "name": "Grace"},
            ],
            "logs": [],
        }
    }


@pytest.fixture
def fake_connection(users_and_logs):
    """Fake connection preloaded with the users/logs database."""
    return FakeConnection(users_and_logs)
