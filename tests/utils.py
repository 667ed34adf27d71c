"""Test utilities for mongo-backup tests."""
import copy
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

from mongo_backup.exceptions import ConnectionUnavailableError


class FakeConnection:
    """In-memory stand-in for MongoConnection.

    ``data`` maps database -> collection -> documents. Collections and
    databases are listed in insertion order, like a server would return
    them.
    """

    def __init__(self, data: Optional[Dict[str, Dict[str, List[Dict[str, Any]]]]] = None):
        self.data = copy.deepcopy(data or {})
        self.calls: List[Tuple[str, ...]] = []
        self.ping_count = 0
        self.down_on_pings: Set[int] = set()
        self.always_down = False
        self.fail_fetch: Set[Tuple[str, str]] = set()
        self.fail_insert: Set[Tuple[str, str]] = set()
        self.closed = False

    async def ping(self) -> None:
        self.ping_count += 1
        self.calls.append(("ping",))
        if self.always_down or self.ping_count in self.down_on_pings:
            raise ConnectionUnavailableError("server selection timed out")

    async def list_database_names(self) -> List[str]:
        return list(self.data)

    async def list_collection_names(self, database: str) -> List[str]:
        return list(self.data.get(database, {}))

    async def fetch_all(self, database: str, collection: str) -> List[Dict[str, Any]]:
        self.calls.append(("fetch_all", database, collection))
        if (database, collection) in self.fail_fetch:
            raise RuntimeError(f"cursor killed for {collection}")
        return copy.deepcopy(self.data[database][collection])

    async def delete_all(self, database: str, collection: str) -> int:
        self.calls.append(("delete_all", database, collection))
        documents = self.data.setdefault(database, {}).setdefault(collection, [])
        deleted = len(documents)
        documents.clear()
        return deleted

    async def insert_many(self, database: str, collection: str, documents: Iterable[Dict[str, Any]]) -> int:
        self.calls.append(("insert_many", database, collection))
        if (database, collection) in self.fail_insert:
            raise RuntimeError("write concern error")
        documents = copy.deepcopy(list(documents))
        self.data.setdefault(database, {}).setdefault(collection, []).extend(documents)
        return len(documents)

    def close(self) -> None:
        self.closed = True

    async def __aenter__(self) -> "FakeConnection":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.close()

    def writes_to(self, database: str, collection: str) -> List[str]:
        """Names of mutating calls made against one collection."""
        return [
            call[0] for call in self.calls
            if call[0] in ("delete_all", "insert_many") and call[1:] == (database, collection)
        ]


def scripted_input(answers: Iterable[str]):
    """Return an ``input`` replacement that replays answers, then hits EOF."""
    remaining = iter(answers)
    prompts: List[str] = []

    def _input(prompt: str) -> str:
        prompts.append(prompt)
        try:
            return next(remaining)
        except StopIteration:
            raise EOFError from None

    _input.prompts = prompts
    return _input
