"""Async MongoDB connection handle shared by the backup and restore managers."""

from typing import Any, Dict, List, Mapping, Optional, Sequence

from bson.codec_options import DatetimeConversion
from motor.motor_asyncio import AsyncIOMotorClient
from pymongo.errors import PyMongoError

from ._utils import logger, mask_url
from .config import MongoConfig, SYSTEM_DATABASES
from .exceptions import ConnectionUnavailableError

# Internal collections (system.views, system.profile, ...) are not user data.
USER_COLLECTIONS_FILTER = {"name": {"$regex": r"^(?!system\.)"}}


class MongoConnection:
    """Thin wrapper exposing the operations backup and restore need.

    The caller owns the lifetime of the handle: open it with
    ``MongoConnection.from_config`` (or ``async with``) and close it when the
    run is over. The managers never open or close connections themselves.
    """

    def __init__(self, client: Any, include_system_databases: bool = False):
        self._client = client
        self.include_system_databases = include_system_databases

    @classmethod
    def from_config(cls, config: MongoConfig) -> "MongoConnection":
        """Create a connection handle from configuration.

        Datetimes come back timezone-aware (UTC) so they compare equal to
        the values decoded from a snapshot. Dates outside the year range
        1-9999 come back as DatetimeMS instead of failing the read.
        """
        logger.info(f"Connecting to MongoDB at {mask_url(config.url)}")
        client = AsyncIOMotorClient(
            config.url,
            tz_aware=True,
            datetime_conversion=DatetimeConversion.DATETIME_AUTO,
            serverSelectionTimeoutMS=config.server_selection_timeout_ms,
            connectTimeoutMS=config.connect_timeout_ms,
        )
        return cls(client, include_system_databases=config.include_system_databases)

    async def ping(self) -> None:
        """Run the ``ping`` admin command.

        Raises:
            ConnectionUnavailableError: If the server cannot be reached
        """
        try:
            await self._client.admin.command("ping")
        except PyMongoError as e:
            raise ConnectionUnavailableError(str(e)) from e

    async def list_database_names(self) -> List[str]:
        names = await self._client.list_database_names()
        if self.include_system_databases:
            return list(names)
        return [name for name in names if name not in SYSTEM_DATABASES]

    async def list_collection_names(self, database: str) -> List[str]:
        return await self._client[database].list_collection_names(filter=USER_COLLECTIONS_FILTER)

    async def fetch_all(self, database: str, collection: str) -> List[Dict[str, Any]]:
        """Fetch every document in natural order."""
        cursor = self._client[database][collection].find({})
        return await cursor.to_list(length=None)

    async def delete_all(self, database: str, collection: str) -> int:
        result = await self._client[database][collection].delete_many({})
        return result.deleted_count

    async def insert_many(self, database: str, collection: str, documents: Sequence[Mapping[str, Any]]) -> int:
        result = await self._client[database][collection].insert_many(list(documents))
        return len(result.inserted_ids)

    def close(self) -> None:
        self._client.close()
        logger.info("MongoDB connection closed.")

    async def __aenter__(self) -> "MongoConnection":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> Optional[bool]:
        self.close()
        return None
