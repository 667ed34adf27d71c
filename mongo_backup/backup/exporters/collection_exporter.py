"""Single-collection backup/restore exporter."""

from pathlib import Path
from typing import Any

from ..._codec import decode_documents, encode_documents
from ..._utils import logger
from ..utils import load_snapshot, save_snapshot


class CollectionExporter:
    """Export and restore one MongoDB collection as a JSON snapshot file."""

    def __init__(self, connection: Any, database: str, collection: str):
        """Initialize exporter for one collection.

        Args:
            connection: MongoConnection (or any object with the same methods)
            database: Database name
            collection: Collection name
        """
        self.connection = connection
        self.database = database
        self.collection = collection

    async def export(self, output_file: Path) -> int:
        """Write every document of the collection to ``output_file``.

        An empty collection still produces a file holding ``[]``.

        Returns:
            Number of documents written
        """
        documents = await self.connection.fetch_all(self.database, self.collection)
        await save_snapshot(encode_documents(documents), output_file)

        logger.debug(f"Exported {self.database}.{self.collection}: {len(documents)} documents")
        return len(documents)

    async def restore(self, snapshot_file: Path) -> int:
        """Replace the collection contents with the snapshot.

        The live collection is cleared and refilled only when the snapshot
        holds at least one document; an empty snapshot leaves it untouched.

        Returns:
            Number of documents in the snapshot

        Raises:
            MalformedSnapshotFileError: If the file is not a JSON array
            MalformedExtendedValueError: If a tagged value cannot be decoded
        """
        documents = decode_documents(await load_snapshot(snapshot_file))

        if documents:
            deleted = await self.connection.delete_all(self.database, self.collection)
            logger.debug(f"Cleared {self.database}.{self.collection}: {deleted} documents removed")
            await self.connection.insert_many(self.database, self.collection, documents)
        else:
            logger.debug(f"Empty snapshot for {self.database}.{self.collection}, collection left untouched")

        return len(documents)
