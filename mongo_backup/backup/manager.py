"""Backup and restore orchestration for MongoDB collections."""

from pathlib import Path
from typing import Awaitable, Callable, List, Optional

from .._selection import Selection, select_all
from .._utils import logger
from ..exceptions import ConnectionUnavailableError
from .exporters import CollectionExporter
from .models import RunReport, UnitOutcome
from .utils import (
    collection_file,
    database_dir,
    ensure_directory,
    list_collection_files,
    list_database_dirs,
    list_projects,
    project_dir,
)

# Called with (database, candidate collections); returns the chosen collections.
CollectionChooser = Callable[[str, List[str]], Awaitable[Optional[Selection]]]


async def _choose_collections(
    database: str,
    candidates: List[str],
    inherit_all: bool,
    choose_collections: Optional[CollectionChooser],
) -> Optional[Selection]:
    """Pick the collections of one database.

    Choosing ``all`` databases selects every collection without asking.
    """
    if inherit_all or choose_collections is None:
        return select_all(candidates)
    return await choose_collections(database, candidates)


async def _check_liveness(connection, database: str, collection: str, action: str) -> Optional[UnitOutcome]:
    """Ping before a transfer; return a skipped outcome if the server is gone."""
    try:
        await connection.ping()
    except Exception as e:
        detail = e.detail if isinstance(e, ConnectionUnavailableError) else str(e)
        logger.error(f"Connection lost before {action} {database}.{collection}: {detail}")
        return UnitOutcome.skipped(database, collection, f"connection unavailable: {detail}")
    return None


class BackupManager:
    """Snapshot selected collections to ``<root>/<project>/<database>/<collection>.json``."""

    def __init__(self, connection, backup_root: str = "./backup"):
        """Initialize backup manager.

        Args:
            connection: Open MongoConnection; the caller closes it
            backup_root: Directory holding backup projects
        """
        self.connection = connection
        self.backup_root = Path(backup_root)

    async def list_databases(self) -> List[str]:
        return await self.connection.list_database_names()

    async def list_collections(self, database: str) -> List[str]:
        return await self.connection.list_collection_names(database)

    async def create_backup(
        self,
        project: str,
        databases: Selection,
        choose_collections: Optional[CollectionChooser] = None,
    ) -> RunReport:
        """Back up the selected databases into a project directory.

        Failures are isolated per collection: a collection that cannot be
        read or written is reported as skipped and the run continues.

        Args:
            project: Project (backup run) name
            databases: Databases to back up, in processing order
            choose_collections: Asked for each database unless ``databases``
                was an ``all`` selection. Without it every collection is used.

        Returns:
            RunReport with one outcome per attempted collection
        """
        project = (project or "").strip()
        if not project:
            raise ValueError("Project name cannot be empty")

        report = RunReport(operation="backup", project=project)
        target = project_dir(self.backup_root, project)
        logger.info(f"Starting backup process for project: {project}")
        logger.debug(f"Backup root: {self.backup_root.resolve()}, project path: {target}")

        try:
            ensure_directory(target)
        except OSError as e:
            logger.error(f"Cannot create project directory {target}: {e}")

        for database in databases:
            await self._backup_database(report, project, database, databases.all_selected, choose_collections)

        report.finish()
        logger.info(
            f"Backup process completed: {len(report.succeeded)} collections backed up, "
            f"{len(report.skipped)} skipped"
        )
        return report

    async def _backup_database(
        self,
        report: RunReport,
        project: str,
        database: str,
        inherit_all: bool,
        choose_collections: Optional[CollectionChooser],
    ) -> None:
        logger.info(f"Backing up database: {database}")

        try:
            candidates = await self.list_collections(database)
        except Exception as e:
            logger.error(f"Cannot list collections of database '{database}': {e}")
            return

        if not candidates:
            logger.info(f"No collections found in database '{database}'.")
            return

        collections = await _choose_collections(database, candidates, inherit_all, choose_collections)
        if not collections:
            logger.warning(f"No collections selected in database '{database}'.")
            return

        db_dir = database_dir(self.backup_root, project, database)
        try:
            ensure_directory(db_dir)
        except OSError as e:
            logger.error(f"Cannot create database directory {db_dir}: {e}")
            for collection in collections:
                report.add(UnitOutcome.skipped(database, collection, f"cannot create directory {db_dir}: {e}"))
            return

        for collection in collections:
            report.add(await self._backup_collection(project, database, collection))

    async def _backup_collection(self, project: str, database: str, collection: str) -> UnitOutcome:
        skipped = await _check_liveness(self.connection, database, collection, "backing up")
        if skipped is not None:
            return skipped

        output_file = collection_file(self.backup_root, project, database, collection)
        logger.info(f"  Backing up collection: {collection}")
        try:
            count = await CollectionExporter(self.connection, database, collection).export(output_file)
        except Exception as e:
            logger.error(f"Error backing up collection {database}.{collection}: {e}")
            return UnitOutcome.skipped(database, collection, str(e), path=str(output_file))

        logger.info(f"    Backed up {count} documents to {output_file}")
        return UnitOutcome.succeeded(database, collection, count, path=str(output_file))


class RestoreManager:
    """Replay stored project snapshots into MongoDB."""

    def __init__(self, connection, backup_root: str = "./backup"):
        """Initialize restore manager.

        Args:
            connection: Open MongoConnection; the caller closes it
            backup_root: Directory holding backup projects
        """
        self.connection = connection
        self.backup_root = Path(backup_root)

    def list_projects(self) -> List[str]:
        return list_projects(self.backup_root)

    def list_databases(self, project: str) -> List[str]:
        return list_database_dirs(project_dir(self.backup_root, project))

    def list_collections(self, project: str, database: str) -> List[str]:
        return list_collection_files(database_dir(self.backup_root, project, database))

    async def restore_backup(
        self,
        project: str,
        databases: Selection,
        choose_collections: Optional[CollectionChooser] = None,
    ) -> RunReport:
        """Restore the selected databases of a backup project.

        Each restored collection is cleared and refilled from its snapshot;
        empty snapshots leave the live collection untouched.

        Args:
            project: Existing backup project
            databases: Database folders to restore, in processing order
            choose_collections: Asked for each database unless ``databases``
                was an ``all`` selection. Without it every snapshot is used.

        Returns:
            RunReport with one outcome per attempted collection

        Raises:
            FileNotFoundError: If the project does not exist
        """
        if project not in self.list_projects():
            raise FileNotFoundError(f"Backup project not found: {project}")

        report = RunReport(operation="restore", project=project)
        logger.info(f"Starting restore of project: {project}")
        logger.debug(
            f"Backup root: {self.backup_root.resolve()}, "
            f"available databases: {', '.join(self.list_databases(project))}"
        )

        for database in databases:
            await self._restore_database(report, project, database, databases.all_selected, choose_collections)

        report.finish()
        if not report.restored_any:
            logger.info("No collections found to restore.")
        else:
            logger.info(
                f"Restore completed: {len(report.succeeded)} collections restored, "
                f"{len(report.skipped)} skipped"
            )
        return report

    async def _restore_database(
        self,
        report: RunReport,
        project: str,
        database: str,
        inherit_all: bool,
        choose_collections: Optional[CollectionChooser],
    ) -> None:
        try:
            candidates = self.list_collections(project, database)
        except Exception as e:
            logger.error(f"Cannot list snapshots of database '{database}': {e}")
            return

        if not candidates:
            logger.info(f"No collections found in database '{database}'.")
            return

        if inherit_all:
            logger.info(f"Restoring all collections from database '{database}'...")
        collections = await _choose_collections(database, candidates, inherit_all, choose_collections)
        if not collections:
            logger.warning(f"No collections selected in database '{database}'.")
            return

        logger.debug(f"Restore path: {database_dir(self.backup_root, project, database)}")
        for collection in collections:
            report.add(await self._restore_collection(project, database, collection))

    async def _restore_collection(self, project: str, database: str, collection: str) -> UnitOutcome:
        skipped = await _check_liveness(self.connection, database, collection, "restoring")
        if skipped is not None:
            return skipped

        snapshot = collection_file(self.backup_root, project, database, collection)
        try:
            count = await CollectionExporter(self.connection, database, collection).restore(snapshot)
        except Exception as e:
            logger.error(f"Error restoring {database}.{collection}: {e}")
            return UnitOutcome.skipped(database, collection, str(e), path=str(snapshot))

        logger.info(f"Restored {count} documents to {database}.{collection}")
        return UnitOutcome.succeeded(database, collection, count, path=str(snapshot))
