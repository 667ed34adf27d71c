"""Interactive console menu driving backup and restore runs."""

import argparse
import asyncio
from typing import Callable, List, Optional, Sequence

from ._selection import Selection, resolve_selection, resolve_single
from ._utils import configure_logging, logger
from .backup import BackupManager, RestoreManager, RunReport
from .config import AppConfig
from .connection import MongoConnection

MENU = """
MongoBackup CLI Menu:
1. Backup MongoDB
2. Restore MongoDB
0. Exit"""


class InteractiveCli:
    """Line-based prompts around BackupManager and RestoreManager.

    Prompts only collect text; resolution happens in resolve_selection and
    invalid answers are asked again.
    """

    def __init__(
        self,
        connection,
        backup_root: str,
        input_func: Callable[[str], str] = input,
        output: Callable[[str], None] = print,
    ):
        self.backup_manager = BackupManager(connection, backup_root)
        self.restore_manager = RestoreManager(connection, backup_root)
        self._input = input_func
        self._output = output

    async def ask(self, prompt: str) -> str:
        return await asyncio.to_thread(self._input, prompt)

    def show_candidates(self, title: str, candidates: Sequence[str]) -> None:
        self._output(title)
        for index, name in enumerate(candidates, start=1):
            self._output(f"{index}. {name}")

    async def ask_selection(self, label: str, candidates: List[str], prompt: str) -> Selection:
        """Ask until the answer resolves to at least one candidate."""
        while True:
            selection = resolve_selection(await self.ask(prompt), candidates)
            if selection is not None:
                return selection
            self._output(f"Invalid {label} selection. Please try again.")

    async def _ask_collections(self, action: str, database: str, candidates: List[str]) -> Selection:
        self.show_candidates(f"\nCollections in database '{database}':", candidates)
        return await self.ask_selection(
            "collection",
            candidates,
            f"Enter collection(s) to {action} (number, name, comma separated, or 'all'): ",
        )

    def show_report(self, report: RunReport) -> None:
        for outcome in report.outcomes:
            self._output(f"  {outcome.describe()}")
        if report.operation == "restore" and not report.restored_any:
            self._output("No collections found to restore.")
        else:
            self._output(
                f"\n{report.operation.capitalize()} process completed! "
                f"{len(report.succeeded)} succeeded, {len(report.skipped)} skipped."
            )

    async def run_backup(self) -> Optional[RunReport]:
        project = (await self.ask("Enter project name for backup: ")).strip()
        if not project:
            self._output("Project name cannot be empty.")
            return None

        try:
            databases = await self.backup_manager.list_databases()
        except Exception as e:
            logger.error(f"Cannot list databases: {e}")
            return None
        if not databases:
            self._output("No databases found.")
            return None

        self.show_candidates("Available databases:", databases)
        selection = await self.ask_selection(
            "database", databases, "Select database(s) to backup (number, name, comma separated, or 'all'): "
        )

        async def choose(database: str, candidates: List[str]) -> Selection:
            return await self._ask_collections("backup", database, candidates)

        report = await self.backup_manager.create_backup(project, selection, choose)
        self.show_report(report)
        return report

    async def run_restore(self) -> Optional[RunReport]:
        projects = self.restore_manager.list_projects()
        if not projects:
            self._output("No backup projects found.")
            return None

        self.show_candidates("Available backup projects:", projects)
        project = None
        while project is None:
            project = resolve_single(await self.ask("Enter project name to restore (number or name): "), projects)
            if project is None:
                self._output("Invalid project. Please try again.")

        databases = self.restore_manager.list_databases(project)
        if not databases:
            self._output("No databases found in this project.")
            return None

        self.show_candidates("Available databases in this backup:", databases)
        selection = await self.ask_selection(
            "database", databases, "Select database(s) (number, name, comma separated, or 'all'): "
        )

        async def choose(database: str, candidates: List[str]) -> Selection:
            return await self._ask_collections("restore", database, candidates)

        report = await self.restore_manager.restore_backup(project, selection, choose)
        self.show_report(report)
        return report

    async def main_menu(self) -> None:
        while True:
            self._output(MENU)
            try:
                answer = (await self.ask("Select an option: ")).strip()
                if answer == "1":
                    await self.run_backup()
                elif answer == "2":
                    await self.run_restore()
                elif answer == "0":
                    return
                else:
                    self._output("Invalid option. Please try again.")
            except EOFError:
                return


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="mongo-backup",
        description="Back up and restore MongoDB collections as extended JSON files.",
    )
    parser.add_argument("--url", help="MongoDB connection URL (default: $MONGO_URL)")
    parser.add_argument("--backup-root", help="Directory holding backup projects (default: $MONGO_BACKUP_ROOT)")
    parser.add_argument("--debug", action="store_true", help="Log directories and driver details")
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> AppConfig:
    """Apply command-line overrides on top of the environment config."""
    mongo = {}
    backup = {}
    if args.url:
        mongo["url"] = args.url
    if args.backup_root:
        backup["backup_root"] = args.backup_root
    if args.debug:
        backup["debug"] = True
    return AppConfig.from_env(mongo_overrides=mongo, backup_overrides=backup)


async def run(config: AppConfig, input_func: Callable[[str], str] = input) -> None:
    async with MongoConnection.from_config(config.mongo) as connection:
        cli = InteractiveCli(connection, config.backup.backup_root, input_func=input_func)
        await cli.main_menu()


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)
    config = build_config(args)
    configure_logging(config.backup.effective_log_level)
    logger.debug(f"Active configuration: {config.to_dict()}")
    try:
        asyncio.run(run(config))
    except KeyboardInterrupt:
        logger.info("Interrupted.")
