from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

import typer

from connectors.blocklist import BlocklistConnector, SyncSummary
from connectors.state_store import resolve_checkpoint
from core.config import settings
from core.errors import BlocklistSyncError
from core.logging import configure_logging, set_run_id
from core.storage.block_store import BlockStore

app = typer.Typer(help="Incrementally synchronize Wikipedia's block list to a local SQLite3 database.")

logger = logging.getLogger(__name__)

DB_OPTION = typer.Option(
    None,
    "--db",
    help="SQLite database file holding the mirror (created on first run). "
    "Defaults to SETTINGS__BLOCKLIST_DB_PATH.",
)


def _resolve_db(db: Optional[Path]) -> Path:
    if db is not None:
        return db.expanduser()
    if settings.blocklist_db_path:
        return Path(settings.blocklist_db_path)
    raise typer.BadParameter("no database given; pass --db or set SETTINGS__BLOCKLIST_DB_PATH", param_hint="--db")


async def run_sync(db_path: Path) -> SyncSummary:
    with BlockStore(db_path) as store:
        connector = BlocklistConnector(store)
        try:
            return await connector.run()
        finally:
            await connector.close()


@app.command()
def sync(db: Optional[Path] = DB_OPTION) -> None:
    """Fetch every block entry newer than the local checkpoint."""
    db_path = _resolve_db(db)
    configure_logging(settings.log_level)
    set_run_id()
    try:
        summary = asyncio.run(run_sync(db_path))
    except BlocklistSyncError:
        logger.exception("Block list sync failed")
        raise typer.Exit(code=1)
    typer.echo(
        f"Synced {summary.accepted} block entries over {summary.pages} pages "
        f"starting at {summary.checkpoint}."
    )


@app.command()
def checkpoint(db: Optional[Path] = DB_OPTION) -> None:
    """Print the timestamp the next sync would start at."""
    db_path = _resolve_db(db)
    configure_logging(settings.log_level)
    try:
        with BlockStore(db_path) as store:
            value = resolve_checkpoint(store)
    except BlocklistSyncError:
        logger.exception("Cannot read checkpoint")
        raise typer.Exit(code=1)
    typer.echo(value)


def main() -> None:
    """Entry point for console_scripts."""
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Interrupted by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
