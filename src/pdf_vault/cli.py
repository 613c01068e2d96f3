from __future__ import annotations

import asyncio
from typing import Optional

import typer
import uvicorn

from pdf_vault.app.core.logging import setup_logging
from pdf_vault.app.settings import get_app_settings
from pdf_vault.db.settings import get_mongo_settings
from pdf_vault.documents.service import ReconcileReport

app = typer.Typer(no_args_is_help=True, add_completion=False, help="pdf-vault service commands.")


@app.command("serve")
def serve(
        host: Optional[str] = typer.Option(None, help="Bind address (default: APP_HOST)"),
        port: Optional[int] = typer.Option(None, help="Port (default: APP_PORT / PORT)"),
        reload: bool = typer.Option(False, help="Reload on code changes (development only)"),
        log_level: Optional[str] = typer.Option(None, help="Override LOG_LEVEL"),
):
    """Run the HTTP API with uvicorn."""
    setup_logging(level=log_level)
    settings = get_app_settings()
    uvicorn.run(
        "pdf_vault.api.fastapi:create_app",
        factory=True,
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
        log_config=None,  # keep our dictConfig
    )


async def _reconcile(purge_orphans: bool) -> ReconcileReport:
    from pdf_vault.api.fastapi import build_mongo_service

    handle, service = await build_mongo_service(get_app_settings(), get_mongo_settings())
    try:
        return await service.reconcile(purge_orphans=purge_orphans)
    finally:
        await handle.close()


def _echo_ids(label: str, ids: list[str]) -> None:
    typer.echo(f"{label}: {len(ids)}")
    for value in ids:
        typer.echo(f"  {value}")


@app.command("reconcile")
def reconcile(
        purge_orphans: bool = typer.Option(
            False,
            "--purge-orphans",
            help="Delete blobs no document references. Run while no uploads are in flight.",
        ),
):
    """Finish interrupted deletes and report (or purge) orphaned blobs."""
    setup_logging()
    report = asyncio.run(_reconcile(purge_orphans))
    _echo_ids("Finished deletes", report.finished_deletes)
    _echo_ids("Failed deletes", report.failed_deletes)
    _echo_ids("Orphan blobs", report.orphan_blobs)
    if purge_orphans:
        _echo_ids("Purged blobs", report.purged_blobs)
    if not report.clean:
        raise typer.Exit(code=1)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
