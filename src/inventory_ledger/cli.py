"""Command line interface for the packaged service."""

from __future__ import annotations

from typing import NoReturn, Optional

import typer
import uvicorn

from . import barcodes, ledger, movements
from .config import Settings, get_settings
from .database import SessionLocal, init_database
from .errors import InventoryError
from .logging_setup import configure_logging
from .models import MovementType

app = typer.Typer(help="Manage and run the inventory ledger service.")

_ACTOR_OPTION = typer.Option("cli", "--actor", help="Actor id recorded on ledger entries")


def _print_header(title: str) -> None:
    typer.secho(title, bold=True, fg=typer.colors.CYAN)


def _fail(message: str) -> NoReturn:
    typer.secho(message, fg=typer.colors.RED)
    raise typer.Exit(code=1)


def _resolve_settings() -> Settings:
    settings = get_settings()
    configure_logging(settings.log_level)
    init_database()
    return settings


@app.command()
def run(
    host: Optional[str] = typer.Option(None, help="Hostname to bind"),
    port: Optional[int] = typer.Option(None, help="Port to expose"),
    reload: Optional[bool] = typer.Option(None, help="Enable auto-reload"),
    log_level: Optional[str] = typer.Option(None, help="Uvicorn log level"),
) -> None:
    """Start the FastAPI service using Uvicorn."""

    settings = _resolve_settings()

    uvicorn.run(
        "inventory_ledger.app:create_app",
        host=host or settings.host,
        port=port or settings.port,
        reload=settings.reload if reload is None else reload,
        log_level=log_level or settings.log_level,
        factory=True,
    )


@app.command()
def init_db() -> None:
    """Create the database tables."""

    settings = _resolve_settings()
    typer.echo(f"Database initialised at {settings.sqlalchemy_url}")


@app.command()
def show_paths() -> None:
    """Print out important filesystem paths."""

    settings = _resolve_settings()
    typer.echo(f"Database: {settings.sqlalchemy_url}")
    typer.echo(f"Data directory: {settings.database_path.parent}")


@app.command()
def move(
    product_id: int = typer.Argument(..., help="Product id"),
    location_id: int = typer.Argument(..., help="Location id"),
    movement_type: MovementType = typer.Argument(..., help="Movement type"),
    quantity: int = typer.Argument(..., help="Units moved, or the absolute target for an adjustment"),
    reference: Optional[str] = typer.Option(None, help="External reference"),
    notes: Optional[str] = typer.Option(None, help="Free text notes"),
    transfer_to: Optional[int] = typer.Option(None, help="Destination location of a transfer_out"),
    actor: str = _ACTOR_OPTION,
) -> None:
    """Apply one stock movement."""

    _resolve_settings()
    with SessionLocal() as session:
        try:
            ledger.validate_quantity(movement_type, quantity)
            new_quantity = movements.apply_movement(
                session,
                product_id,
                location_id,
                movement_type,
                quantity,
                actor_id=actor,
                reference=reference,
                notes=notes,
                transfer_to_location_id=transfer_to,
            )
        except InventoryError as exc:
            _fail(str(exc))
        typer.secho(f"Product {product_id} at location {location_id}: {new_quantity}", fg=typer.colors.GREEN)


@app.command()
def snapshot(
    product_id: int = typer.Argument(..., help="Product id"),
    location_id: int = typer.Argument(..., help="Location id"),
) -> None:
    """Show the current quantity of a product at a location."""

    _resolve_settings()
    with SessionLocal() as session:
        current = movements.get_snapshot(session, product_id, location_id)
        if current is None:
            typer.echo("No stock recorded for this pair.")
            return
        typer.echo(
            f"quantity={current.quantity} reserved={current.reserved_quantity} "
            f"updated_at={current.updated_at.isoformat()}"
        )


@app.command("ledger")
def ledger_cmd(
    product_id: Optional[int] = typer.Option(None, help="Filter by product id"),
    location_id: Optional[int] = typer.Option(None, help="Filter by location id"),
    limit: int = typer.Option(50, help="Maximum entries to show"),
) -> None:
    """List the most recent ledger entries."""

    _resolve_settings()
    with SessionLocal() as session:
        entries = ledger.list_movements(session, product_id=product_id, location_id=location_id, limit=limit)
        if not entries:
            typer.echo("No movements found.")
            return
        _print_header("Recent movements")
        for entry in entries:
            typer.echo(
                f"- #{entry.id} {entry.type.value} product={entry.product_id} location={entry.location_id} "
                f"qty={entry.quantity} {entry.previous_quantity}->{entry.new_quantity} by {entry.actor_id}"
            )


@app.command("generate-barcodes")
def generate_barcodes(
    product_id: int = typer.Argument(..., help="Product id"),
    location_id: int = typer.Argument(..., help="Location id"),
    quantity: int = typer.Argument(..., help="Number of barcodes to issue"),
    actor: str = _ACTOR_OPTION,
) -> None:
    """Issue a batch of barcodes and receive the matching units."""

    _resolve_settings()
    with SessionLocal() as session:
        try:
            result = barcodes.generate_batch(session, product_id, location_id, quantity, actor)
        except InventoryError as exc:
            _fail(str(exc))
        _print_header(f"Batch session {result.session_id}")
        for code in result.barcodes:
            typer.echo(code)


@app.command("verify-ledger")
def verify_ledger() -> None:
    """Replay the ledger and compare it with every stored snapshot."""

    _resolve_settings()
    with SessionLocal() as session:
        problems = ledger.verify_snapshots(session)
    if not problems:
        typer.secho("All snapshots match the ledger.", fg=typer.colors.GREEN)
        return
    for problem in problems:
        typer.secho(
            f"product={problem.product_id} location={problem.location_id} "
            f"snapshot={problem.snapshot_quantity} ledger={problem.ledger_quantity}",
            fg=typer.colors.RED,
        )
    raise typer.Exit(code=1)


def main() -> None:
    """Entry-point for console scripts."""

    app()


if __name__ == "__main__":  # pragma: no cover
    main()
