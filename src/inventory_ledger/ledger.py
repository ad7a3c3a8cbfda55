"""Movement entries: validation rules, the quantity rule table and replay.

Entries are append-only. This module never updates or deletes a
``MovementEntry``; the row is written by :mod:`inventory_ledger.movements`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, assert_never

from sqlalchemy import select
from sqlalchemy.orm import Session

from . import models
from .errors import NotFoundError, ValidationError
from .models import MovementType


def validate_quantity(movement_type: MovementType, quantity: int) -> None:
    """Reject quantities the rule table cannot accept for *movement_type*."""

    if movement_type is MovementType.ADJUSTMENT:
        if quantity < 0:
            raise ValidationError("Adjustment target must be zero or greater")
    elif quantity <= 0:
        raise ValidationError(f"Quantity for {movement_type.value} must be greater than zero")


def require_references(
    db: Session,
    product_id: int,
    location_id: int,
    transfer_to_location_id: Optional[int] = None,
) -> None:
    if db.get(models.Product, product_id) is None:
        raise NotFoundError(f"Product {product_id} not found")
    if db.get(models.Location, location_id) is None:
        raise NotFoundError(f"Location {location_id} not found")
    if transfer_to_location_id is not None and db.get(models.Location, transfer_to_location_id) is None:
        raise NotFoundError(f"Location {transfer_to_location_id} not found")


def compute_new_quantity(movement_type: MovementType, previous: int, quantity: int) -> int:
    """Apply one movement to *previous*.

    Withdrawals floor at zero instead of failing; an adjustment is an
    absolute target and ignores *previous*.
    """

    match movement_type:
        case MovementType.INBOUND | MovementType.TRANSFER_IN:
            return previous + quantity
        case MovementType.OUTBOUND | MovementType.TRANSFER_OUT:
            return max(0, previous - quantity)
        case MovementType.ADJUSTMENT:
            return quantity
        case _:
            assert_never(movement_type)


def list_movements(
    db: Session,
    *,
    product_id: Optional[int] = None,
    location_id: Optional[int] = None,
    movement_type: Optional[MovementType] = None,
    limit: int = 50,
) -> list[models.MovementEntry]:
    statement = select(models.MovementEntry)
    if product_id is not None:
        statement = statement.where(models.MovementEntry.product_id == product_id)
    if location_id is not None:
        statement = statement.where(models.MovementEntry.location_id == location_id)
    if movement_type is not None:
        statement = statement.where(models.MovementEntry.type == movement_type)
    statement = statement.order_by(models.MovementEntry.id.desc()).limit(limit)
    return list(db.scalars(statement))


def entries_for(db: Session, product_id: int, location_id: int) -> list[models.MovementEntry]:
    """Entries of one pair in creation order."""

    statement = (
        select(models.MovementEntry)
        .where(
            models.MovementEntry.product_id == product_id,
            models.MovementEntry.location_id == location_id,
        )
        .order_by(models.MovementEntry.id)
    )
    return list(db.scalars(statement))


def replay(db: Session, product_id: int, location_id: int) -> int:
    """Rebuild the pair's quantity from its ledger, seeded with 0."""

    quantity = 0
    for entry in entries_for(db, product_id, location_id):
        quantity = compute_new_quantity(entry.type, quantity, entry.quantity)
    return quantity


@dataclass(slots=True)
class Discrepancy:
    product_id: int
    location_id: int
    snapshot_quantity: int
    ledger_quantity: int


def verify_snapshots(db: Session) -> list[Discrepancy]:
    """Compare every snapshot with the replay of its ledger."""

    problems: list[Discrepancy] = []
    for snapshot in db.scalars(select(models.StockSnapshot).order_by(models.StockSnapshot.id)):
        expected = replay(db, snapshot.product_id, snapshot.location_id)
        if expected != snapshot.quantity:
            problems.append(
                Discrepancy(
                    product_id=snapshot.product_id,
                    location_id=snapshot.location_id,
                    snapshot_quantity=snapshot.quantity,
                    ledger_quantity=expected,
                )
            )
    return problems
