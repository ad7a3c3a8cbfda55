"""Current-quantity cache keyed by (product, location).

Nothing here commits or serializes; :mod:`inventory_ledger.movements` owns the
transaction and the per-pair lock.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from . import models


def get(db: Session, product_id: int, location_id: int, *, for_update: bool = False) -> Optional[models.StockSnapshot]:
    """Return the snapshot row, or ``None`` when the pair was never moved.

    ``for_update`` locks the row where the dialect supports ``FOR UPDATE``;
    SQLite transactions already hold the database write lock
    (see :func:`inventory_ledger.database.build_engine`).
    """

    statement = select(models.StockSnapshot).where(
        models.StockSnapshot.product_id == product_id,
        models.StockSnapshot.location_id == location_id,
    )
    if for_update:
        statement = statement.with_for_update().execution_options(populate_existing=True)
    return db.scalars(statement).first()


def upsert(
    db: Session,
    product_id: int,
    location_id: int,
    new_quantity: int,
    timestamp: datetime,
    *,
    existing: Optional[models.StockSnapshot] = None,
) -> models.StockSnapshot:
    """Create the row with no reservation, or patch quantity and timestamp only."""

    snapshot = existing if existing is not None else get(db, product_id, location_id)
    if snapshot is None:
        snapshot = models.StockSnapshot(
            product_id=product_id,
            location_id=location_id,
            quantity=new_quantity,
            reserved_quantity=0,
            updated_at=timestamp,
        )
        db.add(snapshot)
    else:
        snapshot.quantity = new_quantity
        snapshot.updated_at = timestamp
    return snapshot


def list_levels(db: Session, *, location_id: Optional[int] = None) -> list[models.StockSnapshot]:
    statement = select(models.StockSnapshot).order_by(models.StockSnapshot.id)
    if location_id is not None:
        statement = statement.where(models.StockSnapshot.location_id == location_id)
    return list(db.scalars(statement))


def low_stock_products(db: Session) -> list[tuple[models.Product, int]]:
    """Active products whose stock over all locations is at or under the reorder level."""

    totals = (
        select(
            models.StockSnapshot.product_id,
            func.sum(models.StockSnapshot.quantity).label("total"),
        )
        .group_by(models.StockSnapshot.product_id)
        .subquery()
    )
    total_stock = func.coalesce(totals.c.total, 0)
    statement = (
        select(models.Product, total_stock)
        .outerjoin(totals, totals.c.product_id == models.Product.id)
        .where(models.Product.is_active.is_(True))
        .where(total_stock <= models.Product.reorder_level)
        .order_by(total_stock, models.Product.id)
    )
    return [(product, int(total)) for product, total in db.execute(statement)]
