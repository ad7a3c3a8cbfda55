"""Movement engine: the only code path that changes stock.

Each call reads the pair's snapshot, computes the new quantity, writes the
snapshot and appends the ledger entry, then commits both together. The whole
sequence runs inside one storage transaction that holds the row (or, on
SQLite, the database) for writing, and under an in-process lock for that
(product, location) pair, so concurrent movements on one pair never
interleave, whether they come from threads or from separate processes.
"""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from . import ledger, models, snapshots
from .errors import ConflictError
from .locks import KeyedLock
from .models import MovementType, utcnow

logger = logging.getLogger(__name__)

_pair_locks = KeyedLock()


def record_movement(
    db: Session,
    product_id: int,
    location_id: int,
    movement_type: MovementType,
    quantity: int,
    *,
    actor_id: str,
    reference: Optional[str] = None,
    notes: Optional[str] = None,
    transfer_to_location_id: Optional[int] = None,
) -> models.MovementEntry:
    """Apply a movement and return the ledger entry that records it.

    Changes the caller has already staged on *db* are committed in the same
    transaction. Quantity range checks are the caller's responsibility.
    """

    movement_type = MovementType(movement_type)
    try:
        # storage transaction first, then the in-process lock
        db.connection()
        with db.no_autoflush:
            ledger.require_references(db, product_id, location_id, transfer_to_location_id)
        with _pair_locks.hold((product_id, location_id)):
            snapshot = snapshots.get(db, product_id, location_id, for_update=True)
            previous = snapshot.quantity if snapshot is not None else 0
            new_quantity = ledger.compute_new_quantity(movement_type, previous, quantity)
            now = utcnow()

            snapshots.upsert(db, product_id, location_id, new_quantity, now, existing=snapshot)
            entry = models.MovementEntry(
                product_id=product_id,
                location_id=location_id,
                type=movement_type,
                quantity=quantity,
                previous_quantity=previous,
                new_quantity=new_quantity,
                reference=reference,
                notes=notes,
                transfer_to_location_id=transfer_to_location_id,
                actor_id=actor_id,
                created_at=now,
            )
            db.add(entry)
            db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError(
            f"Stock for product {product_id} at location {location_id} was created concurrently"
        ) from exc
    except Exception:
        db.rollback()
        raise

    if movement_type in (MovementType.OUTBOUND, MovementType.TRANSFER_OUT) and quantity > previous:
        logger.warning(
            "%s of %s for product %s at location %s clamped to zero (had %s)",
            movement_type.value,
            quantity,
            product_id,
            location_id,
            previous,
        )
    logger.info(
        "movement %s product=%s location=%s qty=%s %s->%s actor=%s",
        movement_type.value,
        product_id,
        location_id,
        quantity,
        previous,
        new_quantity,
        actor_id,
    )
    return entry


def apply_movement(
    db: Session,
    product_id: int,
    location_id: int,
    movement_type: MovementType,
    quantity: int,
    *,
    actor_id: str,
    reference: Optional[str] = None,
    notes: Optional[str] = None,
    transfer_to_location_id: Optional[int] = None,
) -> int:
    """Apply a movement and return the pair's new quantity."""

    entry = record_movement(
        db,
        product_id,
        location_id,
        movement_type,
        quantity,
        actor_id=actor_id,
        reference=reference,
        notes=notes,
        transfer_to_location_id=transfer_to_location_id,
    )
    return entry.new_quantity


def get_snapshot(db: Session, product_id: int, location_id: int) -> Optional[models.StockSnapshot]:
    return snapshots.get(db, product_id, location_id)
