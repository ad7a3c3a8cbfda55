"""Stock transfers between two locations.

A transfer is two ledger entries, not one transaction: a ``transfer_out`` at
the source carrying ``transfer_to_location_id`` and, as a separate movement,
a ``transfer_in`` at the destination. Clients may issue the two halves
themselves through :func:`inventory_ledger.movements.apply_movement`;
:func:`transfer` issues them back to back.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from . import ledger, movements
from .errors import ValidationError
from .models import MovementType

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class TransferResult:
    source_quantity: int
    destination_quantity: Optional[int]


def transfer(
    db: Session,
    product_id: int,
    from_location_id: int,
    to_location_id: int,
    quantity: int,
    *,
    actor_id: str,
    reference: Optional[str] = None,
    notes: Optional[str] = None,
) -> TransferResult:
    """Debit the source, then credit the destination with what actually left.

    The debit floors at zero like any withdrawal, so the credit may be smaller
    than *quantity*; when nothing left the source no ``transfer_in`` is written.
    """

    if from_location_id == to_location_id:
        raise ValidationError("Source and destination locations must differ")
    ledger.validate_quantity(MovementType.TRANSFER_OUT, quantity)
    ledger.require_references(db, product_id, from_location_id, to_location_id)

    debit = movements.record_movement(
        db,
        product_id,
        from_location_id,
        MovementType.TRANSFER_OUT,
        quantity,
        actor_id=actor_id,
        reference=reference,
        notes=notes,
        transfer_to_location_id=to_location_id,
    )
    moved = debit.previous_quantity - debit.new_quantity
    if moved <= 0:
        logger.warning(
            "transfer of product %s from %s to %s moved nothing; no transfer_in written",
            product_id,
            from_location_id,
            to_location_id,
        )
        return TransferResult(source_quantity=debit.new_quantity, destination_quantity=None)

    destination_quantity = movements.apply_movement(
        db,
        product_id,
        to_location_id,
        MovementType.TRANSFER_IN,
        moved,
        actor_id=actor_id,
        reference=reference,
        notes=notes or f"Transfer from location {from_location_id}",
    )
    return TransferResult(source_quantity=debit.new_quantity, destination_quantity=destination_quantity)
