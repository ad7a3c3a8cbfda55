"""Barcode issuance and the single-scan shortcut."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Literal, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from . import catalog, models, movements, schemas
from .config import get_settings
from .errors import AccessDeniedError, ConflictError, ValidationError
from .models import MovementType, SessionStatus

logger = logging.getLogger(__name__)

GENERATION_REFERENCE = "Barcode Generation"
SINGLE_SCAN_REFERENCE = "Barcode Scan"


@dataclass(slots=True)
class BatchResult:
    session_id: int
    barcodes: list[str]
    quantity: int


@dataclass(slots=True)
class ScanOutcome:
    type: Literal["existing", "new"]
    product: models.Product


def batch_barcodes(sku: str, timestamp_ms: int, quantity: int) -> list[str]:
    """``sku`` followed by the last 8 digits of timestamp + 4-digit sequence.

    The sequence is strictly increasing, so codes within one batch never
    collide.
    """

    return [f"{sku}{(f'{timestamp_ms}{sequence:04d}')[-8:]}" for sequence in range(1, quantity + 1)]


def generate_batch(
    db: Session,
    product_id: int,
    location_id: int,
    quantity: int,
    actor_id: str,
) -> BatchResult:
    """Issue *quantity* barcodes and receive that many units in one movement.

    The batch is recorded as a session that is completed from the start, with
    one scan record per generated code.
    """

    limit = get_settings().max_batch_size
    if quantity < 1 or quantity > limit:
        raise ValidationError(f"Quantity must be between 1 and {limit}")
    product = catalog.require_product(db, product_id)
    catalog.require_location(db, location_id)

    timestamp_ms = int(time.time() * 1000)
    issued_at = models.utcnow()
    barcodes = batch_barcodes(product.sku, timestamp_ms, quantity)

    session = models.ScanSession(
        product_id=product_id,
        location_id=location_id,
        status=SessionStatus.COMPLETED,
        total_scanned=quantity,
        actor_id=actor_id,
        created_at=issued_at,
        completed_at=issued_at,
    )
    session.records = [models.ScanRecord(barcode=code, scanned_at=issued_at) for code in barcodes]
    db.add(session)

    movements.record_movement(
        db,
        product_id,
        location_id,
        MovementType.INBOUND,
        quantity,
        actor_id=actor_id,
        reference=GENERATION_REFERENCE,
        notes=f"Generated {quantity} unique barcodes",
    )
    session_id = session.id
    logger.info("generated %s barcodes for product %s (session %s)", quantity, product_id, session_id)
    return BatchResult(session_id=session_id, barcodes=barcodes, quantity=quantity)


def get_batch(db: Session, session_id: int, actor_id: str) -> tuple[models.ScanSession, list[str]]:
    """Return a session the actor owns with its barcodes in issue order."""

    session = db.get(models.ScanSession, session_id)
    if session is None or session.actor_id != actor_id:
        raise AccessDeniedError("Session not found or access denied")
    statement = (
        select(models.ScanRecord.barcode)
        .where(models.ScanRecord.session_id == session_id)
        .order_by(models.ScanRecord.id)
    )
    return session, list(db.scalars(statement))


def single_scan(db: Session, barcode: str, location_id: int, actor_id: str) -> ScanOutcome:
    """Receive one unit of a known barcode, or register an unknown one.

    A newly registered product starts without stock.
    """

    catalog.require_location(db, location_id)
    product: Optional[models.Product] = catalog.get_product_by_barcode(db, barcode, active_only=True)
    if product is not None:
        movements.record_movement(
            db,
            product.id,
            location_id,
            MovementType.INBOUND,
            1,
            actor_id=actor_id,
            reference=SINGLE_SCAN_REFERENCE,
            notes="Single scan increment",
        )
        return ScanOutcome(type="existing", product=product)

    if catalog.get_product_by_barcode(db, barcode) is not None:
        raise ConflictError(f"Barcode '{barcode}' belongs to an inactive product")

    product = catalog.create_product(
        db,
        schemas.ProductCreate(
            name=f"Product {barcode}",
            sku=catalog.generate_sku(db),
            barcode=barcode,
            unit_price=0.0,
            reorder_level=get_settings().default_reorder_level,
        ),
        actor_id=actor_id,
    )
    logger.info("registered product %s for unknown barcode %s", product.id, barcode)
    return ScanOutcome(type="new", product=product)
