"""Bulk intake through scan sessions.

A session collects raw barcode reads for one (product, location) pair and
commits them as a single inbound movement when completed. Sessions move one
way only: ``active -> completed`` or ``active -> cancelled``.

Mutations open their storage transaction before taking the per-session lock,
the same order the movement engine uses, and re-read the session row for
update inside it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from . import ledger, models, movements
from .errors import AccessDeniedError, ConflictError, InvalidStateError
from .locks import KeyedLock
from .models import MovementType, SessionStatus, utcnow

logger = logging.getLogger(__name__)

_session_locks = KeyedLock()

BULK_SCAN_REFERENCE = "Bulk Barcode Scan"


@dataclass(slots=True)
class CompletionResult:
    product: models.Product
    total_scanned: int


def get_active_session(db: Session, actor_id: str) -> Optional[models.ScanSession]:
    statement = select(models.ScanSession).where(
        models.ScanSession.actor_id == actor_id,
        models.ScanSession.status == SessionStatus.ACTIVE,
    )
    return db.scalars(statement).first()


def start_session(db: Session, product_id: int, location_id: int, actor_id: str) -> models.ScanSession:
    ledger.require_references(db, product_id, location_id)
    if get_active_session(db, actor_id) is not None:
        raise ConflictError("You already have an active scan session")

    session = models.ScanSession(
        product_id=product_id,
        location_id=location_id,
        status=SessionStatus.ACTIVE,
        total_scanned=0,
        actor_id=actor_id,
        created_at=utcnow(),
    )
    db.add(session)
    try:
        db.commit()
    except IntegrityError as exc:
        # a concurrent start by the same actor won the unique index
        db.rollback()
        raise ConflictError("You already have an active scan session") from exc
    db.refresh(session)
    logger.info("scan session %s started by %s", session.id, actor_id)
    return session


def _owned_session(
    db: Session, session_id: int, actor_id: str, *, for_update: bool = False
) -> models.ScanSession:
    session = db.get(models.ScanSession, session_id, populate_existing=True, with_for_update=for_update)
    if session is None or session.actor_id != actor_id:
        raise AccessDeniedError("Session not found or access denied")
    return session


def _active_session(db: Session, session_id: int, actor_id: str) -> models.ScanSession:
    session = _owned_session(db, session_id, actor_id, for_update=True)
    if session.status != SessionStatus.ACTIVE:
        raise InvalidStateError("Session is not active")
    return session


def add_scan(db: Session, session_id: int, barcode: str, actor_id: str) -> int:
    """Record one read; repeated barcodes count again."""

    db.connection()
    with _session_locks.hold(session_id):
        session = _active_session(db, session_id, actor_id)
        db.add(models.ScanRecord(session_id=session.id, barcode=barcode, scanned_at=utcnow()))
        session.total_scanned += 1
        total = session.total_scanned
        db.commit()
    return total


def complete_session(db: Session, session_id: int, actor_id: str) -> CompletionResult:
    db.connection()
    with _session_locks.hold(session_id):
        session = _active_session(db, session_id, actor_id)
        total = session.total_scanned
        session.status = SessionStatus.COMPLETED
        session.completed_at = utcnow()
        if total > 0:
            # the status change commits together with the movement
            movements.record_movement(
                db,
                session.product_id,
                session.location_id,
                MovementType.INBOUND,
                total,
                actor_id=actor_id,
                reference=BULK_SCAN_REFERENCE,
                notes=f"Bulk scan session with {total} items",
            )
        else:
            db.commit()
        product = db.get(models.Product, session.product_id)

    logger.info("scan session %s completed with %s items", session_id, total)
    return CompletionResult(product=product, total_scanned=total)


def cancel_session(db: Session, session_id: int, actor_id: str) -> None:
    """Close the session without touching stock; its scan records stay."""

    db.connection()
    with _session_locks.hold(session_id):
        session = _active_session(db, session_id, actor_id)
        session.status = SessionStatus.CANCELLED
        session.completed_at = utcnow()
        discarded = session.total_scanned
        db.commit()
    logger.info("scan session %s cancelled, %s scans discarded", session_id, discarded)


def list_session_scans(db: Session, session_id: int, actor_id: str) -> list[models.ScanRecord]:
    _owned_session(db, session_id, actor_id)
    statement = (
        select(models.ScanRecord)
        .where(models.ScanRecord.session_id == session_id)
        .order_by(models.ScanRecord.id.desc())
    )
    return list(db.scalars(statement))


def list_sessions(
    db: Session, *, status: Optional[SessionStatus] = None, limit: int = 50
) -> list[tuple[models.ScanSession, int]]:
    """Newest sessions with the number of scan records each actually holds."""

    counts = (
        select(models.ScanRecord.session_id, func.count(models.ScanRecord.id).label("scans"))
        .group_by(models.ScanRecord.session_id)
        .subquery()
    )
    statement = select(models.ScanSession, func.coalesce(counts.c.scans, 0)).outerjoin(
        counts, counts.c.session_id == models.ScanSession.id
    )
    if status is not None:
        statement = statement.where(models.ScanSession.status == status)
    statement = statement.order_by(models.ScanSession.id.desc()).limit(limit)
    return [(session, int(scans)) for session, scans in db.execute(statement)]
