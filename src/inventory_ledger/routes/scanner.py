from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from .. import barcodes, intake
from ..auth import get_current_actor
from ..dependencies import get_db, limit_param
from ..models import SessionStatus
from ..schemas import (
    ProductRead,
    ScanAccepted,
    ScanCreate,
    ScanRecordRead,
    ScanSessionRead,
    ScanSessionSummary,
    SessionCompleted,
    SessionStart,
    SessionStarted,
    SingleScanCreate,
    SingleScanRead,
)

router = APIRouter(prefix="/scanner", tags=["scanner"])


@router.post("/single-scan", response_model=SingleScanRead)
def single_scan(
    payload: SingleScanCreate,
    actor_id: str = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> SingleScanRead:
    outcome = barcodes.single_scan(db, payload.barcode, payload.location_id, actor_id)
    return SingleScanRead(type=outcome.type, product=ProductRead.model_validate(outcome.product))


@router.post("/sessions", response_model=SessionStarted, status_code=status.HTTP_201_CREATED)
def start_session(
    payload: SessionStart,
    actor_id: str = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> SessionStarted:
    session = intake.start_session(db, payload.product_id, payload.location_id, actor_id)
    return SessionStarted(session_id=session.id)


@router.get("/sessions", response_model=list[ScanSessionSummary])
def list_sessions(
    status_filter: Optional[SessionStatus] = Query(None, alias="status"),
    limit: int = Depends(limit_param),
    db: Session = Depends(get_db),
) -> list[ScanSessionSummary]:
    return [
        ScanSessionSummary(**ScanSessionRead.model_validate(session).model_dump(), actual_scan_count=count)
        for session, count in intake.list_sessions(db, status=status_filter, limit=limit)
    ]


@router.get("/sessions/active", response_model=Optional[ScanSessionRead])
def get_active_session(actor_id: str = Depends(get_current_actor), db: Session = Depends(get_db)):
    return intake.get_active_session(db, actor_id)


@router.post("/sessions/{session_id}/scans", response_model=ScanAccepted)
def add_scan(
    session_id: int,
    payload: ScanCreate,
    actor_id: str = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> ScanAccepted:
    return ScanAccepted(total_scanned=intake.add_scan(db, session_id, payload.barcode, actor_id))


@router.get("/sessions/{session_id}/scans", response_model=list[ScanRecordRead])
def list_session_scans(
    session_id: int,
    actor_id: str = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    return intake.list_session_scans(db, session_id, actor_id)


@router.post("/sessions/{session_id}/complete", response_model=SessionCompleted)
def complete_session(
    session_id: int,
    actor_id: str = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> SessionCompleted:
    result = intake.complete_session(db, session_id, actor_id)
    return SessionCompleted(product=ProductRead.model_validate(result.product), total_scanned=result.total_scanned)


@router.post("/sessions/{session_id}/cancel", status_code=status.HTTP_204_NO_CONTENT)
def cancel_session(
    session_id: int,
    actor_id: str = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> Response:
    intake.cancel_session(db, session_id, actor_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
