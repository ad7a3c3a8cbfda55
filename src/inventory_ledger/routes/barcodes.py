from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from .. import barcodes
from ..auth import get_current_actor
from ..dependencies import get_db
from ..schemas import BatchCreate, BatchDetail, BatchRead, ScanSessionRead

router = APIRouter(prefix="/barcodes", tags=["barcodes"])


@router.post("/batches", response_model=BatchRead, status_code=status.HTTP_201_CREATED)
def generate_batch(
    payload: BatchCreate,
    actor_id: str = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> BatchRead:
    result = barcodes.generate_batch(db, payload.product_id, payload.location_id, payload.quantity, actor_id)
    return BatchRead(session_id=result.session_id, barcodes=result.barcodes, quantity=result.quantity)


@router.get("/batches/{session_id}", response_model=BatchDetail)
def get_batch(
    session_id: int,
    actor_id: str = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> BatchDetail:
    session, codes = barcodes.get_batch(db, session_id, actor_id)
    return BatchDetail(session=ScanSessionRead.model_validate(session), barcodes=codes)
