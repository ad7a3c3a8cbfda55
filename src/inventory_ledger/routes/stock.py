from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from .. import ledger, movements, snapshots, transfers
from ..auth import get_current_actor
from ..dependencies import get_db, limit_param
from ..models import MovementType
from ..schemas import (
    MovementApplied,
    MovementCreate,
    MovementRead,
    SnapshotRead,
    StockLevelRead,
    TransferCreate,
    TransferRead,
)

router = APIRouter(prefix="/stock", tags=["stock"])


@router.post("/movements", response_model=MovementApplied, status_code=status.HTTP_201_CREATED)
def apply_movement(
    payload: MovementCreate,
    actor_id: str = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> MovementApplied:
    quantity = movements.apply_movement(
        db,
        payload.product_id,
        payload.location_id,
        payload.type,
        payload.quantity,
        actor_id=actor_id,
        reference=payload.reference,
        notes=payload.notes,
        transfer_to_location_id=payload.transfer_to_location_id,
    )
    return MovementApplied(quantity=quantity)


@router.get("/movements", response_model=list[MovementRead])
def list_movements(
    product_id: Optional[int] = None,
    location_id: Optional[int] = None,
    type: Optional[MovementType] = None,
    limit: int = Depends(limit_param),
    db: Session = Depends(get_db),
):
    return ledger.list_movements(
        db,
        product_id=product_id,
        location_id=location_id,
        movement_type=type,
        limit=limit,
    )


@router.get("/snapshot", response_model=Optional[SnapshotRead])
def get_snapshot(product_id: int, location_id: int, db: Session = Depends(get_db)):
    return movements.get_snapshot(db, product_id, location_id)


@router.get("/levels", response_model=list[StockLevelRead])
def list_stock_levels(location_id: Optional[int] = None, db: Session = Depends(get_db)):
    return snapshots.list_levels(db, location_id=location_id)


@router.post("/transfers", response_model=TransferRead, status_code=status.HTTP_201_CREATED)
def transfer_stock(
    payload: TransferCreate,
    actor_id: str = Depends(get_current_actor),
    db: Session = Depends(get_db),
) -> TransferRead:
    result = transfers.transfer(
        db,
        payload.product_id,
        payload.from_location_id,
        payload.to_location_id,
        payload.quantity,
        actor_id=actor_id,
        reference=payload.reference,
        notes=payload.notes,
    )
    return TransferRead(
        source_quantity=result.source_quantity,
        destination_quantity=result.destination_quantity,
    )
