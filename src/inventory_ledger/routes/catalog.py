from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from .. import catalog, snapshots
from ..auth import get_current_actor
from ..dependencies import get_db
from ..schemas import LocationCreate, LocationRead, LowStockProduct, ProductCreate, ProductRead

router = APIRouter(tags=["catalog"])


@router.post("/products", response_model=ProductRead, status_code=status.HTTP_201_CREATED)
def create_product(
    payload: ProductCreate,
    actor_id: str = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    return catalog.create_product(db, payload, actor_id=actor_id)


@router.get("/products/low-stock", response_model=list[LowStockProduct])
def list_low_stock(db: Session = Depends(get_db)) -> list[LowStockProduct]:
    return [
        LowStockProduct(**ProductRead.model_validate(product).model_dump(), total_stock=total)
        for product, total in snapshots.low_stock_products(db)
    ]


@router.get("/products/{product_id}", response_model=ProductRead)
def get_product(product_id: int, db: Session = Depends(get_db)):
    return catalog.require_product(db, product_id)


@router.post("/locations", response_model=LocationRead, status_code=status.HTTP_201_CREATED)
def create_location(
    payload: LocationCreate,
    actor_id: str = Depends(get_current_actor),
    db: Session = Depends(get_db),
):
    return catalog.create_location(db, payload, actor_id=actor_id)


@router.get("/locations", response_model=list[LocationRead])
def list_locations(db: Session = Depends(get_db)):
    return catalog.list_locations(db)
