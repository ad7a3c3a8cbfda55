"""Pydantic schemas for API payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from . import ledger
from .errors import ValidationError
from .models import MovementType, SessionStatus


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=256)
    sku: str = Field(..., min_length=1, max_length=64)
    barcode: Optional[str] = Field(None, min_length=1, max_length=128)
    description: Optional[str] = None
    unit_price: float = Field(0.0, ge=0)
    reorder_level: int = Field(10, ge=0)
    is_active: bool = True


class ProductRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    sku: str
    barcode: Optional[str] = None
    description: Optional[str] = None
    unit_price: float
    reorder_level: int
    is_active: bool
    created_at: datetime
    updated_at: datetime


class LowStockProduct(ProductRead):
    total_stock: int


class LocationCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=128)
    address: Optional[str] = Field(None, max_length=256)


class LocationRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    address: Optional[str] = None
    is_active: bool
    created_at: datetime


class MovementCreate(BaseModel):
    product_id: int
    location_id: int
    type: MovementType
    quantity: int
    reference: Optional[str] = Field(None, max_length=256)
    notes: Optional[str] = None
    transfer_to_location_id: Optional[int] = None

    @model_validator(mode="after")
    def _check_quantity(self) -> "MovementCreate":
        try:
            ledger.validate_quantity(self.type, self.quantity)
        except ValidationError as exc:
            raise ValueError(str(exc)) from exc
        return self


class MovementApplied(BaseModel):
    quantity: int


class MovementRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    product_id: int
    location_id: int
    type: MovementType
    quantity: int
    previous_quantity: int
    new_quantity: int
    reference: Optional[str] = None
    notes: Optional[str] = None
    transfer_to_location_id: Optional[int] = None
    actor_id: str
    created_at: datetime


class SnapshotRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    quantity: int
    reserved_quantity: int
    updated_at: datetime


class StockLevelRead(SnapshotRead):
    product_id: int
    location_id: int
    product: ProductRead
    location: LocationRead


class TransferCreate(BaseModel):
    product_id: int
    from_location_id: int
    to_location_id: int
    quantity: int = Field(..., gt=0)
    reference: Optional[str] = Field(None, max_length=256)
    notes: Optional[str] = None


class TransferRead(BaseModel):
    source_quantity: int
    destination_quantity: Optional[int] = None


class SessionStart(BaseModel):
    product_id: int
    location_id: int


class SessionStarted(BaseModel):
    session_id: int


class ScanCreate(BaseModel):
    barcode: str = Field(..., min_length=1, max_length=128)


class ScanAccepted(BaseModel):
    total_scanned: int


class ScanRecordRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    barcode: str
    scanned_at: datetime


class ScanSessionRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    product_id: int
    location_id: int
    status: SessionStatus
    total_scanned: int
    actor_id: str
    created_at: datetime
    completed_at: Optional[datetime] = None


class ScanSessionSummary(ScanSessionRead):
    actual_scan_count: int


class SessionCompleted(BaseModel):
    product: ProductRead
    total_scanned: int


class SingleScanCreate(BaseModel):
    barcode: str = Field(..., min_length=1, max_length=128)
    location_id: int


class SingleScanRead(BaseModel):
    type: Literal["existing", "new"]
    product: ProductRead


class BatchCreate(BaseModel):
    product_id: int
    location_id: int
    quantity: int


class BatchRead(BaseModel):
    session_id: int
    barcodes: list[str]
    quantity: int


class BatchDetail(BaseModel):
    session: ScanSessionRead
    barcodes: list[str]
