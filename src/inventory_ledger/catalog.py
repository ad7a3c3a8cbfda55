"""Minimal catalog access: the ledger only needs to register and look up
products and locations; everything else about the catalog lives elsewhere."""

from __future__ import annotations

import random
import string
import time
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from . import models, schemas
from .errors import ConflictError, NotFoundError

_SKU_SUFFIX_ALPHABET = string.digits + string.ascii_uppercase


def get_product(db: Session, product_id: int) -> Optional[models.Product]:
    return db.get(models.Product, product_id)


def get_location(db: Session, location_id: int) -> Optional[models.Location]:
    return db.get(models.Location, location_id)


def require_product(db: Session, product_id: int) -> models.Product:
    product = get_product(db, product_id)
    if product is None:
        raise NotFoundError(f"Product {product_id} not found")
    return product


def require_location(db: Session, location_id: int) -> models.Location:
    location = get_location(db, location_id)
    if location is None:
        raise NotFoundError(f"Location {location_id} not found")
    return location


def get_product_by_sku(db: Session, sku: str) -> Optional[models.Product]:
    statement = select(models.Product).where(models.Product.sku == sku)
    return db.scalars(statement).first()


def get_product_by_barcode(db: Session, barcode: str, *, active_only: bool = False) -> Optional[models.Product]:
    statement = select(models.Product).where(models.Product.barcode == barcode)
    if active_only:
        statement = statement.where(models.Product.is_active.is_(True))
    return db.scalars(statement).first()


def list_locations(db: Session, *, include_inactive: bool = False) -> list[models.Location]:
    statement = select(models.Location).order_by(models.Location.id)
    if not include_inactive:
        statement = statement.where(models.Location.is_active.is_(True))
    return list(db.scalars(statement))


def generate_sku(db: Session) -> str:
    """Return an unused ``SKU<6 digits><3 chars>`` code."""

    while True:
        stamp = str(int(time.time() * 1000))[-6:]
        suffix = "".join(random.choices(_SKU_SUFFIX_ALPHABET, k=3))
        sku = f"SKU{stamp}{suffix}"
        if get_product_by_sku(db, sku) is None:
            return sku


def create_product(db: Session, payload: schemas.ProductCreate, *, actor_id: str) -> models.Product:
    if get_product_by_sku(db, payload.sku):
        raise ConflictError(f"A product with SKU '{payload.sku}' already exists")
    if payload.barcode and get_product_by_barcode(db, payload.barcode):
        raise ConflictError(f"A product with barcode '{payload.barcode}' already exists")

    product = models.Product(
        name=payload.name,
        sku=payload.sku,
        barcode=payload.barcode,
        description=payload.description,
        unit_price=payload.unit_price,
        reorder_level=payload.reorder_level,
        is_active=payload.is_active,
        created_by=actor_id,
    )
    db.add(product)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError("A product with this SKU or barcode already exists") from exc
    db.refresh(product)
    return product


def create_location(db: Session, payload: schemas.LocationCreate, *, actor_id: str) -> models.Location:
    location = models.Location(name=payload.name, address=payload.address, is_active=True, created_by=actor_id)
    db.add(location)
    db.commit()
    db.refresh(location)
    return location
