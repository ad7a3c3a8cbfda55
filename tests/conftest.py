import os
import tempfile
from collections.abc import Generator
from pathlib import Path
from typing import Any

# The packaged engine is built at import time; point it at a throwaway file.
os.environ.setdefault("INVENTORY_LEDGER_DB", str(Path(tempfile.mkdtemp()) / "default.sqlite3"))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker

from inventory_ledger import catalog, schemas
from inventory_ledger.app import create_app
from inventory_ledger.database import build_engine, init_database
from inventory_ledger.dependencies import get_db
from inventory_ledger.models import Location, Product

ACTOR = "alice"


@pytest.fixture(name="db_engine")
def db_engine_fixture(tmp_path: Path) -> Generator[Any, None, None]:
    engine = build_engine(f"sqlite:///{tmp_path / 'ledger.sqlite3'}")
    init_database(engine)
    yield engine
    engine.dispose()


@pytest.fixture(name="session_factory")
def session_factory_fixture(db_engine) -> sessionmaker:  # type: ignore[no-untyped-def]
    return sessionmaker(bind=db_engine, autoflush=False, autocommit=False, expire_on_commit=False)


@pytest.fixture(name="db")
def db_fixture(session_factory: sessionmaker) -> Generator[Session, None, None]:
    with session_factory() as session:
        yield session


@pytest.fixture(name="client")
def client_fixture(session_factory: sessionmaker):  # type: ignore[no-untyped-def]
    app = create_app()

    def get_db_override() -> Generator[Session, None, None]:
        with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = get_db_override

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture(name="product")
def product_fixture(db: Session) -> Product:
    return catalog.create_product(
        db,
        schemas.ProductCreate(name="Bottled Water", sku="WATER500", barcode="6900000000017", unit_price=3.5),
        actor_id=ACTOR,
    )


@pytest.fixture(name="location")
def location_fixture(db: Session) -> Location:
    return catalog.create_location(db, schemas.LocationCreate(name="Main Warehouse"), actor_id=ACTOR)


@pytest.fixture(name="other_location")
def other_location_fixture(db: Session) -> Location:
    return catalog.create_location(db, schemas.LocationCreate(name="Shop Floor"), actor_id=ACTOR)
