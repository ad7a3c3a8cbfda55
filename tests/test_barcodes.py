import pytest

from inventory_ledger import barcodes, catalog, intake, ledger, movements, schemas
from inventory_ledger.config import BATCH_SIZE_CEILING, Settings
from inventory_ledger.errors import AccessDeniedError, ConflictError, NotFoundError, ValidationError
from inventory_ledger.models import MovementType, SessionStatus

ACTOR = "alice"


def test_batch_barcodes_use_sku_prefix_and_increasing_sequence() -> None:
    codes = barcodes.batch_barcodes("WATER500", 1700000000123, 3)

    assert codes == ["WATER50001230001", "WATER50001230002", "WATER50001230003"]


def test_generate_batch_receives_units_and_records_session(db, product, location) -> None:
    result = barcodes.generate_batch(db, product.id, location.id, 3, ACTOR)

    assert result.quantity == 3
    assert len(set(result.barcodes)) == 3
    assert all(code.startswith(product.sku) for code in result.barcodes)

    entries = ledger.entries_for(db, product.id, location.id)
    assert [(entry.type, entry.quantity, entry.reference) for entry in entries] == [
        (MovementType.INBOUND, 3, barcodes.GENERATION_REFERENCE)
    ]
    assert movements.get_snapshot(db, product.id, location.id).quantity == 3

    session, stored = barcodes.get_batch(db, result.session_id, ACTOR)
    assert session.status is SessionStatus.COMPLETED
    assert session.total_scanned == 3
    assert session.completed_at is not None
    assert stored == result.barcodes


@pytest.mark.parametrize("quantity", [0, -1, 1001])
def test_generate_batch_rejects_out_of_range_quantities(db, product, location, quantity: int) -> None:
    with pytest.raises(ValidationError):
        barcodes.generate_batch(db, product.id, location.id, quantity, ACTOR)
    assert ledger.list_movements(db) == []


def test_generate_batch_requires_existing_references(db, product, location) -> None:
    with pytest.raises(NotFoundError):
        barcodes.generate_batch(db, 9999, location.id, 2, ACTOR)
    with pytest.raises(NotFoundError):
        barcodes.generate_batch(db, product.id, 9999, 2, ACTOR)


def test_get_batch_only_for_the_issuing_actor(db, product, location) -> None:
    result = barcodes.generate_batch(db, product.id, location.id, 2, ACTOR)

    with pytest.raises(AccessDeniedError):
        barcodes.get_batch(db, result.session_id, "mallory")
    with pytest.raises(AccessDeniedError):
        barcodes.get_batch(db, 42, ACTOR)


def test_get_batch_does_not_expose_interactive_sessions(db, product, location) -> None:
    session = intake.start_session(db, product.id, location.id, ACTOR)
    intake.add_scan(db, session.id, "PRIVATE", ACTOR)

    with pytest.raises(AccessDeniedError):
        barcodes.get_batch(db, session.id, "bob")


def test_single_scan_of_known_barcode_receives_one_unit(db, product, location) -> None:
    outcome = barcodes.single_scan(db, product.barcode, location.id, ACTOR)

    assert outcome.type == "existing"
    assert outcome.product.id == product.id
    entry = ledger.list_movements(db)[0]
    assert entry.quantity == 1
    assert entry.reference == barcodes.SINGLE_SCAN_REFERENCE
    assert movements.get_snapshot(db, product.id, location.id).quantity == 1


def test_single_scan_of_unknown_barcode_registers_product(db, location) -> None:
    outcome = barcodes.single_scan(db, "4006381333931", location.id, ACTOR)

    assert outcome.type == "new"
    created = outcome.product
    assert created.name == "Product 4006381333931"
    assert created.barcode == "4006381333931"
    assert created.sku.startswith("SKU")
    assert created.unit_price == 0
    assert created.reorder_level == 10
    assert created.created_by == ACTOR
    assert ledger.list_movements(db) == []
    assert movements.get_snapshot(db, created.id, location.id) is None

    # the next scan of the same code is now an existing product
    assert barcodes.single_scan(db, "4006381333931", location.id, ACTOR).type == "existing"


def test_single_scan_of_inactive_product_barcode_conflicts(db, location) -> None:
    retired = catalog.create_product(
        db,
        schemas.ProductCreate(name="Retired", sku="OLD1", barcode="1111", is_active=False),
        actor_id=ACTOR,
    )

    with pytest.raises(ConflictError):
        barcodes.single_scan(db, "1111", location.id, ACTOR)
    assert movements.get_snapshot(db, retired.id, location.id) is None


def test_single_scan_requires_existing_location(db, product) -> None:
    with pytest.raises(NotFoundError):
        barcodes.single_scan(db, product.barcode, 9999, ACTOR)


def test_batch_size_setting_cannot_exceed_ceiling(db, product, location, monkeypatch) -> None:
    monkeypatch.setenv("INVENTORY_LEDGER_MAX_BATCH_SIZE", "5000")
    assert Settings().max_batch_size == BATCH_SIZE_CEILING

    monkeypatch.setattr(barcodes, "get_settings", Settings)
    with pytest.raises(ValidationError):
        barcodes.generate_batch(db, product.id, location.id, BATCH_SIZE_CEILING + 1, ACTOR)

    monkeypatch.setenv("INVENTORY_LEDGER_MAX_BATCH_SIZE", "25")
    assert Settings().max_batch_size == 25
