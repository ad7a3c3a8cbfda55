import pytest

from inventory_ledger import ledger, movements
from inventory_ledger.errors import NotFoundError, ValidationError
from inventory_ledger.models import MovementType

ACTOR = "alice"


@pytest.mark.parametrize(
    ("movement_type", "previous", "quantity", "expected"),
    [
        (MovementType.INBOUND, 0, 10, 10),
        (MovementType.TRANSFER_IN, 4, 6, 10),
        (MovementType.OUTBOUND, 10, 3, 7),
        (MovementType.OUTBOUND, 10, 15, 0),
        (MovementType.TRANSFER_OUT, 2, 5, 0),
        (MovementType.ADJUSTMENT, 42, 7, 7),
        (MovementType.ADJUSTMENT, 3, 0, 0),
    ],
)
def test_compute_new_quantity(movement_type, previous, quantity, expected) -> None:
    assert ledger.compute_new_quantity(movement_type, previous, quantity) == expected


@pytest.mark.parametrize(
    "movement_type",
    [MovementType.INBOUND, MovementType.OUTBOUND, MovementType.TRANSFER_OUT, MovementType.TRANSFER_IN],
)
def test_non_adjustment_quantities_must_be_positive(movement_type) -> None:
    with pytest.raises(ValidationError):
        ledger.validate_quantity(movement_type, 0)
    with pytest.raises(ValidationError):
        ledger.validate_quantity(movement_type, -2)
    ledger.validate_quantity(movement_type, 1)


def test_adjustment_accepts_zero_but_not_negative() -> None:
    ledger.validate_quantity(MovementType.ADJUSTMENT, 0)
    with pytest.raises(ValidationError):
        ledger.validate_quantity(MovementType.ADJUSTMENT, -1)


def test_require_references_reports_dangling_ids(db, product, location) -> None:
    ledger.require_references(db, product.id, location.id)
    with pytest.raises(NotFoundError):
        ledger.require_references(db, 9999, location.id)
    with pytest.raises(NotFoundError):
        ledger.require_references(db, product.id, 9999)
    with pytest.raises(NotFoundError):
        ledger.require_references(db, product.id, location.id, transfer_to_location_id=9999)


def test_replay_matches_snapshot_after_mixed_movements(db, product, location) -> None:
    sequence = [
        (MovementType.INBOUND, 10),
        (MovementType.OUTBOUND, 4),
        (MovementType.ADJUSTMENT, 20),
        (MovementType.OUTBOUND, 25),
        (MovementType.TRANSFER_IN, 5),
        (MovementType.TRANSFER_OUT, 2),
    ]
    for movement_type, quantity in sequence:
        movements.apply_movement(db, product.id, location.id, movement_type, quantity, actor_id=ACTOR)

    snapshot = movements.get_snapshot(db, product.id, location.id)
    assert snapshot.quantity == 3
    assert ledger.replay(db, product.id, location.id) == 3
    assert ledger.verify_snapshots(db) == []


def test_verify_snapshots_flags_a_tampered_snapshot(db, product, location) -> None:
    movements.apply_movement(db, product.id, location.id, MovementType.INBOUND, 5, actor_id=ACTOR)
    snapshot = movements.get_snapshot(db, product.id, location.id)
    snapshot.quantity = 99
    db.commit()

    problems = ledger.verify_snapshots(db)
    assert len(problems) == 1
    assert problems[0].snapshot_quantity == 99
    assert problems[0].ledger_quantity == 5


def test_list_movements_filters_and_orders_newest_first(db, product, location, other_location) -> None:
    movements.apply_movement(db, product.id, location.id, MovementType.INBOUND, 5, actor_id=ACTOR)
    movements.apply_movement(db, product.id, other_location.id, MovementType.INBOUND, 2, actor_id=ACTOR)
    movements.apply_movement(db, product.id, location.id, MovementType.OUTBOUND, 1, actor_id=ACTOR)

    at_location = ledger.list_movements(db, location_id=location.id)
    assert [entry.type for entry in at_location] == [MovementType.OUTBOUND, MovementType.INBOUND]

    inbound = ledger.list_movements(db, movement_type=MovementType.INBOUND)
    assert {entry.location_id for entry in inbound} == {location.id, other_location.id}

    assert len(ledger.list_movements(db, product_id=product.id, limit=2)) == 2
