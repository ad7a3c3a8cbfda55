import pytest

from inventory_ledger import ledger, movements, transfers
from inventory_ledger.errors import NotFoundError, ValidationError
from inventory_ledger.models import MovementType

ACTOR = "alice"


def test_transfer_writes_two_correlated_entries(db, product, location, other_location) -> None:
    movements.apply_movement(db, product.id, location.id, MovementType.INBOUND, 10, actor_id=ACTOR)

    result = transfers.transfer(db, product.id, location.id, other_location.id, 4, actor_id=ACTOR, reference="TR-9")

    assert result.source_quantity == 6
    assert result.destination_quantity == 4
    debit = ledger.list_movements(db, location_id=location.id, limit=1)[0]
    credit = ledger.list_movements(db, location_id=other_location.id, limit=1)[0]
    assert debit.type is MovementType.TRANSFER_OUT
    assert debit.transfer_to_location_id == other_location.id
    assert credit.type is MovementType.TRANSFER_IN
    assert credit.quantity == 4
    assert credit.reference == "TR-9"
    assert ledger.verify_snapshots(db) == []


def test_transfer_credits_only_what_left_the_source(db, product, location, other_location) -> None:
    movements.apply_movement(db, product.id, location.id, MovementType.INBOUND, 3, actor_id=ACTOR)

    result = transfers.transfer(db, product.id, location.id, other_location.id, 5, actor_id=ACTOR)

    assert result.source_quantity == 0
    assert result.destination_quantity == 3


def test_transfer_from_empty_source_writes_no_credit(db, product, location, other_location) -> None:
    result = transfers.transfer(db, product.id, location.id, other_location.id, 2, actor_id=ACTOR)

    assert result.destination_quantity is None
    assert ledger.list_movements(db, location_id=other_location.id) == []
    assert len(ledger.list_movements(db, location_id=location.id)) == 1


def test_transfer_rejects_bad_input(db, product, location) -> None:
    with pytest.raises(ValidationError):
        transfers.transfer(db, product.id, location.id, location.id, 1, actor_id=ACTOR)
    with pytest.raises(ValidationError):
        transfers.transfer(db, product.id, location.id, location.id + 1, 0, actor_id=ACTOR)
    with pytest.raises(NotFoundError):
        transfers.transfer(db, product.id, location.id, 9999, 1, actor_id=ACTOR)
    assert ledger.list_movements(db) == []
