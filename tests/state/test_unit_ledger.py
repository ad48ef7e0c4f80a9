# [TESTER] v1

from __future__ import annotations

import pytest

from curvemint.core.curve.errors import InsufficientBalance, InvalidQuantity, Unauthorized
from curvemint.state.units import SerialUnitLedger


def test_mint_assigns_increasing_batch_ids() -> None:
    ledger = SerialUnitLedger()
    assert ledger.mint("alice", 3) == 1
    assert ledger.mint("bob", 2) == 2
    assert ledger.mint("alice", 1) == 3
    assert ledger.total_supply() == 6
    assert ledger.ids_of("alice") == [1, 3]
    assert ledger.balance_of("bob", 2) == 2
    assert ledger.balance_of("bob", 1) == 0


def test_mint_rejects_non_positive() -> None:
    ledger = SerialUnitLedger()
    with pytest.raises(InvalidQuantity):
        ledger.mint("alice", 0)
    with pytest.raises(TypeError):
        ledger.mint("alice", True)


def test_burn_removes_empty_holdings() -> None:
    ledger = SerialUnitLedger()
    bid = ledger.mint("alice", 2)
    ledger.burn("alice", bid, 2)
    assert ledger.ids_of("alice") == []
    assert ledger.total_supply() == 0


def test_burn_by_non_holder_is_unauthorized() -> None:
    ledger = SerialUnitLedger()
    bid = ledger.mint("alice", 2)
    with pytest.raises(Unauthorized):
        ledger.burn("bob", bid, 1)
    with pytest.raises(Unauthorized):
        ledger.burn("alice", bid, 1, operator="bob")


def test_burn_over_balance() -> None:
    ledger = SerialUnitLedger()
    bid = ledger.mint("alice", 2)
    with pytest.raises(InsufficientBalance):
        ledger.burn("alice", bid, 3)
    assert ledger.balance_of("alice", bid) == 2


def test_operator_approval() -> None:
    ledger = SerialUnitLedger()
    bid = ledger.mint("alice", 2)
    ledger.set_approval_for_all("alice", "bob", True)
    assert ledger.is_approved_for_all("alice", "bob")
    ledger.burn("alice", bid, 1, operator="bob")
    ledger.set_approval_for_all("alice", "bob", False)
    with pytest.raises(Unauthorized):
        ledger.burn("alice", bid, 1, operator="bob")
    with pytest.raises(ValueError):
        ledger.set_approval_for_all("alice", "alice", True)


def test_burn_batch_validates_before_debiting() -> None:
    ledger = SerialUnitLedger()
    b1 = ledger.mint("alice", 2)
    b2 = ledger.mint("alice", 1)
    with pytest.raises(InsufficientBalance):
        ledger.burn_batch("alice", [b1, b2, b2], [1, 1, 1])
    assert ledger.balance_of("alice", b1) == 2
    assert ledger.balance_of("alice", b2) == 1
    assert ledger.total_supply() == 3

    ledger.burn_batch("alice", [b1, b2, b1], [1, 1, 1])
    assert ledger.total_supply() == 0


def test_burn_batch_foreign_batch_is_unauthorized() -> None:
    ledger = SerialUnitLedger()
    b1 = ledger.mint("alice", 2)
    b2 = ledger.mint("bob", 1)
    with pytest.raises(Unauthorized):
        ledger.burn_batch("alice", [b1, b2], [1, 1])
    assert ledger.total_supply() == 3


def test_transfer_keeps_supply() -> None:
    ledger = SerialUnitLedger()
    bid = ledger.mint("alice", 5)
    ledger.transfer("alice", "bob", bid, 2)
    assert ledger.balance_of("alice", bid) == 3
    assert ledger.balance_of("bob", bid) == 2
    assert ledger.total_supply() == 5


def test_checkpoint_rollback() -> None:
    ledger = SerialUnitLedger()
    bid = ledger.mint("alice", 5)
    cp = ledger.checkpoint()
    ledger.mint("bob", 1)
    ledger.burn("alice", bid, 5)
    ledger.set_approval_for_all("alice", "carol", True)
    ledger.rollback(cp)
    assert ledger.balance_of("alice", bid) == 5
    assert ledger.total_supply() == 5
    assert not ledger.is_approved_for_all("alice", "carol")
    assert ledger.mint("bob", 1) == 2


def test_rollback_rejects_foreign_checkpoint() -> None:
    with pytest.raises(TypeError):
        SerialUnitLedger().rollback(object())
