"""
Serialized-unit ledger (in-memory `UnitLedger`).

Each mint call creates a new batch with a fresh, strictly increasing batch id;
the batch's units are fungible among themselves. Holdings are tracked per
(owner, batch_id), like the per-pool LP table.

Notes:
- Balances are always non-negative; zero balances are omitted.
- A burn or transfer by someone other than the owner requires operator
  approval (`set_approval_for_all`), otherwise `Unauthorized`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Sequence, Tuple

from ..core.curve.errors import InsufficientBalance, InvalidQuantity, Unauthorized
from ..core.curve.ports import UnitLedger
from .balances import Amount, PubKey

# Type alias
BatchId = int


@dataclass(frozen=True)
class _LedgerCheckpoint:
    balances: Tuple[Tuple[Tuple[PubKey, BatchId], Amount], ...]
    approvals: FrozenSet[Tuple[PubKey, PubKey]]
    next_id: int
    total: int


def _require_positive(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")
    if value <= 0:
        raise InvalidQuantity(f"{name} must be positive: {value}")


class SerialUnitLedger(UnitLedger):
    """Deterministic unit table mapping (owner, batch_id) -> quantity."""

    def __init__(self) -> None:
        self._balances: Dict[Tuple[PubKey, BatchId], Amount] = {}
        self._approvals: set[Tuple[PubKey, PubKey]] = set()
        self._next_id: BatchId = 1
        self._total: Amount = 0

    # -- Reads ---------------------------------------------------------------

    def balance_of(self, owner: PubKey, batch_id: BatchId) -> Amount:
        return self._balances.get((owner, batch_id), 0)

    def total_supply(self) -> Amount:
        return self._total

    def ids_of(self, owner: PubKey) -> List[BatchId]:
        """Batch ids with a non-zero balance for `owner`, ascending."""
        return sorted(bid for (pk, bid) in self._balances if pk == owner)

    def is_approved_for_all(self, owner: PubKey, operator: PubKey) -> bool:
        return (owner, operator) in self._approvals

    # -- Writes --------------------------------------------------------------

    def set_approval_for_all(self, owner: PubKey, operator: PubKey, approved: bool) -> None:
        if owner == operator:
            raise ValueError("owner cannot approve itself")
        if approved:
            self._approvals.add((owner, operator))
        else:
            self._approvals.discard((owner, operator))

    def mint(self, owner: PubKey, quantity: int) -> BatchId:
        _require_positive("quantity", quantity)
        batch_id = self._next_id
        self._next_id += 1
        self._balances[(owner, batch_id)] = quantity
        self._total += quantity
        return batch_id

    def burn(self, owner: PubKey, batch_id: BatchId, quantity: int, *, operator: PubKey | None = None) -> None:
        self._require_operator(owner, operator)
        self._debit(owner, batch_id, quantity)
        self._total -= quantity

    def burn_batch(
        self,
        owner: PubKey,
        batch_ids: Sequence[BatchId],
        quantities: Sequence[int],
        *,
        operator: PubKey | None = None,
    ) -> None:
        if len(batch_ids) != len(quantities):
            raise InvalidQuantity("batch_ids and quantities length mismatch")
        self._require_operator(owner, operator)
        # Validate everything before the first debit so a failure leaves no trace.
        needed: Dict[BatchId, int] = {}
        for batch_id, quantity in zip(batch_ids, quantities):
            _require_positive("quantity", quantity)
            needed[batch_id] = needed.get(batch_id, 0) + quantity
        for batch_id, quantity in needed.items():
            self._check_holding(owner, batch_id, quantity)
        for batch_id, quantity in needed.items():
            self._debit(owner, batch_id, quantity)
            self._total -= quantity

    def transfer(self, sender: PubKey, recipient: PubKey, batch_id: BatchId, quantity: int, *, operator: PubKey | None = None) -> None:
        self._require_operator(sender, operator)
        self._debit(sender, batch_id, quantity)
        key = (recipient, batch_id)
        self._balances[key] = self._balances.get(key, 0) + quantity

    def _require_operator(self, owner: PubKey, operator: PubKey | None) -> None:
        if operator is None or operator == owner:
            return
        if not self.is_approved_for_all(owner, operator):
            raise Unauthorized(f"{operator} is not approved to act for {owner}")

    def _check_holding(self, owner: PubKey, batch_id: BatchId, quantity: int) -> Amount:
        held = self.balance_of(owner, batch_id)
        if held == 0:
            raise Unauthorized(f"{owner} holds no units of batch {batch_id}")
        if held < quantity:
            raise InsufficientBalance(f"{owner} holds {held} of batch {batch_id}, needs {quantity}")
        return held

    def _debit(self, owner: PubKey, batch_id: BatchId, quantity: int) -> None:
        _require_positive("quantity", quantity)
        held = self._check_holding(owner, batch_id, quantity)
        if held == quantity:
            del self._balances[(owner, batch_id)]
        else:
            self._balances[(owner, batch_id)] = held - quantity

    # -- Checkpoints ---------------------------------------------------------

    def checkpoint(self) -> _LedgerCheckpoint:
        return _LedgerCheckpoint(
            balances=tuple(self._balances.items()),
            approvals=frozenset(self._approvals),
            next_id=self._next_id,
            total=self._total,
        )

    def rollback(self, checkpoint: object) -> None:
        if not isinstance(checkpoint, _LedgerCheckpoint):
            raise TypeError("checkpoint was not produced by this ledger")
        self._balances = dict(checkpoint.balances)
        self._approvals = set(checkpoint.approvals)
        self._next_id = checkpoint.next_id
        self._total = checkpoint.total

    def __repr__(self) -> str:
        return f"SerialUnitLedger({len(self._balances)} holdings, supply={self._total})"
