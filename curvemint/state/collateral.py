"""
In-memory collateral gateway.

Two asset kinds share one `BalanceTable`:
- fungible tokens: `pull` spends an allowance the payer granted to the
  recipient (the curve's custody account); `push` is a direct transfer,
- the native currency (`NATIVE_ASSET`): `pull` takes the payment attached to
  the call, no allowance needed.

Each transfer either completes fully or raises before touching any balance.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple

from ..core.curve.errors import InsufficientBalance
from ..core.curve.ports import CollateralGateway
from .balances import NATIVE_ASSET, Amount, AssetId, BalanceTable, PubKey, require_amount


@dataclass(frozen=True)
class _CollateralCheckpoint:
    holdings: Tuple[Tuple[Tuple[PubKey, AssetId], Amount], ...]
    allowances: Tuple[Tuple[Tuple[PubKey, PubKey, AssetId], Amount], ...]


class InMemoryCollateral(CollateralGateway):
    """Token + native collateral balances with ERC20-style allowances."""

    def __init__(self, balances: BalanceTable | None = None) -> None:
        self.balances = balances if balances is not None else BalanceTable()
        self._allowances: Dict[Tuple[PubKey, PubKey, AssetId], Amount] = {}

    def credit(self, holder: PubKey, asset: AssetId, amount: int) -> None:
        """Create collateral out of thin air (genesis / faucet / tests)."""
        require_amount(amount)
        self.balances.credit(holder, asset, amount)

    def approve(self, owner: PubKey, spender: PubKey, asset: AssetId, amount: int) -> None:
        require_amount(amount)
        if asset == NATIVE_ASSET:
            raise ValueError("native currency has no allowances")
        if amount == 0:
            self._allowances.pop((owner, spender, asset), None)
        else:
            self._allowances[(owner, spender, asset)] = amount

    def allowance(self, owner: PubKey, spender: PubKey, asset: AssetId) -> Amount:
        return self._allowances.get((owner, spender, asset), 0)

    def balance_of(self, asset: AssetId, holder: PubKey) -> Amount:
        return self.balances.get(holder, asset)

    def pull(self, asset: AssetId, payer: PubKey, recipient: PubKey, amount: int) -> None:
        require_amount(amount)
        if asset != NATIVE_ASSET:
            allowed = self.allowance(payer, recipient, asset)
            if allowed < amount:
                raise InsufficientBalance(f"allowance {allowed} below {amount} for {payer}")
        self._move(asset, payer, recipient, amount)
        if asset != NATIVE_ASSET:
            self.approve(payer, recipient, asset, self.allowance(payer, recipient, asset) - amount)

    def push(self, asset: AssetId, sender: PubKey, recipient: PubKey, amount: int) -> None:
        require_amount(amount)
        self._move(asset, sender, recipient, amount)

    def _move(self, asset: AssetId, sender: PubKey, recipient: PubKey, amount: int) -> None:
        held = self.balances.get(sender, asset)
        if held < amount:
            raise InsufficientBalance(f"{sender} holds {held} of {asset}, needs {amount}")
        self.balances.debit(sender, asset, amount)
        self.balances.credit(recipient, asset, amount)

    def checkpoint(self) -> _CollateralCheckpoint:
        return _CollateralCheckpoint(
            holdings=tuple(self.balances.holdings().items()),
            allowances=tuple(self._allowances.items()),
        )

    def rollback(self, checkpoint: object) -> None:
        if not isinstance(checkpoint, _CollateralCheckpoint):
            raise TypeError("checkpoint was not produced by this gateway")
        self.balances = BalanceTable(dict(checkpoint.holdings))
        self._allowances = dict(checkpoint.allowances)

    def __repr__(self) -> str:
        return f"InMemoryCollateral({self.balances!r}, {len(self._allowances)} allowances)"
