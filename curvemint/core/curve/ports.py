"""Collaborator interfaces consumed by the settlement orchestrator.

The engine never owns units or collateral directly. It drives three
capabilities:

- ``UnitLedger``: serialized-unit ownership (mint / burn / balances). Burn
  authorization is enforced here, not by the pricing core.
- ``CollateralGateway``: all-or-nothing movement of a fungible token or the
  native currency.
- ``PowerMath`` (see ``kernels.python.power_math_v1``): rational powers and
  closed-form power sums.

``checkpoint()`` / ``rollback()`` let the orchestrator undo a partially applied
settlement so that a failed operation has no effect.
"""

from __future__ import annotations

from typing import Sequence

from ...kernels.python.power_math_v1 import PowerMath
from ...state.balances import AssetId, PubKey


class UnitLedger:
    """Interface for the serialized-unit token ledger."""

    def mint(self, owner: PubKey, quantity: int) -> int:
        """Create `quantity` units of a new batch for `owner`; return the batch id."""
        raise NotImplementedError

    def burn(self, owner: PubKey, batch_id: int, quantity: int, *, operator: PubKey | None = None) -> None:
        raise NotImplementedError

    def burn_batch(
        self,
        owner: PubKey,
        batch_ids: Sequence[int],
        quantities: Sequence[int],
        *,
        operator: PubKey | None = None,
    ) -> None:
        raise NotImplementedError

    def balance_of(self, owner: PubKey, batch_id: int) -> int:
        raise NotImplementedError

    def total_supply(self) -> int:
        raise NotImplementedError

    def checkpoint(self) -> object:
        raise NotImplementedError

    def rollback(self, checkpoint: object) -> None:
        raise NotImplementedError


class CollateralGateway:
    """Interface for collateral movement.

    `pull` moves funds the payer authorized (token allowance or attached native
    payment) to `recipient`; `push` is a direct transfer from `sender`.
    """

    def pull(self, asset: AssetId, payer: PubKey, recipient: PubKey, amount: int) -> None:
        raise NotImplementedError

    def push(self, asset: AssetId, sender: PubKey, recipient: PubKey, amount: int) -> None:
        raise NotImplementedError

    def balance_of(self, asset: AssetId, holder: PubKey) -> int:
        raise NotImplementedError

    def checkpoint(self) -> object:
        raise NotImplementedError

    def rollback(self, checkpoint: object) -> None:
        raise NotImplementedError


__all__ = ["CollateralGateway", "PowerMath", "UnitLedger"]
