"""
Settlement orchestrator (imperative shell around the pricing core).

``CurveMarket`` owns one ``CurveState`` and drives the unit ledger and the
collateral gateway:

1. Validate the request and price it with the evaluator.
2. Move units and collateral through the collaborators.
3. Update supply / reserve / commission totals.
4. Check invariants and append a settlement record.

Every public operation is all-or-nothing: state, ledger and collateral are
checkpointed on entry and rolled back if any step raises. Operations are
serialized; the market takes no locks and is not thread-safe.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Callable, Iterator, Sequence

from ...kernels.python.power_math_v1 import PowerMath
from ...state.balances import PubKey
from .errors import (
    AssetMismatch,
    CurveError,
    CurveInvariantError,
    InsufficientPayment,
    InvalidCurveParams,
    InvalidQuantity,
    PayoutModeMismatch,
    ReserveUnderflow,
    SlippageExceeded,
    Unauthorized,
)
from .invariants import check_all
from .math import checked_add, checked_sub, split_commission
from .ports import CollateralGateway, UnitLedger
from .pricing import (
    DEFAULT_POWER_MATH,
    cost_to_mint,
    quote_cost_to_mint,
    quote_return_on_burn,
    return_on_burn,
    unit_price,
)
from .state import checkpoint_state, restore_state
from .types import (
    Action,
    AssetKind,
    BatchBurned,
    Burned,
    CommissionSplit,
    CurveState,
    Minted,
    PayoutMode,
    Record,
    SettlementCommand,
    SettlementResult,
    Withdrawn,
)

log = logging.getLogger(__name__)

DEFAULT_CUSTODY_ACCOUNT = "curvemint:custody"


class CurveMarket:
    """Mint / burn / sweep entry points for one bonding curve."""

    def __init__(
        self,
        state: CurveState,
        *,
        ledger: UnitLedger,
        collateral: CollateralGateway,
        power_math: PowerMath = DEFAULT_POWER_MATH,
        custody_account: PubKey = DEFAULT_CUSTODY_ACCOUNT,
    ) -> None:
        self.state = state
        self.ledger = ledger
        self.collateral = collateral
        self.power_math = power_math
        self.custody_account = custody_account
        self.records: list[Record] = []

    # -- Read-only views -----------------------------------------------------

    def current_supply(self) -> int:
        return self.state.total_supply

    def quote_mint(self, quantity: int) -> int:
        return quote_cost_to_mint(self.state, quantity, self.power_math)

    def quote_burn(self, quantity: int) -> int:
        return quote_return_on_burn(self.state, quantity, self.power_math)

    def price_at(self, unit_index: int) -> int:
        return unit_price(self.state.params, unit_index, self.power_math)

    def custody_balance(self) -> int:
        return self.collateral.balance_of(self.state.collateral_asset, self.custody_account)

    # -- Atomicity -----------------------------------------------------------

    def _violations(self) -> list[str]:
        violations = check_all(self.state)
        if self.ledger.total_supply() != self.state.total_supply:
            violations.append("inv_supply_matches_ledger")
        if self.custody_balance() < self.state.collateral_held:
            violations.append("inv_custody_covers_held")
        return violations

    @contextmanager
    def _atomic(self, label: str) -> Iterator[None]:
        state_cp = checkpoint_state(self.state)
        ledger_cp = self.ledger.checkpoint()
        collateral_cp = self.collateral.checkpoint()
        records_len = len(self.records)
        try:
            yield
            violations = self._violations()
            if violations:
                raise CurveInvariantError(violations)
        except Exception as exc:
            restore_state(self.state, state_cp)
            self.ledger.rollback(ledger_cp)
            self.collateral.rollback(collateral_cp)
            del self.records[records_len:]
            log.warning("%s rejected, rolled back: %s: %s", label, type(exc).__name__, exc)
            raise

    def _emit(self, record: Record) -> Record:
        self.records.append(record)
        return record

    # -- Guards --------------------------------------------------------------

    def _require_asset(self, kind: AssetKind) -> None:
        if self.state.asset_kind is not kind:
            raise AssetMismatch(
                f"{kind.value} entry point called on a {self.state.asset_kind.value} curve"
            )

    def _require_payout_mode(self, mode: PayoutMode) -> None:
        if self.state.payout_mode is not mode:
            raise PayoutModeMismatch(
                f"{mode.value} sweep called on a {self.state.payout_mode.value} curve"
            )

    def _require_burn_quantity(self, quantity: int) -> None:
        if not isinstance(quantity, int) or isinstance(quantity, bool):
            raise TypeError("quantity must be an int")
        if quantity <= 0:
            raise InvalidQuantity(f"quantity must be positive: {quantity}")
        if quantity > self.state.total_supply:
            raise InvalidQuantity(
                f"quantity {quantity} exceeds current supply {self.state.total_supply}"
            )

    # -- Mint ----------------------------------------------------------------

    def mint(
        self,
        caller: PubKey,
        quantity: int,
        max_payment: int,
        max_first_unit_price: int | None = None,
    ) -> Minted:
        """Mint on a token curve, pulling exactly the cost (<= max_payment) via allowance."""
        self._require_asset(AssetKind.TOKEN)
        with self._atomic("mint"):
            return self._mint(caller, quantity, max_payment, max_first_unit_price, native=False)

    def mint_native(
        self,
        caller: PubKey,
        quantity: int,
        payment: int,
        max_first_unit_price: int | None = None,
    ) -> Minted:
        """Mint on a native curve; the attached `payment` is taken and the excess refunded."""
        self._require_asset(AssetKind.NATIVE)
        with self._atomic("mint_native"):
            return self._mint(caller, quantity, payment, max_first_unit_price, native=True)

    def _mint(
        self,
        caller: PubKey,
        quantity: int,
        payment: int,
        max_first_unit_price: int | None,
        *,
        native: bool,
    ) -> Minted:
        s = self.state
        if not isinstance(quantity, int) or isinstance(quantity, bool):
            raise TypeError("quantity must be an int")
        if quantity <= 0:
            raise InvalidQuantity(f"quantity must be positive: {quantity}")

        if max_first_unit_price is not None:
            first_price = cost_to_mint(s, 1, self.power_math)
            if first_price > max_first_unit_price:
                raise SlippageExceeded(
                    f"first unit price {first_price} exceeds ceiling {max_first_unit_price}"
                )

        total_cost = cost_to_mint(s, quantity, self.power_math)
        if payment < total_cost:
            raise InsufficientPayment(f"payment {payment} below cost {total_cost}")

        batch_id = self.ledger.mint(caller, quantity)
        s.total_supply = checked_add(s.total_supply, quantity)

        split = split_commission(total_cost, s.fees.platform_rate, s.fees.creator_rate)
        s.reserve = checked_add(s.reserve, split.reserve_cut)

        asset = s.collateral_asset
        if native:
            self.collateral.pull(asset, caller, self.custody_account, payment)
            refund = payment - total_cost
            if refund:
                self.collateral.push(asset, self.custody_account, caller, refund)
        else:
            self.collateral.pull(asset, caller, self.custody_account, total_cost)
        s.collateral_held = checked_add(s.collateral_held, total_cost)

        self._dispose_commission(split)

        record = Minted(
            batch_id=batch_id,
            cost=total_cost,
            reserve_after=s.reserve,
            quantity=quantity,
            platform_cut=split.platform_cut,
            creator_cut=split.creator_cut,
        )
        log.info(
            "minted batch=%d quantity=%d cost=%d reserve=%d supply=%d",
            batch_id, quantity, total_cost, s.reserve, s.total_supply,
        )
        return self._emit(record)

    def _dispose_commission(self, split: CommissionSplit) -> None:
        """Pay the platform cut now, or accrue both cuts for a later claim."""
        s = self.state
        if s.payout_mode is PayoutMode.DEFERRED:
            s.total_platform_profit = checked_add(s.total_platform_profit, split.platform_cut)
            s.total_creator_profit = checked_add(s.total_creator_profit, split.creator_cut)
            return
        # Immediate: the creator cut stays custodied until `withdraw()` sweeps it.
        if split.platform_cut:
            self.collateral.push(s.collateral_asset, self.custody_account, s.fees.platform_account, split.platform_cut)
            s.collateral_held = checked_sub(s.collateral_held, split.platform_cut)

    # -- Burn ----------------------------------------------------------------

    def burn(self, caller: PubKey, batch_id: int, quantity: int, *, owner: PubKey | None = None) -> Burned:
        """Burn `quantity` units of `batch_id` held by `owner` (default: caller)."""
        with self._atomic("burn"):
            self._require_burn_quantity(quantity)
            total_return = return_on_burn(self.state, quantity, self.power_math)
            self.ledger.burn(owner or caller, batch_id, quantity, operator=caller)
            self._settle_burn(caller, quantity, total_return)
            record = Burned(
                batch_id=batch_id,
                return_amount=total_return,
                reserve_after=self.state.reserve,
                quantity=quantity,
            )
            log.info(
                "burned batch=%d quantity=%d return=%d reserve=%d supply=%d",
                batch_id, quantity, total_return, self.state.reserve, self.state.total_supply,
            )
            return self._emit(record)

    def burn_batch(
        self,
        caller: PubKey,
        batch_ids: Sequence[int],
        quantities: Sequence[int],
        *,
        owner: PubKey | None = None,
    ) -> BatchBurned:
        """Burn several batches in one settlement priced as a single range."""
        with self._atomic("burn_batch"):
            if not batch_ids or len(batch_ids) != len(quantities):
                raise InvalidQuantity("batch_ids and quantities must be non-empty and of equal length")
            for q in quantities:
                if not isinstance(q, int) or isinstance(q, bool) or q <= 0:
                    raise InvalidQuantity(f"every quantity must be a positive int: {q!r}")
            total_quantity = sum(quantities)
            self._require_burn_quantity(total_quantity)

            total_return = return_on_burn(self.state, total_quantity, self.power_math)
            self.ledger.burn_batch(owner or caller, batch_ids, quantities, operator=caller)
            self._settle_burn(caller, total_quantity, total_return)
            record = BatchBurned(
                batch_ids=tuple(batch_ids),
                quantities=tuple(quantities),
                return_amount=total_return,
                reserve_after=self.state.reserve,
            )
            log.info(
                "batch burned batches=%d quantity=%d return=%d reserve=%d",
                len(batch_ids), total_quantity, total_return, self.state.reserve,
            )
            return self._emit(record)

    def _settle_burn(self, caller: PubKey, quantity: int, total_return: int) -> None:
        s = self.state
        s.total_supply = checked_sub(s.total_supply, quantity)
        if total_return > s.reserve:
            raise ReserveUnderflow(f"return {total_return} exceeds reserve {s.reserve}")
        s.reserve -= total_return
        if total_return:
            self.collateral.push(s.collateral_asset, self.custody_account, caller, total_return)
        s.collateral_held = checked_sub(s.collateral_held, total_return)

    # -- Sweeps --------------------------------------------------------------

    def withdraw(self) -> Withdrawn:
        """Immediate payout: send custodied collateral above the reserve to the creator."""
        self._require_payout_mode(PayoutMode.IMMEDIATE)
        with self._atomic("withdraw"):
            s = self.state
            creator = s.fees.creator_account
            if creator is None:
                raise InvalidCurveParams("creator account not configured")
            amount = checked_sub(self.custody_balance(), s.reserve)
            if amount:
                self.collateral.push(s.collateral_asset, self.custody_account, creator, amount)
            s.collateral_held = s.reserve
            log.info("withdrawn to=%s amount=%d", creator, amount)
            return self._emit(Withdrawn(to=creator, amount=amount))

    def claim_platform_profit(self, caller: PubKey) -> Withdrawn:
        """Deferred payout: the platform account collects its accrued commission."""
        self._require_payout_mode(PayoutMode.DEFERRED)
        with self._atomic("claim_platform"):
            return self._claim(caller, self.state.fees.platform_account, "total_platform_profit")

    def claim_creator_profit(self, caller: PubKey) -> Withdrawn:
        """Deferred payout: the creator account collects its accrued commission."""
        self._require_payout_mode(PayoutMode.DEFERRED)
        with self._atomic("claim_creator"):
            return self._claim(caller, self.state.fees.creator_account, "total_creator_profit")

    def _claim(self, caller: PubKey, beneficiary: PubKey | None, field: str) -> Withdrawn:
        s = self.state
        if beneficiary is None or caller != beneficiary:
            raise Unauthorized(f"{caller} may not claim {field}")
        amount = getattr(s, field)
        if amount:
            self.collateral.push(s.collateral_asset, self.custody_account, caller, amount)
        setattr(s, field, 0)
        s.collateral_held = checked_sub(s.collateral_held, amount)
        log.info("claimed %s to=%s amount=%d", field, caller, amount)
        return self._emit(Withdrawn(to=caller, amount=amount))

    # -- Command facade ------------------------------------------------------

    def execute(self, command: SettlementCommand) -> SettlementResult:
        """Run one command; curve errors become a rejected ``SettlementResult``."""
        handler = _DISPATCH.get(command.action)
        if handler is None:
            return SettlementResult(ok=False, error=f"unknown action: {command.action}", code="unknown_action")
        try:
            record = handler(self, command)
        except CurveError as exc:
            return SettlementResult(ok=False, error=str(exc), code=type(exc).__name__)
        return SettlementResult(ok=True, record=record)


_Handler = Callable[[CurveMarket, SettlementCommand], Record]

_DISPATCH: dict[Action, _Handler] = {
    Action.MINT: lambda m, c: m.mint(c.caller, c.quantity, c.payment, c.max_first_unit_price),
    Action.MINT_NATIVE: lambda m, c: m.mint_native(c.caller, c.quantity, c.payment, c.max_first_unit_price),
    Action.BURN: lambda m, c: m.burn(c.caller, c.batch_id, c.quantity, owner=c.owner),
    Action.BURN_BATCH: lambda m, c: m.burn_batch(c.caller, c.batch_ids, c.quantities, owner=c.owner),
    Action.WITHDRAW: lambda m, c: m.withdraw(),
    Action.CLAIM_PLATFORM: lambda m, c: m.claim_platform_profit(c.caller),
    Action.CLAIM_CREATOR: lambda m, c: m.claim_creator_profit(c.caller),
}
