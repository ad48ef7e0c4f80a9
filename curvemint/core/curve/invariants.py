"""Invariant checkers for a curve's ledger state.

Each function returns True when the invariant holds, and `check_all()` returns
the list of violated invariant IDs (empty = all pass).

These are state-local checks. Cross-collaborator checks (ledger supply,
custodied collateral) run in ``CurveMarket`` where the collaborators are known.
"""

from __future__ import annotations

from typing import Callable

from ...kernels.python.power_math_v1 import PowerMath
from .pricing import DEFAULT_POWER_MATH, unit_price
from .types import CurveState, PayoutMode


def inv_ledger_nonneg(s: CurveState) -> bool:
    return min(
        s.total_supply,
        s.reserve,
        s.collateral_held,
        s.total_platform_profit,
        s.total_creator_profit,
    ) >= 0


def inv_reserve_within_custody(s: CurveState) -> bool:
    return s.reserve <= s.collateral_held


def inv_collateral_conservation(s: CurveState) -> bool:
    if s.payout_mode is PayoutMode.IMMEDIATE:
        return s.total_platform_profit == 0 and s.total_creator_profit == 0
    return s.collateral_held == s.reserve + s.total_platform_profit + s.total_creator_profit


def inv_commission_rates_bounded(s: CurveState) -> bool:
    return s.fees.platform_rate + s.fees.creator_rate <= 100


def inv_cache_fractional_only(s: CurveState) -> bool:
    if s.params.is_integer_mode:
        return not s.price_cache
    return True


def inv_cache_keys_positive(s: CurveState) -> bool:
    return all(i >= 1 for i in s.price_cache)


# ---------------------------------------------------------------------------
# Registry + check_all
# ---------------------------------------------------------------------------

INVARIANT_REGISTRY: dict[str, Callable[[CurveState], bool]] = {
    "inv_ledger_nonneg": inv_ledger_nonneg,
    "inv_reserve_within_custody": inv_reserve_within_custody,
    "inv_collateral_conservation": inv_collateral_conservation,
    "inv_commission_rates_bounded": inv_commission_rates_bounded,
    "inv_cache_fractional_only": inv_cache_fractional_only,
    "inv_cache_keys_positive": inv_cache_keys_positive,
}


def check_all(state: CurveState) -> list[str]:
    """Return list of violated invariant IDs (empty = all pass)."""
    return [
        inv_id
        for inv_id, check_fn in INVARIANT_REGISTRY.items()
        if not check_fn(state)
    ]


def stale_cache_entries(state: CurveState, power_math: PowerMath = DEFAULT_POWER_MATH) -> list[int]:
    """Indices whose cached price differs from a fresh computation (expensive)."""
    return [
        i
        for i, price in sorted(state.price_cache.items())
        if price != unit_price(state.params, i, power_math)
    ]
