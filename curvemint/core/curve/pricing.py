"""
Pricing evaluator for the bonding curve f(x) = m * x^N + v.

The price of a range of units is the definite sum of per-unit prices over
absolute unit indices. Mint prices the range just above the current supply,
`[S+1, S+q]`; burn prices the top of the curve, `[E-q+1, E]`.

Evaluation strategy is fixed by the curve's exponent:

- integer N <= 10: closed form, m * (P(N, b) - P(N, a-1)) + v * q, where P is
  the power-sum collaborator. Constant work in q.
- integer N > 10: unit-by-unit m * i^N + v.
- fractional N = n/d: unit-by-unit v + floor(m * num / den) with
  (num, den) ~ i^(n/d) from the collaborator. The floor rounds in the
  protocol's favor.

Fractional prices are memoized in `CurveState.price_cache` by the *settle*
functions (`cost_to_mint`, `return_on_burn`). The *quote* functions
(`quote_cost_to_mint`, `quote_return_on_burn`) read the cache but never write
it, and return identical numbers.
"""

from __future__ import annotations

import logging

from ...kernels.python.power_math_v1 import ExactPowerMath, PowerMath
from .errors import ArithmeticFault, InvalidQuantity
from .math import (
    MAX_CLOSED_FORM_EXPONENT,
    checked_add,
    checked_div,
    checked_mul,
    checked_pow,
    checked_sub,
    net_of_commission,
)
from .types import CurveParams, CurveState, PricingStrategy

log = logging.getLogger(__name__)

DEFAULT_POWER_MATH: PowerMath = ExactPowerMath()


def _require_quantity(quantity: int) -> None:
    if not isinstance(quantity, int) or isinstance(quantity, bool):
        raise TypeError("quantity must be an int")
    if quantity < 0:
        raise InvalidQuantity(f"quantity must be non-negative: {quantity}")


def pricing_strategy(params: CurveParams) -> PricingStrategy:
    if not params.is_integer_mode:
        return PricingStrategy.FRACTIONAL
    if params.integer_exponent <= MAX_CLOSED_FORM_EXPONENT:
        return PricingStrategy.CLOSED_FORM
    return PricingStrategy.ITERATIVE


# -- Per-unit price ----------------------------------------------------------

def unit_price(params: CurveParams, index: int, power_math: PowerMath = DEFAULT_POWER_MATH) -> int:
    """Price of the unit at absolute position `index` (1-based). Side-effect free."""
    if index < 1:
        raise ArithmeticFault(f"unit index must be >= 1: {index}")
    if params.is_integer_mode:
        return checked_add(checked_mul(params.slope, checked_pow(index, params.integer_exponent)), params.virtual_balance)
    n, d = params.exponent_numerator, params.exponent_denominator
    # index^(n/d) >= 2^((bits-1)*n/d): bound it before the collaborator materializes it.
    if index > 1 and n * (index.bit_length() - 1) > 256 * d:
        raise ArithmeticFault(f"overflow in {index}^({n}/{d})")
    num, den = power_math.pow(index, n, d)
    # num carries the 2^precision scale; only the descaled product is a uint256 amount.
    return checked_add(params.virtual_balance, checked_div(params.slope * num, den))


def cached_unit_price(state: CurveState, index: int, power_math: PowerMath = DEFAULT_POWER_MATH) -> int:
    """Per-unit price, memoized in `state.price_cache` on first computation."""
    hit = state.price_cache.get(index)
    if hit is not None:
        return hit
    price = unit_price(state.params, index, power_math)
    state.price_cache[index] = price
    log.debug("price cache fill: index=%d price=%d", index, price)
    return price


def _peek_unit_price(state: CurveState, index: int, power_math: PowerMath) -> int:
    hit = state.price_cache.get(index)
    if hit is not None:
        return hit
    return unit_price(state.params, index, power_math)


# -- Range sums --------------------------------------------------------------

def interval_power_sum(power: int, first: int, last: int, power_math: PowerMath = DEFAULT_POWER_MATH) -> int:
    """sum_{i=first}^{last} i^power via P(power, last) - P(power, first-1)."""
    if first < 1:
        raise ArithmeticFault(f"interval sum lower bound must be >= 1: {first}")
    if last == first - 1:
        return 0
    upper = power_math.int_power_sum(power, last)
    lower = power_math.int_power_sum(power, first - 1)
    return checked_sub(upper, lower)


def range_price_sum(
    state: CurveState,
    first: int,
    last: int,
    power_math: PowerMath = DEFAULT_POWER_MATH,
    *,
    memoize: bool,
) -> int:
    """Sum of per-unit prices over absolute indices [first, last] (0 when empty)."""
    if last < first:
        return 0
    params = state.params
    strategy = pricing_strategy(params)
    count = last - first + 1
    log.debug("range price: [%d, %d] strategy=%s", first, last, strategy.value)

    if strategy is PricingStrategy.CLOSED_FORM:
        s = interval_power_sum(params.integer_exponent, first, last, power_math)
        return checked_add(checked_mul(params.slope, s), checked_mul(params.virtual_balance, count))

    total = 0
    if strategy is PricingStrategy.ITERATIVE:
        for i in range(first, last + 1):
            total = checked_add(total, unit_price(params, i, power_math))
        return total

    price_of = cached_unit_price if memoize else _peek_unit_price
    for i in range(first, last + 1):
        total = checked_add(total, price_of(state, i, power_math))
    return total


def _mint_range(state: CurveState, quantity: int) -> tuple[int, int]:
    _require_quantity(quantity)
    return checked_add(state.total_supply, 1), checked_add(state.total_supply, quantity)


def _burn_range(state: CurveState, quantity: int) -> tuple[int, int]:
    _require_quantity(quantity)
    top = state.total_supply
    clamped = min(quantity, top)
    return top - clamped + 1, top


# -- Public evaluator --------------------------------------------------------

def cost_to_mint(state: CurveState, quantity: int, power_math: PowerMath = DEFAULT_POWER_MATH) -> int:
    """Cost of the next `quantity` units. Fills the fractional price cache."""
    first, last = _mint_range(state, quantity)
    return range_price_sum(state, first, last, power_math, memoize=True)


def quote_cost_to_mint(state: CurveState, quantity: int, power_math: PowerMath = DEFAULT_POWER_MATH) -> int:
    """Read-only twin of `cost_to_mint`."""
    first, last = _mint_range(state, quantity)
    return range_price_sum(state, first, last, power_math, memoize=False)


def return_on_burn(state: CurveState, quantity: int, power_math: PowerMath = DEFAULT_POWER_MATH) -> int:
    """
    Collateral returned for burning the top `quantity` units, net of commission.

    `quantity` is clamped to the current supply; callers needing exact accounting
    must check the clamp themselves.
    """
    first, last = _burn_range(state, quantity)
    gross = range_price_sum(state, first, last, power_math, memoize=True)
    return net_of_commission(gross, state.fees.platform_rate, state.fees.creator_rate)


def quote_return_on_burn(state: CurveState, quantity: int, power_math: PowerMath = DEFAULT_POWER_MATH) -> int:
    """Read-only twin of `return_on_burn`."""
    first, last = _burn_range(state, quantity)
    gross = range_price_sum(state, first, last, power_math, memoize=False)
    return net_of_commission(gross, state.fees.platform_rate, state.fees.creator_rate)
