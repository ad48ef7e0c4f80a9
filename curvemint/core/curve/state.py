"""Curve construction, fee setup, checkpoints and dict serialization.

Round-trip property (tested): `state_from_dict(state_to_dict(s)) == s` for all
valid states.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Mapping

from ...state.balances import NATIVE_ASSET, AssetId, PubKey
from .errors import ConfigurationAlreadySet, InvalidCurveParams
from .types import CurveParams, CurveState, FeeConfig, PayoutMode

# Scalar ledger fields, in serialization order.
LEDGER_VAR_NAMES: tuple[str, ...] = (
    "total_supply",
    "reserve",
    "collateral_held",
    "total_platform_profit",
    "total_creator_profit",
)


def derive_curve_params(
    initial_mint_price: int,
    slope: int,
    exponent_numerator: int,
    exponent_denominator: int,
) -> CurveParams:
    """Build CurveParams with price(1) == initial_mint_price."""
    if exponent_denominator == 0:
        raise InvalidCurveParams("exponent_denominator must be non-zero")
    if initial_mint_price < slope:
        raise InvalidCurveParams(
            f"initial_mint_price ({initial_mint_price}) must be >= slope ({slope})"
        )
    n, d = exponent_numerator, exponent_denominator
    integer_exponent = n // d if d > 0 and n % d == 0 else 0
    try:
        return CurveParams(
            slope=slope,
            exponent_numerator=n,
            exponent_denominator=d,
            integer_exponent=integer_exponent,
            virtual_balance=initial_mint_price - slope,
        )
    except (TypeError, ValueError) as exc:
        raise InvalidCurveParams(str(exc)) from exc


def create_curve(
    initial_mint_price: int,
    slope: int,
    exponent_numerator: int,
    exponent_denominator: int,
    *,
    collateral_asset: AssetId = NATIVE_ASSET,
    payout_mode: PayoutMode = PayoutMode.DEFERRED,
) -> CurveState:
    """Return a fresh, empty CurveState (no supply, no reserve, fees unset)."""
    params = derive_curve_params(initial_mint_price, slope, exponent_numerator, exponent_denominator)
    return CurveState(params=params, collateral_asset=collateral_asset, payout_mode=payout_mode)


def setup_fees(
    state: CurveState,
    platform_account: PubKey,
    platform_rate: int,
    creator_account: PubKey,
    creator_rate: int,
) -> FeeConfig:
    """One-time fee configuration. Fails if either beneficiary is already set."""
    if state.fees.is_set:
        raise ConfigurationAlreadySet("fee configuration already set")
    if not platform_account or not creator_account:
        raise InvalidCurveParams("platform_account and creator_account must be non-empty")
    try:
        fees = FeeConfig(
            platform_account=platform_account,
            platform_rate=platform_rate,
            creator_account=creator_account,
            creator_rate=creator_rate,
        )
    except (TypeError, ValueError) as exc:
        raise InvalidCurveParams(str(exc)) from exc
    state.fees = fees
    return fees


def current_supply(state: CurveState) -> int:
    return state.total_supply


def cached_price(state: CurveState, unit_index: int) -> int | None:
    """Memoized per-unit price at `unit_index`, or None if not yet computed."""
    return state.price_cache.get(unit_index)


# ---------------------------------------------------------------------------
# Checkpoints (all-or-nothing settlement)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StateCheckpoint:
    fees: FeeConfig
    ledger: tuple[int, ...]
    cache_len: int


def checkpoint_state(state: CurveState) -> StateCheckpoint:
    return StateCheckpoint(
        fees=state.fees,
        ledger=tuple(getattr(state, name) for name in LEDGER_VAR_NAMES),
        cache_len=len(state.price_cache),
    )


def restore_state(state: CurveState, checkpoint: StateCheckpoint) -> None:
    """Undo every mutation made since `checkpoint` was taken."""
    state.fees = checkpoint.fees
    for name, value in zip(LEDGER_VAR_NAMES, checkpoint.ledger):
        setattr(state, name, value)
    # The cache only grows and dicts keep insertion order: drop the newest keys.
    for index in list(state.price_cache)[checkpoint.cache_len:]:
        del state.price_cache[index]


# ---------------------------------------------------------------------------
# Dict serialization
# ---------------------------------------------------------------------------


def state_to_dict(state: CurveState) -> dict[str, Any]:
    """Serialize a CurveState to plain JSON-compatible values."""
    p = state.params
    f = state.fees
    return {
        "params": {
            "slope": p.slope,
            "exponent_numerator": p.exponent_numerator,
            "exponent_denominator": p.exponent_denominator,
            "integer_exponent": p.integer_exponent,
            "virtual_balance": p.virtual_balance,
        },
        "collateral_asset": state.collateral_asset,
        "payout_mode": state.payout_mode.value,
        "fees": {
            "platform_account": f.platform_account,
            "platform_rate": f.platform_rate,
            "creator_account": f.creator_account,
            "creator_rate": f.creator_rate,
        },
        **{name: getattr(state, name) for name in LEDGER_VAR_NAMES},
        # JSON object keys are strings; order by index for determinism.
        "price_cache": {str(i): state.price_cache[i] for i in sorted(state.price_cache)},
    }


def _require_int(d: Mapping[str, Any], name: str) -> int:
    val = d[name]
    if not isinstance(val, int) or isinstance(val, bool):
        raise TypeError(f"{name!r} must be an int, got {type(val).__name__}")
    return int(val)


def state_from_dict(d: Mapping[str, Any]) -> CurveState:
    """Deserialize a dict to a CurveState. Raises KeyError on missing fields."""
    p = d["params"]
    params = CurveParams(
        slope=_require_int(p, "slope"),
        exponent_numerator=_require_int(p, "exponent_numerator"),
        exponent_denominator=_require_int(p, "exponent_denominator"),
        integer_exponent=_require_int(p, "integer_exponent"),
        virtual_balance=_require_int(p, "virtual_balance"),
    )
    f = d["fees"]
    fees = FeeConfig(
        platform_account=f["platform_account"],
        platform_rate=_require_int(f, "platform_rate"),
        creator_account=f["creator_account"],
        creator_rate=_require_int(f, "creator_rate"),
    )
    state = CurveState(
        params=params,
        collateral_asset=str(d["collateral_asset"]),
        payout_mode=PayoutMode(d["payout_mode"]),
        fees=fees,
        price_cache={int(k): int(v) for k, v in d["price_cache"].items()},
    )
    return replace(state, **{name: _require_int(d, name) for name in LEDGER_VAR_NAMES})
