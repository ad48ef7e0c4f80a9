"""
Curve deployment configuration (imperative shell).

A curve is described by a YAML mapping:

    name: Example Pass
    symbol: PASS
    metadata_base_uri: https://example.invalid/pass/
    collateral_asset: native          # or a 0x-prefixed 32-byte asset id
    payout_mode: deferred             # or immediate
    initial_mint_price: 1000
    slope: 10
    exponent_numerator: 3
    exponent_denominator: 2
    fees:
      platform_account: platform
      platform_rate: 5
      creator_account: creator
      creator_rate: 5

Environment variables prefixed `CURVEMINT_` override individual keys, e.g.
`CURVEMINT_PAYOUT_MODE=immediate` or `CURVEMINT_SLOPE=20`.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Mapping

import yaml

from ..core.curve.ports import CollateralGateway, UnitLedger
from ..core.curve.settlement import DEFAULT_CUSTODY_ACCOUNT, CurveMarket
from ..core.curve.state import create_curve, setup_fees
from ..core.curve.types import CurveState, PayoutMode
from ..kernels.python.power_math_v1 import DEFAULT_POW_PRECISION, ExactPowerMath
from ..state.balances import NATIVE_ASSET
from ..state.canonical import canonical_hex_fixed_allow_0x
from ..state.collateral import InMemoryCollateral
from ..state.units import SerialUnitLedger

log = logging.getLogger(__name__)

ENV_PREFIX = "CURVEMINT_"

_INT_KEYS = (
    "initial_mint_price",
    "slope",
    "exponent_numerator",
    "exponent_denominator",
    "platform_rate",
    "creator_rate",
    "pow_precision",
)
_STR_KEYS = (
    "name",
    "symbol",
    "metadata_base_uri",
    "collateral_asset",
    "payout_mode",
    "platform_account",
    "creator_account",
    "custody_account",
)


@dataclass(frozen=True)
class CurveConfig:
    name: str = "curve"
    symbol: str = ""
    metadata_base_uri: str = ""
    collateral_asset: str = NATIVE_ASSET
    payout_mode: PayoutMode = PayoutMode.DEFERRED

    initial_mint_price: int = 1
    slope: int = 1
    exponent_numerator: int = 1
    exponent_denominator: int = 1

    # Fee setup is applied only when both accounts are present.
    platform_account: str | None = None
    platform_rate: int = 0
    creator_account: str | None = None
    creator_rate: int = 0

    custody_account: str = DEFAULT_CUSTODY_ACCOUNT
    pow_precision: int = DEFAULT_POW_PRECISION

    def unit_uri(self, batch_id: int) -> str:
        return f"{self.metadata_base_uri}{batch_id}"


def _require_int(value: Any, *, name: str) -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")
    if value < 0:
        raise ValueError(f"{name} must be non-negative")
    return int(value)


def _require_str(value: Any, *, name: str) -> str:
    if not isinstance(value, str):
        raise TypeError(f"{name} must be a string")
    return value


def _normalize_asset(value: str) -> str:
    if value.strip().lower() == "native":
        return NATIVE_ASSET
    return canonical_hex_fixed_allow_0x(value, nbytes=32, name="collateral_asset")


def config_from_mapping(obj: Mapping[str, Any]) -> CurveConfig:
    """Validate a parsed YAML/JSON mapping into a CurveConfig."""
    if not isinstance(obj, Mapping):
        raise TypeError("curve config must be a mapping")
    flat: dict[str, Any] = {k: v for k, v in obj.items() if k != "fees"}
    fees = obj.get("fees") or {}
    if not isinstance(fees, Mapping):
        raise TypeError("fees must be a mapping")
    flat.update(fees)

    unknown = set(flat) - set(_INT_KEYS) - set(_STR_KEYS)
    if unknown:
        raise ValueError(f"unknown curve config keys: {sorted(unknown)}")

    kwargs: dict[str, Any] = {}
    for key in _INT_KEYS:
        if key in flat:
            kwargs[key] = _require_int(flat[key], name=key)
    for key in _STR_KEYS:
        if key in flat and flat[key] is not None:
            kwargs[key] = _require_str(flat[key], name=key)
    if "collateral_asset" in kwargs:
        kwargs["collateral_asset"] = _normalize_asset(kwargs["collateral_asset"])
    if "payout_mode" in kwargs:
        kwargs["payout_mode"] = PayoutMode(kwargs["payout_mode"].strip().lower())
    return CurveConfig(**kwargs)


def _int_env(env: Mapping[str, str], name: str) -> int | None:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return None
    try:
        return int(raw.strip(), 10)
    except ValueError as exc:
        raise ValueError(f"{name} must be a base-10 integer: {raw!r}") from exc


def apply_env_overrides(config: CurveConfig, env: Mapping[str, str] | None = None) -> CurveConfig:
    """Override config fields from `CURVEMINT_<KEY>` environment variables."""
    env = os.environ if env is None else env
    overrides: dict[str, Any] = {}
    for key in _INT_KEYS:
        v = _int_env(env, ENV_PREFIX + key.upper())
        if v is not None:
            overrides[key] = _require_int(v, name=key)
    for key in _STR_KEYS:
        raw = env.get(ENV_PREFIX + key.upper())
        if raw is not None and raw.strip():
            overrides[key] = raw.strip()
    if not overrides:
        return config
    log.debug("config env overrides: %s", sorted(overrides))
    if "collateral_asset" in overrides:
        overrides["collateral_asset"] = _normalize_asset(overrides["collateral_asset"])
    if "payout_mode" in overrides:
        overrides["payout_mode"] = PayoutMode(overrides["payout_mode"].lower())
    return replace(config, **overrides)


def load_curve_config(path: Path | str, *, env: Mapping[str, str] | None = None) -> CurveConfig:
    """Read a YAML curve config and apply environment overrides."""
    obj = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
    if obj is None:
        obj = {}
    return apply_env_overrides(config_from_mapping(obj), env)


def curve_state_from_config(config: CurveConfig) -> CurveState:
    """Fresh CurveState for `config`, with fees applied when both accounts are set."""
    state = create_curve(
        config.initial_mint_price,
        config.slope,
        config.exponent_numerator,
        config.exponent_denominator,
        collateral_asset=config.collateral_asset,
        payout_mode=config.payout_mode,
    )
    if config.platform_account and config.creator_account:
        setup_fees(state, config.platform_account, config.platform_rate, config.creator_account, config.creator_rate)
    elif config.platform_rate or config.creator_rate:
        raise ValueError("fee rates configured without both platform_account and creator_account")
    return state


def build_market(
    config: CurveConfig,
    *,
    ledger: UnitLedger | None = None,
    collateral: CollateralGateway | None = None,
) -> CurveMarket:
    """Deploy a curve from config onto the given (or fresh in-memory) collaborators."""
    state = curve_state_from_config(config)
    market = CurveMarket(
        state,
        ledger=ledger if ledger is not None else SerialUnitLedger(),
        collateral=collateral if collateral is not None else InMemoryCollateral(),
        power_math=ExactPowerMath(config.pow_precision),
        custody_account=config.custody_account,
    )
    log.info(
        "curve deployed name=%s asset=%s payout=%s price(1)=%d exponent=%d/%d",
        config.name, config.collateral_asset, config.payout_mode.value,
        config.initial_mint_price, config.exponent_numerator, config.exponent_denominator,
    )
    return market
