# [TESTER] v1

from __future__ import annotations

from pathlib import Path

import pytest

from curvemint.core.curve import ConfigurationAlreadySet, PayoutMode, setup_fees
from curvemint.integration.config import (
    CurveConfig,
    apply_env_overrides,
    build_market,
    config_from_mapping,
    curve_state_from_config,
    load_curve_config,
)
from curvemint.state.balances import NATIVE_ASSET
from curvemint.state.collateral import InMemoryCollateral

TOKEN = "0x" + "ab" * 32

_YAML = """
name: Example Pass
symbol: PASS
metadata_base_uri: https://example.invalid/pass/
collateral_asset: native
payout_mode: immediate
initial_mint_price: 1000
slope: 10
exponent_numerator: 3
exponent_denominator: 2
fees:
  platform_account: platform
  platform_rate: 5
  creator_account: creator
  creator_rate: 5
"""


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "curve.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def test_load_yaml(tmp_path: Path) -> None:
    cfg = load_curve_config(_write(tmp_path, _YAML), env={})
    assert cfg.name == "Example Pass"
    assert cfg.collateral_asset == NATIVE_ASSET
    assert cfg.payout_mode is PayoutMode.IMMEDIATE
    assert (cfg.exponent_numerator, cfg.exponent_denominator) == (3, 2)
    assert (cfg.platform_account, cfg.platform_rate) == ("platform", 5)
    assert cfg.unit_uri(7) == "https://example.invalid/pass/7"


def test_empty_yaml_gives_defaults(tmp_path: Path) -> None:
    assert load_curve_config(_write(tmp_path, ""), env={}) == CurveConfig()


def test_env_overrides(tmp_path: Path) -> None:
    env = {"CURVEMINT_SLOPE": "20", "CURVEMINT_PAYOUT_MODE": "Deferred", "CURVEMINT_NAME": " renamed "}
    cfg = load_curve_config(_write(tmp_path, _YAML), env=env)
    assert cfg.slope == 20
    assert cfg.payout_mode is PayoutMode.DEFERRED
    assert cfg.name == "renamed"


def test_env_blank_values_ignored() -> None:
    cfg = CurveConfig()
    assert apply_env_overrides(cfg, {"CURVEMINT_SLOPE": "  "}) is cfg


def test_env_bad_int() -> None:
    with pytest.raises(ValueError):
        apply_env_overrides(CurveConfig(), {"CURVEMINT_SLOPE": "1.5"})


def test_token_asset_is_canonicalized() -> None:
    cfg = config_from_mapping({"collateral_asset": TOKEN.upper().replace("0X", "")})
    assert cfg.collateral_asset == TOKEN


def test_unknown_key_rejected() -> None:
    with pytest.raises(ValueError, match="unknown"):
        config_from_mapping({"slope": 1, "slop": 2})


def test_bad_types_rejected() -> None:
    with pytest.raises(TypeError):
        config_from_mapping({"slope": "1"})
    with pytest.raises(TypeError):
        config_from_mapping({"fees": [1, 2]})
    with pytest.raises(ValueError):
        config_from_mapping({"payout_mode": "later"})


def test_build_market_applies_fees(tmp_path: Path) -> None:
    cfg = load_curve_config(_write(tmp_path, _YAML), env={})
    collateral = InMemoryCollateral()
    collateral.credit("alice", NATIVE_ASSET, 10_000)
    market = build_market(cfg, collateral=collateral)
    assert market.state.fees.total_rate == 10
    assert market.price_at(1) == 1000
    with pytest.raises(ConfigurationAlreadySet):
        setup_fees(market.state, "x", 1, "y", 1)

    rec = market.mint_native("alice", 1, payment=1000)
    assert (rec.platform_cut, rec.creator_cut) == (50, 50)
    assert collateral.balance_of(NATIVE_ASSET, "platform") == 50


def test_build_market_without_fees() -> None:
    market = build_market(CurveConfig(slope=2, initial_mint_price=5))
    assert not market.state.fees.is_set
    assert market.price_at(3) == 9


def test_rates_without_accounts_rejected() -> None:
    with pytest.raises(ValueError):
        build_market(CurveConfig(platform_rate=1))


def test_curve_state_from_config_matches_market() -> None:
    cfg = CurveConfig(platform_account="p", platform_rate=2, creator_account="c", creator_rate=3)
    state = curve_state_from_config(cfg)
    assert state.fees == build_market(cfg).state.fees
    assert state.total_supply == 0
    with pytest.raises(ValueError):
        curve_state_from_config(CurveConfig(platform_account="p", platform_rate=1))
