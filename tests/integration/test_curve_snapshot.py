# [TESTER] v1

from __future__ import annotations

import json

import pytest

from curvemint.core.curve import create_curve, setup_fees
from curvemint.integration.config import CurveConfig, build_market
from curvemint.integration.snapshot import CURVE_SNAPSHOT_VERSION, snapshot_from_state, state_from_snapshot
from curvemint.state.balances import NATIVE_ASSET
from curvemint.state.canonical import canonical_json_bytes, domain_sep_bytes
from curvemint.state.collateral import InMemoryCollateral


def _traded_state():
    collateral = InMemoryCollateral()
    collateral.credit("alice", NATIVE_ASSET, 10**9)
    market = build_market(
        CurveConfig(
            initial_mint_price=100,
            slope=10,
            exponent_numerator=3,
            exponent_denominator=2,
            platform_account="platform",
            platform_rate=2,
            creator_account="creator",
            creator_rate=3,
        ),
        collateral=collateral,
    )
    rec = market.mint_native("alice", 6, payment=10**6)
    market.burn("alice", rec.batch_id, 2)
    return market.state


def test_snapshot_roundtrip_is_deterministic() -> None:
    state = _traded_state()
    snap1 = snapshot_from_state(state)
    state2 = state_from_snapshot(json.loads(snap1.to_json()))
    snap2 = snapshot_from_state(state2)

    assert state2 == state
    assert snap1.canonical_bytes() == snap2.canonical_bytes()
    assert snap1.commitment_hex() == snap2.commitment_hex()
    assert snap1.commitment_hex() == "0x" + snap1.commitment_bytes().hex()


def test_restored_cache_keeps_int_keys() -> None:
    state = state_from_snapshot(json.loads(snapshot_from_state(_traded_state()).to_json()))
    assert sorted(state.price_cache) == [1, 2, 3, 4, 5, 6]


def test_cache_insertion_order_does_not_matter() -> None:
    s1 = create_curve(100, 10, 3, 2)
    s2 = create_curve(100, 10, 3, 2)
    s1.price_cache.update({1: 100, 2: 118})
    s2.price_cache.update({2: 118, 1: 100})
    assert snapshot_from_state(s1).canonical_bytes() == snapshot_from_state(s2).canonical_bytes()


def test_commitment_changes_with_state() -> None:
    s1 = create_curve(1, 1, 2, 1)
    s2 = create_curve(1, 1, 2, 1)
    setup_fees(s2, "platform", 0, "creator", 0)
    assert snapshot_from_state(s1).commitment_hex() != snapshot_from_state(s2).commitment_hex()


def test_state_from_snapshot_is_fail_closed() -> None:
    data = snapshot_from_state(create_curve(1, 1, 2, 1)).data
    with pytest.raises(ValueError):
        state_from_snapshot({"version": CURVE_SNAPSHOT_VERSION + 1, "data": data})
    with pytest.raises(TypeError):
        state_from_snapshot({"version": CURVE_SNAPSHOT_VERSION, "data": [data]})
    with pytest.raises(TypeError):
        state_from_snapshot([CURVE_SNAPSHOT_VERSION, data])


def test_canonical_encoding_rejects_floats() -> None:
    with pytest.raises(TypeError):
        canonical_json_bytes({"reserve": 1.5})
    with pytest.raises(TypeError):
        canonical_json_bytes({1: 2})


def test_domain_separation_prefix() -> None:
    assert domain_sep_bytes("curve_snapshot", version=2) == b"curvemint:curve_snapshot:v2\x00"
    with pytest.raises(ValueError):
        domain_sep_bytes("bad\x00label")
