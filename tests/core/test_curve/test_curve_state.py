"""Tests for curvemint/core/curve/state.py and the curve data types."""

import pytest

from curvemint.core.curve import (
    ConfigurationAlreadySet,
    CurveParams,
    FeeConfig,
    InvalidCurveParams,
    PayoutMode,
    cost_to_mint,
    create_curve,
    current_supply,
    setup_fees,
    state_from_dict,
    state_to_dict,
)
from curvemint.core.curve.state import checkpoint_state, derive_curve_params, restore_state
from curvemint.core.curve.types import AssetKind
from curvemint.state.balances import NATIVE_ASSET

TOKEN = "0x" + "ab" * 32


class TestCreateCurve:
    def test_integer_exponent_derived(self):
        params = derive_curve_params(10, 2, 6, 2)
        assert params.integer_exponent == 3
        assert params.virtual_balance == 8
        assert params.initial_mint_price == 10
        assert params.is_integer_mode

    def test_fractional_exponent(self):
        params = derive_curve_params(10, 2, 3, 2)
        assert params.integer_exponent == 0
        assert not params.is_integer_mode

    def test_fresh_state_is_empty(self):
        state = create_curve(1, 1, 2, 1)
        assert current_supply(state) == 0
        assert state.reserve == 0
        assert state.collateral_held == 0
        assert not state.fees.is_set
        assert state.collateral_asset == NATIVE_ASSET
        assert state.asset_kind is AssetKind.NATIVE
        assert state.payout_mode is PayoutMode.DEFERRED

    def test_token_curve(self):
        state = create_curve(1, 1, 1, 1, collateral_asset=TOKEN, payout_mode=PayoutMode.IMMEDIATE)
        assert state.asset_kind is AssetKind.TOKEN
        assert state.payout_mode is PayoutMode.IMMEDIATE

    def test_price_below_slope_rejected(self):
        with pytest.raises(InvalidCurveParams):
            create_curve(1, 2, 1, 1)

    def test_zero_denominator_rejected(self):
        with pytest.raises(InvalidCurveParams):
            create_curve(1, 1, 1, 0)

    def test_negative_values_rejected(self):
        with pytest.raises(InvalidCurveParams):
            create_curve(1, 1, -1, 1)

    def test_params_reject_wrong_integer_exponent(self):
        with pytest.raises(ValueError):
            CurveParams(
                slope=1,
                exponent_numerator=4,
                exponent_denominator=2,
                integer_exponent=0,
                virtual_balance=0,
            )


class TestSetupFees:
    def test_sets_once(self):
        state = create_curve(1, 1, 2, 1)
        fees = setup_fees(state, "platform", 5, "creator", 10)
        assert state.fees is fees
        assert fees.total_rate == 15

    def test_second_setup_rejected(self):
        state = create_curve(1, 1, 2, 1)
        setup_fees(state, "platform", 5, "creator", 10)
        with pytest.raises(ConfigurationAlreadySet):
            setup_fees(state, "other", 1, "other", 1)
        assert state.fees.platform_account == "platform"
        assert state.fees.platform_rate == 5

    def test_rates_bounded(self):
        state = create_curve(1, 1, 2, 1)
        with pytest.raises(InvalidCurveParams):
            setup_fees(state, "platform", 60, "creator", 41)
        with pytest.raises(InvalidCurveParams):
            setup_fees(state, "platform", 101, "creator", 0)
        assert not state.fees.is_set

    def test_empty_accounts_rejected(self):
        state = create_curve(1, 1, 2, 1)
        with pytest.raises(InvalidCurveParams):
            setup_fees(state, "", 1, "creator", 1)

    def test_fee_config_defaults(self):
        fees = FeeConfig()
        assert not fees.is_set
        assert fees.total_rate == 0


class TestCheckpoint:
    def test_restore_undoes_ledger_fees_and_cache(self):
        state = create_curve(100, 10, 3, 2)
        cost_to_mint(state, 2)
        cp = checkpoint_state(state)

        setup_fees(state, "platform", 1, "creator", 1)
        state.total_supply = 5
        state.reserve = 77
        cost_to_mint(state, 5)
        assert len(state.price_cache) == 7

        restore_state(state, cp)
        assert not state.fees.is_set
        assert state.total_supply == 0
        assert state.reserve == 0
        assert sorted(state.price_cache) == [1, 2]


class TestDictRoundTrip:
    def test_round_trip_with_cache_and_fees(self):
        state = create_curve(100, 10, 3, 2, collateral_asset=TOKEN, payout_mode=PayoutMode.IMMEDIATE)
        setup_fees(state, "platform", 2, "creator", 3)
        cost_to_mint(state, 5)
        state.total_supply = 5
        state.reserve = 123
        state.collateral_held = 130
        assert state_from_dict(state_to_dict(state)) == state

    def test_cache_keys_are_sorted_strings(self):
        state = create_curve(100, 10, 3, 2)
        state.price_cache.update({10: 5, 2: 3})
        assert list(state_to_dict(state)["price_cache"]) == ["2", "10"]

    def test_missing_field(self):
        d = state_to_dict(create_curve(1, 1, 2, 1))
        del d["reserve"]
        with pytest.raises(KeyError):
            state_from_dict(d)

    def test_bool_rejected(self):
        d = state_to_dict(create_curve(1, 1, 2, 1))
        d["reserve"] = True
        with pytest.raises(TypeError):
            state_from_dict(d)
