"""AMM pricing engine tests."""

import pydantic
import pytest

from omnioracle.amm import PricingParams, apply_trade, check_probabilities, price_impact
from omnioracle.errors import InvariantViolation, ValidationError
from omnioracle.models import MarketStatus, Outcome

from conftest import make_market


def test_buy_yes_moves_probability_up():
    market = make_market(yes=0.65, liquidity=5000)
    ex = apply_trade(market, Outcome.YES, 500)
    assert ex.impact == pytest.approx(0.02)
    assert ex.market.probabilities == pytest.approx((0.67, 0.33))
    assert ex.price == 0.65
    assert ex.shares == pytest.approx(769.2307, rel=1e-6)
    assert ex.market.volume == market.volume + 500


def test_buy_no_moves_probability_down():
    market = make_market(yes=0.65, liquidity=5000)
    ex = apply_trade(market, Outcome.NO, 500)
    assert ex.market.probabilities == pytest.approx((0.63, 0.37))
    assert ex.price == pytest.approx(0.35)
    assert ex.shares == pytest.approx(500 / 0.35)


def test_pool_balance_credits_only_traded_side():
    market = make_market(yes=0.5, liquidity=1000)
    ex = apply_trade(market, Outcome.NO, 100)
    assert ex.market.pool_balance.no == pytest.approx(market.pool_balance.no + 100)
    assert ex.market.pool_balance.yes == market.pool_balance.yes


def test_input_market_untouched():
    market = make_market(yes=0.65)
    apply_trade(market, Outcome.YES, 500)
    assert market.probabilities == (0.65, 0.35)
    assert market.volume == 0


def test_probability_clamped_at_bounds():
    market = make_market(yes=0.98, liquidity=100)
    up = apply_trade(market, Outcome.YES, 100)
    assert up.market.yes_probability == 0.99
    down = apply_trade(make_market(yes=0.02, liquidity=100), Outcome.NO, 100)
    assert down.market.yes_probability == 0.01
    assert sum(down.market.probabilities) == pytest.approx(1.0, abs=1e-9)


def test_probabilities_stay_bounded_over_trade_sequence():
    market = make_market(yes=0.5, liquidity=800)
    amounts = [50, 400, 13.5, 999, 0.01, 250, 700, 3, 1200, 75]
    volume = 0.0
    for i in range(60):
        outcome = Outcome.YES if (i * 7) % 3 else Outcome.NO
        amount = amounts[i % len(amounts)]
        market = apply_trade(market, outcome, amount).market
        volume += amount
        yes, no = market.probabilities
        assert 0.01 <= yes <= 0.99
        assert abs(yes + no - 1.0) <= 1e-9
        assert market.volume == pytest.approx(volume)


@pytest.mark.parametrize("amount", [0, -5, float("nan"), float("inf")])
def test_rejects_non_positive_or_non_finite_amount(amount):
    with pytest.raises(ValidationError) as exc:
        apply_trade(make_market(), Outcome.YES, amount)
    assert exc.value.code == "invalid_amount"


def test_rejects_non_active_market():
    market = make_market(status=MarketStatus.LOCKED)
    with pytest.raises(ValidationError) as exc:
        apply_trade(market, Outcome.YES, 10)
    assert exc.value.code == "market_not_active"


def test_custom_impact_coefficient():
    params = PricingParams(impact_coefficient=0.5)
    ex = apply_trade(make_market(yes=0.5, liquidity=1000), Outcome.YES, 100, params)
    assert ex.market.yes_probability == pytest.approx(0.55)
    assert price_impact(100, 1000, 0.5) == pytest.approx(0.05)


def test_invariant_guard():
    check_probabilities((0.4, 0.6), PricingParams())
    with pytest.raises(InvariantViolation):
        check_probabilities((0.995, 0.005), PricingParams())
    with pytest.raises(InvariantViolation):
        check_probabilities((0.5, 0.6), PricingParams())


@pytest.mark.parametrize("yes", [0.005, 0.995, 0.0])
def test_market_rejects_probabilities_outside_clamp(yes):
    with pytest.raises(pydantic.ValidationError):
        make_market(yes=yes)
