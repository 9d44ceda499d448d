"""Linear price-impact AMM for binary markets.

Impact is ``amount / liquidity * coefficient`` added to (YES) or removed from
(NO) the YES probability and clamped to [min_probability, max_probability].
This is a heuristic, not a constant-product curve: pool balances are kept as a
ledger of notional per side and do not feed back into the price.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from omnioracle.errors import InvariantViolation, ValidationError
from omnioracle.models import Market, Outcome
from omnioracle.models.market import probabilities_valid


@dataclass(frozen=True)
class PricingParams:
    """AMM constants. Defaults reproduce the demo exchange."""

    impact_coefficient: float = 0.2
    min_probability: float = 0.01
    max_probability: float = 0.99

    @classmethod
    def from_settings(cls, settings) -> PricingParams:
        return cls(
            impact_coefficient=settings.impact_coefficient,
            min_probability=settings.min_probability,
            max_probability=settings.max_probability,
        )


@dataclass(frozen=True)
class TradeExecution:
    """Result of pricing one buy: the updated market plus fill terms."""

    market: Market
    outcome: Outcome
    amount: float
    shares: float
    price: float
    impact: float


def price_impact(amount: float, liquidity: float, coefficient: float = 0.2) -> float:
    """Probability shift caused by spending ``amount`` against ``liquidity``."""
    return (amount / liquidity) * coefficient


def check_probabilities(probabilities: tuple[float, float], params: PricingParams) -> None:
    """Raise InvariantViolation if probabilities left their clamp or stopped summing to 1."""
    if not probabilities_valid(probabilities, params.min_probability, params.max_probability):
        raise InvariantViolation(
            f"probabilities {probabilities} outside "
            f"[{params.min_probability}, {params.max_probability}] or not summing to 1"
        )


def apply_trade(
    market: Market,
    outcome: Outcome,
    amount: float,
    params: PricingParams = PricingParams(),
) -> TradeExecution:
    """Price a buy of ``amount`` notional on ``outcome``. Pure: returns a new market record.

    Balance checks belong to the caller.
    """
    if not math.isfinite(amount) or amount <= 0:
        raise ValidationError(f"Trade amount must be positive, got {amount}", code="invalid_amount")
    if not market.accepts_trades:
        raise ValidationError(
            f"Market {market.market_id} is {market.status.value}, not accepting trades",
            code="market_not_active",
        )

    price = market.probability(outcome)
    shares = amount / price
    impact = price_impact(amount, market.liquidity, params.impact_coefficient)

    yes_prob = market.yes_probability
    if outcome is Outcome.YES:
        new_yes = min(params.max_probability, yes_prob + impact)
    else:
        new_yes = max(params.min_probability, yes_prob - impact)
    probabilities = (new_yes, 1 - new_yes)
    check_probabilities(probabilities, params)

    updated = market.model_copy(
        update={
            "probabilities": probabilities,
            "pool_balance": market.pool_balance.credit(outcome, amount),
            "volume": market.volume + amount,
        }
    )
    return TradeExecution(
        market=updated,
        outcome=outcome,
        amount=amount,
        shares=shares,
        price=price,
        impact=impact,
    )
