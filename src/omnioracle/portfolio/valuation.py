"""Mark-to-market valuation of open positions."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from omnioracle.models import Market, MarketStatus, Outcome, Trade


@dataclass
class Position:
    """Aggregate of one owner's trades on one side of one market."""

    market_id: str
    outcome: Outcome
    shares: float = 0.0
    cost: float = 0.0
    trade_count: int = 0
    mark_price: float | None = None

    def add(self, trade: Trade) -> None:
        self.shares += trade.shares
        self.cost += trade.amount
        self.trade_count += 1

    @property
    def avg_price(self) -> float:
        return self.cost / self.shares if self.shares else 0.0

    @property
    def market_value(self) -> float:
        return self.shares * self.mark_price if self.mark_price is not None else 0.0

    @property
    def unrealized_pnl(self) -> float:
        return self.market_value - self.cost


def _index(markets: Iterable[Market]) -> dict[str, Market]:
    return {m.market_id: m for m in markets}


def open_positions(trades: Iterable[Trade], markets: Iterable[Market], owner_id: str) -> list[Position]:
    """Positions of ``owner_id`` in markets that are not RESOLVED, marked at live probabilities."""
    by_id = _index(markets)
    positions: dict[tuple[str, Outcome], Position] = {}
    for trade in trades:
        if trade.user_id != owner_id:
            continue
        market = by_id.get(trade.market_id)
        if market is None or market.status == MarketStatus.RESOLVED:
            continue
        key = (trade.market_id, trade.outcome)
        pos = positions.get(key)
        if pos is None:
            pos = positions[key] = Position(
                market_id=trade.market_id,
                outcome=trade.outcome,
                mark_price=market.probability(trade.outcome),
            )
        pos.add(trade)
    return list(positions.values())


def value_portfolio(trades: Iterable[Trade], markets: Iterable[Market], owner_id: str) -> float:
    """Sum of shares * live probability over the owner's unresolved positions. Pure."""
    return sum(p.market_value for p in open_positions(trades, markets, owner_id))
