"""Portfolio valuation."""

from omnioracle.portfolio.valuation import Position, open_positions, value_portfolio

__all__ = ["Position", "open_positions", "value_portfolio"]
