"""Automated market maker pricing."""

from omnioracle.amm.pricing import PricingParams, TradeExecution, apply_trade, check_probabilities, price_impact

__all__ = ["PricingParams", "TradeExecution", "apply_trade", "check_probabilities", "price_impact"]
