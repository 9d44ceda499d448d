"""Canonical schema (Pydantic) - Market, OracleSource, Trade, UserProfile, MarketDraft."""

from omnioracle.models.draft import MarketDraft, MarketDraftGenerator, draft_from_generated
from omnioracle.models.enums import MarketStatus, OracleStatus, Outcome
from omnioracle.models.market import HistoryEntry, Market, OracleConfig, PoolBalance
from omnioracle.models.oracle import AiAnalysisSource, ApiSource, HumanValidatorSource, OracleSource
from omnioracle.models.trade import Trade
from omnioracle.models.user import UserProfile

__all__ = [
    "Market",
    "MarketStatus",
    "Outcome",
    "OracleConfig",
    "PoolBalance",
    "HistoryEntry",
    "OracleSource",
    "OracleStatus",
    "ApiSource",
    "HumanValidatorSource",
    "AiAnalysisSource",
    "Trade",
    "UserProfile",
    "MarketDraft",
    "MarketDraftGenerator",
    "draft_from_generated",
]
