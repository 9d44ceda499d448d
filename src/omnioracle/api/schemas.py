"""Pydantic schemas for API request/response consistency and OpenAPI docs."""

from __future__ import annotations

from pydantic import BaseModel, Field

from omnioracle.models import Market, MarketStatus, Outcome, Trade, UserProfile


# --- Health ---
class HealthResponse(BaseModel):
    status: str = "ok"


# --- Error (consistent shape for 4xx/5xx) ---
class ErrorResponse(BaseModel):
    detail: str = Field(..., description="Human-readable message")
    code: str | None = Field(None, description="Machine-readable code, e.g. insufficient_balance, not_found")


# --- Markets ---
class MarketsListResponse(BaseModel):
    markets: list[Market]
    total: int


class StatusRequest(BaseModel):
    status: MarketStatus


class ResolveRequest(BaseModel):
    outcome: Outcome


class CancelRequest(BaseModel):
    reason: str = ""


# --- Trades ---
class TradeRequest(BaseModel):
    outcome: Outcome
    amount: float


class TradeResponse(BaseModel):
    trade: Trade
    shares: float
    price: float
    balance: float
    probabilities: tuple[float, float]


class TradesListResponse(BaseModel):
    trades: list[Trade]
    total: int


# --- Portfolio / session ---
class PositionItem(BaseModel):
    market_id: str
    outcome: Outcome
    shares: float
    cost: float
    avg_price: float
    mark_price: float | None
    market_value: float
    unrealized_pnl: float


class PortfolioResponse(BaseModel):
    user: UserProfile
    portfolio_value: float
    positions: list[PositionItem]


class ConnectRequest(BaseModel):
    wallet_address: str
