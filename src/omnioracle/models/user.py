"""UserProfile - the connected session."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class UserProfile(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: str
    username: str = ""
    wallet_address: str | None = None
    is_connected: bool = False
    balance: float = Field(..., ge=0, description="Spendable notional")
    reputation: int = Field(100, ge=0, le=1000)
    badges: tuple[str, ...] = ()
    portfolio_value: float = 0.0  # derived by the valuator, never set by trade logic
