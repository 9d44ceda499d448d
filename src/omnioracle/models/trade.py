"""Trade - immutable executed buy."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from omnioracle.models.enums import Outcome


class Trade(BaseModel):
    """Executed trade against the AMM. Never mutated once recorded."""

    model_config = ConfigDict(frozen=True)

    trade_id: str
    market_id: str
    user_id: str
    outcome: Outcome
    amount: float = Field(..., gt=0, description="Notional paid")
    shares: float = Field(..., gt=0)
    price: float = Field(..., gt=0, lt=1, description="Execution price (probability at entry)")
    timestamp: int  # ms epoch
    type: Literal["BUY"] = "BUY"
