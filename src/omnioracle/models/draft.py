"""MarketDraft - validated payload for creating a market.

Drafts usually come from a prompt-to-market generator. The generator is an
external collaborator; this module only validates what it returns.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Protocol

from pydantic import BaseModel, Field, field_validator

from omnioracle.models.oracle import ApiSource, OracleSource


class MarketDraft(BaseModel):
    """Market proposal. Missing or invalid probability, date, or criteria is rejected."""

    title: str = Field(..., min_length=1)
    description: str = ""
    category: str = "General"
    end_date: datetime
    initial_probability: float = Field(..., ge=0.01, le=0.99)
    resolution_criteria: str = Field(..., min_length=1)
    oracle_source: OracleSource
    backup_sources: list[OracleSource] = Field(default_factory=list)
    dispute_window_hours: int = Field(24, ge=0)
    liquidity: float | None = Field(None, gt=0)
    tags: list[str] = Field(default_factory=list)

    @field_validator("title", "resolution_criteria")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v

    @field_validator("oracle_source")
    @classmethod
    def _source_named(cls, v: OracleSource) -> OracleSource:
        if not v.name.strip():
            raise ValueError("oracle source needs a name")
        return v


class MarketDraftGenerator(Protocol):
    """Turns free text into a market draft (e.g. an LLM-backed architect)."""

    async def generate(self, prompt: str) -> MarketDraft: ...


def draft_from_generated(data: dict[str, Any], source_id: str = "ai-gen-1") -> MarketDraft:
    """Build a MarketDraft from the generator's camelCase JSON shape.

    Expected keys: title, description, category, endDate, initialProbability,
    resolutionCriteria, oracleName, optional oracleUrl and tags. Raises
    pydantic.ValidationError when required fields are missing or invalid.
    """
    oracle_name = data.get("oracleName")
    source = ApiSource(
        id=source_id,
        name=str(oracle_name) if oracle_name else "",
        url=data.get("oracleUrl") or None,
    )
    payload: dict[str, Any] = {
        "title": data.get("title") or "",
        "description": data.get("description") or "",
        "category": data.get("category") or "General",
        "end_date": data.get("endDate"),
        "initial_probability": data.get("initialProbability"),
        "resolution_criteria": data.get("resolutionCriteria") or "",
        "oracle_source": source,
        "tags": list(data.get("tags") or []),
    }
    return MarketDraft.model_validate(payload)
