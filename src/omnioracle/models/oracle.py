"""Oracle source descriptors, one variant per source type."""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from omnioracle.models.enums import OracleStatus, Outcome


class _SourceBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    status: OracleStatus = OracleStatus.PENDING
    reported_value: Outcome | None = None
    timestamp: int | None = None  # ms epoch, set when a fetch completes

    @model_validator(mode="after")
    def _value_only_when_verified(self):
        if self.reported_value is not None and self.status != OracleStatus.VERIFIED:
            raise ValueError("reported_value is only allowed on VERIFIED sources")
        return self

    def with_result(
        self,
        status: OracleStatus,
        reported_value: Outcome | None = None,
        timestamp: int | None = None,
    ):
        """Return a validated copy carrying a fetch result."""
        data = self.model_dump()
        data.update(status=status, reported_value=reported_value, timestamp=timestamp)
        return type(self).model_validate(data)

    def pending(self):
        """Return a copy reset to PENDING, ready for a new resolution attempt."""
        return self.with_result(OracleStatus.PENDING)

    @property
    def has_verified_value(self) -> bool:
        return self.status == OracleStatus.VERIFIED and self.reported_value is not None


class ApiSource(_SourceBase):
    """External data API (price feed, official results endpoint)."""

    type: Literal["API"] = "API"
    url: str | None = None


class HumanValidatorSource(_SourceBase):
    """Manual attestation by a designated validator."""

    type: Literal["HUMAN_VALIDATOR"] = "HUMAN_VALIDATOR"


class AiAnalysisSource(_SourceBase):
    """Model-driven analysis of public information."""

    type: Literal["AI_ANALYSIS"] = "AI_ANALYSIS"


OracleSource = Annotated[
    Union[ApiSource, HumanValidatorSource, AiAnalysisSource],
    Field(discriminator="type"),
]
