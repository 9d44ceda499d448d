"""Oracle collaborator protocol - pluggable resolution sources."""

from __future__ import annotations

from abc import ABC, abstractmethod

from omnioracle.models import OracleSource


class OracleCollaborator(ABC):
    """Fetches a source's verdict. Implement for each kind of resolution source."""

    @abstractmethod
    async def fetch(self, source: OracleSource) -> OracleSource:
        """Return a copy of ``source`` with status VERIFIED, CONFLICT or REJECTED.

        ``reported_value`` is set only on VERIFIED results. Latency is arbitrary;
        callers bound it with a timeout.
        """
        ...


class OracleRouter(OracleCollaborator):
    """Dispatch by source type (API, HUMAN_VALIDATOR, AI_ANALYSIS) with a fallback."""

    def __init__(
        self,
        default: OracleCollaborator,
        routes: dict[str, OracleCollaborator] | None = None,
    ) -> None:
        self.default = default
        self.routes = dict(routes or {})

    async def fetch(self, source: OracleSource) -> OracleSource:
        collaborator = self.routes.get(source.type, self.default)
        return await collaborator.fetch(source)
