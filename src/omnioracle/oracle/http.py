"""HTTP oracle for API sources: GET the source URL and read the reported outcome."""

from __future__ import annotations

import time
from typing import Any

import httpx
import structlog

from omnioracle.models import OracleSource, OracleStatus, Outcome
from omnioracle.oracle.base import OracleCollaborator

log = structlog.get_logger(__name__)

_OUTCOME_KEYS = ("outcome", "result", "value")


def parse_reported_outcome(body: Any) -> Outcome | None:
    """Extract YES/NO from a JSON body like {"outcome": "yes"}. None if absent or unrecognized."""
    if not isinstance(body, dict):
        return None
    for key in _OUTCOME_KEYS:
        raw = body.get(key)
        if raw is None:
            continue
        if isinstance(raw, bool):
            return Outcome.YES if raw else Outcome.NO
        text = str(raw).strip().upper()
        if text in ("YES", "NO"):
            return Outcome(text)
        return None
    return None


class HttpApiOracle(OracleCollaborator):
    """Fetches ``source.url``. Transport or HTTP errors yield REJECTED; unreadable bodies CONFLICT."""

    def __init__(self, client: httpx.AsyncClient | None = None, timeout: float = 10.0) -> None:
        self._client = client
        self.timeout = timeout

    async def _get(self, url: str) -> httpx.Response:
        if self._client is not None:
            return await self._client.get(url, timeout=self.timeout)
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.get(url)

    async def fetch(self, source: OracleSource) -> OracleSource:
        url = getattr(source, "url", None)
        now_ms = int(time.time() * 1000)
        if not url:
            log.warning("oracle_source_without_url", source_id=source.id)
            return source.with_result(OracleStatus.REJECTED, timestamp=now_ms)
        try:
            resp = await self._get(url)
            resp.raise_for_status()
            body = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            log.warning("oracle_http_failed", source_id=source.id, url=url, error=str(e))
            return source.with_result(OracleStatus.REJECTED, timestamp=int(time.time() * 1000))
        value = parse_reported_outcome(body)
        now_ms = int(time.time() * 1000)
        if value is None:
            log.info("oracle_http_unreadable", source_id=source.id, url=url)
            return source.with_result(OracleStatus.CONFLICT, timestamp=now_ms)
        return source.with_result(OracleStatus.VERIFIED, value, timestamp=now_ms)
