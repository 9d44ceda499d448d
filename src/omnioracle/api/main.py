"""FastAPI backend over the ledger store.

Handlers are ``async def`` so every store call runs on the event loop thread:
the store is a single writer and its DuckDB connection is not shared across threads.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from omnioracle.api.schemas import (
    CancelRequest,
    ConnectRequest,
    ErrorResponse,
    HealthResponse,
    MarketsListResponse,
    PortfolioResponse,
    PositionItem,
    ResolveRequest,
    StatusRequest,
    TradeRequest,
    TradeResponse,
    TradesListResponse,
)
from omnioracle.config import Settings, configure_logging, get_settings
from omnioracle.errors import NotFoundError, ValidationError
from omnioracle.ledger import LedgerStore
from omnioracle.models import Market, MarketDraft, UserProfile

# Set by run_api() so the lifespan opens the ledger the CLI was configured for.
_settings: Settings | None = None

_ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"description": "Rejected", "model": ErrorResponse},
    404: {"description": "Not found", "model": ErrorResponse},
}


def _error_json(code: str, message: str, status_code: int = 404) -> JSONResponse:
    """Return consistent error JSON: { detail, code }."""
    return JSONResponse(
        status_code=status_code,
        content={"detail": message, "code": code},
    )


def create_app(store: LedgerStore | None = None) -> FastAPI:
    """Build the API. Without an injected store, the lifespan opens one from settings."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = None
        if store is None:
            settings = _settings or get_settings()
            configure_logging(settings)
            owned = LedgerStore.from_settings(settings)
            app.state.store = owned
        else:
            app.state.store = store
        yield
        if owned is not None:
            owned.close()

    app = FastAPI(title="OmniOracle API", version="0.1.0", lifespan=lifespan)
    app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])
    if store is not None:
        app.state.store = store

    def _store(request: Request) -> LedgerStore:
        return request.app.state.store

    @app.exception_handler(ValidationError)
    async def _validation_error(request: Request, exc: ValidationError) -> JSONResponse:
        return _error_json(exc.code, str(exc), status_code=400)

    @app.exception_handler(NotFoundError)
    async def _not_found(request: Request, exc: NotFoundError) -> JSONResponse:
        return _error_json(exc.code, str(exc), status_code=404)

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.get("/markets", response_model=MarketsListResponse)
    async def markets_list(
        request: Request,
        status: str | None = None,
        limit: int = Query(100, ge=1, le=500),
        offset: int = Query(0, ge=0),
    ) -> MarketsListResponse:
        """List markets, newest first, optionally filtered by status."""
        all_markets = _store(request).list_markets()
        if status:
            all_markets = [m for m in all_markets if m.status.value == status.upper()]
        return MarketsListResponse(markets=all_markets[offset : offset + limit], total=len(all_markets))

    @app.post("/markets", response_model=Market, status_code=201, responses=_ERROR_RESPONSES)
    async def market_create(request: Request, draft: MarketDraft) -> Market:
        return _store(request).create_market(draft)

    @app.get("/markets/{market_id}", response_model=Market, responses=_ERROR_RESPONSES)
    async def market_detail(request: Request, market_id: str) -> Market:
        return _store(request).get_market(market_id)

    @app.post("/markets/{market_id}/trades", response_model=TradeResponse, responses=_ERROR_RESPONSES)
    async def market_trade(request: Request, market_id: str, body: TradeRequest) -> TradeResponse:
        receipt = _store(request).trade(market_id, body.outcome, body.amount)
        return TradeResponse(
            trade=receipt.trade,
            shares=receipt.shares,
            price=receipt.price,
            balance=receipt.balance,
            probabilities=receipt.market.probabilities,
        )

    @app.post("/markets/{market_id}/status", response_model=Market, responses=_ERROR_RESPONSES)
    async def market_status(request: Request, market_id: str, body: StatusRequest) -> Market:
        return _store(request).update_status(market_id, body.status)

    @app.post("/markets/{market_id}/settle", response_model=Market, responses=_ERROR_RESPONSES)
    async def market_settle(request: Request, market_id: str) -> Market:
        """Lock (if needed), query the oracle sources and settle or open the dispute window."""
        market = await _store(request).settle(market_id)
        if market is None:
            raise NotFoundError("Market", market_id)
        return market

    @app.post("/markets/{market_id}/resolve", response_model=Market, responses=_ERROR_RESPONSES)
    async def market_resolve(request: Request, market_id: str, body: ResolveRequest) -> Market:
        return _store(request).resolve(market_id, body.outcome)

    @app.post("/markets/{market_id}/cancel", response_model=Market, responses=_ERROR_RESPONSES)
    async def market_cancel(request: Request, market_id: str, body: CancelRequest) -> Market:
        return _store(request).cancel(market_id, body.reason)

    @app.get("/trades", response_model=TradesListResponse)
    async def trades_list(request: Request, market_id: str | None = None) -> TradesListResponse:
        trades = _store(request).list_trades()
        if market_id:
            trades = [t for t in trades if t.market_id == market_id]
        return TradesListResponse(trades=trades, total=len(trades))

    @app.get("/portfolio", response_model=PortfolioResponse)
    async def portfolio(request: Request) -> PortfolioResponse:
        store = _store(request)
        positions = [
            PositionItem(
                market_id=p.market_id,
                outcome=p.outcome,
                shares=p.shares,
                cost=p.cost,
                avg_price=p.avg_price,
                mark_price=p.mark_price,
                market_value=p.market_value,
                unrealized_pnl=p.unrealized_pnl,
            )
            for p in store.positions()
        ]
        return PortfolioResponse(
            user=store.user(),
            portfolio_value=sum(p.market_value for p in positions),
            positions=positions,
        )

    @app.post("/session/connect", response_model=UserProfile, responses=_ERROR_RESPONSES)
    async def session_connect(request: Request, body: ConnectRequest) -> UserProfile:
        return _store(request).connect(body.wallet_address)

    @app.post("/admin/reset", response_model=HealthResponse)
    async def admin_reset(request: Request) -> HealthResponse:
        _store(request).reset()
        return HealthResponse(status="reset")

    return app


app = create_app()


def run_api(host: str = "127.0.0.1", port: int = 8000, settings: Settings | None = None) -> None:
    global _settings
    _settings = settings
    import uvicorn

    uvicorn.run("omnioracle.api.main:app", host=host, port=port, reload=False)
