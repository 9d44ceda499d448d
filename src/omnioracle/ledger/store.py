"""Ledger store - the single writer over markets, trades and the session profile."""

from __future__ import annotations

import math
import time
import uuid
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

import pydantic
import structlog

from omnioracle import lifecycle
from omnioracle.amm import PricingParams, apply_trade
from omnioracle.config import Settings
from omnioracle.errors import NotFoundError, ValidationError
from omnioracle.ledger.seed import seed_markets, seed_user
from omnioracle.models import (
    Market,
    MarketDraft,
    MarketStatus,
    OracleConfig,
    Outcome,
    PoolBalance,
    Trade,
    UserProfile,
)
from omnioracle.oracle import (
    HttpApiOracle,
    OracleCollaborator,
    OracleOutcome,
    OracleRouter,
    SimulatedOracle,
    consult,
)
from omnioracle.portfolio import Position, open_positions, value_portfolio
from omnioracle.storage import DuckDBRepository, Repository, get_connection, init_schema

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class TradeReceipt:
    """Accepted trade: the recorded Trade plus the market after the price move."""

    trade: Trade
    market: Market
    balance: float

    @property
    def shares(self) -> float:
        return self.trade.shares

    @property
    def price(self) -> float:
        return self.trade.price


@dataclass(frozen=True)
class LedgerSnapshot:
    """Consistent read of the whole registry, published to subscribers."""

    markets: list[Market]
    trades: list[Trade]
    user: UserProfile
    portfolio_value: float


Listener = Callable[[LedgerSnapshot], None]


def parse_outcome(value: Outcome | str) -> Outcome:
    if isinstance(value, Outcome):
        return value
    try:
        return Outcome(str(value).strip().upper())
    except ValueError:
        raise ValidationError(f"Unknown outcome: {value!r}", code="invalid_outcome") from None


def parse_status(value: MarketStatus | str) -> MarketStatus:
    if isinstance(value, MarketStatus):
        return value
    try:
        return MarketStatus(str(value).strip().upper())
    except ValueError:
        raise ValidationError(f"Unknown market status: {value!r}", code="invalid_status") from None


def default_oracle(settings: Settings) -> OracleCollaborator:
    """Simulated verdicts, with API sources fetched over HTTP when oracle.use_http is set."""
    simulated = SimulatedOracle.from_settings(settings)
    if not settings.oracle_use_http:
        return simulated
    return OracleRouter(simulated, {"API": HttpApiOracle(timeout=settings.oracle_timeout_sec)})


class LedgerStore:
    """Facade over the repository. Validates, computes new records, commits them whole.

    Assumes a single writer: synchronous operations never interleave, and the
    only suspension point (oracle settlement) re-reads the market before writing.
    """

    def __init__(
        self,
        repository: Repository,
        settings: Settings | None = None,
        oracle: OracleCollaborator | None = None,
    ) -> None:
        self.repository = repository
        self.settings = settings or Settings()
        self.pricing = PricingParams.from_settings(self.settings)
        self.oracle = oracle or default_oracle(self.settings)
        self._listeners: list[Listener] = []
        if repository.get_user() is None:
            self.reset()

    @classmethod
    def from_settings(cls, settings: Settings, oracle: OracleCollaborator | None = None) -> LedgerStore:
        """Open the DuckDB ledger named in settings."""
        conn = get_connection(settings.db_path)
        try:
            init_schema(conn)
        except Exception:
            conn.close()
            raise
        return cls(DuckDBRepository(conn), settings, oracle)

    def close(self) -> None:
        self.repository.close()

    # --- Reads ---

    def list_markets(self) -> list[Market]:
        return self.repository.list_markets()

    def get_market(self, market_id: str) -> Market:
        market = self.repository.get_market(market_id)
        if market is None:
            raise NotFoundError("Market", market_id)
        return market

    def list_trades(self, user_id: str | None = None) -> list[Trade]:
        return self.repository.list_trades(user_id)

    def user(self) -> UserProfile:
        user = self.repository.get_user()
        if user is None:
            raise NotFoundError("Session", "user")
        return user

    def positions(self) -> list[Position]:
        user = self.user()
        return open_positions(self.list_trades(user.user_id), self.list_markets(), user.user_id)

    def portfolio_value(self) -> float:
        user = self.user()
        return value_portfolio(self.list_trades(user.user_id), self.list_markets(), user.user_id)

    def snapshot(self) -> LedgerSnapshot:
        markets = self.list_markets()
        trades = self.list_trades()
        user = self.user()
        return LedgerSnapshot(
            markets=markets,
            trades=trades,
            user=user,
            portfolio_value=value_portfolio(trades, markets, user.user_id),
        )

    # --- Observers ---

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener`` with a fresh snapshot after every commit. Returns an unsubscribe hook."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self) -> None:
        if not self._listeners:
            return
        snap = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snap)
            except Exception:
                log.exception("ledger_listener_failed", listener=repr(listener))

    # --- Writes ---

    def _revalued(self, user: UserProfile, markets: Iterable[Market], trades: Iterable[Trade]) -> UserProfile:
        """User with portfolio_value recomputed as if ``markets``/``trades`` were committed."""
        by_id = {m.market_id: m for m in self.list_markets()}
        by_id.update({m.market_id: m for m in markets})
        all_trades = [*self.list_trades(user.user_id), *trades]
        value = value_portfolio(all_trades, by_id.values(), user.user_id)
        return user.model_copy(update={"portfolio_value": value})

    def _commit(
        self,
        markets: list[Market] | None = None,
        trades: list[Trade] | None = None,
        user: UserProfile | None = None,
    ) -> None:
        markets = markets or []
        trades = trades or []
        current = user or self.repository.get_user()
        if current is not None:
            user = self._revalued(current, markets, trades)
        self.repository.commit(markets=markets, trades=trades, user=user)
        self._publish()

    def _reject(self, message: str, code: str, **context: Any) -> ValidationError:
        log.info("operation_rejected", code=code, reason=message, **context)
        return ValidationError(message, code=code)

    def connect(self, wallet_address: str) -> UserProfile:
        """Mark the session profile connected to ``wallet_address``."""
        if not wallet_address.strip():
            raise self._reject("Wallet address must not be empty", "invalid_wallet")
        user = self.user().model_copy(update={"is_connected": True, "wallet_address": wallet_address.strip()})
        self._commit(user=user)
        log.info("wallet_connected", user_id=user.user_id, wallet_address=user.wallet_address)
        return self.user()

    def create_market(self, draft: MarketDraft | dict[str, Any]) -> Market:
        """Validate a draft and open a new ACTIVE market with pool balances seeded from its probability."""
        if not isinstance(draft, MarketDraft):
            try:
                draft = MarketDraft.model_validate(draft)
            except pydantic.ValidationError as e:
                raise self._reject(f"Invalid market draft: {e}", "invalid_draft") from e
        market_id = str(uuid.uuid4())[:8]
        while self.repository.get_market(market_id) is not None:
            market_id = str(uuid.uuid4())[:8]
        liquidity = draft.liquidity or self.settings.default_liquidity
        p = draft.initial_probability
        market = Market(
            market_id=market_id,
            title=draft.title,
            description=draft.description,
            category=draft.category,
            end_date=draft.end_date,
            probabilities=(p, 1 - p),
            liquidity=liquidity,
            pool_balance=PoolBalance.seeded(liquidity, p),
            oracle_config=OracleConfig(
                primary_source=draft.oracle_source.pending(),
                backup_sources=tuple(s.pending() for s in draft.backup_sources),
                resolution_criteria=draft.resolution_criteria,
                dispute_window_hours=draft.dispute_window_hours,
            ),
            creator_id=self.user().user_id,
            created_at=int(time.time() * 1000),
        )
        self._commit(markets=[market])
        log.info("market_created", market_id=market_id, title=market.title, yes_probability=p)
        return market

    def trade(self, market_id: str, outcome: Outcome | str, amount: float) -> TradeReceipt:
        """Buy ``amount`` notional of ``outcome``. Rejected with no state change on any failed check."""
        outcome = parse_outcome(outcome)
        # bool is an int subclass; True is not an amount
        valid = isinstance(amount, (int, float)) and not isinstance(amount, bool)
        if not valid or not math.isfinite(amount) or amount <= 0:
            raise self._reject(f"Trade amount must be positive, got {amount}", "invalid_amount", market_id=market_id)
        market = self.get_market(market_id)
        if not market.accepts_trades:
            raise self._reject(
                f"Market {market_id} is {market.status.value}, not accepting trades",
                "market_not_active",
                market_id=market_id,
            )
        user = self.user()
        if amount > user.balance:
            raise self._reject(
                f"Insufficient funds: balance {user.balance:.2f}, requested {amount:.2f}",
                "insufficient_balance",
                market_id=market_id,
            )

        execution = apply_trade(market, outcome, float(amount), self.pricing)
        trade = Trade(
            trade_id=uuid.uuid4().hex[:12],
            market_id=market_id,
            user_id=user.user_id,
            outcome=outcome,
            amount=float(amount),
            shares=execution.shares,
            price=execution.price,
            timestamp=int(time.time() * 1000),
        )
        user = user.model_copy(update={"balance": user.balance - amount})
        self._commit(markets=[execution.market], trades=[trade], user=user)
        log.info(
            "trade_executed",
            market_id=market_id,
            outcome=outcome.value,
            amount=amount,
            shares=round(trade.shares, 4),
            price=trade.price,
            yes_probability=round(execution.market.yes_probability, 4),
        )
        return TradeReceipt(trade=trade, market=execution.market, balance=user.balance)

    def update_status(self, market_id: str, status: MarketStatus | str) -> Market:
        """Administrative status change (LOCKED, DISPUTE_WINDOW or CANCELLED)."""
        status = parse_status(status)
        market = lifecycle.transition(self.get_market(market_id), status)
        self._commit(markets=[market])
        return market

    def lock(self, market_id: str) -> Market:
        return self.update_status(market_id, MarketStatus.LOCKED)

    def cancel(self, market_id: str, reason: str = "") -> Market:
        market = lifecycle.cancel(self.get_market(market_id), reason)
        self._commit(markets=[market])
        return market

    def resolve(self, market_id: str, outcome: Outcome | str) -> Market:
        """Manually resolve a market waiting in the dispute window."""
        outcome = parse_outcome(outcome)
        market = lifecycle.resolve(self.get_market(market_id), outcome)
        self._commit(markets=[market])
        return market

    def begin_settlement(self, market_id: str) -> Market:
        """Lock if still ACTIVE, then enter FETCHING_ORACLES with a new attempt number."""
        market = self.get_market(market_id)
        if market.status == MarketStatus.FETCHING_ORACLES:
            raise self._reject(
                f"Market {market_id} already has a resolution in flight",
                "resolution_in_flight",
                market_id=market_id,
            )
        if market.status == MarketStatus.ACTIVE:
            market = lifecycle.lock(market)
            self._commit(markets=[market])
        if market.status != MarketStatus.LOCKED:
            raise self._reject(
                f"Market {market_id} is {market.status.value} and cannot be settled",
                "illegal_transition",
                market_id=market_id,
            )
        market = lifecycle.begin_oracle_fetch(market)
        self._commit(markets=[market])
        return market

    def apply_oracle_result(self, market_id: str, attempt_id: str, outcome: OracleOutcome) -> Market | None:
        """Commit an oracle verdict for ``attempt_id``. Stale verdicts leave the market untouched.

        Returns None when the market was removed (e.g. by a reset) while the oracle was consulted.
        """
        current = self.repository.get_market(market_id)
        if current is None:
            log.warning("oracle_result_for_missing_market", market_id=market_id, attempt_id=attempt_id)
            return None
        settled = lifecycle.apply_oracle_result(current, attempt_id, outcome)
        if settled is None:
            return current
        self._commit(markets=[settled])
        return settled

    async def settle(self, market_id: str) -> Market | None:
        """Run one oracle resolution attempt: RESOLVED on agreement, DISPUTE_WINDOW otherwise.

        Returns None if the market disappeared before the verdict arrived.
        """
        market = self.begin_settlement(market_id)
        outcome = await consult(
            self.oracle,
            market.oracle_config.sources(),
            timeout_sec=self.settings.oracle_timeout_sec,
        )
        return self.apply_oracle_result(market_id, market.attempt_id, outcome)

    def reset(self) -> None:
        """Drop every market and trade and restore the seed session."""
        self.repository.clear()
        markets = seed_markets() if self.settings.seed_markets else []
        # newest-first listing: commit in reverse so the first seed lists first
        self.repository.commit(markets=list(reversed(markets)), user=seed_user(self.settings))
        log.info("ledger_reset", seeded_markets=len(markets))
        self._publish()
