"""TOML config loading and profiles."""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any

# Default config search path (project root or cwd)
_CONFIG_DIR = Path(__file__).resolve().parent.parent.parent.parent / "config"


def _load_toml(path: Path) -> dict[str, Any]:
    with open(path, "rb") as f:
        return tomllib.load(f)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override into base. Override values take precedence."""
    result = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _find_config_dir(config_dir: Path | None = None) -> Path:
    if config_dir is not None:
        return config_dir
    cwd_config = Path.cwd() / "config"
    if cwd_config.exists():
        return cwd_config
    return _CONFIG_DIR


def load_config(profile: str | None = None, config_dir: Path | None = None) -> dict[str, Any]:
    """Load merged config from default.toml and optional profile overlay."""
    config_dir = _find_config_dir(config_dir)
    default_path = config_dir / "default.toml"
    if not default_path.exists():
        return {}
    base = _load_toml(default_path)
    if profile:
        profile_path = config_dir / f"{profile}.toml"
        if profile_path.exists():
            overlay = _load_toml(profile_path)
            base = _deep_merge(base, overlay)
    return base


def get_settings(profile: str | None = None, config_dir: Path | None = None) -> Settings:
    """Return Settings instance from merged config."""
    raw = load_config(profile, config_dir)
    return Settings.from_dict(raw)


class Settings:
    """Application settings from TOML config."""

    def __init__(
        self,
        *,
        storage: dict[str, Any] | None = None,
        amm: dict[str, Any] | None = None,
        oracle: dict[str, Any] | None = None,
        session: dict[str, Any] | None = None,
        ledger: dict[str, Any] | None = None,
        logging: dict[str, Any] | None = None,
    ):
        self.storage = storage or {}
        self.amm = amm or {}
        self.oracle = oracle or {}
        self.session = session or {}
        self.ledger = ledger or {}
        self.logging = logging or {}

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Settings:
        return cls(
            storage=raw.get("storage"),
            amm=raw.get("amm"),
            oracle=raw.get("oracle"),
            session=raw.get("session"),
            ledger=raw.get("ledger"),
            logging=raw.get("logging"),
        )

    # Convenience accessors with defaults
    @property
    def db_path(self) -> str:
        return self.storage.get("db_path", "data/omnioracle.duckdb")

    @property
    def impact_coefficient(self) -> float:
        return float(self.amm.get("impact_coefficient", 0.2))

    @property
    def min_probability(self) -> float:
        return float(self.amm.get("min_probability", 0.01))

    @property
    def max_probability(self) -> float:
        return float(self.amm.get("max_probability", 0.99))

    @property
    def default_liquidity(self) -> float:
        return float(self.amm.get("default_liquidity", 1000.0))

    @property
    def oracle_timeout_sec(self) -> float:
        return float(self.oracle.get("timeout_sec", 10.0))

    @property
    def oracle_latency_sec(self) -> float:
        return float(self.oracle.get("latency_sec", 1.5))

    @property
    def oracle_success_rate(self) -> float:
        return float(self.oracle.get("success_rate", 0.95))

    @property
    def oracle_yes_bias(self) -> float:
        return float(self.oracle.get("yes_bias", 0.7))

    @property
    def oracle_use_http(self) -> bool:
        return bool(self.oracle.get("use_http", False))

    @property
    def oracle_seed(self) -> int | None:
        seed = self.oracle.get("seed")
        return int(seed) if seed is not None else None

    @property
    def user_id(self) -> str:
        return str(self.session.get("user_id", "u1"))

    @property
    def username(self) -> str:
        return str(self.session.get("username", "CryptoOracle"))

    @property
    def starting_balance(self) -> float:
        return float(self.session.get("starting_balance", 2500.0))

    @property
    def starting_reputation(self) -> int:
        return int(self.session.get("starting_reputation", 100))

    @property
    def seed_markets(self) -> bool:
        return bool(self.ledger.get("seed_markets", True))

    @property
    def poll_interval_sec(self) -> float:
        return float(self.ledger.get("poll_interval_sec", 2.0))

    @property
    def logging_level(self) -> str:
        return self.logging.get("level", "INFO").upper()

    @property
    def logging_format(self) -> str:
        return self.logging.get("format", "console")

    @property
    def logging_level_num(self) -> int:
        return getattr(logging, self.logging_level, logging.INFO)


def configure_logging(settings: Settings) -> None:
    """Configure structlog with settings. Call once at application entry."""
    import structlog

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]
    if settings.logging_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(settings.logging_level_num),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
