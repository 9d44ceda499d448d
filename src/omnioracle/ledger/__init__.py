"""Ledger store facade, seed data and read-refresh loop."""

from omnioracle.ledger.poller import RegistryPoller
from omnioracle.ledger.store import LedgerSnapshot, LedgerStore, TradeReceipt

__all__ = ["LedgerSnapshot", "LedgerStore", "RegistryPoller", "TradeReceipt"]
