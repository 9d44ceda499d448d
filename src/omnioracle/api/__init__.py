"""HTTP API over the ledger store."""
