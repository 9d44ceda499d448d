"""OmniOracle - binary prediction-market ledger with AMM pricing and oracle settlement."""

__version__ = "0.1.0"
