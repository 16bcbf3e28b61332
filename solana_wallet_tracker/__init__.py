"""Solana wallet tracker — token positions, bundled wallets and activity."""

__version__ = "0.1.0"
