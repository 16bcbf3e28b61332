"""Solscan API access."""
from .client import SolscanClient, SolscanError
from .token_cache import TokenInfoResolver

__all__ = ["SolscanClient", "SolscanError", "TokenInfoResolver"]
