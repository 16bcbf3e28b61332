"""Token info resolution with a time-bounded cache."""
from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable, Iterable

from ..models import TokenInfo
from .client import SolscanClient
from .parser import parse_token_meta

logger = logging.getLogger(__name__)

WRAPPED_SOL = "So11111111111111111111111111111111111111112"

# Well-known mints resolved without a network round trip.
COMMON_TOKENS: dict[str, str] = {
    WRAPPED_SOL: "SOL",
    "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v": "USDC",
    "Es9vMFrzaCERmJfrF4H2FYD4KCoNkY11McCe8BenwNYB": "USDT",
}


class TokenInfoResolver:
    """Resolve token addresses to TokenInfo, caching results for ``ttl`` seconds.

    Lookups that fail are not cached and resolve to None.
    """

    def __init__(
        self,
        client: SolscanClient,
        ttl: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._client = client
        self._ttl = ttl
        self._clock = clock
        self._cache: dict[str, tuple[TokenInfo, float]] = {}

    def _cached(self, token_address: str, now: float) -> TokenInfo | None:
        entry = self._cache.get(token_address)
        if entry is None:
            return None
        info, stored_at = entry
        if now - stored_at >= self._ttl:
            return None
        return info

    async def resolve(self, token_address: str) -> TokenInfo | None:
        """Return token info for ``token_address`` or None when unavailable."""
        now = self._clock()
        cached = self._cached(token_address, now)
        if cached is not None:
            return cached

        symbol = COMMON_TOKENS.get(token_address)
        if symbol is not None:
            info = TokenInfo(
                address=token_address,
                symbol=symbol,
                name=symbol,
                decimals=9 if token_address == WRAPPED_SOL else 6,
            )
            self._cache[token_address] = (info, now)
            return info

        try:
            data = await self._client.get_token_meta(token_address)
        except Exception as e:
            logger.error("Error fetching token info for %s: %s", token_address, e)
            return None

        if not data:
            return None

        info = parse_token_meta(token_address, data)
        self._cache[token_address] = (info, now)
        return info

    async def resolve_many(
        self, token_addresses: Iterable[str]
    ) -> dict[str, TokenInfo | None]:
        """Resolve several addresses concurrently (each distinct address once)."""
        unique = list(dict.fromkeys(token_addresses))
        results = await asyncio.gather(*(self.resolve(addr) for addr in unique))
        return dict(zip(unique, results))
