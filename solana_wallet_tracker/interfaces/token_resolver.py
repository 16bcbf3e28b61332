"""Token resolver protocol — token address to TokenInfo."""
from typing import Iterable, Protocol

from ..models import TokenInfo


class TokenResolver(Protocol):
    """Abstract interface for token identity lookup.

    Results may be stale or missing at any time.
    """

    async def resolve(self, token_address: str) -> TokenInfo | None: ...

    async def resolve_many(
        self, token_addresses: Iterable[str]
    ) -> dict[str, TokenInfo | None]: ...
