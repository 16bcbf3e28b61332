"""Indexer client protocol — blockchain indexing API abstraction."""
from typing import Any, Protocol


class IndexerClient(Protocol):
    """Abstract interface for the account-level indexer queries."""

    async def get_transfers(self, address: str) -> list[dict[str, Any]]: ...

    async def get_defi_activities(self, address: str) -> list[dict[str, Any]]: ...

    async def get_token_accounts(self, address: str) -> list[dict[str, Any]]: ...
