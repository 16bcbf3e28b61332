"""Wallet group fetching and refresh orchestration."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Sequence

from ..addresses import is_valid_wallet_address
from ..interfaces.indexer import IndexerClient
from ..interfaces.token_resolver import TokenResolver
from ..models import TokenAccount, TrackedWallet, TransferActivity, WalletData
from ..solscan.parser import parse_defi_activities, parse_token_accounts, parse_transfers
from .activity import build_activity_feed
from .aggregator import SignificanceFilter, aggregate
from .change_detector import detect_changes

logger = logging.getLogger(__name__)

__all__ = ["WalletService", "bundled_wallets_from_transfers", "is_valid_wallet_address"]


def bundled_wallets_from_transfers(
    address: str, transfers: Sequence[TransferActivity]
) -> list[str]:
    """Unique recipients of outgoing transfers, in first-seen order."""
    bundled: dict[str, None] = {}
    for transfer in transfers:
        if transfer.flow != "out":
            continue
        recipient = transfer.to_address
        if recipient and recipient != address:
            bundled.setdefault(recipient, None)
    return list(bundled)


class WalletService:
    """Fetches a wallet group from the indexer and turns it into TrackedWallet state."""

    def __init__(
        self,
        client: IndexerClient,
        resolver: TokenResolver,
        significance: SignificanceFilter | None = None,
    ) -> None:
        self._client = client
        self._resolver = resolver
        self._significance = significance

    async def _fetch_token_accounts(
        self, addresses: Sequence[str]
    ) -> list[tuple[str, list[TokenAccount]]]:
        results = await asyncio.gather(
            *(self._client.get_token_accounts(addr) for addr in addresses),
            return_exceptions=True,
        )

        holdings: list[tuple[str, list[TokenAccount]]] = []
        for addr, result in zip(addresses, results):
            if isinstance(result, BaseException):
                logger.error("Error fetching token accounts for %s: %s", addr, result)
                continue
            holdings.append((addr, parse_token_accounts(result)))
        return holdings

    async def fetch_wallet_data(self, address: str) -> WalletData:
        """Fetch activity, bundled wallets and holdings for one wallet group.

        Transfers and DeFi activity are fetched concurrently and a failure of
        either propagates. Token accounts are then fetched for the wallet and
        every bundled wallet; an address whose fetch fails is left out.
        """
        raw_transfers, raw_defi = await asyncio.gather(
            self._client.get_transfers(address),
            self._client.get_defi_activities(address),
        )
        transfers = parse_transfers(raw_transfers)
        defi = parse_defi_activities(raw_defi)
        bundled = bundled_wallets_from_transfers(address, transfers)
        logger.info("Found %d bundled wallets for %s", len(bundled), address)

        holdings = await self._fetch_token_accounts([address, *bundled])

        token_addresses: list[str] = [t.token_address for t in transfers]
        for swap in defi:
            if swap.amount_info is not None:
                token_addresses += [swap.amount_info.token1, swap.amount_info.token2]
        for _, accounts in holdings:
            token_addresses += [a.token_address for a in accounts]
        infos = await self._resolver.resolve_many(token_addresses)

        transfers = [replace(t, token_info=infos.get(t.token_address)) for t in transfers]
        defi = [
            replace(
                s,
                token1_info=infos.get(s.amount_info.token1),
                token2_info=infos.get(s.amount_info.token2),
            )
            if s.amount_info is not None
            else s
            for s in defi
        ]
        enriched_holdings = tuple(
            (
                addr,
                tuple(replace(a, token_info=infos.get(a.token_address)) for a in accounts),
            )
            for addr, accounts in holdings
        )

        return WalletData(
            address=address,
            bundled_addresses=tuple(bundled),
            transfers=tuple(transfers),
            defi=tuple(defi),
            token_accounts=enriched_holdings,
        )

    async def refresh(
        self,
        address: str,
        previous: TrackedWallet | None = None,
        label: str = "",
        now: datetime | None = None,
    ) -> TrackedWallet:
        """Fetch ``address`` and build its next TrackedWallet state.

        Raises whatever the fetch raises; callers keep ``previous`` in that
        case so a failed refresh never replaces good data.
        """
        if now is None:
            now = datetime.now(timezone.utc)

        data = await self.fetch_wallet_data(address)
        summary = aggregate(data.token_accounts, self._significance)

        changes = detect_changes(
            previous.token_summary if previous else None,
            previous.position_changes if previous else None,
            summary,
            now,
        )

        return TrackedWallet(
            address=address,
            last_updated=now,
            bundled_wallets=data.bundled_addresses,
            token_summary=summary,
            position_changes=changes,
            activities=build_activity_feed(data.defi, data.transfers),
            label=label or (previous.label if previous else ""),
        )
