"""Wallet activity feed — swap and transfer descriptions, ordering, filters."""
from __future__ import annotations

import logging
import re
from collections import defaultdict
from dataclasses import replace
from datetime import datetime
from typing import Iterable, Sequence

from ..formatting import format_token_amount
from ..models import (
    DefiActivity,
    TrackedWallet,
    TransferActivity,
    WalletActivity,
    WalletTokenSummary,
)
from .aggregator import holding_usd_value

logger = logging.getLogger(__name__)

_WORD_RE = re.compile(r"\b[A-Za-z0-9]+\b")

# DEX program ids with a friendly name.
KNOWN_PLATFORMS: dict[str, str] = {
    "JUP6LkbZbjS1jKKwapdHNy74zcZ3tLUZoi5QNyVTaV4": "Jupiter",
    "CAMMCzo5YL8w4VFF8KVHrK22GGUsp5VTaW7grrKgrWqK": "Raydium",
}

# Deposit addresses of centralized exchanges.
KNOWN_EXCHANGES: frozenset[str] = frozenset(
    {
        "3yFwqXBfZY4jBVEmnzWPvtYDzJj36wqQzEPNHnyTvXkh",  # Binance
    }
)


def describe_swap(activity: DefiActivity) -> tuple[str, float | None]:
    """Return ``(details, usd_value)`` for a swap."""
    info = activity.amount_info
    if info is None:
        return "Unknown activity", None

    amount1 = format_token_amount(info.amount1, info.token1_decimals)
    amount2 = format_token_amount(info.amount2, info.token2_decimals)
    symbol1 = activity.token1_info.symbol if activity.token1_info else "Unknown"
    symbol2 = activity.token2_info.symbol if activity.token2_info else "Unknown"
    platform = KNOWN_PLATFORMS.get(activity.platform, "DEX")

    usd_value = None
    if activity.token1_info and activity.token1_info.price:
        usd_value = holding_usd_value(
            info.amount1, info.token1_decimals, activity.token1_info.price
        )

    return f"{platform}: Swapped {amount1} {symbol1} for {amount2} {symbol2}", usd_value


def describe_transfer(activity: TransferActivity) -> tuple[str, float | None]:
    """Return ``(details, usd_value)`` for an SPL transfer."""
    amount = (
        format_token_amount(activity.amount, activity.token_decimals)
        if activity.amount
        else "?"
    )
    symbol = activity.token_info.symbol if activity.token_info else "Unknown"
    to_exchange = " to exchange" if activity.to_address in KNOWN_EXCHANGES else ""
    verb = "Sent" if activity.flow == "out" else "Received"

    usd_value = None
    if activity.token_info and activity.token_info.price:
        usd_value = holding_usd_value(
            activity.amount, activity.token_decimals, activity.token_info.price
        )

    return f"{verb} {amount} {symbol}{to_exchange}", usd_value


def build_activity_feed(
    defi: Iterable[DefiActivity], transfers: Iterable[TransferActivity]
) -> tuple[WalletActivity, ...]:
    """Merge swaps and transfers into one feed, newest first."""
    entries: list[tuple[int, WalletActivity]] = []

    for swap in defi:
        details, usd_value = describe_swap(swap)
        entries.append(
            (
                swap.block_time,
                WalletActivity(
                    type="SWAP",
                    timestamp=swap.time,
                    transaction_id=swap.trans_id,
                    details=details,
                    usd_value=usd_value,
                    token_info=swap.token1_info,
                ),
            )
        )

    for transfer in transfers:
        details, usd_value = describe_transfer(transfer)
        entries.append(
            (
                transfer.block_time,
                WalletActivity(
                    type="TRANSFER",
                    timestamp=transfer.time,
                    transaction_id=transfer.trans_id,
                    details=details,
                    usd_value=usd_value,
                    token_info=transfer.token_info,
                ),
            )
        )

    entries.sort(key=lambda e: e[0], reverse=True)
    return tuple(activity for _, activity in entries)


def filter_by_min_usd(
    activities: Iterable[WalletActivity], min_usd: float
) -> list[WalletActivity]:
    """Keep activities with a known USD value of at least ``min_usd``."""
    return [
        a for a in activities if a.usd_value is not None and a.usd_value >= min_usd
    ]


def filter_by_tokens(
    activities: Iterable[WalletActivity], symbols: Sequence[str]
) -> list[WalletActivity]:
    """Keep activities involving one of ``symbols``; empty selection keeps all.

    Transfers match on their token symbol only. Swaps match when a selected
    symbol appears as a whole word of the description, so ``SOL`` does not
    select ``JitoSOL``.
    """
    if not symbols:
        return list(activities)
    wanted = set(symbols)
    selected: list[WalletActivity] = []
    for a in activities:
        if a.token_info is not None and a.token_info.symbol in wanted:
            selected.append(a)
        elif a.type == "SWAP" and wanted.intersection(_WORD_RE.findall(a.details)):
            selected.append(a)
    return selected


def group_by_date(activities: Iterable[WalletActivity]) -> dict[str, list[WalletActivity]]:
    """Group activities by calendar date (``YYYY-MM-DD``), keeping feed order."""
    groups: dict[str, list[WalletActivity]] = defaultdict(list)
    for activity in activities:
        try:
            day = datetime.fromisoformat(activity.timestamp.replace("Z", "+00:00"))
            key = day.date().isoformat()
        except ValueError:
            logger.debug("Unparseable activity timestamp: %s", activity.timestamp)
            key = "unknown"
        groups[key].append(activity)
    return dict(groups)


def all_token_symbols(wallets: Iterable[TrackedWallet]) -> list[str]:
    """Sorted unique token symbols held across ``wallets``."""
    symbols: set[str] = set()
    for wallet in wallets:
        if wallet.token_summary:
            symbols.update(pos.token.symbol for pos in wallet.token_summary.tokens)
    return sorted(symbols)


def filter_wallets_by_tokens(
    wallets: Sequence[TrackedWallet], symbols: Sequence[str]
) -> list[TrackedWallet]:
    """Wallets holding any of ``symbols``, narrowed to those tokens.

    Totals are left as reported; only the token list and the activity feed
    are narrowed. An empty selection returns every wallet unchanged.
    """
    if not symbols:
        return list(wallets)

    wanted = set(symbols)
    result: list[TrackedWallet] = []
    for wallet in wallets:
        if wallet.token_summary is None:
            continue
        tokens = tuple(
            pos for pos in wallet.token_summary.tokens if pos.token.symbol in wanted
        )
        if not tokens:
            continue
        result.append(
            replace(
                wallet,
                token_summary=WalletTokenSummary(
                    total_usd_value=wallet.token_summary.total_usd_value,
                    tokens=tokens,
                ),
                activities=tuple(filter_by_tokens(wallet.activities, symbols)),
            )
        )
    return result
