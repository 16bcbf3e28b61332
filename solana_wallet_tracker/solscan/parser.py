"""Pure parsing of Solscan JSON payloads into model dataclasses.

No I/O here; token info is attached later by the wallet service.
"""
from __future__ import annotations

import logging
from typing import Any

from ..models import DefiActivity, SwapAmounts, TokenAccount, TokenInfo, TransferActivity

logger = logging.getLogger(__name__)


def _opt_float(value: Any) -> float | None:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _opt_int(value: Any) -> int | None:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def parse_token_meta(token_address: str, data: dict[str, Any]) -> TokenInfo:
    """Build a TokenInfo from a ``/token/meta`` payload."""
    supply = data.get("supply")
    return TokenInfo(
        address=token_address,
        symbol=(data.get("symbol") or "").strip() or "Unknown",
        name=(data.get("name") or "").strip() or "Unknown Token",
        decimals=int(data.get("decimals") or 0),
        icon=data.get("icon"),
        price=_opt_float(data.get("price")),
        price_change_24h=_opt_float(data.get("price_change_24h")),
        volume_24h=_opt_float(data.get("volume_24h")),
        market_cap=_opt_float(data.get("market_cap")),
        market_cap_rank=_opt_int(data.get("market_cap_rank")),
        holder=_opt_int(data.get("holder")),
        supply=str(supply) if supply is not None else None,
    )


def parse_token_accounts(raw: list[dict[str, Any]]) -> list[TokenAccount]:
    """Parse ``/account/token-accounts`` entries, skipping malformed ones."""
    accounts: list[TokenAccount] = []
    for item in raw:
        try:
            accounts.append(
                TokenAccount(
                    token_account=item.get("token_account", ""),
                    token_address=item["token_address"],
                    amount=int(item["amount"]),
                    token_decimals=int(item.get("token_decimals") or 0),
                    owner=item.get("owner", ""),
                )
            )
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Skipping malformed token account %s: %s", item, e)
    return accounts


def parse_transfers(raw: list[dict[str, Any]]) -> list[TransferActivity]:
    """Parse ``/account/transfer`` entries, skipping malformed ones."""
    transfers: list[TransferActivity] = []
    for item in raw:
        try:
            transfers.append(
                TransferActivity(
                    trans_id=item["trans_id"],
                    block_time=int(item.get("block_time") or 0),
                    time=item.get("time", ""),
                    activity_type=item.get("activity_type", ""),
                    from_address=item.get("from_address", ""),
                    to_address=item.get("to_address", ""),
                    token_address=item.get("token_address", ""),
                    token_decimals=int(item.get("token_decimals") or 0),
                    amount=int(item.get("amount") or 0),
                    flow=item.get("flow", ""),
                )
            )
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(
                "Skipping malformed transfer %s: %s", item.get("trans_id", "unknown"), e
            )
    return transfers


def _parse_amount_info(raw: dict[str, Any] | None) -> SwapAmounts | None:
    if not raw:
        return None
    return SwapAmounts(
        token1=raw.get("token1", ""),
        token1_decimals=int(raw.get("token1_decimals") or 0),
        amount1=int(raw.get("amount1") or 0),
        token2=raw.get("token2", ""),
        token2_decimals=int(raw.get("token2_decimals") or 0),
        amount2=int(raw.get("amount2") or 0),
    )


def parse_defi_activities(raw: list[dict[str, Any]]) -> list[DefiActivity]:
    """Parse ``/account/defi/activities`` entries, skipping malformed ones."""
    activities: list[DefiActivity] = []
    for item in raw:
        try:
            activities.append(
                DefiActivity(
                    trans_id=item["trans_id"],
                    block_time=int(item.get("block_time") or 0),
                    time=item.get("time", ""),
                    activity_type=item.get("activity_type", ""),
                    from_address=item.get("from_address", ""),
                    platform=item.get("platform", ""),
                    sources=tuple(item.get("sources") or ()),
                    amount_info=_parse_amount_info(item.get("amount_info")),
                )
            )
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(
                "Skipping malformed DeFi activity %s: %s",
                item.get("trans_id", "unknown"),
                e,
            )
    return activities
