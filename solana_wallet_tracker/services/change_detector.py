"""Position change detection between two consecutive wallet snapshots."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Mapping

from ..models import TokenPosition, TokenPositionChange, WalletTokenSummary

DEFAULT_SIGNIFICANCE_PCT = 0.01


def detect_changes(
    previous_summary: WalletTokenSummary | None,
    previous_changes: Mapping[str, TokenPositionChange] | None,
    new_summary: WalletTokenSummary,
    now: datetime | None = None,
) -> dict[str, TokenPositionChange]:
    """Compute per-token change records for a freshly aggregated summary.

    A record is created when a token held in both snapshots changed its total
    amount or USD value (exact comparison). Unchanged tokens keep their
    earlier record, timestamp included, so "moved N% X ago" survives repeated
    refreshes. Tokens missing from ``new_summary`` get no record, and neither
    do tokens seen for the first time.

    Returns an empty mapping when there is no previous summary.
    """
    changes: dict[str, TokenPositionChange] = {}
    if previous_summary is None:
        return changes

    if now is None:
        now = datetime.now(timezone.utc)
    previous_changes = previous_changes or {}

    previous_positions: dict[str, TokenPosition] = {
        pos.token.address: pos for pos in previous_summary.tokens
    }

    for new_pos in new_summary.tokens:
        token_address = new_pos.token.address
        prev_pos = previous_positions.get(token_address)
        if prev_pos is None:
            continue

        if (
            new_pos.total_amount != prev_pos.total_amount
            or new_pos.usd_value != prev_pos.usd_value
        ):
            changes[token_address] = TokenPositionChange(
                previous_amount=prev_pos.total_amount,
                current_amount=new_pos.total_amount,
                previous_usd_value=prev_pos.usd_value,
                current_usd_value=new_pos.usd_value,
                change_timestamp=now,
            )
        elif token_address in previous_changes:
            changes[token_address] = previous_changes[token_address]

    return changes


def position_change_pct(
    position: TokenPosition, change: TokenPositionChange
) -> tuple[float | None, float | None]:
    """Percentage move of ``position`` relative to the recorded previous values.

    Returns ``(amount_pct, value_pct)``; an element is None when the previous
    value was zero.
    """
    amount_pct = None
    if change.previous_amount:
        amount_pct = (
            (position.total_amount - change.previous_amount)
            / change.previous_amount
            * 100
        )

    value_pct = None
    if change.previous_usd_value:
        value_pct = (
            (position.usd_value - change.previous_usd_value)
            / change.previous_usd_value
            * 100
        )

    return amount_pct, value_pct


def is_significant(
    change: TokenPositionChange, threshold_pct: float = DEFAULT_SIGNIFICANCE_PCT
) -> bool:
    """True when amount or value moved by more than ``threshold_pct`` percent."""
    for pct in (change.amount_change_pct, change.value_change_pct):
        if pct is not None and abs(pct) > threshold_pct:
            return True
    # A move away from zero has no percentage but is still a move.
    if change.previous_amount == 0 and change.current_amount != 0:
        return True
    return False
