"""Plain-text rendering of tracked wallets."""
from __future__ import annotations

from datetime import datetime

from ..addresses import shorten_address
from ..formatting import (
    format_number,
    format_pct,
    format_time_since,
    format_usd,
)
from ..models import TokenPosition, TokenPositionChange, TrackedWallet
from .activity import filter_by_min_usd, group_by_date
from .change_detector import DEFAULT_SIGNIFICANCE_PCT, is_significant, position_change_pct


def render_position(
    position: TokenPosition,
    change: TokenPositionChange | None,
    now: datetime,
    threshold_pct: float = DEFAULT_SIGNIFICANCE_PCT,
    show_breakdown: bool = True,
) -> list[str]:
    token = position.token
    amount = format_number(position.total_amount / 10**token.decimals)
    line = f"  {token.symbol:<10} {amount:>12} {format_usd(position.usd_value):>16}"

    if change is not None and is_significant(change, threshold_pct):
        amount_pct, value_pct = position_change_pct(position, change)
        line += (
            f"  [amt {format_pct(amount_pct)}, val {format_pct(value_pct)},"
            f" {format_time_since(change.change_timestamp, now)}]"
        )

    lines = [line]
    if show_breakdown and len(position.positions) > 1:
        for sub in position.positions:
            lines.append(
                f"      {shorten_address(sub.address)}"
                f"  {format_number(sub.amount / 10**token.decimals)}"
            )
    return lines


def render_wallet(
    wallet: TrackedWallet,
    now: datetime,
    top_tokens: int | None = None,
    min_activity_usd: float = 1.0,
    max_activities: int = 10,
    threshold_pct: float = DEFAULT_SIGNIFICANCE_PCT,
) -> str:
    """Render a wallet group: totals, token positions and recent activity."""
    lines = [
        f"━━ {wallet.display_name} ━━",
        f"Bundled wallets: {len(wallet.bundled_wallets)}",
    ]

    summary = wallet.token_summary
    if summary is None or not summary.tokens:
        lines.append("No token positions found.")
    else:
        lines.append(f"Total value: {format_usd(summary.total_usd_value)}")
        tokens = summary.tokens if top_tokens is None else summary.tokens[:top_tokens]
        for position in tokens:
            lines += render_position(
                position,
                wallet.position_changes.get(position.token.address),
                now,
                threshold_pct,
            )
        hidden = len(summary.tokens) - len(tokens)
        if hidden > 0:
            lines.append(f"  ... {hidden} more tokens")

    activities = filter_by_min_usd(wallet.activities, min_activity_usd)[:max_activities]
    if activities:
        lines.append("")
        lines.append("Recent activity:")
        for day, entries in group_by_date(activities).items():
            lines.append(f"  {day}")
            for activity in entries:
                value = format_usd(activity.usd_value) if activity.usd_value is not None else ""
                lines.append(f"    {activity.details}  {value}".rstrip())

    lines.append(f"Updated {wallet.last_updated.strftime('%Y-%m-%d %H:%M:%S')} UTC")
    return "\n".join(lines)


def render_changes(
    wallet: TrackedWallet,
    changed: dict[str, TokenPositionChange],
) -> str:
    """Render the positions in ``changed`` for an alert message."""
    summary = wallet.token_summary
    lines = [f"🔔 Position changes — {wallet.display_name}", ""]
    positions = {p.token.address: p for p in summary.tokens} if summary else {}

    for token_address, change in changed.items():
        position = positions.get(token_address)
        symbol = position.token.symbol if position else shorten_address(token_address)
        lines.append(
            f"{symbol}: {format_usd(change.previous_usd_value)} → "
            f"{format_usd(change.current_usd_value)}"
            f" (amt {format_pct(change.amount_change_pct)},"
            f" val {format_pct(change.value_change_pct)})"
        )

    lines += ["", f"Wallet: {shorten_address(wallet.address)}"]
    return "\n".join(lines)
