"""Display formatting helpers."""
from __future__ import annotations

from datetime import datetime, timezone


def format_usd(value: float) -> str:
    """Format a USD amount, e.g. ``$1,234.56`` or ``-$3.00``."""
    if value < 0:
        return f"-${abs(value):,.2f}"
    return f"${value:,.2f}"


def format_number(num: float) -> str:
    """Format a number with a K/M/B suffix and two decimals."""
    if num >= 1_000_000_000:
        return f"{num / 1_000_000_000:,.2f}B"
    if num >= 1_000_000:
        return f"{num / 1_000_000:,.2f}M"
    if num >= 1_000:
        return f"{num / 1_000:,.2f}K"
    return f"{num:,.2f}"


def format_token_amount(amount: int, decimals: int) -> str:
    """Decimal-adjust a raw amount, showing at most six fractional digits."""
    places = min(decimals, 6)
    return f"{amount / 10**decimals:.{places}f}"


def format_pct(pct: float | None) -> str:
    if pct is None:
        return "n/a"
    return f"{'+' if pct > 0 else ''}{pct:.2f}%"


def format_time_since(timestamp: datetime, now: datetime | None = None) -> str:
    """Coarse relative time: ``42s ago``, ``5m ago``, ``3h ago``, ``2d ago``."""
    if now is None:
        now = datetime.now(timezone.utc)
    seconds = max(int((now - timestamp).total_seconds()), 0)

    if seconds < 60:
        return f"{seconds}s ago"
    minutes = seconds // 60
    if minutes < 60:
        return f"{minutes}m ago"
    hours = minutes // 60
    if hours < 24:
        return f"{hours}h ago"
    return f"{hours // 24}d ago"
