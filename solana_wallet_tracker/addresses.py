"""Wallet address helpers."""
from __future__ import annotations

import re

_BASE58_ADDRESS_RE = re.compile(r"^[1-9A-HJ-NP-Za-km-z]{32,44}$")


def is_valid_wallet_address(address: str) -> bool:
    """Return True if ``address`` looks like a base58 Solana account address."""
    if not address:
        return False
    return bool(_BASE58_ADDRESS_RE.match(address))


def shorten_address(address: str, head: int = 8, tail: int = 4) -> str:
    """Abbreviate an address for display, e.g. ``7xKXtg2C...gAsU``."""
    if len(address) <= head + tail + 3:
        return address
    return f"{address[:head]}...{address[-tail:]}"
