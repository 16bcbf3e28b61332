"""Data models — all frozen (immutable)."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class TokenInfo:
    """Descriptive and pricing metadata for a fungible token.

    ``address`` is the identity key; everything after ``decimals`` is optional
    and may be stale.
    """

    address: str
    symbol: str
    name: str
    decimals: int
    icon: str | None = None
    price: float | None = None
    price_change_24h: float | None = None
    volume_24h: float | None = None
    market_cap: float | None = None
    market_cap_rank: int | None = None
    holder: int | None = None
    supply: str | None = None


@dataclass(frozen=True)
class TokenAccount:
    """One token balance held by one owner address (raw integer amount)."""

    token_account: str
    token_address: str
    amount: int
    token_decimals: int
    owner: str
    token_info: TokenInfo | None = None


@dataclass(frozen=True)
class SubPosition:
    """Amount and USD value of one token attributable to a single address."""

    address: str
    amount: int
    usd_value: float


@dataclass(frozen=True)
class TokenPosition:
    """One token aggregated across every address of a wallet group."""

    token: TokenInfo
    total_amount: int
    usd_value: float
    positions: tuple[SubPosition, ...] = ()


@dataclass(frozen=True)
class WalletTokenSummary:
    """All token positions of a wallet group, richest first."""

    total_usd_value: float = 0.0
    tokens: tuple[TokenPosition, ...] = ()


@dataclass(frozen=True)
class TokenPositionChange:
    """A token position that moved between two consecutive snapshots."""

    previous_amount: int
    current_amount: int
    previous_usd_value: float
    current_usd_value: float
    change_timestamp: datetime

    @property
    def amount_change_pct(self) -> float | None:
        if not self.previous_amount:
            return None
        return (self.current_amount - self.previous_amount) / self.previous_amount * 100

    @property
    def value_change_pct(self) -> float | None:
        if not self.previous_usd_value:
            return None
        return (
            (self.current_usd_value - self.previous_usd_value)
            / self.previous_usd_value
            * 100
        )


@dataclass(frozen=True)
class TransferActivity:
    """Single SPL token transfer touching a wallet."""

    trans_id: str
    block_time: int
    time: str
    activity_type: str
    from_address: str
    to_address: str
    token_address: str
    token_decimals: int
    amount: int
    flow: str  # 'in' or 'out'
    token_info: TokenInfo | None = None


@dataclass(frozen=True)
class SwapAmounts:
    """Token pair and raw amounts of a DEX swap."""

    token1: str
    token1_decimals: int
    amount1: int
    token2: str
    token2_decimals: int
    amount2: int


@dataclass(frozen=True)
class DefiActivity:
    """Single DeFi (swap) activity of a wallet."""

    trans_id: str
    block_time: int
    time: str
    activity_type: str
    from_address: str
    platform: str
    sources: tuple[str, ...] = ()
    amount_info: SwapAmounts | None = None
    token1_info: TokenInfo | None = None
    token2_info: TokenInfo | None = None


@dataclass(frozen=True)
class WalletActivity:
    """Normalized entry of a wallet's activity feed."""

    type: str  # 'SWAP' or 'TRANSFER'
    timestamp: str
    transaction_id: str
    details: str
    usd_value: float | None = None
    token_info: TokenInfo | None = None


@dataclass(frozen=True)
class WalletData:
    """Everything fetched for one wallet group in a single refresh."""

    address: str
    bundled_addresses: tuple[str, ...] = ()
    transfers: tuple[TransferActivity, ...] = ()
    defi: tuple[DefiActivity, ...] = ()
    token_accounts: tuple[tuple[str, tuple[TokenAccount, ...]], ...] = ()


@dataclass(frozen=True)
class TrackedWallet:
    """Last known good state of a tracked wallet group."""

    address: str
    last_updated: datetime
    bundled_wallets: tuple[str, ...] = ()
    token_summary: WalletTokenSummary | None = None
    position_changes: dict[str, TokenPositionChange] = field(default_factory=dict)
    activities: tuple[WalletActivity, ...] = ()
    label: str = ""

    @property
    def display_name(self) -> str:
        return self.label or self.address
