"""Token position aggregation across a wallet group."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Sequence

from ..config import SignificanceConfig
from ..models import SubPosition, TokenAccount, TokenInfo, TokenPosition, WalletTokenSummary

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SignificanceFilter:
    """Dust thresholds applied while aggregating.

    ``min_usd_value`` applies both to single holdings and to the aggregated
    position. ``min_holder_percentage`` is the share of token supply a single
    holding must reach; it is only checked when the token reports a holder
    count and a positive supply.
    """

    min_usd_value: float = 100.0
    min_holder_percentage: float = 0.01

    def accepts_holding(self, account: TokenAccount, usd_value: float) -> bool:
        if usd_value < self.min_usd_value:
            return False

        info = account.token_info
        if info is not None and info.holder and info.supply:
            try:
                total_supply = float(info.supply)
            except ValueError:
                total_supply = 0.0
            if total_supply > 0:
                holder_percentage = account.amount / total_supply * 100
                if holder_percentage < self.min_holder_percentage:
                    return False
        return True


def build_significance_filter(
    config: SignificanceConfig, force: bool = False
) -> SignificanceFilter | None:
    """Filter with the configured thresholds, or None when disabled and not forced."""
    if not (config.enabled or force):
        return None
    return SignificanceFilter(
        min_usd_value=config.min_usd_value,
        min_holder_percentage=config.min_holder_percentage,
    )


def holding_usd_value(amount: int, decimals: int, price: float | None) -> float:
    """USD value of a raw token amount; zero when the price is unknown."""
    if not price:
        return 0.0
    return (amount * price) / (10**decimals)


class _Accumulator:
    __slots__ = ("token", "total_amount", "usd_value", "positions")

    def __init__(self, token: TokenInfo) -> None:
        self.token = token
        self.total_amount = 0
        self.usd_value = 0.0
        self.positions: list[SubPosition] = []

    def freeze(self) -> TokenPosition:
        return TokenPosition(
            token=self.token,
            total_amount=self.total_amount,
            usd_value=self.usd_value,
            positions=tuple(self.positions),
        )


def aggregate(
    holdings_by_address: Iterable[tuple[str, Sequence[TokenAccount]]],
    significance: SignificanceFilter | None = None,
) -> WalletTokenSummary:
    """Merge per-address token holdings into one summary for the wallet group.

    Args:
        holdings_by_address: ``(address, holdings)`` pairs; the primary wallet
            first, then its bundled wallets. Iteration order fixes both the
            order of each token's sub-positions and the tie order of tokens
            with equal USD value.
        significance: Optional dust filter. Without it every resolved holding
            is counted.

    Holdings without resolved token info are skipped entirely. Amounts are
    summed raw; decimals are only applied to compute USD values.
    """
    accumulators: dict[str, _Accumulator] = {}
    total_usd_value = 0.0
    skipped = 0

    for address, holdings in holdings_by_address:
        for account in holdings:
            if account.token_info is None:
                skipped += 1
                continue

            usd_value = holding_usd_value(
                account.amount, account.token_decimals, account.token_info.price
            )

            if significance is not None and not significance.accepts_holding(
                account, usd_value
            ):
                continue

            acc = accumulators.get(account.token_address)
            if acc is None:
                acc = accumulators[account.token_address] = _Accumulator(
                    account.token_info
                )

            acc.total_amount += account.amount
            acc.usd_value += usd_value
            acc.positions.append(
                SubPosition(address=address, amount=account.amount, usd_value=usd_value)
            )

            total_usd_value += usd_value

    if skipped:
        logger.debug("Skipped %d holdings without token info", skipped)

    # sorted() is stable: equal values keep first-encountered order
    tokens = sorted(
        (acc.freeze() for acc in accumulators.values()),
        key=lambda position: position.usd_value,
        reverse=True,
    )

    if significance is not None:
        tokens = [t for t in tokens if t.usd_value >= significance.min_usd_value]

    return WalletTokenSummary(total_usd_value=total_usd_value, tokens=tuple(tokens))
