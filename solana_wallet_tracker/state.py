"""JSON persistence of tracked wallet snapshots between runs.

Only what change detection needs is stored: the aggregated token summary,
the change records and the bundled wallet list. The activity feed is
refetched on every refresh and is not persisted.
"""
from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Any, Mapping

from .models import (
    SubPosition,
    TokenInfo,
    TokenPosition,
    TokenPositionChange,
    TrackedWallet,
    WalletTokenSummary,
)

logger = logging.getLogger(__name__)


def _change_to_dict(change: TokenPositionChange) -> dict[str, Any]:
    return {
        "previous_amount": change.previous_amount,
        "current_amount": change.current_amount,
        "previous_usd_value": change.previous_usd_value,
        "current_usd_value": change.current_usd_value,
        "change_timestamp": change.change_timestamp.isoformat(),
    }


def wallet_to_dict(wallet: TrackedWallet) -> dict[str, Any]:
    return {
        "address": wallet.address,
        "label": wallet.label,
        "last_updated": wallet.last_updated.isoformat(),
        "bundled_wallets": list(wallet.bundled_wallets),
        "token_summary": asdict(wallet.token_summary) if wallet.token_summary else None,
        "position_changes": {
            token: _change_to_dict(change)
            for token, change in wallet.position_changes.items()
        },
    }


def _summary_from_dict(raw: dict[str, Any]) -> WalletTokenSummary:
    tokens = tuple(
        TokenPosition(
            token=TokenInfo(**item["token"]),
            total_amount=int(item["total_amount"]),
            usd_value=float(item["usd_value"]),
            positions=tuple(SubPosition(**p) for p in item.get("positions") or ()),
        )
        for item in raw.get("tokens") or ()
    )
    return WalletTokenSummary(
        total_usd_value=float(raw["total_usd_value"]), tokens=tokens
    )


def wallet_from_dict(raw: dict[str, Any]) -> TrackedWallet:
    summary = raw.get("token_summary")
    return TrackedWallet(
        address=raw["address"],
        label=raw.get("label", ""),
        last_updated=datetime.fromisoformat(raw["last_updated"]),
        bundled_wallets=tuple(raw.get("bundled_wallets") or ()),
        token_summary=_summary_from_dict(summary) if summary else None,
        position_changes={
            token: TokenPositionChange(
                previous_amount=int(change["previous_amount"]),
                current_amount=int(change["current_amount"]),
                previous_usd_value=float(change["previous_usd_value"]),
                current_usd_value=float(change["current_usd_value"]),
                change_timestamp=datetime.fromisoformat(change["change_timestamp"]),
            )
            for token, change in (raw.get("position_changes") or {}).items()
        },
    )


class WalletStateStore:
    """Loads and saves the last known good TrackedWallet per address."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def load(self) -> dict[str, TrackedWallet]:
        """Read saved snapshots; a missing or unreadable file yields no state."""
        if not self.path.exists():
            return {}

        try:
            with open(self.path) as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable wallet state %s: %s", self.path, e)
            return {}

        if not isinstance(data, dict):
            logger.warning("Ignoring wallet state %s: not a JSON object", self.path)
            return {}

        wallets: dict[str, TrackedWallet] = {}
        for raw in data.get("wallets", []):
            try:
                wallet = wallet_from_dict(raw)
            except (AttributeError, KeyError, TypeError, ValueError) as e:
                logger.warning("Skipping malformed wallet state entry: %s", e)
                continue
            wallets[wallet.address] = wallet

        logger.info("Loaded state for %d wallets from %s", len(wallets), self.path)
        return wallets

    def save(self, wallets: Mapping[str, TrackedWallet]) -> None:
        """Write all snapshots, replacing the file in one step."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        with open(tmp_path, "w") as f:
            json.dump(
                {"wallets": [wallet_to_dict(w) for w in wallets.values()]}, f, indent=2
            )
        os.replace(tmp_path, self.path)
