"""Unit tests for wallet state persistence."""
from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from conftest import BUNDLED_WALLET, MAIN_WALLET, USDC_MINT
from solana_wallet_tracker.models import (
    SubPosition,
    TokenInfo,
    TokenPosition,
    TokenPositionChange,
    TrackedWallet,
    WalletActivity,
    WalletTokenSummary,
)
from solana_wallet_tracker.services.change_detector import detect_changes
from solana_wallet_tracker.state import WalletStateStore

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture()
def wallet(usdc_info: TokenInfo) -> TrackedWallet:
    position = TokenPosition(
        token=usdc_info,
        total_amount=1_500_000,
        usd_value=0.1 + 0.2,
        positions=(
            SubPosition(address=MAIN_WALLET, amount=1_000_000, usd_value=0.1),
            SubPosition(address=BUNDLED_WALLET, amount=500_000, usd_value=0.2),
        ),
    )
    return TrackedWallet(
        address=MAIN_WALLET,
        last_updated=NOW,
        bundled_wallets=(BUNDLED_WALLET,),
        token_summary=WalletTokenSummary(total_usd_value=0.1 + 0.2, tokens=(position,)),
        position_changes={
            USDC_MINT: TokenPositionChange(
                previous_amount=1_000_000,
                current_amount=1_500_000,
                previous_usd_value=0.1,
                current_usd_value=0.1 + 0.2,
                change_timestamp=NOW - timedelta(minutes=15),
            )
        },
        activities=(
            WalletActivity(type="SWAP", timestamp="", transaction_id="x", details="d"),
        ),
        label="main",
    )


class TestWalletStateStore:
    def test_saved_snapshot_loads_back(self, tmp_path: Path, wallet: TrackedWallet) -> None:
        store = WalletStateStore(tmp_path / "state" / "wallets.json")
        store.save({MAIN_WALLET: wallet})

        loaded = WalletStateStore(store.path).load()[MAIN_WALLET]

        assert loaded.token_summary == wallet.token_summary
        assert loaded.position_changes == wallet.position_changes
        assert loaded.bundled_wallets == (BUNDLED_WALLET,)
        assert loaded.label == "main"
        assert loaded.last_updated == NOW
        assert loaded.activities == ()

    def test_reloaded_summary_compares_equal_to_itself(
        self, tmp_path: Path, wallet: TrackedWallet
    ) -> None:
        store = WalletStateStore(tmp_path / "wallets.json")
        store.save({MAIN_WALLET: wallet})
        loaded = store.load()[MAIN_WALLET]

        changes = detect_changes(
            loaded.token_summary, loaded.position_changes, wallet.token_summary, NOW
        )

        assert changes[USDC_MINT] == wallet.position_changes[USDC_MINT]

    def test_missing_file(self, tmp_path: Path) -> None:
        assert WalletStateStore(tmp_path / "nope.json").load() == {}

    def test_corrupt_file(self, tmp_path: Path) -> None:
        path = tmp_path / "wallets.json"
        path.write_text("{not json")
        assert WalletStateStore(path).load() == {}

    def test_malformed_entry_skipped(self, tmp_path: Path, wallet: TrackedWallet) -> None:
        store = WalletStateStore(tmp_path / "wallets.json")
        store.save({MAIN_WALLET: wallet})
        data = json.loads(store.path.read_text())
        data["wallets"].append({"label": "no address"})
        data["wallets"].append("garbage")
        store.path.write_text(json.dumps(data))

        assert list(store.load()) == [MAIN_WALLET]

    def test_save_leaves_no_temp_file(self, tmp_path: Path, wallet: TrackedWallet) -> None:
        store = WalletStateStore(tmp_path / "wallets.json")
        store.save({MAIN_WALLET: wallet})
        assert [p.name for p in tmp_path.iterdir()] == ["wallets.json"]
