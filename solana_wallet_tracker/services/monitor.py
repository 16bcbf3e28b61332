"""Wallet monitoring orchestration — refreshes tracked wallets and notifies."""
from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone

from ..config import AppConfig
from ..interfaces.notifier import Notifier
from ..models import TokenPositionChange, TrackedWallet
from ..notifications import EmailNotifier, TelegramNotifier
from ..solscan import SolscanClient, TokenInfoResolver
from ..state import WalletStateStore
from .aggregator import build_significance_filter
from .change_detector import is_significant
from .report import render_changes, render_wallet
from .wallet_service import WalletService

logger = logging.getLogger(__name__)


class Monitor:
    """Owns the last known good state of every configured wallet group."""

    def __init__(self, config: AppConfig) -> None:
        self._config = config
        self._monitor_cfg = config.monitor

        client = SolscanClient(config.solscan)
        resolver = TokenInfoResolver(client, ttl=config.solscan.token_cache_ttl_seconds)

        significance = build_significance_filter(config.monitor.significance)
        self._service = WalletService(client, resolver, significance)

        self._store: WalletStateStore | None = None
        self._wallets: dict[str, TrackedWallet] = {}
        if config.monitor.state_file:
            self._store = WalletStateStore(config.monitor.state_file)
            self._wallets = self._store.load()

        self._notifiers: list[Notifier] = []
        if config.notifications.telegram.enabled:
            self._notifiers.append(TelegramNotifier(config.notifications.telegram))
        if config.notifications.email.enabled:
            self._notifiers.append(EmailNotifier(config.notifications.email))

    @property
    def wallets(self) -> dict[str, TrackedWallet]:
        return dict(self._wallets)

    # ------------------------------------------------------------------
    # Notification dispatch
    # ------------------------------------------------------------------

    async def _send_log(self, message: str, silent: bool = False) -> None:
        for notifier in self._notifiers:
            try:
                await notifier.send_log(message, silent=silent)
            except Exception as e:
                logger.error("Notifier send_log failed: %s", e)

    async def _send_alert(self, message: str, subject: str = "") -> None:
        for notifier in self._notifiers:
            try:
                await notifier.send_alert(message, subject=subject)
            except Exception as e:
                logger.error("Notifier send_alert failed: %s", e)

    def _save_state(self) -> None:
        if self._store is None:
            return
        try:
            self._store.save(self._wallets)
        except OSError as e:
            logger.error("Could not save wallet state to %s: %s", self._store.path, e)

    # ------------------------------------------------------------------
    # Core workflows
    # ------------------------------------------------------------------

    def _new_changes(
        self, wallet: TrackedWallet, now: datetime
    ) -> dict[str, TokenPositionChange]:
        """Changes detected in this refresh (carried-forward ones are skipped)."""
        threshold = self._monitor_cfg.change_threshold_pct
        return {
            token: change
            for token, change in wallet.position_changes.items()
            if change.change_timestamp == now and is_significant(change, threshold)
        }

    async def refresh_wallet(
        self, address: str, label: str = "", now: datetime | None = None
    ) -> TrackedWallet | None:
        """Refresh one wallet group; on failure the previous state is kept."""
        if now is None:
            now = datetime.now(timezone.utc)
        previous = self._wallets.get(address)

        try:
            wallet = await self._service.refresh(address, previous, label=label, now=now)
        except Exception as e:
            logger.error("Error refreshing wallet %s: %s", address, e)
            await self._send_log(f"⚠️ Refresh failed for {label or address}: {e}")
            return None

        self._wallets[address] = wallet
        return wallet

    async def check_and_alert(self) -> None:
        """Refresh every configured wallet and alert on fresh position changes."""
        now = datetime.now(timezone.utc)

        for wallet_cfg in self._config.wallets:
            wallet = await self.refresh_wallet(wallet_cfg.address, wallet_cfg.label, now)
            if wallet is None:
                continue

            summary = wallet.token_summary
            logger.info(
                "Wallet — %s · Total: $%.2f  Tokens: %d  Bundled: %d  Changes: %d",
                wallet.display_name,
                summary.total_usd_value if summary else 0.0,
                len(summary.tokens) if summary else 0,
                len(wallet.bundled_wallets),
                len(wallet.position_changes),
            )

            await self._send_log(
                render_wallet(
                    wallet,
                    now,
                    top_tokens=self._monitor_cfg.report_top_tokens,
                    min_activity_usd=self._monitor_cfg.min_activity_usd,
                    max_activities=5,
                    threshold_pct=self._monitor_cfg.change_threshold_pct,
                ),
                silent=True,
            )

            changed = self._new_changes(wallet, now)
            if changed:
                await self._send_alert(
                    render_changes(wallet, changed),
                    subject=f"🔔 {len(changed)} position change(s): {wallet.display_name}",
                )

        self._save_state()

    async def generate_report(self) -> None:
        """Send a portfolio report covering every configured wallet."""
        now = datetime.now(timezone.utc)
        sections: list[str] = []

        for wallet_cfg in self._config.wallets:
            wallet = await self.refresh_wallet(wallet_cfg.address, wallet_cfg.label, now)
            if wallet is None:
                wallet = self._wallets.get(wallet_cfg.address)
            if wallet is None:
                sections.append(f"━━ {wallet_cfg.label or wallet_cfg.address} ━━\nUnavailable.")
                continue
            sections.append(
                render_wallet(
                    wallet,
                    now,
                    top_tokens=self._monitor_cfg.report_top_tokens,
                    min_activity_usd=self._monitor_cfg.min_activity_usd,
                    max_activities=0,
                    threshold_pct=self._monitor_cfg.change_threshold_pct,
                )
            )

        self._save_state()

        body = "\n\n".join(sections) if sections else "No wallets configured."
        report = (
            f"📋 Solana Wallet Report\n"
            f"\n"
            f"{body}\n"
            f"\n"
            f"{now.strftime('%Y-%m-%d %H:%M:%S')} UTC"
        )

        await self._send_alert(report, subject="📋 Solana Wallet Report")
        logger.info("Wallet report sent")

    async def run_continuous(self, check_interval_minutes: int | None = None) -> None:
        """Run the refresh loop forever."""
        interval = check_interval_minutes or self._monitor_cfg.check_interval_minutes
        logger.info("Starting continuous monitoring (checking every %d minutes)", interval)

        while True:
            try:
                await self.check_and_alert()
                await asyncio.sleep(interval * 60)
            except Exception as e:
                logger.error("Error in monitoring loop: %s", e)
                await asyncio.sleep(60)
