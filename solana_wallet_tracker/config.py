"""Configuration loader — reads config.yaml, interpolates env vars, validates."""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from .addresses import is_valid_wallet_address

logger = logging.getLogger(__name__)

# Resolved relative to the config file.
DEFAULT_STATE_FILE = "wallet_state.json"

# ---------------------------------------------------------------------------
# Frozen config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SolscanConfig:
    api_base: str = "https://pro-api.solscan.io/v2.0"
    api_key: str = ""
    timeout: int = 30
    token_cache_ttl_seconds: int = 300
    transfers_page_size: int = 100
    defi_page_size: int = 100
    token_accounts_page_size: int = 30


@dataclass(frozen=True)
class SignificanceConfig:
    enabled: bool = False
    min_usd_value: float = 100.0
    min_holder_percentage: float = 0.01


@dataclass(frozen=True)
class MonitorConfig:
    check_interval_minutes: int = 15
    change_threshold_pct: float = 0.01
    min_activity_usd: float = 1.0
    report_top_tokens: int = 5
    significance: SignificanceConfig = field(default_factory=SignificanceConfig)
    # Empty disables persistence of wallet snapshots between runs.
    state_file: str = ""


@dataclass(frozen=True)
class WalletConfig:
    label: str = ""
    address: str = ""


@dataclass(frozen=True)
class TelegramConfig:
    enabled: bool = False
    alert_bot_token: str = ""
    log_bot_token: str = ""
    chat_id: str = ""


@dataclass(frozen=True)
class EmailConfig:
    enabled: bool = False
    alert_email: str = ""
    smtp_server: str = "smtp.gmail.com"
    smtp_port: int = 587
    sender_email: str = ""
    sender_password: str = ""


@dataclass(frozen=True)
class NotificationsConfig:
    telegram: TelegramConfig = field(default_factory=TelegramConfig)
    email: EmailConfig = field(default_factory=EmailConfig)


@dataclass(frozen=True)
class AppConfig:
    solscan: SolscanConfig = field(default_factory=SolscanConfig)
    monitor: MonitorConfig = field(default_factory=MonitorConfig)
    wallets: tuple[WalletConfig, ...] = ()
    notifications: NotificationsConfig = field(default_factory=NotificationsConfig)


# ---------------------------------------------------------------------------
# Env interpolation
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)}")


def _interpolate_env(value: Any) -> Any:
    """Recursively replace ${VAR} references with environment variable values."""
    if isinstance(value, str):
        return _ENV_VAR_RE.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, dict):
        return {k: _interpolate_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_interpolate_env(item) for item in value]
    return value


# ---------------------------------------------------------------------------
# YAML → dataclass builders
# ---------------------------------------------------------------------------


def _build_solscan(raw: dict[str, Any]) -> SolscanConfig:
    return SolscanConfig(
        api_base=raw.get("api_base", SolscanConfig.api_base).rstrip("/"),
        api_key=raw.get("api_key", "") or os.environ.get("SOLSCAN_API_KEY", ""),
        timeout=int(raw.get("timeout", 30)),
        token_cache_ttl_seconds=int(raw.get("token_cache_ttl_seconds", 300)),
        transfers_page_size=int(raw.get("transfers_page_size", 100)),
        defi_page_size=int(raw.get("defi_page_size", 100)),
        token_accounts_page_size=int(raw.get("token_accounts_page_size", 30)),
    )


def _build_significance(raw: dict[str, Any]) -> SignificanceConfig:
    return SignificanceConfig(
        enabled=bool(raw.get("enabled", False)),
        min_usd_value=float(raw.get("min_usd_value", 100.0)),
        min_holder_percentage=float(raw.get("min_holder_percentage", 0.01)),
    )


def _build_monitor(raw: dict[str, Any], base_dir: Path) -> MonitorConfig:
    state_file = str(raw.get("state_file", DEFAULT_STATE_FILE) or "")
    if state_file and not Path(state_file).is_absolute():
        state_file = str(base_dir / state_file)
    return MonitorConfig(
        check_interval_minutes=int(raw.get("check_interval_minutes", 15)),
        change_threshold_pct=float(raw.get("change_threshold_pct", 0.01)),
        min_activity_usd=float(raw.get("min_activity_usd", 1.0)),
        report_top_tokens=int(raw.get("report_top_tokens", 5)),
        significance=_build_significance(raw.get("significance", {}) or {}),
        state_file=state_file,
    )


def _build_wallets(raw: list[Any]) -> tuple[WalletConfig, ...]:
    wallets: list[WalletConfig] = []
    for w in raw:
        if isinstance(w, str):
            wallets.append(WalletConfig(address=w.strip()))
            continue
        wallets.append(
            WalletConfig(
                label=w.get("label", ""),
                address=str(w.get("address", "")).strip(),
            )
        )
    return tuple(wallets)


def _build_notifications(raw: dict[str, Any]) -> NotificationsConfig:
    tg = raw.get("telegram", {}) or {}
    em = raw.get("email", {}) or {}
    return NotificationsConfig(
        telegram=TelegramConfig(
            enabled=bool(tg.get("enabled", False)),
            alert_bot_token=tg.get("alert_bot_token", ""),
            log_bot_token=tg.get("log_bot_token", ""),
            chat_id=str(tg.get("chat_id", "")),
        ),
        email=EmailConfig(
            enabled=bool(em.get("enabled", False)),
            alert_email=em.get("alert_email", ""),
            smtp_server=em.get("smtp_server", "smtp.gmail.com"),
            smtp_port=int(em.get("smtp_port", 587)),
            sender_email=em.get("sender_email", ""),
            sender_password=em.get("sender_password", ""),
        ),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(
    config_path: str | Path | None = None, require_wallets: bool = True
) -> AppConfig:
    """Load and validate application configuration from YAML + .env.

    Args:
        config_path: Path to config.yaml. Defaults to ``config.yaml`` in the
            project root (one level up from the package).
        require_wallets: Whether an empty ``wallets`` list is an error. The
            one-shot ``track`` command takes addresses on the command line.
    """
    load_dotenv()

    if config_path is None:
        config_path = Path(__file__).resolve().parent.parent / "config.yaml"
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    raw = _interpolate_env(raw)

    cfg = AppConfig(
        solscan=_build_solscan(raw.get("solscan", {}) or {}),
        monitor=_build_monitor(raw.get("monitor", {}) or {}, config_path.resolve().parent),
        wallets=_build_wallets(raw.get("wallets", []) or []),
        notifications=_build_notifications(raw.get("notifications", {}) or {}),
    )

    _validate(cfg, require_wallets=require_wallets)
    logger.info("Configuration loaded from %s", config_path)
    return cfg


def _validate(cfg: AppConfig, require_wallets: bool = True) -> None:
    """Raise on invalid configuration."""
    if require_wallets and not cfg.wallets:
        raise ValueError("At least one wallet must be configured")

    seen: set[str] = set()
    for wallet in cfg.wallets:
        if not wallet.address:
            raise ValueError(f"Wallet '{wallet.label}' has no address")
        if not is_valid_wallet_address(wallet.address):
            raise ValueError(f"Invalid Solana wallet address: {wallet.address}")
        if wallet.address in seen:
            raise ValueError(f"Wallet is listed more than once: {wallet.address}")
        seen.add(wallet.address)

    if not cfg.solscan.api_key:
        logger.warning("No Solscan API key configured; requests will be rejected")
