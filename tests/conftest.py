"""Shared test fixtures and sample data."""
from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from solana_wallet_tracker.config import (
    AppConfig,
    EmailConfig,
    MonitorConfig,
    NotificationsConfig,
    SolscanConfig,
    TelegramConfig,
    WalletConfig,
)
from solana_wallet_tracker.models import TokenAccount, TokenInfo

MAIN_WALLET = "7xKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJosgAsU"
BUNDLED_WALLET = "9WzDXwBbmkg8ZTbNMqUxvQRAyrZzDsGYdLVL9zYtAWWM"
OTHER_WALLET = "HN7cABqLq46Es1jh92dQQisAq662SmxELLLsHHe4YWrH"

USDC_MINT = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"
BONK_MINT = "DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263"
JUP_MINT = "JUPyiwrYJFskUPiHa7hkeR8VUtAeFoSYbKedZNsDvCN"


# ---------------------------------------------------------------------------
# Model fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def usdc_info() -> TokenInfo:
    return TokenInfo(address=USDC_MINT, symbol="USDC", name="USD Coin", decimals=6, price=1.0)


@pytest.fixture()
def jup_info() -> TokenInfo:
    return TokenInfo(address=JUP_MINT, symbol="JUP", name="Jupiter", decimals=6, price=2.0)


@pytest.fixture()
def bonk_info() -> TokenInfo:
    return TokenInfo(address=BONK_MINT, symbol="BONK", name="Bonk", decimals=5)


def make_account(
    owner: str, mint: str, amount: int, decimals: int, info: TokenInfo | None
) -> TokenAccount:
    return TokenAccount(
        token_account=f"acct-{owner[:4]}-{mint[:4]}",
        token_address=mint,
        amount=amount,
        token_decimals=decimals,
        owner=owner,
        token_info=info,
    )


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_app_config() -> AppConfig:
    return AppConfig(
        solscan=SolscanConfig(api_base="https://solscan.example.com/v2.0", api_key="key"),
        monitor=MonitorConfig(check_interval_minutes=5),
        wallets=(WalletConfig(label="test-wallet", address=MAIN_WALLET),),
        notifications=NotificationsConfig(
            telegram=TelegramConfig(
                enabled=True,
                alert_bot_token="fake-alert-token",
                log_bot_token="fake-log-token",
                chat_id="12345",
            ),
            email=EmailConfig(enabled=False),
        ),
    )


SAMPLE_YAML = textwrap.dedent(f"""\
    solscan:
      api_base: "https://solscan.example.com/v2.0/"
      api_key: "abc"
      timeout: 10
      token_cache_ttl_seconds: 60
    monitor:
      check_interval_minutes: 5
      change_threshold_pct: 0.5
      significance:
        enabled: true
        min_usd_value: 50
    wallets:
      - label: test-wallet
        address: "{MAIN_WALLET}"
      - "{OTHER_WALLET}"
    notifications:
      telegram:
        enabled: true
        alert_bot_token: "tok1"
        log_bot_token: "tok2"
        chat_id: 999
      email:
        enabled: false
""")


@pytest.fixture()
def sample_yaml_path(tmp_path: Path) -> Path:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(SAMPLE_YAML)
    return cfg_file


# ---------------------------------------------------------------------------
# Sample Solscan payloads
# ---------------------------------------------------------------------------


@pytest.fixture()
def raw_transfers() -> list[dict]:
    return [
        {
            "block_id": 300,
            "trans_id": "sig-out-1",
            "block_time": 1_700_000_300,
            "time": "2023-11-14T22:18:20.000Z",
            "activity_type": "ACTIVITY_SPL_TRANSFER",
            "from_address": MAIN_WALLET,
            "to_address": BUNDLED_WALLET,
            "token_address": USDC_MINT,
            "token_decimals": 6,
            "amount": 25_000_000,
            "flow": "out",
        },
        {
            "block_id": 200,
            "trans_id": "sig-in-1",
            "block_time": 1_700_000_200,
            "time": "2023-11-14T22:16:40.000Z",
            "activity_type": "ACTIVITY_SPL_TRANSFER",
            "from_address": OTHER_WALLET,
            "to_address": MAIN_WALLET,
            "token_address": JUP_MINT,
            "token_decimals": 6,
            "amount": 3_000_000,
            "flow": "in",
        },
        {
            "block_id": 100,
            "trans_id": "sig-out-2",
            "block_time": 1_700_000_100,
            "time": "2023-11-14T22:15:00.000Z",
            "activity_type": "ACTIVITY_SPL_TRANSFER",
            "from_address": MAIN_WALLET,
            "to_address": BUNDLED_WALLET,
            "token_address": USDC_MINT,
            "token_decimals": 6,
            "amount": 1_000_000,
            "flow": "out",
        },
    ]


@pytest.fixture()
def raw_defi() -> list[dict]:
    return [
        {
            "block_id": 250,
            "trans_id": "sig-swap-1",
            "block_time": 1_700_000_250,
            "time": "2023-11-14T22:17:30.000Z",
            "activity_type": "ACTIVITY_AGG_TOKEN_SWAP",
            "from_address": MAIN_WALLET,
            "to_address": "",
            "sources": [MAIN_WALLET],
            "platform": "JUP6LkbZbjS1jKKwapdHNy74zcZ3tLUZoi5QNyVTaV4",
            "amount_info": {
                "token1": USDC_MINT,
                "token1_decimals": 6,
                "amount1": 10_000_000,
                "token2": JUP_MINT,
                "token2_decimals": 6,
                "amount2": 5_000_000,
                "routers": [],
            },
        }
    ]


@pytest.fixture()
def raw_token_accounts() -> dict[str, list[dict]]:
    return {
        MAIN_WALLET: [
            {
                "token_account": "acct-main-usdc",
                "token_address": USDC_MINT,
                "amount": 1_000_000,
                "token_decimals": 6,
                "owner": MAIN_WALLET,
            },
            {
                "token_account": "acct-main-jup",
                "token_address": JUP_MINT,
                "amount": 4_000_000,
                "token_decimals": 6,
                "owner": MAIN_WALLET,
            },
        ],
        BUNDLED_WALLET: [
            {
                "token_account": "acct-bundled-usdc",
                "token_address": USDC_MINT,
                "amount": 500_000,
                "token_decimals": 6,
                "owner": BUNDLED_WALLET,
            },
        ],
    }
