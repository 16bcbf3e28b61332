"""Solscan Pro API client."""
import logging
import ssl
from typing import Any

import aiohttp
import certifi

from ..config import SolscanConfig

logger = logging.getLogger(__name__)

TRANSFER_ACTIVITY_TYPES = ("ACTIVITY_SPL_TRANSFER",)
SWAP_ACTIVITY_TYPES = ("ACTIVITY_TOKEN_SWAP", "ACTIVITY_AGG_TOKEN_SWAP")


class SolscanError(RuntimeError):
    """Raised when the Solscan API cannot be reached or answers with an error."""


class SolscanClient:
    """Thin async wrapper over the Solscan Pro v2 REST endpoints.

    Each public method returns the ``data`` member of the response envelope,
    or an empty value when the envelope reports ``success: false``.
    """

    def __init__(self, config: SolscanConfig) -> None:
        self.api_base = config.api_base
        self.timeout = config.timeout
        self.transfers_page_size = config.transfers_page_size
        self.defi_page_size = config.defi_page_size
        self.token_accounts_page_size = config.token_accounts_page_size
        self._headers = {"accept": "application/json", "token": config.api_key}

    async def request(
        self, path: str, params: list[tuple[str, str]]
    ) -> Any:
        """GET ``path`` and unwrap the response envelope."""
        url = f"{self.api_base}{path}"
        ssl_context = ssl.create_default_context(cafile=certifi.where())
        connector = aiohttp.TCPConnector(ssl=ssl_context)

        try:
            async with aiohttp.ClientSession(connector=connector) as session:
                async with session.get(
                    url,
                    params=params,
                    headers=self._headers,
                    timeout=aiohttp.ClientTimeout(total=self.timeout),
                ) as response:
                    if response.status != 200:
                        raise SolscanError(
                            f"Solscan {path} failed: HTTP {response.status}"
                        )
                    body = await response.json()
        except SolscanError:
            raise
        except Exception as e:
            raise SolscanError(f"Solscan {path} failed: {e}") from e

        if not body.get("success"):
            logger.warning("Solscan %s returned success=false", path)
            return None
        return body.get("data")

    async def get_token_meta(self, token_address: str) -> dict[str, Any]:
        """Fetch token metadata (symbol, decimals, price, market data)."""
        data = await self.request("/token/meta", [("address", token_address)])
        return data or {}

    async def get_transfers(
        self, address: str, page_size: int | None = None
    ) -> list[dict[str, Any]]:
        """Fetch the most recent SPL transfers of ``address``."""
        params = [("address", address)]
        params += [("activity_type[]", t) for t in TRANSFER_ACTIVITY_TYPES]
        params += [
            ("page", "1"),
            ("page_size", str(page_size or self.transfers_page_size)),
            ("sort_by", "block_time"),
            ("sort_order", "desc"),
        ]
        data = await self.request("/account/transfer", params)
        return data or []

    async def get_defi_activities(
        self, address: str, page_size: int | None = None
    ) -> list[dict[str, Any]]:
        """Fetch the most recent swap activities of ``address``."""
        params = [("address", address)]
        params += [("activity_type[]", t) for t in SWAP_ACTIVITY_TYPES]
        params += [
            ("page", "1"),
            ("page_size", str(page_size or self.defi_page_size)),
            ("sort_by", "block_time"),
            ("sort_order", "desc"),
        ]
        data = await self.request("/account/defi/activities", params)
        return data or []

    async def get_token_accounts(
        self, address: str, page_size: int | None = None
    ) -> list[dict[str, Any]]:
        """Fetch the non-empty SPL token accounts owned by ``address``."""
        params = [
            ("address", address),
            ("type", "token"),
            ("page", "1"),
            ("page_size", str(page_size or self.token_accounts_page_size)),
            ("hide_zero", "true"),
        ]
        data = await self.request("/account/token-accounts", params)
        return data or []
