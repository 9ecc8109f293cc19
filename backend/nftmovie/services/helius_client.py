"""Helius DAS client — lists the NFTs held by a Solana wallet.

Two JSON-RPC calls:
1. getTokenAccounts(owner) → mint addresses
2. getAssetBatch(ids)      → asset metadata + CDN image URIs
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx

logger = logging.getLogger(__name__)

DEFAULT_RPC_URL = "https://mainnet.helius-rpc.com/"


class NftIndexError(Exception):
    """The NFT indexer could not be queried."""


@dataclass(frozen=True)
class NftAsset:
    name: str
    image_uri: str
    mint: str


class HeliusClient:
    def __init__(
        self,
        *,
        api_key: str,
        rpc_url: str = DEFAULT_RPC_URL,
        page_limit: int = 100,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ) -> None:
        self._api_key = api_key
        self._rpc_url = rpc_url
        self._page_limit = page_limit
        self._client = http_client or httpx.AsyncClient(timeout=timeout)
        self._own_client = http_client is None

    async def fetch_nfts(self, wallet_address: str) -> list[NftAsset]:
        """Return NFTs with a CDN image owned by ``wallet_address`` (first page only)."""
        logger.info("Fetching NFTs for wallet: %s", wallet_address)
        result = await self._rpc("getTokenAccounts", {
            "owner": wallet_address,
            "page": 1,
            "limit": self._page_limit,
            "options": {"showZeroBalance": False},
        })

        if result is not None and not isinstance(result, dict):
            raise NftIndexError(f"Helius getTokenAccounts returned {result!r}")
        accounts = (result or {}).get("token_accounts") or []
        mints = [a["mint"] for a in accounts if isinstance(a, dict) and a.get("mint")]
        if not mints:
            logger.info("No token accounts found for wallet: %s", wallet_address)
            return []

        assets = await self._rpc("getAssetBatch", {"ids": mints}) or []
        if not isinstance(assets, list):
            raise NftIndexError(f"Helius getAssetBatch returned {assets!r}")

        nfts = [nft for nft in (_asset_to_nft(a) for a in assets) if nft is not None]
        logger.info("Fetched %d NFTs for wallet: %s", len(nfts), wallet_address)
        return nfts

    async def _rpc(self, method: str, params: dict[str, Any]) -> Any:
        if not self._api_key:
            raise NftIndexError("Helius API key is not configured")

        body = {
            "jsonrpc": "2.0",
            "id": f"nftmovie-{method}",
            "method": method,
            "params": params,
        }
        try:
            resp = await self._client.post(
                self._rpc_url, params={"api-key": self._api_key}, json=body,
            )
            resp.raise_for_status()
            data = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            raise NftIndexError(f"Helius {method} failed: {e}") from e

        if not isinstance(data, dict):
            raise NftIndexError(f"Helius {method} returned {data!r}")
        if data.get("error"):
            err = data["error"]
            msg = err.get("message", err) if isinstance(err, dict) else err
            raise NftIndexError(f"Helius {method} error: {msg}")
        return data.get("result")

    async def aclose(self) -> None:
        if self._own_client:
            await self._client.aclose()


def _asset_to_nft(asset: Any) -> NftAsset | None:
    # getAssetBatch returns null for ids it does not know
    if not isinstance(asset, dict):
        return None

    content = asset.get("content") or {}
    files = content.get("files") or []
    image_uri = next(
        (f["cdn_uri"] for f in files if isinstance(f, dict) and f.get("cdn_uri")), "",
    )
    if not image_uri:
        return None

    mint = str(asset.get("id", ""))
    name = (content.get("metadata") or {}).get("name") or f"NFT {mint}"
    return NftAsset(name=name, image_uri=image_uri, mint=mint)
