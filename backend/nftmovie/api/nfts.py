"""Wallet NFT lookup endpoint."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from nftmovie.clients import get_nft_client
from nftmovie.schemas.conversion import ErrorResponse
from nftmovie.schemas.nft import FetchNftsRequest, FetchNftsResponse, NftRead
from nftmovie.services.helius_client import HeliusClient, NftIndexError

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/fetch-nfts",
    response_model=FetchNftsResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def fetch_nfts(
    req: FetchNftsRequest,
    client: HeliusClient = Depends(get_nft_client),
) -> Any:
    try:
        assets = await client.fetch_nfts(req.wallet_address)
    except NftIndexError as e:
        logger.error("Error fetching NFTs for %s: %s", req.wallet_address, e)
        return JSONResponse(status_code=500, content={"error": str(e) or "Failed to fetch NFTs"})

    return FetchNftsResponse(nfts=[NftRead.from_asset(a) for a in assets])
