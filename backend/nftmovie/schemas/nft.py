"""Pydantic v2 schemas for the /fetch-nfts endpoint."""

from __future__ import annotations

from pydantic import BaseModel, Field

from nftmovie.services.helius_client import NftAsset


class FetchNftsRequest(BaseModel):
    wallet_address: str = Field(alias="walletAddress", min_length=1)

    model_config = {"populate_by_name": True, "str_strip_whitespace": True}


class NftRead(BaseModel):
    name: str
    image_uri: str = Field(alias="imageUri")
    mint: str

    model_config = {"populate_by_name": True}

    @classmethod
    def from_asset(cls, asset: NftAsset) -> NftRead:
        return cls(name=asset.name, image_uri=asset.image_uri, mint=asset.mint)


class FetchNftsResponse(BaseModel):
    nfts: list[NftRead]
