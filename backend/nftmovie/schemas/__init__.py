"""Pydantic v2 schemas package."""

from nftmovie.schemas.conversion import (
    ConversionFailureItem,
    ConversionResultItem,
    ConvertToVideoRequest,
    ConvertToVideoResponse,
    ErrorResponse,
)
from nftmovie.schemas.nft import FetchNftsRequest, FetchNftsResponse, NftRead

__all__ = [
    "ConversionFailureItem",
    "ConversionResultItem",
    "ConvertToVideoRequest",
    "ConvertToVideoResponse",
    "ErrorResponse",
    "FetchNftsRequest",
    "FetchNftsResponse",
    "NftRead",
]
