"""Master API router — mounts all sub-routers."""

from fastapi import APIRouter

from nftmovie.api.convert import router as convert_router
from nftmovie.api.nfts import router as nfts_router

api_router = APIRouter(redirect_slashes=False)

api_router.include_router(nfts_router, tags=["NFTs"])
api_router.include_router(convert_router, tags=["Video Conversion"])
