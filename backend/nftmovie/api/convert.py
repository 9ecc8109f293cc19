"""Image-to-video conversion endpoint."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, TypeVar

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from nftmovie.clients import get_batch_converter
from nftmovie.schemas.conversion import (
    ConvertToVideoRequest,
    ConvertToVideoResponse,
    ErrorResponse,
)
from nftmovie.services.batch_converter import BatchConverter
from nftmovie.services.errors import AllItemsFailedError, InvalidRequestError

logger = logging.getLogger(__name__)

router = APIRouter()

T = TypeVar("T")

DISCONNECT_CHECK_INTERVAL = 1.0


class ClientDisconnected(Exception):
    pass


async def _run_while_connected(request: Request, work: Awaitable[T]) -> T:
    """Await ``work``, cancelling it if the caller goes away first."""
    task = asyncio.ensure_future(work)
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=DISCONNECT_CHECK_INTERVAL)
            if done:
                return task.result()
            if await request.is_disconnected():
                raise ClientDisconnected()
    finally:
        if not task.done():
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)


@router.post(
    "/convert-to-video",
    response_model=ConvertToVideoResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def convert_to_video(
    req: ConvertToVideoRequest,
    request: Request,
    converter: BatchConverter = Depends(get_batch_converter),
) -> Any:
    """Convert each image URL to a video. Returns only the successful subset in ``results``."""
    try:
        result = await _run_while_connected(request, converter.convert(req.to_domain()))
        return ConvertToVideoResponse.from_result(result)
    except InvalidRequestError as e:
        return JSONResponse(status_code=400, content={"error": str(e)})
    except AllItemsFailedError as e:
        return JSONResponse(status_code=500, content={"error": str(e)})
    except ClientDisconnected:
        logger.warning("Client disconnected, batch cancelled")
        return JSONResponse(status_code=499, content={"error": "Client closed request"})
    except Exception as e:
        logger.exception("Critical error during video conversion")
        return JSONResponse(
            status_code=500,
            content={"error": str(e) or "Failed to convert NFTs to movies"},
        )
