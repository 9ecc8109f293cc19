"""Remote client lifecycle.

Clients are built once in the app lifespan, stored on ``app.state``, and
handed to routes through FastAPI dependencies. Closed on shutdown.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request

from nftmovie.config import Settings
from nftmovie.services.batch_converter import BatchConverter
from nftmovie.services.helius_client import HeliusClient
from nftmovie.services.poller import PollPolicy
from nftmovie.services.runway_client import MockTaskClient, RunwayClient, TaskClient

logger = logging.getLogger(__name__)


def build_task_client(settings: Settings) -> TaskClient:
    if settings.USE_MOCK_API:
        logger.info("Using mock RunwayML client")
        return MockTaskClient(polls_until_done=settings.MOCK_POLLS_UNTIL_DONE)
    if not settings.RUNWAYML_API_SECRET:
        logger.warning("No RUNWAYML_API_SECRET set — video conversions will fail")
    return RunwayClient(
        api_key=settings.RUNWAYML_API_SECRET,
        base_url=settings.RUNWAYML_BASE_URL,
        api_version=settings.RUNWAYML_API_VERSION,
        timeout=settings.RUNWAYML_TIMEOUT,
    )


def build_nft_client(settings: Settings) -> HeliusClient:
    if not settings.HELIUS_API_KEY:
        logger.warning("No HELIUS_API_KEY set — NFT lookups will fail")
    return HeliusClient(
        api_key=settings.HELIUS_API_KEY,
        rpc_url=settings.HELIUS_RPC_URL,
        page_limit=settings.NFT_PAGE_LIMIT,
        timeout=settings.HELIUS_TIMEOUT,
    )


def open_clients(app: FastAPI, settings: Settings) -> None:
    task_client = build_task_client(settings)
    app.state.task_client = task_client
    app.state.batch_converter = BatchConverter(
        task_client,
        policy=PollPolicy(interval=settings.POLL_INTERVAL, timeout=settings.POLL_TIMEOUT),
        max_concurrency=settings.MAX_CONCURRENT_JOBS,
    )
    app.state.nft_client = build_nft_client(settings)


async def close_clients(app: FastAPI) -> None:
    for name in ("task_client", "nft_client"):
        client = getattr(app.state, name, None)
        if client is not None:
            await client.aclose()


def get_batch_converter(request: Request) -> BatchConverter:
    """FastAPI dependency for the process-wide BatchConverter."""
    return request.app.state.batch_converter


def get_nft_client(request: Request) -> HeliusClient:
    """FastAPI dependency for the process-wide HeliusClient."""
    return request.app.state.nft_client
