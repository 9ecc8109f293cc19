"""Batch conversion orchestrator.

Fans out one JobPoller per image URL, bounded by a semaphore, then waits for
every job to reach a terminal outcome before building the BatchResult.
A batch succeeds as long as at least one item does.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from urllib.parse import urlparse

from nftmovie.services.errors import AllItemsFailedError, InvalidRequestError
from nftmovie.services.poller import (
    ConversionFailure,
    ConversionOutcome,
    ConversionSuccess,
    JobPoller,
    PollPolicy,
    Sleep,
)
from nftmovie.services.runway_client import TaskClient

logger = logging.getLogger(__name__)


def is_absolute_url(value: str) -> bool:
    """True for http(s) URLs with a host."""
    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


@dataclass(frozen=True)
class ConversionRequest:
    model: str
    image_urls: tuple[str, ...]
    prompt_text: str

    def validate(self) -> None:
        missing = [
            name
            for name, value in (
                ("model", self.model),
                ("imageUrls", self.image_urls),
                ("promptText", self.prompt_text),
            )
            if not value or (isinstance(value, str) and not value.strip())
        ]
        if missing:
            raise InvalidRequestError(f"Missing required fields: {', '.join(missing)}")

        bad = [u for u in self.image_urls if not isinstance(u, str) or not is_absolute_url(u)]
        if bad:
            raise InvalidRequestError(f"Invalid image URL(s): {', '.join(map(str, bad))}")


@dataclass(frozen=True)
class BatchResult:
    """Every item's outcome, in request order."""

    outcomes: tuple[ConversionOutcome, ...]

    @property
    def successes(self) -> list[ConversionSuccess]:
        return [o for o in self.outcomes if isinstance(o, ConversionSuccess)]

    @property
    def failures(self) -> list[ConversionFailure]:
        return [o for o in self.outcomes if isinstance(o, ConversionFailure)]

    @property
    def total_requested(self) -> int:
        return len(self.outcomes)

    @property
    def success(self) -> bool:
        return bool(self.successes)


class BatchConverter:
    """Runs image-to-video batches against an injected task client.

    The concurrency limit is shared by every batch run through this
    converter, so it bounds outbound jobs for the whole process.
    """

    def __init__(
        self,
        client: TaskClient,
        *,
        policy: PollPolicy | None = None,
        max_concurrency: int = 4,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        if max_concurrency < 1:
            raise ValueError(f"max_concurrency must be >= 1, got {max_concurrency}")
        self._poller = JobPoller(client, policy, sleep)
        self._max_concurrency = max_concurrency
        self._semaphore = asyncio.Semaphore(max_concurrency)

    async def convert(self, request: ConversionRequest) -> BatchResult:
        """Convert every image in ``request``.

        Raises InvalidRequestError before any remote call, or
        AllItemsFailedError (carrying the full result) when nothing succeeded.
        """
        request.validate()
        logger.info(
            "Starting video conversion for %d image(s) using model: %s (concurrency=%d)",
            len(request.image_urls), request.model, self._max_concurrency,
        )

        outcomes = await asyncio.gather(
            *(self._run_one(i, url, request) for i, url in enumerate(request.image_urls))
        )
        result = BatchResult(outcomes=tuple(outcomes))

        for failure in result.failures:
            logger.warning(
                "Conversion failed for %s (%s): %s",
                failure.source_url, failure.kind.value, failure.reason,
            )

        if not result.success:
            logger.error("All %d video conversions failed", result.total_requested)
            raise AllItemsFailedError(result)

        logger.info(
            "Video conversion completed. %d/%d videos successfully generated.",
            len(result.successes), result.total_requested,
        )
        return result

    async def _run_one(self, index: int, url: str, request: ConversionRequest) -> ConversionOutcome:
        async with self._semaphore:
            logger.info("Processing image #%d: %s", index + 1, url)
            return await self._poller.run(url, request.model, request.prompt_text)
