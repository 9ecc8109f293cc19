"""Single-job poller: submit one image-to-video task and drive it to a terminal outcome."""

from __future__ import annotations

import asyncio
import enum
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Union

from nftmovie.services.errors import RemoteQueryError, RemoteSubmissionError
from nftmovie.services.runway_client import JobHandle, JobState, JobStatus, TaskClient

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


class FailureKind(str, enum.Enum):
    SUBMISSION = "submission_error"
    QUERY = "query_error"
    REMOTE_FAILED = "remote_failed"
    EMPTY_OUTPUT = "empty_output"
    TIMEOUT = "timeout"


@dataclass(frozen=True)
class ConversionSuccess:
    source_url: str
    task_id: str
    video_url: str


@dataclass(frozen=True)
class ConversionFailure:
    source_url: str
    kind: FailureKind
    reason: str
    task_id: str | None = None


ConversionOutcome = Union[ConversionSuccess, ConversionFailure]


@dataclass(frozen=True)
class PollPolicy:
    """Fixed-interval polling with an elapsed-time deadline."""

    interval: float = 5.0
    timeout: float = 600.0

    def __post_init__(self) -> None:
        if self.interval <= 0:
            raise ValueError(f"Poll interval must be positive, got {self.interval}")
        if self.timeout <= 0:
            raise ValueError(f"Poll timeout must be positive, got {self.timeout}")


class JobPoller:
    """Runs one conversion job end to end.

    Per-job errors never escape ``run``; they come back as a
    ``ConversionFailure``. Only cancellation propagates.
    """

    def __init__(
        self,
        client: TaskClient,
        policy: PollPolicy | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._client = client
        self._policy = policy or PollPolicy()
        self._sleep = sleep

    async def run(self, image_url: str, model: str, prompt_text: str) -> ConversionOutcome:
        try:
            handle = await self._client.submit(model, image_url, prompt_text)
        except RemoteSubmissionError as e:
            logger.error("Submission failed for %s: %s", image_url, e)
            return ConversionFailure(image_url, FailureKind.SUBMISSION, str(e))
        except Exception as e:
            logger.exception("Unexpected error submitting %s", image_url)
            return ConversionFailure(image_url, FailureKind.SUBMISSION, str(e) or type(e).__name__)

        logger.info("Task created for %s, task_id=%s", image_url, handle.task_id)

        try:
            status = await self._poll(handle)
        except RemoteQueryError as e:
            logger.error("Polling failed for task %s: %s", handle.task_id, e)
            return ConversionFailure(image_url, FailureKind.QUERY, str(e), handle.task_id)
        except Exception as e:
            logger.exception("Unexpected error polling task %s", handle.task_id)
            return ConversionFailure(
                image_url, FailureKind.QUERY, str(e) or type(e).__name__, handle.task_id,
            )

        return self._to_outcome(handle, status)

    async def _poll(self, handle: JobHandle) -> JobStatus | None:
        """Poll until terminal. Returns None when the deadline passes first."""
        elapsed = 0.0
        while elapsed < self._policy.timeout:
            await self._sleep(self._policy.interval)
            elapsed += self._policy.interval

            status = await self._client.retrieve_status(handle.task_id)
            if status.progress is not None:
                logger.info("Task %s progress: %s%%", handle.task_id, status.progress)
            else:
                logger.info("Task %s status: %s", handle.task_id, status.state.value)

            if status.is_terminal:
                return status
        return None

    def _to_outcome(self, handle: JobHandle, status: JobStatus | None) -> ConversionOutcome:
        if status is None:
            logger.warning("Task %s timed out after %ss", handle.task_id, self._policy.timeout)
            return ConversionFailure(
                handle.source_url,
                FailureKind.TIMEOUT,
                f"Task did not finish within {self._policy.timeout}s",
                handle.task_id,
            )

        if status.state is JobState.FAILED:
            reason = status.reason or "unknown"
            logger.warning("Task %s failed: %s", handle.task_id, reason)
            return ConversionFailure(
                handle.source_url, FailureKind.REMOTE_FAILED, reason, handle.task_id,
            )

        if not status.output:
            logger.warning("Task %s succeeded but returned no output", handle.task_id)
            return ConversionFailure(
                handle.source_url,
                FailureKind.EMPTY_OUTPUT,
                "Task succeeded but no video URL was returned",
                handle.task_id,
            )

        video_url = status.output[0]
        logger.info("Task %s succeeded. Video URL: %s", handle.task_id, video_url)
        return ConversionSuccess(handle.source_url, handle.task_id, video_url)
