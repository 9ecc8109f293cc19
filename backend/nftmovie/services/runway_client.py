"""RunwayML image-to-video task client.

Async task pattern:
1. POST /image_to_video → create task
2. GET  /tasks/{id}      → poll status

One client is built at startup and shared by every in-flight job; the
underlying httpx.AsyncClient connection pool is safe for concurrent use.
"""

from __future__ import annotations

import enum
import logging
import uuid
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Protocol

import httpx

from nftmovie.services.errors import RemoteQueryError, RemoteSubmissionError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.dev.runwayml.com/v1"
DEFAULT_API_VERSION = "2024-11-06"


class JobState(str, enum.Enum):
    PENDING = "PENDING"
    RUNNING = "RUNNING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        return self in (JobState.SUCCEEDED, JobState.FAILED)


# Runway reports a few extra statuses; fold them into the four we act on.
_STATE_ALIASES = {
    "THROTTLED": JobState.PENDING,
    "CANCELLED": JobState.FAILED,
}


@dataclass(frozen=True)
class JobHandle:
    task_id: str
    source_url: str


@dataclass(frozen=True)
class JobStatus:
    """Snapshot of a remote task, as returned by one status query."""

    state: JobState
    progress: float | None = None
    output: tuple[str, ...] = ()
    reason: str | None = None

    @property
    def is_terminal(self) -> bool:
        return self.state.is_terminal

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> JobStatus:
        """Parse a Runway task object (``GET /tasks/{id}``)."""
        raw = str(payload.get("status", "")).upper()
        if raw in JobState.__members__:
            state = JobState(raw)
        elif raw in _STATE_ALIASES:
            state = _STATE_ALIASES[raw]
        else:
            logger.warning("Runway unknown status: %r, treating as RUNNING", raw)
            state = JobState.RUNNING

        # Runway reports progress as a 0..1 fraction
        progress = payload.get("progress")
        if progress is not None:
            try:
                progress = max(0.0, min(100.0, round(float(progress) * 100, 1)))
            except (TypeError, ValueError):
                progress = None

        output = tuple(str(u) for u in (payload.get("output") or []) if u)

        reason = None
        if state is JobState.FAILED:
            reason = str(payload.get("failure") or payload.get("failureCode") or raw.lower())

        return cls(state=state, progress=progress, output=output, reason=reason)


class TaskClient(Protocol):
    """Contract of a remote generation service."""

    async def submit(self, model: str, image_url: str, prompt_text: str) -> JobHandle: ...

    async def retrieve_status(self, task_id: str) -> JobStatus: ...

    async def aclose(self) -> None: ...


class RunwayClient:
    """Thin async wrapper over the RunwayML REST API."""

    def __init__(
        self,
        *,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        api_version: str = DEFAULT_API_VERSION,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
            "X-Runway-Version": api_version,
        }
        self._client = http_client or httpx.AsyncClient(timeout=timeout)
        self._own_client = http_client is None

    async def submit(self, model: str, image_url: str, prompt_text: str) -> JobHandle:
        """Create an image-to-video task. Raises RemoteSubmissionError."""
        if not self._api_key:
            raise RemoteSubmissionError("RunwayML API secret is not configured")

        body = {
            "model": model,
            "promptImage": image_url,
            "promptText": prompt_text,
        }
        try:
            resp = await self._client.post(
                f"{self._base_url}/image_to_video", json=body, headers=self._headers,
            )
            resp.raise_for_status()
            data = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            raise RemoteSubmissionError(f"Runway task creation failed: {e}") from e

        task_id = data.get("id") if isinstance(data, dict) else None
        if not task_id:
            raise RemoteSubmissionError(f"Runway task creation failed: no task id returned: {data}")

        logger.info("Runway task created: %s (model=%s)", task_id, model)
        return JobHandle(task_id=str(task_id), source_url=image_url)

    async def retrieve_status(self, task_id: str) -> JobStatus:
        """Fetch the current status of a task. Raises RemoteQueryError."""
        try:
            resp = await self._client.get(
                f"{self._base_url}/tasks/{task_id}", headers=self._headers,
            )
            resp.raise_for_status()
            data = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            raise RemoteQueryError(f"Runway status query for {task_id} failed: {e}") from e

        if not isinstance(data, dict):
            raise RemoteQueryError(f"Runway status query for {task_id} returned {data!r}")
        return JobStatus.from_payload(data)

    async def aclose(self) -> None:
        if self._own_client:
            await self._client.aclose()


class MockTaskClient:
    """Offline stand-in used when USE_MOCK_API is set.

    Each task reports RUNNING for ``polls_until_done`` checks, then SUCCEEDED
    with a fake video URL. Once terminal, every further check returns the
    same status. Only the ``max_finished`` most recent finished tasks are
    remembered; older ones become unknown.
    """

    def __init__(self, polls_until_done: int = 2, max_finished: int = 1000) -> None:
        self._polls_until_done = max(polls_until_done, 0)
        self._max_finished = max(max_finished, 1)
        self._polls: dict[str, int] = {}
        self._finished: OrderedDict[str, JobStatus] = OrderedDict()

    async def submit(self, model: str, image_url: str, prompt_text: str) -> JobHandle:
        task_id = str(uuid.uuid4())
        self._polls[task_id] = 0
        logger.info("Mock task created: %s (model=%s)", task_id, model)
        return JobHandle(task_id=task_id, source_url=image_url)

    async def retrieve_status(self, task_id: str) -> JobStatus:
        if task_id in self._finished:
            return self._finished[task_id]
        if task_id not in self._polls:
            raise RemoteQueryError(f"Unknown mock task: {task_id}")

        count = self._polls[task_id] + 1
        if count <= self._polls_until_done:
            self._polls[task_id] = count
            return JobStatus(
                state=JobState.RUNNING,
                progress=round(count / (self._polls_until_done + 1) * 100, 1),
            )

        del self._polls[task_id]
        status = JobStatus(
            state=JobState.SUCCEEDED,
            progress=100.0,
            output=(f"https://mock.runwayml.invalid/videos/{task_id}.mp4",),
        )
        self._finished[task_id] = status
        while len(self._finished) > self._max_finished:
            self._finished.popitem(last=False)
        return status

    @property
    def tracked_tasks(self) -> int:
        return len(self._polls) + len(self._finished)

    async def aclose(self) -> None:
        self._polls.clear()
        self._finished.clear()
