"""Pytest configuration helpers.

This conftest ensures the backend source root is on `sys.path` so tests can
import the `nftmovie` package without an install, and provides fakes for the
remote generation service.
"""
import asyncio
import os
import sys

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "backend"))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from nftmovie.services.errors import RemoteSubmissionError  # noqa: E402
from nftmovie.services.runway_client import JobHandle, JobState, JobStatus  # noqa: E402


def running(progress=None):
    return JobStatus(state=JobState.RUNNING, progress=progress)


def pending():
    return JobStatus(state=JobState.PENDING)


def succeeded(*urls):
    return JobStatus(state=JobState.SUCCEEDED, output=tuple(urls))


def failed(reason="bad input"):
    return JobStatus(state=JobState.FAILED, reason=reason)


class ScriptedTaskClient:
    """Task client that replays a fixed status sequence per image URL.

    The last entry of each script repeats forever. An Exception entry is
    raised instead of returned. Task ids are ``task-1``, ``task-2``... in
    script order.
    """

    def __init__(self, scripts, submit_errors=None):
        self.scripts = {url: list(steps) for url, steps in scripts.items()}
        self.submit_errors = submit_errors or {}
        self.task_ids = {url: f"task-{i}" for i, url in enumerate(scripts, 1)}
        self.submitted = []
        self.queries = []
        self.closed = False

    async def submit(self, model, image_url, prompt_text):
        if image_url in self.submit_errors:
            raise self.submit_errors[image_url]
        handle = JobHandle(task_id=self.task_ids[image_url], source_url=image_url)
        self.submitted.append((model, image_url, prompt_text))
        return handle

    async def retrieve_status(self, task_id):
        self.queries.append(task_id)
        url = next(u for u, t in self.task_ids.items() if t == task_id)
        script = self.scripts[url]
        step = script.pop(0) if len(script) > 1 else script[0]
        if isinstance(step, BaseException):
            raise step
        return step

    async def aclose(self):
        self.closed = True

    def polls_for(self, url):
        return self.queries.count(self.task_ids[url])


class FakeSleep:
    """Records requested delays and yields to the loop without waiting."""

    def __init__(self):
        self.calls = []

    async def __call__(self, delay):
        self.calls.append(delay)
        await asyncio.sleep(0)


@pytest.fixture
def fake_sleep():
    return FakeSleep()


@pytest.fixture
def submission_error():
    return RemoteSubmissionError("Runway task creation failed: 401 Unauthorized")
