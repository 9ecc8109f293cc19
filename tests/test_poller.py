import asyncio

import pytest

from conftest import ScriptedTaskClient, failed, pending, running, succeeded
from nftmovie.services.errors import RemoteQueryError
from nftmovie.services.poller import (
    ConversionFailure,
    ConversionSuccess,
    FailureKind,
    JobPoller,
    PollPolicy,
)

URL = "https://x/1.png"


def _run(client, fake_sleep, policy=None):
    poller = JobPoller(client, policy or PollPolicy(interval=5.0, timeout=60.0), sleep=fake_sleep)
    return asyncio.run(poller.run(URL, "gen3a_turbo", "NFT is dancing"))


def test_polls_until_succeeded_and_returns_first_output(fake_sleep):
    client = ScriptedTaskClient({
        URL: [running(10.0), running(55.0), succeeded("https://out/1.mp4", "https://out/1b.mp4")],
    })

    outcome = _run(client, fake_sleep)

    assert outcome == ConversionSuccess(URL, "task-1", "https://out/1.mp4")
    assert client.submitted == [("gen3a_turbo", URL, "NFT is dancing")]
    assert client.polls_for(URL) == 3
    assert fake_sleep.calls == [5.0, 5.0, 5.0]


def test_sleeps_before_every_status_check(fake_sleep):
    client = ScriptedTaskClient({URL: [succeeded("https://out/1.mp4")]})

    _run(client, fake_sleep)

    assert fake_sleep.calls == [5.0]
    assert client.polls_for(URL) == 1


def test_remote_failure_becomes_failure_marker(fake_sleep):
    client = ScriptedTaskClient({URL: [pending(), failed("SAFETY.INPUT.IMAGE")]})

    outcome = _run(client, fake_sleep)

    assert isinstance(outcome, ConversionFailure)
    assert outcome.kind is FailureKind.REMOTE_FAILED
    assert outcome.reason == "SAFETY.INPUT.IMAGE"
    assert outcome.task_id == "task-1"


def test_succeeded_with_empty_output_is_a_failure(fake_sleep):
    client = ScriptedTaskClient({URL: [succeeded()]})

    outcome = _run(client, fake_sleep)

    assert isinstance(outcome, ConversionFailure)
    assert outcome.kind is FailureKind.EMPTY_OUTPUT
    assert outcome.task_id == "task-1"


def test_submission_error_is_caught(fake_sleep, submission_error):
    client = ScriptedTaskClient({URL: [succeeded("https://out/1.mp4")]}, {URL: submission_error})

    outcome = _run(client, fake_sleep)

    assert isinstance(outcome, ConversionFailure)
    assert outcome.kind is FailureKind.SUBMISSION
    assert outcome.task_id is None
    assert "401" in outcome.reason
    assert client.queries == []
    assert fake_sleep.calls == []


def test_query_error_mid_poll_is_caught(fake_sleep):
    client = ScriptedTaskClient({
        URL: [running(), RemoteQueryError("connection reset"), succeeded("https://out/1.mp4")],
    })

    outcome = _run(client, fake_sleep)

    assert isinstance(outcome, ConversionFailure)
    assert outcome.kind is FailureKind.QUERY
    assert outcome.reason == "connection reset"
    assert client.polls_for(URL) == 2


def test_unexpected_error_does_not_escape(fake_sleep):
    client = ScriptedTaskClient({URL: [KeyError("status")]})

    outcome = _run(client, fake_sleep)

    assert isinstance(outcome, ConversionFailure)
    assert outcome.kind is FailureKind.QUERY


def test_never_terminal_job_times_out(fake_sleep):
    client = ScriptedTaskClient({URL: [running()]})

    outcome = _run(client, fake_sleep, PollPolicy(interval=5.0, timeout=30.0))

    assert isinstance(outcome, ConversionFailure)
    assert outcome.kind is FailureKind.TIMEOUT
    assert client.polls_for(URL) == 6
    assert sum(fake_sleep.calls) == 30.0


def test_cancellation_propagates(fake_sleep):
    client = ScriptedTaskClient({URL: [running()]})
    poller = JobPoller(client, PollPolicy(interval=5.0, timeout=10_000.0), sleep=fake_sleep)

    async def scenario():
        task = asyncio.ensure_future(poller.run(URL, "gen3a_turbo", "p"))
        for _ in range(5):
            await asyncio.sleep(0)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(scenario())
    assert client.polls_for(URL) >= 1


@pytest.mark.parametrize("interval,timeout", [(0, 10), (5, 0), (-1, 10)])
def test_poll_policy_rejects_non_positive_values(interval, timeout):
    with pytest.raises(ValueError):
        PollPolicy(interval=interval, timeout=timeout)
