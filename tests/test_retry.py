from __future__ import annotations

import asyncio
import logging

import pytest

from mailstats.mailgun.retry import RetryPolicy, fetch_with_retry
from tests.utils_mailgun import SleepRecorder


class Flaky:
    """Fails the first `failures` calls, then returns `payload`."""

    def __init__(self, failures: int, payload=None):
        self.failures = failures
        self.payload = payload
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise RuntimeError(f"boom {self.calls}")
        return self.payload


def test_backoff_delays_double():
    p = RetryPolicy(max_retries=3, base_delay_s=0.5)
    assert [p.delay(i) for i in (1, 2, 3)] == [1.0, 2.0, 4.0]


@pytest.mark.asyncio
@pytest.mark.parametrize("max_retries", [0, 1, 2, 3])
async def test_permanent_failure_runs_k_plus_one_times(max_retries):
    op = Flaky(failures=100)
    sleep = SleepRecorder()

    with pytest.raises(RuntimeError, match=f"boom {max_retries + 1}"):
        await fetch_with_retry(op, policy=RetryPolicy(max_retries=max_retries), sleep=sleep)

    assert op.calls == max_retries + 1
    assert sleep.delays == [(2**i) * 0.5 for i in range(1, max_retries + 1)]


@pytest.mark.asyncio
async def test_succeeds_on_third_attempt():
    op = Flaky(failures=2, payload={"items": ["ok"]})
    sleep = SleepRecorder()
    attempts = []

    out = await fetch_with_retry(op, policy=RetryPolicy(max_retries=3), sleep=sleep, attempts=attempts)

    assert out == {"items": ["ok"]}
    assert op.calls == 3
    assert sleep.delays == [1.0, 2.0]
    assert [(a.number, a.delay_s, a.ok) for a in attempts] == [(1, 0.0, False), (2, 1.0, False), (3, 2.0, True)]
    assert attempts[0].error == "boom 1"


@pytest.mark.asyncio
async def test_zero_retries_first_failure_is_terminal():
    op = Flaky(failures=1, payload="late")
    sleep = SleepRecorder()

    with pytest.raises(RuntimeError):
        await fetch_with_retry(op, policy=RetryPolicy(max_retries=0), sleep=sleep)

    assert op.calls == 1
    assert sleep.delays == []


@pytest.mark.asyncio
async def test_logs_one_warning_per_retry(caplog):
    op = Flaky(failures=2, payload=1)
    caplog.set_level(logging.WARNING, logger="mailstats.mailgun.retry")

    await fetch_with_retry(op, policy=RetryPolicy(max_retries=2), what="domains", sleep=SleepRecorder())

    msgs = [r.getMessage() for r in caplog.records if r.name == "mailstats.mailgun.retry"]
    assert len(msgs) == 2
    assert msgs[0].startswith("Retry 1/2 for domains after 1000ms")
    assert msgs[1].startswith("Retry 2/2 for domains after 2000ms")


@pytest.mark.asyncio
async def test_cancellation_is_not_retried():
    calls = {"n": 0}
    sleep = SleepRecorder()

    async def op():
        calls["n"] += 1
        raise asyncio.CancelledError()

    with pytest.raises(asyncio.CancelledError):
        await fetch_with_retry(op, policy=RetryPolicy(max_retries=3), sleep=sleep)

    assert calls["n"] == 1
    assert sleep.delays == []
