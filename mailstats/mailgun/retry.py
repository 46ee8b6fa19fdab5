from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

from mailstats.mailgun.errors import describe

log = logging.getLogger(__name__)

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded exponential backoff: delay(n) = 2**n * base_delay_s.

    With the default base of 0.5s the retries wait 1s, 2s, 4s, ... There is
    no jitter and no cap, so keep max_retries small.
    """

    max_retries: int = 2
    base_delay_s: float = 0.5

    def delay(self, attempt: int) -> float:
        return (2**attempt) * self.base_delay_s


@dataclass(frozen=True)
class Attempt:
    number: int
    delay_s: float  # waited before this attempt
    ok: bool
    error: str | None = None


async def fetch_with_retry(
    op: Callable[[], Awaitable[T]],
    *,
    policy: RetryPolicy,
    what: str = "request",
    sleep: Sleep = asyncio.sleep,
    attempts: list[Attempt] | None = None,
) -> T:
    """Run op, retrying failures up to policy.max_retries times.

    op must be safe to repeat (a GET). Intermediate failures are only logged;
    the last one is re-raised once the budget is spent, so a permanently
    failing op runs max_retries + 1 times.
    """
    retries = 0
    delay = 0.0
    while True:
        try:
            result = await op()
        except Exception as e:
            if attempts is not None:
                attempts.append(Attempt(number=retries + 1, delay_s=delay, ok=False, error=describe(e)))
            retries += 1
            if retries > policy.max_retries:
                raise
            delay = policy.delay(retries)
            log.warning(
                "Retry %s/%s for %s after %sms: %s", retries, policy.max_retries, what, int(delay * 1000), describe(e)
            )
            await sleep(delay)
            continue

        if attempts is not None:
            attempts.append(Attempt(number=retries + 1, delay_s=delay, ok=True))
        return result
