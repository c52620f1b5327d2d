import asyncio

import pytest

from career_coach.ai.errors import (
    OtherCallError,
    QuotaExceeded,
    RateLimited,
    ServerError,
    ServiceUnavailable,
)
from career_coach.ai.retry import RetryPolicy, backoff_delay_ms, is_retryable, retry_with_backoff


class ScriptedCall:
    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.attempts = 0

    async def __call__(self):
        self.attempts += 1
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


class RecordingSleep:
    def __init__(self):
        self.waits = []

    async def __call__(self, ms):
        self.waits.append(ms)


def run(call, policy, sleep):
    return asyncio.run(retry_with_backoff(call, policy, sleep=sleep))


def test_success_on_first_attempt_does_not_wait():
    call, sleep = ScriptedCall("ok"), RecordingSleep()
    assert run(call, RetryPolicy(), sleep) == "ok"
    assert call.attempts == 1
    assert sleep.waits == []


@pytest.mark.parametrize("max_retries", [0, 1, 3, 5])
def test_always_retryable_is_attempted_max_retries_plus_one(max_retries):
    err = ServiceUnavailable("down", status=503)
    call, sleep = ScriptedCall(err), RecordingSleep()
    with pytest.raises(ServiceUnavailable) as exc_info:
        run(call, RetryPolicy(max_retries=max_retries), sleep)
    assert exc_info.value is err
    assert call.attempts == max_retries + 1
    assert len(sleep.waits) == max_retries


def test_fail_once_then_succeed_waits_base_delay_once():
    call, sleep = ScriptedCall(RateLimited(status=429), "done"), RecordingSleep()
    assert run(call, RetryPolicy(max_retries=3, initial_delay_ms=1000), sleep) == "done"
    assert call.attempts == 2
    assert sleep.waits == [1000]


@pytest.mark.parametrize("err", [
    QuotaExceeded(status=429, code="insufficient_quota"),
    OtherCallError(status=400, code="invalid_request_error"),
    OtherCallError(status=401),
    ValueError("bad prompt"),
])
def test_non_retryable_is_attempted_once(err):
    call, sleep = ScriptedCall(err), RecordingSleep()
    with pytest.raises(type(err)) as exc_info:
        run(call, RetryPolicy(max_retries=5), sleep)
    assert exc_info.value is err
    assert call.attempts == 1
    assert sleep.waits == []


def test_backoff_doubles_each_attempt():
    policy = RetryPolicy(max_retries=3, initial_delay_ms=1000)
    assert [backoff_delay_ms(policy, a) for a in range(4)] == [1000, 2000, 4000, 8000]


def test_waits_follow_doubling_schedule():
    call, sleep = ScriptedCall(ServerError(status=500)), RecordingSleep()
    with pytest.raises(ServerError):
        run(call, RetryPolicy(max_retries=3, initial_delay_ms=1000), sleep)
    assert sleep.waits == [1000, 2000, 4000]


def test_is_retryable_covers_transient_variants_only():
    assert is_retryable(RateLimited(status=429))
    assert is_retryable(ServerError(status=500))
    assert is_retryable(ServiceUnavailable(status=503))
    assert not is_retryable(QuotaExceeded(status=429, code="insufficient_quota"))
    assert not is_retryable(OtherCallError(status=502))
    assert not is_retryable(RuntimeError("boom"))
    assert not is_retryable(asyncio.CancelledError())


def test_cancellation_is_not_retried():
    call, sleep = ScriptedCall(asyncio.CancelledError()), RecordingSleep()
    with pytest.raises(asyncio.CancelledError):
        run(call, RetryPolicy(max_retries=3), sleep)
    assert call.attempts == 1


def test_concurrent_invocations_do_not_share_state():
    calls = [ScriptedCall(RateLimited(status=429), "a"), ScriptedCall("b")]
    sleeps = [RecordingSleep(), RecordingSleep()]

    async def both():
        return await asyncio.gather(
            retry_with_backoff(calls[0], RetryPolicy(initial_delay_ms=10), sleep=sleeps[0]),
            retry_with_backoff(calls[1], RetryPolicy(initial_delay_ms=10), sleep=sleeps[1]),
        )

    assert asyncio.run(both()) == ["a", "b"]
    assert [c.attempts for c in calls] == [2, 1]
    assert sleeps[0].waits == [10] and sleeps[1].waits == []


@pytest.mark.parametrize("kwargs", [{"max_retries": -1}, {"initial_delay_ms": 0}])
def test_policy_rejects_invalid_values(kwargs):
    with pytest.raises(ValueError):
        RetryPolicy(**kwargs)
