import asyncio
import math

from .models import Failure, RateLimited

BACKOFF_BASE = 5.0
BACKOFF_STEP = 3.0
SUBMIT_TIMEOUT = 30.0


async def countdown(duration_seconds, label="Waiting", on_tick=None, cancel_event=None, sleep=asyncio.sleep):
    """Wait in one-second ticks. Returns False if cancel_event fired first."""
    remaining = float(duration_seconds)
    while remaining > 0:
        if cancel_event is not None and cancel_event.is_set():
            return False
        if on_tick:
            on_tick(math.ceil(remaining), label)
        step = min(1.0, remaining)
        await sleep(step)
        remaining -= step
    if on_tick:
        on_tick(0, label)
    return not (cancel_event is not None and cancel_event.is_set())


def backoff_delay(retry_number, base=BACKOFF_BASE, step=BACKOFF_STEP):
    # retry_number is 1-based: 5, 8, 11, ...
    return base + (retry_number - 1) * step


async def attempt_once(submit, recipient, amount, attempt, timeout=SUBMIT_TIMEOUT):
    try:
        outcome = await asyncio.wait_for(submit(recipient, amount, attempt), timeout)
    except asyncio.TimeoutError:
        return Failure("timeout")
    except Exception as e:
        return Failure(str(e) or e.__class__.__name__)
    if outcome is None:
        return Failure("no response")
    return outcome


async def submit_with_retry(submit, recipient, amount, max_retries=3, on_tick=None, cancel_event=None,
                            sleep=asyncio.sleep, timeout=SUBMIT_TIMEOUT,
                            backoff_base=BACKOFF_BASE, backoff_step=BACKOFF_STEP):
    """
    Call submit(recipient, amount, attempt) until it stops answering RateLimited.

    At most max_retries + 1 calls are made. The result is always Success or
    Failure, never RateLimited.
    """
    attempt = 1
    while True:
        outcome = await attempt_once(submit, recipient, amount, attempt, timeout)
        if not isinstance(outcome, RateLimited):
            return outcome, attempt
        if attempt > max_retries:
            return Failure("rate limit exceeded"), attempt

        wait_for = outcome.retry_after
        if wait_for is None:
            wait_for = backoff_delay(attempt, backoff_base, backoff_step)
        label = f"Rate limited. Retry {attempt}/{max_retries} in"
        if not await countdown(wait_for, label, on_tick, cancel_event, sleep):
            return Failure("cancelled"), attempt
        attempt += 1
