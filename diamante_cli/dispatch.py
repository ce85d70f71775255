import asyncio
import random
import time

from .models import ProgressEvent
from .retry import countdown, submit_with_retry, SUBMIT_TIMEOUT
from .sendqueue import build_queue
from .stats import RunStatistics


def pick_amount(amount_range, rng=random):
    if amount_range.fixed:
        return amount_range.min
    return round(rng.uniform(amount_range.min, amount_range.max), 4)


class Dispatcher:
    """
    Sends one queue (or several rounds of queues) strictly one task at a time.

    The submitter is any object with `async submit(recipient, amount, attempt)`
    returning Success, Failure or RateLimited. It is owned by the caller, who
    opens and closes it around run().
    """

    def __init__(self, submitter, config, on_progress=None, on_tick=None, on_round=None,
                 cancel_event=None, sleep=asyncio.sleep, clock=time.monotonic, rng=random,
                 submit_timeout=SUBMIT_TIMEOUT):
        self.submitter = submitter
        self.config = config
        self.on_progress = on_progress
        self.on_tick = on_tick
        self.on_round = on_round
        self.cancel_event = cancel_event or asyncio.Event()
        self.sleep = sleep
        self.clock = clock
        self.rng = rng
        self.submit_timeout = submit_timeout
        self.stats = RunStatistics(clock=clock)
        self.rounds_completed = 0
        self.cancelled = False

    def cancel(self):
        self.cancel_event.set()

    def _stopping(self):
        if self.cancel_event.is_set():
            self.cancelled = True
        return self.cancelled

    async def _wait(self, seconds, label):
        if not await countdown(seconds, label, self.on_tick, self.cancel_event, self.sleep):
            self.cancelled = True
            return False
        return True

    async def run_queue(self, queue, round_number=1, round_stats=None, first=True):
        """Dispatch one built queue; returns the (task, outcome) pairs it got through."""
        cfg = self.config
        results = []
        for i, task in enumerate(queue):
            if self._stopping():
                break
            if not (first and i == 0):
                delay = self.rng.uniform(cfg.delays.min, cfg.delays.max)
                if not await self._wait(delay, "Next send in"):
                    break

            amount = pick_amount(cfg.amount, self.rng)
            outcome, attempts = await submit_with_retry(
                self.submitter.submit, task.recipient, amount,
                max_retries=cfg.max_retries,
                on_tick=self.on_tick,
                cancel_event=self.cancel_event,
                sleep=self.sleep,
                timeout=self.submit_timeout,
            )
            results.append((task, outcome))
            self.stats.record(task, outcome)
            if round_stats is not None:
                round_stats.record(task, outcome)
            if self.on_progress:
                self.on_progress(ProgressEvent(
                    recipient=task.recipient,
                    attempt_number=attempts,
                    outcome=outcome,
                    sequence=i + 1,
                    total=len(queue),
                    round=round_number,
                ))
        return results

    async def run(self):
        """Run one invocation; never raises for per-task failures or cancellation."""
        cfg = self.config
        results = []
        self.stats.reset()
        self.stats.start()
        self.rounds_completed = 0
        self.cancelled = False
        round_number = 0

        while not self._stopping():
            round_number += 1
            queue = build_queue(cfg.recipients, cfg.sends_per_wallet, self.rng)
            if cfg.reset_stats_per_round and round_number > 1:
                self.stats.reset()
                self.stats.start()
            round_stats = RunStatistics(clock=self.clock)
            round_stats.start()

            results.extend(await self.run_queue(queue, round_number, round_stats, first=round_number == 1))
            if self.cancelled:
                break
            self.rounds_completed = round_number
            if self.on_round:
                self.on_round(round_number, round_stats.summarize())

            if not cfg.continuous:
                break
            if cfg.max_rounds is not None and round_number >= cfg.max_rounds:
                break
            if not await self._wait(cfg.round_pause, "Next round in"):
                break
        return results
