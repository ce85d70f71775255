import asyncio
import base64
import json

import pytest

from diamante_cli.models import Failure, RateLimited, Success


def make_token(payload):
    def enc(obj):
        return base64.urlsafe_b64encode(json.dumps(obj).encode()).decode().rstrip('=')
    return f"{enc({'alg': 'HS256', 'typ': 'JWT'})}.{enc(payload)}.signature"


class FakeSleep:
    def __init__(self):
        self.calls = []

    async def __call__(self, seconds):
        self.calls.append(seconds)
        await asyncio.sleep(0)

    @property
    def total(self):
        return sum(self.calls)


class FakeSubmitter:
    """Answers from a script of outcomes, then with Success forever."""

    def __init__(self, script=None, on_submit=None):
        self.script = list(script or [])
        self.calls = []
        self.on_submit = on_submit
        self.in_flight = 0
        self.max_in_flight = 0

    async def submit(self, recipient, amount, attempt=1):
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            self.calls.append((recipient, amount, attempt))
            await asyncio.sleep(0)
            if self.on_submit:
                self.on_submit(len(self.calls))
            if self.script:
                outcome = self.script.pop(0)
                if isinstance(outcome, Exception):
                    raise outcome
                if callable(outcome):
                    return outcome(recipient, amount, attempt)
                return outcome
            return Success(f"0x{len(self.calls):064x}", amount)
        finally:
            self.in_flight -= 1


class FakeClock:
    def __init__(self, start=100.0):
        self.now = start

    def __call__(self):
        return self.now


@pytest.fixture
def fake_sleep():
    return FakeSleep()


@pytest.fixture
def token():
    return make_token({'userId': 'user-1234abcd', 'exp': 1999999999})


def success(amount=1.0, tx_hash='0xabc'):
    return Success(tx_hash, amount)


def failure(reason='boom'):
    return Failure(reason)


def rate_limited(retry_after=None):
    return RateLimited(retry_after)
