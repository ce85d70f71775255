from dataclasses import dataclass, field
from typing import Optional, Sequence, Union


class DiamanteError(Exception):
    pass


class ConfigError(DiamanteError):
    """Bad or missing configuration; nothing has been dispatched."""


class SessionError(DiamanteError):
    """The transfer backend could not be reached or set up for a run."""


@dataclass(frozen=True)
class SendTask:
    recipient: str
    sequence: int


@dataclass(frozen=True)
class Success:
    hash: str
    amount: float


@dataclass(frozen=True)
class Failure:
    reason: str


@dataclass(frozen=True)
class RateLimited:
    retry_after: Optional[float] = None
    attempts_so_far: int = 1


Outcome = Union[Success, Failure, RateLimited]


@dataclass(frozen=True)
class ProgressEvent:
    recipient: str
    attempt_number: int
    outcome: Outcome
    sequence: int = 0
    total: int = 0
    round: int = 1


@dataclass(frozen=True)
class AmountRange:
    min: float = 1.0
    max: float = 1.0

    @property
    def fixed(self):
        return self.min == self.max

    def validate(self):
        if self.min <= 0 or self.max <= 0:
            raise ConfigError(f"Amount must be positive (got {self.min}-{self.max})")
        if self.min > self.max:
            raise ConfigError(f"Minimum amount {self.min} is above maximum {self.max}")


@dataclass(frozen=True)
class DelayRange:
    min: float = 1.5
    max: float = 4.0

    def validate(self):
        if self.min < 0 or self.max < 0:
            raise ConfigError(f"Delays cannot be negative (got {self.min}-{self.max}s)")
        if self.min > self.max:
            raise ConfigError(f"Minimum delay {self.min}s is above maximum {self.max}s")


@dataclass(frozen=True)
class Configuration:
    recipients: Sequence[str] = ()
    sends_per_wallet: int = 2
    amount: AmountRange = field(default_factory=AmountRange)
    delays: DelayRange = field(default_factory=DelayRange)
    continuous: bool = False
    max_rounds: Optional[int] = 1
    max_retries: int = 3
    round_pause: float = 5.0
    reset_stats_per_round: bool = False
    access_token: Optional[str] = None
    user_id: Optional[str] = None
    private_key: Optional[str] = None
    headless: bool = True

    def validate(self, require_token=True):
        if not self.recipients:
            raise ConfigError("No recipient wallets configured")
        if self.sends_per_wallet < 1:
            raise ConfigError(f"Sends per wallet must be at least 1 (got {self.sends_per_wallet})")
        if self.max_retries < 0:
            raise ConfigError("Retry count cannot be negative")
        if self.max_rounds is not None and self.max_rounds < 1:
            raise ConfigError("Max rounds must be at least 1")
        self.amount.validate()
        self.delays.validate()
        if require_token and not self.access_token:
            raise ConfigError("Access token is required")
        return self
