from .dispatch import Dispatcher
from .models import (AmountRange, ConfigError, Configuration, DelayRange, DiamanteError, Failure,
                     ProgressEvent, RateLimited, SendTask, SessionError, Success)
from .retry import submit_with_retry
from .sendqueue import build_queue
from .stats import RunStatistics, Summary

__version__ = "0.1.0"
