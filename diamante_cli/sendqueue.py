import random

from .models import ConfigError, SendTask


def build_queue(recipients, sends_per_wallet, rng=random):
    """Every recipient repeated sends_per_wallet times, in uniformly shuffled order."""
    recipients = [r.strip() for r in recipients if r and r.strip()]
    if not recipients:
        raise ConfigError("Cannot build a send queue without recipients")
    if sends_per_wallet < 1:
        raise ConfigError(f"Sends per wallet must be at least 1 (got {sends_per_wallet})")

    queue = [
        SendTask(recipient, seq)
        for recipient in recipients
        for seq in range(1, sends_per_wallet + 1)
    ]
    # Fisher-Yates
    for i in range(len(queue) - 1, 0, -1):
        j = rng.randint(0, i)
        queue[i], queue[j] = queue[j], queue[i]
    return queue
