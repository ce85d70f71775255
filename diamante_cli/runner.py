import asyncio
import json
import signal as sys_signal

import aiohttp

from .api import DiamanteSender
from .dispatch import Dispatcher
from .models import Success
from .stats import format_summary
from .ui import ProgressPrinter, c, print_header, print_round, print_tick

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_CONFIG = 2
EXIT_INTERRUPTED = 130


def exit_code_for(results, cancelled):
    if cancelled:
        return EXIT_INTERRUPTED
    return EXIT_OK if all(isinstance(o, Success) for _, o in results) else EXIT_FAILED


def install_signal_handlers(cancel_event):
    loop = asyncio.get_running_loop()

    def handler(sig, frame):
        if cancel_event.is_set():
            raise KeyboardInterrupt
        print(f"\n{c['y']}⚠️  Interrupted. Finishing current send...{c['r']}")
        loop.call_soon_threadsafe(cancel_event.set)

    previous = {}
    for sig in (sys_signal.SIGINT, sys_signal.SIGTERM):
        previous[sig] = sys_signal.signal(sig, handler)
    return previous


def restore_signal_handlers(previous):
    for sig, old in previous.items():
        sys_signal.signal(sig, old)


async def run_campaign(config, sender_factory=DiamanteSender, cancel_event=None, **dispatcher_kwargs):
    """Validate, open the sender, dispatch every round and print the summary. Returns an exit code."""
    config.validate()
    sender = sender_factory(config.access_token, config.user_id)
    cancel_event = cancel_event or asyncio.Event()

    print_header(config)
    async with sender:
        dispatcher = Dispatcher(sender, config, on_tick=print_tick, on_round=print_round,
                                cancel_event=cancel_event, **dispatcher_kwargs)
        dispatcher.on_progress = ProgressPrinter(dispatcher.stats)
        results = await dispatcher.run()

    print(format_summary(dispatcher.stats.summarize(), c))
    if dispatcher.cancelled:
        print(f"{c['y']}Stopped early after {len(results)} transactions.{c['r']}")
    return exit_code_for(results, dispatcher.cancelled)


async def show_history(config, limit=10, sender_factory=DiamanteSender):
    try:
        async with sender_factory(config.access_token, config.user_id) as sender:
            history = await sender.history(limit)
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        print(f"{c['R']}Could not fetch transaction history: {e}{c['r']}")
        return EXIT_FAILED
    if history is None:
        print(f"{c['R']}Could not fetch transaction history.{c['r']}")
        return EXIT_FAILED
    print(json.dumps(history, indent=2))
    return EXIT_OK
