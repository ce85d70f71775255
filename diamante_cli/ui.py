import asyncio
import os
from concurrent.futures import ThreadPoolExecutor

from .models import Success
from .stats import short_addr

c = {
    'r': '\033[0m',
    'b': '\033[34m',
    'c': '\033[36m',
    'g': '\033[32m',
    'y': '\033[33m',
    'R': '\033[31m',
    'B': '\033[1m',
    'w': '\033[37m',
    'm': '\033[35m',
    'd': '\033[90m',
}

executor = ThreadPoolExecutor(max_workers=1)


def cls():
    os.system('cls' if os.name == 'nt' else 'clear')


async def ainp(prompt=""):
    return await asyncio.get_event_loop().run_in_executor(executor, input, prompt)


async def awaitkey(prompt_text=f"{c['y']}Press Enter to continue...{c['r']}"):
    try:
        await ainp(prompt_text)
    except (EOFError, asyncio.CancelledError):
        pass


async def spin_animation(msg):
    spinner_frames = ['⠋', '⠙', '⠹', '⠸', '⠼', '⠴', '⠦', '⠧', '⠇', '⠏']
    spinner_idx = 0
    try:
        while True:
            print(f"\r{c['c']}{spinner_frames[spinner_idx]} {msg}{c['r']}", end='', flush=True)
            spinner_idx = (spinner_idx + 1) % len(spinner_frames)
            await asyncio.sleep(0.1)
    except asyncio.CancelledError:
        print(f"\r{' ' * (len(msg) + 3)}\r", end='', flush=True)


def clear_line(width=70):
    print(f"\r{' ' * width}\r", end='', flush=True)


def print_tick(seconds_left, label):
    if seconds_left <= 0:
        clear_line()
        return
    minutes, seconds = divmod(int(seconds_left), 60)
    print(f"\r{c['d']}   ⏳ {label} {minutes:02d}:{seconds:02d} (Ctrl+C to stop){c['r']}  ", end='', flush=True)


def progress_bar(done, total, width=40):
    filled = int(width * done / total) if total else width
    return f"{c['c']}{'▓' * filled}{c['d']}{'░' * (width - filled)}{c['r']}"


class ProgressPrinter:
    """Prints one line per finished task plus a running bar."""

    def __init__(self, stats):
        self.stats = stats

    def __call__(self, event):
        clear_line()
        addr = short_addr(event.recipient, 12, 4)
        retry_note = f" {c['d']}(attempt {event.attempt_number}){c['r']}" if event.attempt_number > 1 else ""
        if isinstance(event.outcome, Success):
            tx_hash = event.outcome.hash
            short_hash = f"{tx_hash[:10]}..." if len(tx_hash) > 16 else tx_hash
            print(f"{c['g']}   ✓ {addr}  {event.outcome.amount} DIAM  {short_hash}{c['r']}{retry_note}")
        else:
            print(f"{c['R']}   ✗ {addr}  {str(event.outcome.reason)[:60]}{c['r']}{retry_note}")
        pct = int(event.sequence / event.total * 100) if event.total else 100
        print(f"   {progress_bar(event.sequence, event.total)}  {pct}%  "
              f"{c['g']}{self.stats.succeeded}✓{c['r']} {c['R']}{self.stats.failed}✗{c['r']}")


def print_round(round_number, summary):
    print(f"{c['c']}   Round {round_number} complete: {summary.succeeded}/{summary.total} successful, "
          f"{summary.total_amount:.4f} DIAM{c['r']}\n")


def print_header(config):
    total = len(config.recipients) * config.sends_per_wallet
    amt = config.amount
    amount_str = f"{amt.min}" if amt.fixed else f"{amt.min}-{amt.max}"
    if config.continuous:
        mode = f"Continuous (max {config.max_rounds})" if config.max_rounds else "Continuous"
    else:
        mode = "Single round"
    print(f"\n{c['c']}{'═' * 50}")
    print(f"  🔷 DIAMANTE STRESS TEST")
    print(f"{'═' * 50}{c['r']}")
    print(f"  Wallets:        {len(config.recipients)}")
    print(f"  Sends/wallet:   {config.sends_per_wallet}")
    print(f"  Amount/send:    {amount_str} DIAM")
    print(f"  Total/round:    {total} transactions")
    print(f"  Mode:           {mode}")
    print(f"  Delay:          {config.delays.min}-{config.delays.max}s")
    print(f"  Retries:        {config.max_retries}")
    print(f"{c['c']}{'═' * 50}{c['r']}")
