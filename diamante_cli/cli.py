import argparse
import asyncio
import sys
import traceback

from .config import CONFIG_FILE, build_configuration, load_config
from .menu import run_menu
from .models import DiamanteError
from .runner import (EXIT_CONFIG, EXIT_FAILED, EXIT_INTERRUPTED, install_signal_handlers,
                     restore_signal_handlers, run_campaign, show_history)
from .ui import c, executor


def parse_args(argv=None):
    p = argparse.ArgumentParser(
        prog='diamante-cli',
        description='Send DIAM to a list of recipient wallets in randomized, rate-limited rounds.',
    )
    p.add_argument('--config', default=CONFIG_FILE, help='config file (default: %(default)s)')
    p.add_argument('-t', '--token', help='campaign access token')
    p.add_argument('--to', help='comma-separated recipient addresses')
    p.add_argument('--recipients-file', help='file with one recipient address per line')
    p.add_argument('--amount', type=float, help='fixed amount per send (default: 1)')
    p.add_argument('--min-amount', type=float, help='minimum random amount per send')
    p.add_argument('--max-amount', type=float, help='maximum random amount per send')
    p.add_argument('-s', '--sends', type=int, help='sends per wallet per round (default: 2)')
    p.add_argument('-c', '--continuous', action='store_true', help='run multiple rounds')
    p.add_argument('-i', '--iterations', type=int, help='max rounds in continuous mode')
    p.add_argument('-f', '--fast', action='store_true', help='fast mode (0.5-1s delays)')
    p.add_argument('-r', '--retries', type=int, help='retries on rate limit (default: 3)')
    p.add_argument('--history', action='store_true', help='show transaction history and exit')
    p.add_argument('--menu', action='store_true', help='open the interactive menu')
    return p.parse_args(argv)


def wants_menu(args, raw):
    if args.menu:
        return True
    return raw is None and not args.token


async def main(argv=None):
    args = parse_args(argv)
    try:
        raw = load_config(args.config)
        if wants_menu(args, raw):
            return await run_menu(args.config, raw or {})

        config = build_configuration(raw, args)
        if args.history:
            return await show_history(config)

        cancel_event = asyncio.Event()
        previous = install_signal_handlers(cancel_event)
        try:
            return await run_campaign(config, cancel_event=cancel_event)
        finally:
            restore_signal_handlers(previous)
    except DiamanteError as e:
        print(f"{c['R']}Error: {e}{c['r']}")
        return EXIT_CONFIG


def run():
    try:
        code = asyncio.run(main())
    except KeyboardInterrupt:
        print(f"\n{c['y']}Exiting...{c['r']}")
        code = EXIT_INTERRUPTED
    except Exception as e:
        print(f"\n{c['R']}An unexpected error occurred: {e}{c['r']}")
        traceback.print_exc()
        code = EXIT_FAILED
    finally:
        executor.shutdown(wait=False)
    sys.exit(code)


if __name__ == "__main__":
    run()
