import asyncio

from .config import build_configuration, save_config
from .models import DiamanteError
from .runner import EXIT_OK, install_signal_handlers, restore_signal_handlers, run_campaign, show_history
from .signer import EvmSigner, is_valid_private_key
from .stats import short_addr
from .ui import ainp, awaitkey, c, cls


def account_label(raw):
    key = raw.get('privateKey')
    if key and is_valid_private_key(key):
        return EvmSigner(key).address
    return None


def menu_header(raw):
    cls()
    print(f"\n--- {c['B']}🔷 diamante{c['r']} ---\n")
    address = account_label(raw)
    if address:
        print(f"{c['d']}   {short_addr(address)}{c['r']}")
    token = raw.get('accessToken')
    print(f"{c['B']}Access Token:{c['r']} " + (f"{c['g']}●●●{token[-4:]}{c['r']}" if token else f"{c['R']}not set{c['r']}"))
    print(f"{c['B']}Recipients:{c['r']} {c['c']}{len(raw.get('wallets') or [])} loaded{c['r']}\n")


async def prompt_number(prompt, cast=float, minimum=None):
    value = (await ainp(f"{c['y']}{prompt}: {c['r']}")).strip()
    if not value:
        return None
    try:
        number = cast(value)
    except ValueError:
        print(f"{c['R']}{c['B']}Invalid number.{c['r']}")
        return None
    if minimum is not None and number < minimum:
        print(f"{c['R']}{c['B']}Must be at least {minimum}.{c['r']}")
        return None
    return number


async def recipients_menu(raw, path):
    while True:
        cls()
        print(f"\n--- {c['B']}📋 Recipient Wallets{c['r']} ---\n")
        wallets = raw.get('wallets') or []
        for i, w in enumerate(wallets):
            print(f"{c['g']}[{i + 1}]{c['r']} {short_addr(w, 14, 6)}")
        if not wallets:
            print(f"{c['y']}No recipient wallets yet.{c['r']}")
        print(f"\n{c['w']}[a] Add wallet{c['r']}")
        print(f"{c['w']}[0] Back{c['r']}\n")

        choice = (await ainp(f"{c['B']}{c['y']}Enter number to remove, 'a' to add: {c['r']}")).strip().lower()
        if choice in ('0', ''):
            return
        if choice == 'a':
            addr = (await ainp(f"{c['y']}Wallet address (0x...): {c['r']}")).strip()
            if addr.startswith('0x'):
                raw['wallets'] = wallets + [addr]
                save_config(raw, path)
            else:
                print(f"{c['R']}{c['B']}Invalid address!{c['r']}")
                await awaitkey()
            continue
        try:
            idx = int(choice) - 1
        except ValueError:
            print(f"{c['R']}Invalid input.{c['r']}")
            await awaitkey()
            continue
        if 0 <= idx < len(wallets):
            confirm = (await ainp(f"{c['y']}Remove {short_addr(wallets[idx])}? [y/n]: {c['r']}")).strip().lower()
            if confirm == 'y':
                raw['wallets'] = wallets[:idx] + wallets[idx + 1:]
                save_config(raw, path)
        else:
            print(f"{c['R']}Invalid number. Please try again.{c['r']}")
            await awaitkey()


async def settings_menu(raw, path):
    while True:
        cls()
        delays = raw.get('delays') or {}
        amount = raw.get('amount') if isinstance(raw.get('amount'), dict) else {}
        key = raw.get('privateKey')
        print(f"\n--- {c['B']}⚙ Settings{c['r']} ---\n")
        print(f"{c['w']}[1] Access token     {c['g'] + '●●●' + raw['accessToken'][-4:] if raw.get('accessToken') else c['R'] + 'not set'}{c['r']}")
        print(f"{c['w']}[2] Delay            {c['c']}{delays.get('min', 1.5)} - {delays.get('max', 4.0)}s{c['r']}")
        print(f"{c['w']}[3] Sends/wallet     {c['c']}{raw.get('sendPerWallet', 2)}{c['r']}")
        print(f"{c['w']}[4] Amount           {c['c']}{amount.get('min', raw.get('amountPerSend', 1))} - {amount.get('max', raw.get('amountPerSend', 1))} DIAM{c['r']}")
        print(f"{c['w']}[5] Private key      {c['g'] + '●●●' + key[-4:] if key else c['d'] + 'not set'}{c['r']}")
        print(f"{c['w']}[0] Back{c['r']}\n")

        choice = (await ainp(f"{c['B']}{c['y']}Enter command: {c['r']}")).strip().lower()
        if choice in ('0', ''):
            return
        if choice == '1':
            token = (await ainp(f"{c['y']}Access token: {c['r']}")).strip()
            if token:
                raw['accessToken'] = token
        elif choice == '2':
            lo = await prompt_number("Min delay (s)", minimum=0)
            hi = await prompt_number("Max delay (s)", minimum=0)
            delays = dict(delays)
            if lo is not None:
                delays['min'] = lo
            if hi is not None:
                delays['max'] = hi
            raw['delays'] = delays
        elif choice == '3':
            sends = await prompt_number("Sends per wallet", cast=int, minimum=1)
            if sends is not None:
                raw['sendPerWallet'] = sends
        elif choice == '4':
            lo = await prompt_number("Min amount", minimum=0)
            hi = await prompt_number("Max amount", minimum=0)
            amount = dict(amount)
            if lo is not None:
                amount['min'] = lo
            if hi is not None:
                amount['max'] = hi
            raw.pop('amountPerSend', None)
            raw['amount'] = amount
        elif choice == '5':
            key = (await ainp(f"{c['y']}Private key: {c['r']}")).strip()
            if key and is_valid_private_key(key):
                raw['privateKey'] = key
            elif key:
                print(f"{c['R']}{c['B']}Invalid private key!{c['r']}")
                await awaitkey()
                continue
        else:
            print(f"\n{c['R']}Invalid command. Please try again.{c['r']}")
            await awaitkey()
            continue
        save_config(raw, path)


async def send_tokens(raw):
    cls()
    cancel_event = asyncio.Event()
    previous = install_signal_handlers(cancel_event)
    try:
        await run_campaign(build_configuration(raw), cancel_event=cancel_event)
    except DiamanteError as e:
        print(f"{c['R']}{c['B']}✗ {e}{c['r']}")
    finally:
        restore_signal_handlers(previous)
    await awaitkey()


async def history(raw):
    cls()
    try:
        await show_history(build_configuration(raw))
    except DiamanteError as e:
        print(f"{c['R']}{c['B']}✗ {e}{c['r']}")
    await awaitkey()


async def run_menu(path, raw):
    while True:
        menu_header(raw)
        print(f"{c['w']}[1] Send Tokens{c['r']}")
        print(f"{c['w']}[2] Recipient Wallets{c['r']}")
        print(f"{c['w']}[3] Settings{c['r']}")
        print(f"{c['w']}[4] Transaction History{c['r']}")
        print(f"{c['w']}[0] Exit{c['r']}\n")

        try:
            cmd = (await ainp(f"{c['B']}{c['y']}Enter command: {c['r']}")).strip().lower()
        except EOFError:
            cmd = '0'

        if cmd == '1':
            await send_tokens(raw)
        elif cmd == '2':
            await recipients_menu(raw, path)
        elif cmd == '3':
            await settings_menu(raw, path)
        elif cmd == '4':
            await history(raw)
        elif cmd in ('0', 'q'):
            print(f"{c['d']}\n  bye! 👋\n{c['r']}")
            return EXIT_OK
        else:
            print(f"\n{c['R']}Invalid command. Please try again.{c['r']}")
            await awaitkey()
