import json
import os

from .models import AmountRange, ConfigError, Configuration, DelayRange

CONFIG_FILE = "config.json"

DEFAULT_SENDS_PER_WALLET = 2
DEFAULT_AMOUNT = 1.0
DEFAULT_DELAYS = (1.5, 4.0)
FAST_DELAYS = (0.5, 1.0)
DEFAULT_RETRIES = 3
DEFAULT_ROUND_PAUSE = 5.0


def load_config(path=CONFIG_FILE):
    """Raw config dict, or None when the file does not exist."""
    if not os.path.exists(path):
        return None
    try:
        with open(path, 'r') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Error parsing '{path}': Invalid JSON format. {e}") from e
    except OSError as e:
        raise ConfigError(f"Could not read '{path}': {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid format in '{path}'. Expected a JSON object.")
    return data


def save_config(data, path=CONFIG_FILE):
    with open(path, 'w') as f:
        json.dump(data, f, indent=4)


def load_recipients_file(path):
    if not os.path.exists(path):
        raise ConfigError(f"Recipients file '{path}' not found")
    recipients = []
    with open(path, 'r') as f:
        for line in f:
            addr = line.strip()
            if addr and not addr.startswith('#'):
                recipients.append(addr)
    return recipients


def split_addresses(value):
    return [a.strip() for a in value.split(',') if a.strip()]


def _number(value, name, cast=float):
    try:
        return cast(value)
    except (TypeError, ValueError):
        raise ConfigError(f"Invalid value for {name}: {value!r}") from None


def _pick(*values):
    for v in values:
        if v is not None:
            return v
    return None


def amount_from(raw, args=None):
    fixed = getattr(args, 'amount', None)
    ranged_args = _pick(getattr(args, 'min_amount', None), getattr(args, 'max_amount', None))
    if fixed is None and ranged_args is None:
        fixed = raw.get('amountPerSend')
    if fixed is not None:
        fixed = _number(fixed, 'amount')
        return AmountRange(fixed, fixed)
    rng = raw.get('amount')
    if isinstance(rng, (int, float, str)):
        v = _number(rng, 'amount')
        rng = {'min': v, 'max': v}
    rng = rng or {}
    lo = _number(_pick(getattr(args, 'min_amount', None), rng.get('min'), DEFAULT_AMOUNT), 'min amount')
    hi = _number(_pick(getattr(args, 'max_amount', None), rng.get('max'), lo), 'max amount')
    return AmountRange(lo, hi)


def delays_from(raw, args=None):
    if getattr(args, 'fast', False):
        return DelayRange(*FAST_DELAYS)
    d = raw.get('delays') or {}
    lo = _number(_pick(d.get('min'), DEFAULT_DELAYS[0]), 'min delay')
    hi = _number(_pick(d.get('max'), DEFAULT_DELAYS[1]), 'max delay')
    return DelayRange(lo, hi)


def build_configuration(raw=None, args=None):
    """Merge CLI args over the config file over defaults. Does not validate."""
    raw = raw or {}

    recipients = None
    if getattr(args, 'to', None):
        recipients = split_addresses(args.to)
    elif getattr(args, 'recipients_file', None):
        recipients = load_recipients_file(args.recipients_file)
    if recipients is None:
        recipients = [w.strip() for w in raw.get('wallets') or [] if w and w.strip()]

    continuous = bool(getattr(args, 'continuous', False) or raw.get('continuous', False))
    max_rounds = _pick(getattr(args, 'iterations', None), raw.get('maxIterations'))
    if max_rounds is not None:
        max_rounds = _number(max_rounds, 'iterations', int) or None
    elif not continuous:
        max_rounds = 1

    return Configuration(
        recipients=tuple(recipients),
        sends_per_wallet=_number(_pick(getattr(args, 'sends', None), raw.get('sendPerWallet'),
                                       DEFAULT_SENDS_PER_WALLET), 'sends per wallet', int),
        amount=amount_from(raw, args),
        delays=delays_from(raw, args),
        continuous=continuous,
        max_rounds=max_rounds,
        max_retries=_number(_pick(getattr(args, 'retries', None), raw.get('maxRetries'), DEFAULT_RETRIES),
                            'retries', int),
        round_pause=_number(_pick(raw.get('roundPause'), DEFAULT_ROUND_PAUSE), 'round pause'),
        reset_stats_per_round=bool(raw.get('resetStatsPerRound', False)),
        access_token=_pick(getattr(args, 'token', None), raw.get('accessToken')),
        user_id=raw.get('userId'),
        private_key=raw.get('privateKey'),
        headless=raw.get('headless', True) is not False,
    )
