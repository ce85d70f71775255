import asyncio
import base64
import json
import ssl

import aiohttp

from .models import ConfigError, Failure, RateLimited, SessionError, Success

API_BASE = "https://campapi.diamante.io/api/v1"
TRANSFER_PATH = "/transaction/transfer"
HISTORY_PATH = "/transaction/history"
CAMPAIGN_ORIGIN = "https://campaign.diamante.io"
USER_AGENT = ("Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
              "(KHTML, like Gecko) Chrome/143.0.0.0 Safari/537.36")


def extract_user_id(token):
    """userId claim from the JWT payload, without verifying the signature."""
    try:
        payload = token.split('.')[1]
        payload += '=' * (-len(payload) % 4)
        return json.loads(base64.urlsafe_b64decode(payload)).get('userId')
    except Exception:
        return None


def browser_headers(token):
    return {
        'Accept': 'application/json, text/plain, */*',
        'Accept-Language': 'en-US,en;q=0.9',
        'Content-Type': 'application/json',
        'access-token': token,
        'Origin': CAMPAIGN_ORIGIN,
        'Referer': f'{CAMPAIGN_ORIGIN}/',
        'User-Agent': USER_AGENT,
        'sec-ch-ua': '"Google Chrome";v="143", "Chromium";v="143", "Not A(Brand";v="24"',
        'sec-ch-ua-mobile': '?0',
        'sec-ch-ua-platform': '"Windows"',
        'sec-fetch-dest': 'empty',
        'sec-fetch-mode': 'cors',
        'sec-fetch-site': 'same-site',
        'Cookie': f'access_token={token}',
    }


def parse_retry_after(value):
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        return None
    return seconds if seconds >= 0 else None


def outcome_from_response(status, text, amount, attempt=1, retry_after=None):
    try:
        j = json.loads(text) if text.strip() else {}
    except ValueError:
        j = {'raw': text}
    if not isinstance(j, dict):
        j = {'raw': text}

    if status == 429 or j.get('status') == 429:
        return RateLimited(parse_retry_after(retry_after), attempt)

    if j.get('success') is True:
        data = j.get('data') if isinstance(j.get('data'), dict) else {}
        transfer = data.get('transferData') if isinstance(data.get('transferData'), dict) else {}
        tx_hash = transfer.get('hash') or transfer.get('txHash') or j.get('txHash') or '✓'
        return Success(str(tx_hash), float(amount))

    err = j.get('message') or j.get('error')
    if not err:
        err = f"HTTP {status}" if status >= 400 and 'raw' in j else json.dumps(j)[:60]
    return Failure(str(err))


class DiamanteSender:
    """Direct transfer API client; use as `async with DiamanteSender(...) as sender`."""

    def __init__(self, token, user_id=None, base_url=API_BASE, timeout=30):
        if not token:
            raise ConfigError("Access token is required")
        self.token = token
        self.user_id = user_id or extract_user_id(token)
        if not self.user_id:
            raise ConfigError("Could not read userId from access token; set userId in config")
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.headers = browser_headers(token)
        self.session = None

    async def open(self):
        if self.session and not self.session.closed:
            return self.session
        try:
            connector = aiohttp.TCPConnector(ssl=ssl.create_default_context(), force_close=True)
            self.session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout),
                connector=connector,
                headers=self.headers,
                json_serialize=json.dumps,
            )
        except Exception as e:
            raise SessionError(f"Could not open HTTP session: {e}") from e
        return self.session

    async def close(self):
        if self.session and not self.session.closed:
            await self.session.close()
        self.session = None

    async def __aenter__(self):
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def _post(self, path, body):
        if not self.session or self.session.closed:
            raise SessionError("Sender session is not open")
        async with self.session.post(f"{self.base_url}{path}", json=body) as resp:
            return resp.status, await resp.text(), resp.headers.get('Retry-After')

    async def submit(self, recipient, amount, attempt=1):
        body = {'toAddress': recipient, 'amount': float(amount), 'userId': self.user_id}
        try:
            status, text, retry_after = await self._post(TRANSFER_PATH, body)
        except asyncio.TimeoutError:
            return Failure("timeout")
        except aiohttp.ClientError as e:
            return Failure(str(e) or e.__class__.__name__)
        return outcome_from_response(status, text, amount, attempt, retry_after)

    async def history(self, limit=10):
        status, text, _ = await self._post(HISTORY_PATH, {'userId': self.user_id, 'limit': limit, 'offset': 0})
        if not 200 <= status < 300:
            return None
        try:
            return json.loads(text)
        except ValueError:
            return None
