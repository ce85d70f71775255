from typing import Protocol

from eth_account import Account
from eth_account.messages import encode_defunct


class Signer(Protocol):
    address: str

    def sign(self, message: str) -> str:
        ...


class EvmSigner:
    """personal_sign (EIP-191) with a raw EVM private key."""

    def __init__(self, private_key):
        key = private_key.strip()
        if not key.startswith('0x'):
            key = '0x' + key
        self._account = Account.from_key(key)
        self.address = self._account.address

    def sign(self, message):
        if message.startswith('0x'):
            msg = encode_defunct(hexstr=message)
        else:
            msg = encode_defunct(text=message)
        signature = self._account.sign_message(msg).signature.hex()
        return signature if signature.startswith('0x') else '0x' + signature


def is_valid_private_key(key):
    if not key:
        return False
    try:
        EvmSigner(key)
        return True
    except Exception:
        return False
