from eth_account import Account
from eth_account.messages import encode_defunct

from diamante_cli.signer import EvmSigner, is_valid_private_key

KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"


def test_address_from_key():
    assert EvmSigner(KEY).address == ADDRESS
    assert EvmSigner(KEY[2:]).address == ADDRESS


def test_sign_text_recovers_to_address():
    signature = EvmSigner(KEY).sign("Sign in to Diamante campaign")
    assert signature.startswith("0x")
    recovered = Account.recover_message(encode_defunct(text="Sign in to Diamante campaign"), signature=signature)
    assert recovered == ADDRESS


def test_sign_hex_message():
    message = "0x" + "hello".encode().hex()
    signature = EvmSigner(KEY).sign(message)
    assert Account.recover_message(encode_defunct(text="hello"), signature=signature) == ADDRESS


def test_is_valid_private_key():
    assert is_valid_private_key(KEY)
    assert not is_valid_private_key("")
    assert not is_valid_private_key(None)
    assert not is_valid_private_key("0x1234")
    assert not is_valid_private_key("not a key")
