from bech32 import encode as segwit_encode
from bitcoin import base58
from bitcoin.base58 import CBase58Data
from bitcoin.core import Hash

pubkey0 = bytes.fromhex("02" + "11" * 32)
pubkey1 = bytes.fromhex("03" + "22" * 32)
signature0 = bytes.fromhex("3044" + "01" * 68) + b"\x01"
hash0 = bytes(range(20))

# OP_2 <pubkey0> <pubkey1> OP_2 OP_CHECKMULTISIG
redeem_script0 = b"\x52\x21" + pubkey0 + b"\x21" + pubkey1 + b"\x52\xae"


def push(data: bytes) -> bytes:
    assert len(data) < 0x4c
    return bytes([len(data)]) + data


def base58_address(version: int, payload: bytes) -> str:
    return str(CBase58Data.from_bytes(payload, version))


def bech32_address(program: bytes, witness_version: int = 0, hrp: str = "dgb") -> str:
    return segwit_encode(hrp, witness_version, list(program))


def unwrap(asset_id: str) -> bytes:
    raw = base58.decode(asset_id)
    body, checksum = raw[:-4], raw[-4:]
    assert Hash(body)[:4] == checksum
    return body


pubkey_hash_sig0 = push(signature0) + push(pubkey0)
script_hash_sig0 = b"\x00" + push(signature0) + push(redeem_script0)
