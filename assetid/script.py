"""Locking script templates and a small chunk model over python-bitcoinlib scripts."""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Sequence, Union

from bitcoin.core.script import (
    OP_1NEGATE,
    OP_CHECKSIG,
    OP_DUP,
    OP_EQUAL,
    OP_EQUALVERIFY,
    OP_HASH160,
    OPCODES_BY_NAME,
    CScript,
    CScriptInvalidError,
    CScriptOp,
)

from .errors import InvalidScript

HASH_LENGTH = 20

SIGHASH_SUFFIXES = {
    "ALL": 0x01,
    "NONE": 0x02,
    "SINGLE": 0x03,
    "ALL|ANYONECANPAY": 0x81,
    "NONE|ANYONECANPAY": 0x82,
    "SINGLE|ANYONECANPAY": 0x83,
}

_SIGNATURE_TOKEN = re.compile(r"^([0-9a-fA-F]+)\[([A-Z|]+)\]$")
_HEX_TOKEN = re.compile(r"^(?:[0-9a-fA-F]{2})*$")


def _require_hash(value: bytes) -> bytes:
    if len(value) != HASH_LENGTH:
        raise ValueError(f"Expected a {HASH_LENGTH}-byte hash, got {len(value)} bytes")
    return bytes(value)


def build_pubkey_hash_script(pubkey_hash: bytes) -> bytes:
    """OP_DUP OP_HASH160 <hash> OP_EQUALVERIFY OP_CHECKSIG"""
    pubkey_hash = _require_hash(pubkey_hash)
    return bytes(CScript([OP_DUP, OP_HASH160, pubkey_hash, OP_EQUALVERIFY, OP_CHECKSIG]))


def build_script_hash_script(script_hash: bytes) -> bytes:
    """OP_HASH160 <hash> OP_EQUAL"""
    script_hash = _require_hash(script_hash)
    return bytes(CScript([OP_HASH160, script_hash, OP_EQUAL]))


@dataclass(frozen=True)
class PushData:
    data: bytes


@dataclass(frozen=True)
class Opcode:
    code: int


Chunk = Union[PushData, Opcode]


def parse_chunks(raw: bytes) -> List[Chunk]:
    """Split a serialized script into pushes and bare opcodes.

    OP_0 comes back as an empty push, as python-bitcoinlib reports it.
    """
    chunks: List[Chunk] = []
    try:
        for opcode, data, _ in CScript(raw).raw_iter():
            if data is None:
                chunks.append(Opcode(int(opcode)))
            else:
                chunks.append(PushData(bytes(data)))
    except CScriptInvalidError as exc:
        raise InvalidScript(f"Cannot parse script {bytes(raw).hex()}: {exc}") from exc
    return chunks


def serialize_chunks(chunks: Sequence[Chunk]) -> bytes:
    """Concatenate chunk contents: push data as-is, opcodes as their single byte."""
    out = bytearray()
    for chunk in chunks:
        if isinstance(chunk, PushData):
            out += chunk.data
        else:
            out.append(chunk.code)
    return bytes(out)


def pushed_data(chunks: Sequence[Chunk]) -> List[bytes]:
    return [chunk.data for chunk in chunks if isinstance(chunk, PushData)]


def _asm_token(token: str):
    if token in OPCODES_BY_NAME:
        return OPCODES_BY_NAME[token]
    if token == "-1":
        return OP_1NEGATE
    # even-length digit runs such as "05" are hex pushes; only single digits are small ints
    if len(token) == 1 and token.isdigit():
        return CScriptOp.encode_op_n(int(token))

    signature = _SIGNATURE_TOKEN.match(token)
    if signature:
        sighash = SIGHASH_SUFFIXES.get(signature.group(2))
        if sighash is None or len(signature.group(1)) % 2:
            raise InvalidScript(f"Unknown signature token {token!r}")
        return bytes.fromhex(signature.group(1)) + bytes([sighash])

    if _HEX_TOKEN.match(token):
        return bytes.fromhex(token)
    raise InvalidScript(f"Unknown ASM token {token!r}")


def script_from_asm(asm: str) -> bytes:
    """Rebuild script bytes from the ASM text nodes and indexers return."""
    return bytes(CScript([_asm_token(token) for token in asm.split()]))
