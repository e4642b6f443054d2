"""Classification of unlocking scripts and the redeem scripts they carry."""
from __future__ import annotations

from typing import List, Optional

from bitcoin.core.script import (
    OP_CHECKMULTISIG,
    OP_CHECKSIG,
    OP_DUP,
    OP_EQUALVERIFY,
    OP_HASH160,
    OP_RETURN,
    CScript,
)

from .errors import InvalidScript
from .script import Chunk, Opcode, PushData, parse_chunks

PUBKEY = "pubkey"
PUBKEY_HASH = "pubkeyhash"
SCRIPT_HASH = "scripthash"
MULTISIG = "multisig"
WITNESS = "witness"
NULL_DATA = "nulldata"
UNKNOWN = "unknown"


def _is_public_key(data: Optional[bytes]) -> bool:
    if not data:
        return False
    if data[0] in (0x02, 0x03):
        return len(data) == 33
    if data[0] in (0x04, 0x06, 0x07):
        return len(data) == 65
    return False


def _small_int(chunk: Chunk) -> Optional[int]:
    if isinstance(chunk, Opcode) and 0x51 <= chunk.code <= 0x60:
        return chunk.code - 0x50
    return None


def _data(chunk: Chunk) -> Optional[bytes]:
    return chunk.data if isinstance(chunk, PushData) else None


def _is_multisig(chunks: List[Chunk]) -> bool:
    if len(chunks) < 4 or chunks[-1] != Opcode(OP_CHECKMULTISIG):
        return False
    required = _small_int(chunks[0])
    total = _small_int(chunks[-2])
    keys = chunks[1:-2]
    if required is None or total is None or total != len(keys) or required > total:
        return False
    return all(_is_public_key(_data(key)) for key in keys)


def classify_output(raw: bytes) -> str:
    try:
        chunks = parse_chunks(raw)
    except InvalidScript:
        return UNKNOWN

    script = CScript(raw)
    if script.is_p2sh():
        return SCRIPT_HASH
    if script.is_witness_scriptpubkey():
        return WITNESS
    if chunks and chunks[0] == Opcode(OP_RETURN):
        return NULL_DATA
    if (
        len(chunks) == 5
        and chunks[0] == Opcode(OP_DUP)
        and chunks[1] == Opcode(OP_HASH160)
        and len(_data(chunks[2]) or b"") == 20
        and chunks[3] == Opcode(OP_EQUALVERIFY)
        and chunks[4] == Opcode(OP_CHECKSIG)
    ):
        return PUBKEY_HASH
    if len(chunks) == 2 and _is_public_key(_data(chunks[0])) and chunks[1] == Opcode(OP_CHECKSIG):
        return PUBKEY
    if _is_multisig(chunks):
        return MULTISIG
    return UNKNOWN


class StandardScriptClassifier:
    """Recognizes pay-to-pubkey-hash and pay-to-script-hash unlocking scripts.

    Any object with ``is_pubkey_hash_unlock`` and ``is_script_hash_unlock``
    can stand in for this class when resolving inputs.
    """

    def is_pubkey_hash_unlock(self, raw: bytes) -> bool:
        try:
            chunks = parse_chunks(raw)
        except InvalidScript:
            return False
        if len(chunks) != 2:
            return False
        signature, pubkey = _data(chunks[0]), _data(chunks[1])
        return bool(signature) and signature[0] == 0x30 and _is_public_key(pubkey)

    def is_script_hash_unlock(self, raw: bytes) -> bool:
        try:
            chunks = parse_chunks(raw)
        except InvalidScript:
            return False
        if len(chunks) <= 1:
            return False
        redeem_script = _data(chunks[-1])
        if not redeem_script:
            return False
        return classify_output(redeem_script) != UNKNOWN


DEFAULT_CLASSIFIER = StandardScriptClassifier()
