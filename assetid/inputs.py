"""First-input representations and their resolution into the payload that gets hashed."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from bitcoin.core import Hash160

from .address import address_to_script
from .classifier import DEFAULT_CLASSIFIER
from .errors import InvalidScript, UnresolvableInput, UnsupportedInputScript
from .script import (
    PushData,
    build_pubkey_hash_script,
    build_script_hash_script,
    parse_chunks,
    pushed_data,
    script_from_asm,
    serialize_chunks,
)

logger = logging.getLogger(__name__)

# hybrid keys hash as their uncompressed 0x04 form
HYBRID_KEY_PREFIXES = (0x06, 0x07)


@dataclass(frozen=True)
class PreviousOutputInput:
    """The input carries the scriptPubKey of the output it spends."""

    txid: Optional[str]
    vout: Optional[int]
    script: bytes


@dataclass(frozen=True)
class UnlockingScriptInput:
    txid: Optional[str]
    vout: Optional[int]
    script: bytes


@dataclass(frozen=True)
class AddressInput:
    txid: Optional[str]
    vout: Optional[int]
    address: str


@dataclass(frozen=True)
class BareInput:
    """Only the outpoint is known."""

    txid: Optional[str]
    vout: Optional[int]


Input = Union[PreviousOutputInput, UnlockingScriptInput, AddressInput, BareInput]


def _hex_bytes(value: str, field: str) -> bytes:
    try:
        return bytes.fromhex(value)
    except ValueError as exc:
        raise InvalidScript(f"{field} is not valid hex: {value!r}") from exc


def parse_input(raw: Dict[str, Any]) -> Input:
    """Build the input case from node/indexer JSON, first populated field wins."""
    txid = raw.get("txid")
    vout = raw.get("vout")

    previous_output = raw.get("previousOutput") or {}
    if previous_output.get("hex"):
        return PreviousOutputInput(txid, vout, _hex_bytes(previous_output["hex"], "previousOutput.hex"))

    script_sig = raw.get("scriptSig") or {}
    if script_sig.get("hex"):
        return UnlockingScriptInput(txid, vout, _hex_bytes(script_sig["hex"], "scriptSig.hex"))
    if script_sig.get("asm"):
        return UnlockingScriptInput(txid, vout, script_from_asm(script_sig["asm"]))

    if raw.get("address"):
        return AddressInput(txid, vout, raw["address"])
    return BareInput(txid, vout)


def _pubkey_hash_payload(script: bytes) -> bytes:
    pushes = pushed_data(parse_chunks(script))
    if len(pushes) < 2:
        raise UnsupportedInputScript(f"No public key in unlocking script {script.hex()}")
    public_key = pushes[1]
    if len(public_key) == 65 and public_key[0] in HYBRID_KEY_PREFIXES:
        public_key = b"\x04" + public_key[1:]
    logger.debug("Public key %s", public_key.hex())
    return build_pubkey_hash_script(Hash160(public_key))


def _script_hash_payload(script: bytes) -> bytes:
    last = parse_chunks(script)[-1:]
    if not last or not isinstance(last[0], PushData):
        raise UnsupportedInputScript(f"No redeem script in unlocking script {script.hex()}")
    redeem_chunks = parse_chunks(last[0].data)
    redeem_script = serialize_chunks(redeem_chunks)
    logger.debug("Redeem script %s", redeem_script.hex())
    return build_script_hash_script(Hash160(redeem_script))


def resolve_input(first_input: Input, classifier=DEFAULT_CLASSIFIER) -> bytes:
    """Canonical locking-script payload for the first input of an issuance."""
    if isinstance(first_input, PreviousOutputInput):
        logger.debug("Using previous output script %s", first_input.script.hex())
        return first_input.script

    if isinstance(first_input, UnlockingScriptInput):
        script = first_input.script
        if classifier.is_pubkey_hash_unlock(script):
            logger.debug("Unlocking script is pay-to-pubkey-hash")
            return _pubkey_hash_payload(script)
        if classifier.is_script_hash_unlock(script):
            logger.debug("Unlocking script is pay-to-script-hash")
            return _script_hash_payload(script)
        raise UnsupportedInputScript(f"Unsupported unlocking script {script.hex()}")

    if isinstance(first_input, AddressInput):
        logger.debug("Using address %s", first_input.address)
        return address_to_script(first_input.address)

    raise UnresolvableInput(
        f"Input {first_input.txid}:{first_input.vout} has no previous output, unlocking script or address"
    )
