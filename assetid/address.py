"""Address decoding: base58check first, bech32 as the fallback."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from bech32 import bech32_decode, convertbits
from bitcoin.base58 import Base58Error, CBase58Data

from .errors import InvalidAddress, UnrecognizedNetwork, UnsupportedWitnessProgram
from .script import HASH_LENGTH, build_pubkey_hash_script, build_script_hash_script

logger = logging.getLogger(__name__)

DGB_P2PKH = 0x1E
BTC_TESTNET_P2PKH = 0x6F
DGB_P2SH = 0x3F
DGB_P2SH_LEGACY = 0x05
BTC_TESTNET_P2SH = 0xC4

PUBKEY_HASH_VERSIONS = frozenset({DGB_P2PKH, BTC_TESTNET_P2PKH})
SCRIPT_HASH_VERSIONS = frozenset({DGB_P2SH, DGB_P2SH_LEGACY, BTC_TESTNET_P2SH})
NETWORK_VERSIONS = PUBKEY_HASH_VERSIONS | SCRIPT_HASH_VERSIONS


@dataclass(frozen=True)
class DecodedAddress:
    version: int
    payload_hash: bytes
    witness: bool = False

    def locking_script(self) -> bytes:
        # 20-byte witness programs share the pay-to-pubkey-hash template
        if self.witness or self.version in PUBKEY_HASH_VERSIONS:
            return build_pubkey_hash_script(self.payload_hash)
        return build_script_hash_script(self.payload_hash)


def _try_base58check(address: str) -> Optional[Tuple[int, bytes]]:
    try:
        data = CBase58Data(address)
    except (Base58Error, ValueError, IndexError):
        return None
    return data.nVersion, bytes(data)


def _try_bech32(address: str) -> Optional[Tuple[int, bytes]]:
    _, words = bech32_decode(address)
    if not words:
        return None
    program = convertbits(words[1:], 5, 8, False)
    if program is None:
        return None
    return words[0], bytes(program)


def decode_address(address: str) -> DecodedAddress:
    legacy = _try_base58check(address)
    if legacy is not None:
        version, payload = legacy
        if version not in NETWORK_VERSIONS:
            raise UnrecognizedNetwork(f"Unrecognized address network 0x{version:02x} for {address}")
        if len(payload) != HASH_LENGTH:
            raise InvalidAddress(f"Address {address} carries a {len(payload)}-byte payload")
        logger.debug("Decoded base58 address %s (version 0x%02x)", address, version)
        return DecodedAddress(version=version, payload_hash=payload)

    segwit = _try_bech32(address)
    if segwit is not None:
        witness_version, program = segwit
        if len(program) != HASH_LENGTH:
            raise UnsupportedWitnessProgram(
                f"Witness program of {len(program)} bytes in {address} is not supported"
            )
        logger.debug("Decoded bech32 address %s (witness v%d)", address, witness_version)
        return DecodedAddress(version=witness_version, payload_hash=program, witness=True)

    raise InvalidAddress(f"Address {address!r} is neither base58check nor bech32")


def address_to_script(address: str) -> bytes:
    """Canonical locking script for an address."""
    return decode_address(address).locking_script()
