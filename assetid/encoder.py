"""Asset ID derivation for issuance transactions."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Union

from bitcoin import base58
from bitcoin.core import Hash, Hash160

from .classifier import DEFAULT_CLASSIFIER
from .errors import InvalidDivisibility, MissingLockStatus, MissingMetadata, WrongTransactionType
from .inputs import resolve_input
from .padding import resolve_padding
from .transaction import ISSUANCE, IssuanceMetadata, IssuanceTransaction, parse_transaction

logger = logging.getLogger(__name__)

POSTFIX_BYTE_LENGTH = 2
MAX_DIVISIBILITY = 0xFF


def _minimal_bytes(value: int) -> bytes:
    return value.to_bytes(max(1, (value.bit_length() + 7) // 8), "big")


def hash_and_encode(payload: Union[bytes, str], padding: int, divisibility: int) -> str:
    """Base58Check(padding || hash160(payload) || divisibility).

    Padding keeps its natural width (one or two bytes); divisibility is
    always two bytes.
    """
    if not 0 <= divisibility <= MAX_DIVISIBILITY:
        raise InvalidDivisibility(f"Divisibility {divisibility} outside 0..{MAX_DIVISIBILITY}")
    if isinstance(payload, str):
        payload = payload.encode("utf-8")

    digest = Hash160(payload)
    logger.debug("padding=0x%x divisibility=%d hash160=%s", padding, divisibility, digest.hex())
    body = _minimal_bytes(padding) + digest + divisibility.to_bytes(POSTFIX_BYTE_LENGTH, "big")
    return base58.encode(body + Hash(body)[:4])


def _validated_metadata(tx: IssuanceTransaction) -> IssuanceMetadata:
    metadata = tx.metadata
    if metadata is None:
        raise MissingMetadata(f"Transaction {tx.txid} has no DigiAsset metadata")
    if metadata.type != ISSUANCE:
        raise WrongTransactionType(f"Transaction {tx.txid} is a {metadata.type!r}, not an issuance")
    if metadata.lock_status is None:
        raise MissingLockStatus(f"Transaction {tx.txid} metadata has no lock status")
    return metadata


def derive_asset_id(tx: IssuanceTransaction, classifier=None) -> str:
    metadata = _validated_metadata(tx)
    padding = resolve_padding(metadata.lock_status, metadata.aggregation_policy)
    first_input = tx.first_input

    if metadata.lock_status:
        outpoint = f"{first_input.txid}:{first_input.vout}"
        logger.debug("Locked issuance %s, hashing outpoint %s", tx.txid, outpoint)
        asset_id = hash_and_encode(outpoint, padding, metadata.divisibility)
    else:
        payload = resolve_input(first_input, classifier or DEFAULT_CLASSIFIER)
        asset_id = hash_and_encode(payload, padding, metadata.divisibility)

    logger.debug("Asset ID for %s is %s", tx.txid, asset_id)
    return asset_id


def derive_asset_id_from_json(raw: Dict[str, Any], metadata: Optional[IssuanceMetadata] = None, classifier=None) -> str:
    return derive_asset_id(parse_transaction(raw, metadata), classifier)
