"""Issuance transaction model and parsing of node/indexer JSON."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from .errors import UnresolvableInput
from .inputs import Input, parse_input

ISSUANCE = "issuance"


@dataclass(frozen=True)
class IssuanceMetadata:
    type: Optional[str]
    lock_status: Optional[bool]
    aggregation_policy: str = "aggregatable"
    divisibility: int = 0

    @classmethod
    def from_json(cls, raw: Dict[str, Any]) -> "IssuanceMetadata":
        return cls(
            type=raw.get("type"),
            lock_status=raw.get("lockStatus"),
            aggregation_policy=raw.get("aggregationPolicy") or "aggregatable",
            divisibility=raw.get("divisibility") or 0,
        )


@dataclass(frozen=True)
class IssuanceTransaction:
    txid: str
    first_input: Input
    metadata: Optional[IssuanceMetadata]


def parse_transaction(raw: Dict[str, Any], metadata: Optional[IssuanceMetadata] = None) -> IssuanceTransaction:
    """Build an IssuanceTransaction from verbose transaction JSON.

    Metadata comes from ``metadata`` when given, otherwise from the first
    ``dadata`` entry an indexer attaches.
    """
    vin = raw.get("vin") or []
    if not vin:
        raise UnresolvableInput(f"Transaction {raw.get('txid')} has no inputs")

    if metadata is None:
        dadata = raw.get("dadata") or []
        if dadata:
            metadata = IssuanceMetadata.from_json(dadata[0])

    return IssuanceTransaction(txid=raw.get("txid"), first_input=parse_input(vin[0]), metadata=metadata)
