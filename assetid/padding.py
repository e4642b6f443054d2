"""Asset ID prefixes keyed by lock status and aggregation policy."""
from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Union

from .errors import InvalidAggregationPolicy


class AggregationPolicy(str, Enum):
    AGGREGATABLE = "aggregatable"
    HYBRID = "hybrid"
    DISPERSED = "dispersed"


UNLOCKED_PADDING = MappingProxyType(
    {
        AggregationPolicy.AGGREGATABLE: 0x2E37,
        AggregationPolicy.HYBRID: 0x2E6B,
        AggregationPolicy.DISPERSED: 0x2E4E,
    }
)

LOCKED_PADDING = MappingProxyType(
    {
        AggregationPolicy.AGGREGATABLE: 0x20CE,
        AggregationPolicy.HYBRID: 0x2102,
        AggregationPolicy.DISPERSED: 0x20E4,
    }
)


def parse_policy(policy: Union[str, AggregationPolicy]) -> AggregationPolicy:
    try:
        return AggregationPolicy(policy)
    except ValueError as exc:
        raise InvalidAggregationPolicy(f"Unknown aggregation policy {policy!r}") from exc


def resolve_padding(lock_status: bool, policy: Union[str, AggregationPolicy]) -> int:
    table = LOCKED_PADDING if lock_status else UNLOCKED_PADDING
    return table[parse_policy(policy)]
