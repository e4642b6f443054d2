"""Error taxonomy for asset ID derivation."""
from __future__ import annotations


class AssetIdError(Exception):
    """Base class for every derivation failure."""


class MissingMetadata(AssetIdError):
    """Raised when the transaction carries no issuance metadata."""


class WrongTransactionType(AssetIdError):
    """Raised when the metadata does not describe an issuance."""


class MissingLockStatus(AssetIdError):
    """Raised when the metadata omits the lock status flag."""


class InvalidAggregationPolicy(AssetIdError):
    pass


class InvalidDivisibility(AssetIdError):
    pass


class UnrecognizedNetwork(AssetIdError):
    """Raised when a base58 address uses a version byte outside the allow-list."""


class InvalidAddress(AssetIdError):
    """Raised when an address is neither base58check nor bech32."""


class UnsupportedWitnessProgram(AssetIdError):
    """Raised for bech32 programs that are not 20 bytes long."""


class UnsupportedInputScript(AssetIdError):
    """Raised when an unlocking script matches no known template."""


class UnresolvableInput(AssetIdError):
    """Raised when the first input has nothing to derive a payload from."""


class InvalidScript(AssetIdError):
    pass
