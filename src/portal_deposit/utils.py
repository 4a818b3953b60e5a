"""Utility functions for the portal deposit flow."""

from collections.abc import Mapping, Sequence
from typing import Any

from hexbytes import HexBytes

from .constants import UINT64_MAX
from .exceptions import ValidationError


def to_uint64(value: int, field: str = "value") -> int:
    """Check that an integer fits the uint64 range and return it."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError("Value must be an integer", field=field, value=value)

    if value < 0:
        raise ValidationError("Value cannot be negative", field=field, value=value)

    if value > UINT64_MAX:
        raise ValidationError("Value exceeds uint64 maximum", field=field, value=value)

    return value


def serialise_receipt(receipt: Any) -> Any:
    """Serialise web3 receipt objects into JSON-friendly structures."""
    if receipt is None:
        return None
    if isinstance(receipt, Mapping):
        return {key: serialise_receipt(value) for key, value in receipt.items()}
    if isinstance(receipt, Sequence) and not isinstance(
        receipt, str | bytes | bytearray | HexBytes
    ):
        return [serialise_receipt(item) for item in receipt]
    if isinstance(receipt, bytes | bytearray | HexBytes):
        return HexBytes(receipt).to_0x_hex()
    return receipt
