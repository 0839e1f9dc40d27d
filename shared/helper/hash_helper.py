"""Conversions between base58 strings from the indexer and fixed size byte arrays."""

import base58

from shared.models.errors import HashDecodeError

HASH_LENGTH = 32


def decode_hash(value: str, asset_id: str, field: str) -> list[int]:
    """Decode a base58 32 byte hash into a list of ints, the shape instruction args take.

    Args:
        value (str): The base58 string. Surrounding whitespace is ignored.
        asset_id (str): Asset the value belongs to, for the error message.
        field (str): Field name the value was read from, for the error message.

    Returns:
        list[int]: Exactly 32 byte values.

    Raises:
        HashDecodeError: If the value is empty, not base58 or not 32 bytes long.
    """
    if not isinstance(value, str) or not value.strip():
        raise HashDecodeError(asset_id, field, value, "value is empty")
    try:
        raw = base58.b58decode(value.strip())
    except ValueError as e:
        raise HashDecodeError(asset_id, field, value, f"not base58 ({e})")
    if len(raw) != HASH_LENGTH:
        raise HashDecodeError(asset_id, field, value, f"expected {HASH_LENGTH} bytes, got {len(raw)}")
    return list(raw)


def encode_hash(raw: bytes | list[int]) -> str:
    """Encode 32 bytes back to the base58 form the indexer uses."""
    if len(raw) != HASH_LENGTH:
        raise ValueError(f"expected {HASH_LENGTH} bytes, got {len(raw)}")
    return base58.b58encode(bytes(raw)).decode()
