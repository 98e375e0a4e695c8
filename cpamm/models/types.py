"""Shared type definitions for AMM models.

These types are used across instruction, event and API models.
"""

from typing import Annotated, Any

from pydantic import BeforeValidator, Field, PlainSerializer

from cpamm.safe_int import U16_MAX, U64_MAX

KEY_HEX_LENGTH = 64


def _validate_unsigned(value: Any, max_value: int, name: str) -> int:
    """Parse an unsigned integer from an int or a decimal string.

    Raises:
        ValueError: If value is not a non-negative integer within range
    """
    if isinstance(value, bool):
        raise ValueError(f"{name} must be an integer, got bool")

    if isinstance(value, str):
        try:
            value = int(value)
        except ValueError as err:
            raise ValueError(f"{name} must be a decimal integer string: '{value}'") from err

    if not isinstance(value, int):
        raise ValueError(f"{name} must be string or int, got {type(value).__name__}")

    if value < 0:
        raise ValueError(f"{name} cannot be negative: {value}")
    if value > max_value:
        raise ValueError(f"{name} overflow: {value} > {max_value}")
    return value


def validate_u64(value: Any) -> int:
    """Validate that a value is a valid u64 (int or decimal string)."""
    return _validate_unsigned(value, U64_MAX, "U64")


def validate_u16(value: Any) -> int:
    """Validate that a value is a valid u16 (int or decimal string)."""
    return _validate_unsigned(value, U16_MAX, "U16")


# 64-bit unsigned integer; accepts int or decimal string, serialized to JSON as string
U64 = Annotated[
    int,
    BeforeValidator(validate_u64),
    PlainSerializer(str, return_type=str, when_used="json"),
    Field(description="64-bit unsigned integer"),
]

# 16-bit unsigned integer (fees in basis points)
U16 = Annotated[int, BeforeValidator(validate_u16), Field(description="16-bit unsigned integer")]


def normalize_key(key: str, *, validate: bool = False) -> str:
    """Normalize a 32-byte key to lowercase hex with 0x prefix.

    Args:
        key: A key (with or without 0x prefix)
        validate: If True, raises ValueError for invalid keys.

    Returns:
        Lowercase key with 0x prefix

    Raises:
        ValueError: If validate=True and key is not a valid 32-byte key
    """
    normalized = key.lower()
    if not normalized.startswith("0x"):
        normalized = "0x" + normalized

    if validate and not is_valid_key(normalized):
        raise ValueError(f"Invalid key: {key}")

    return normalized


def is_valid_key(key: str) -> bool:
    """Check if a string is a valid 32-byte hex key."""
    if not isinstance(key, str):
        return False
    if not key.startswith("0x"):
        return False
    if len(key) != 2 + KEY_HEX_LENGTH:
        return False
    try:
        int(key, 16)
        return True
    except ValueError:
        return False


def _validate_pubkey(value: Any) -> str:
    if not isinstance(value, str):
        raise ValueError(f"Pubkey must be a hex string, got {type(value).__name__}")
    return normalize_key(value, validate=True)


# 32-byte account key (64 hex chars after 0x prefix)
Pubkey = Annotated[str, BeforeValidator(_validate_pubkey), Field(description="32-byte hex key")]
