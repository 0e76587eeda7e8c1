"""Currency, hex and address conversions."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Iterable, Union

from scalecodec.utils.ss58 import ss58_decode, ss58_encode

from xychain_e2e.errors import DecodeError

DOLLAR = 10**12  # minor units per major unit
BLOCKS_PER_DAY = 10 * 60 * 24  # 6 second blocks
DEFAULT_SS58_FORMAT = 42

BytesLike = Union[bytes, bytearray, memoryview, Iterable[int]]


# ── Currency ───────────────────────────────────────────


def to_dollar(minor: int) -> Decimal:
    """Convert minor units to major units, exactly."""
    return Decimal(int(minor)) / DOLLAR


def from_dollar(major: Union[int, str, Decimal, float]) -> int:
    """Convert major units to minor units.

    Floats go through their shortest repr so `from_dollar(0.1)` is 10**11.
    """
    try:
        value = Decimal(str(major)) * DOLLAR
    except InvalidOperation as exc:
        raise ValueError(f"not a number: {major!r}") from exc
    if value < 0:
        raise ValueError(f"negative amount: {major!r}")
    if value != value.to_integral_value():
        raise ValueError(f"{major!r} has more precision than one minor unit")
    return int(value)


def to_day(blocks: int) -> Decimal:
    """Convert a block count to days."""
    return Decimal(int(blocks)) / BLOCKS_PER_DAY


# ── Hex ────────────────────────────────────────────────


def bytes_to_hex(data: BytesLike) -> str:
    """Encode bytes as a lowercase `0x`-prefixed hex string."""
    if not isinstance(data, (bytes, bytearray, memoryview)):
        try:
            data = bytes(data)
        except (TypeError, ValueError) as exc:
            raise DecodeError(f"not a byte sequence: {exc}") from exc
    return "0x" + bytes(data).hex()


def hex_to_bytes(text: str) -> bytes:
    """Decode a hex string, with or without the `0x` prefix."""
    if not isinstance(text, str):
        raise DecodeError(f"expected a hex string, got {type(text).__name__}")
    body = text[2:] if text[:2] in ("0x", "0X") else text
    if len(body) % 2:
        raise DecodeError(f"invalid hex string: odd length {len(body)}")
    try:
        return bytes.fromhex(body)
    except ValueError as exc:
        raise DecodeError(f"invalid hex string: {exc}") from exc


def file_name_to_bytes(name: str) -> bytes:
    return name.encode("utf-8")


# ── Addresses ──────────────────────────────────────────


def public_key_to_address(public_key: BytesLike | str,
                          ss58_format: int = DEFAULT_SS58_FORMAT) -> str:
    """Encode a raw 32-byte public key as an SS58 address."""
    if isinstance(public_key, str):
        raw = hex_to_bytes(public_key)
    elif isinstance(public_key, (bytes, bytearray, memoryview)):
        raw = bytes(public_key)
    else:
        raw = bytes(public_key)
    if len(raw) != 32:
        raise DecodeError(f"public key must be 32 bytes, got {len(raw)}")
    return ss58_encode(raw, ss58_format=ss58_format)


def address_to_public_key(address: str) -> bytes:
    """Decode an SS58 address back to its raw public key."""
    try:
        return hex_to_bytes(ss58_decode(address))
    except ValueError as exc:
        raise DecodeError(f"invalid SS58 address {address!r}: {exc}") from exc


def normalize_account(value: object, ss58_format: int = DEFAULT_SS58_FORMAT) -> str:
    """Render an account id given as SS58, hex or raw bytes as SS58."""
    if isinstance(value, str):
        if value[:2] in ("0x", "0X"):
            return public_key_to_address(value, ss58_format)
        return public_key_to_address(address_to_public_key(value), ss58_format)
    if isinstance(value, (bytes, bytearray, list, tuple)):
        return public_key_to_address(bytes(value), ss58_format)
    raise DecodeError(f"cannot interpret {value!r} as an account id")
