"""Byte-level ABI helpers: words, strings, addresses, padded topics.

Every decoder takes a ``0x``-prefixed hex payload as returned by the query
service and raises ``DecodeFailure`` when the payload is empty or malformed.
"""

from __future__ import annotations

import re

from eth_utils import keccak

from chainlens.exceptions import DecodeFailure, InvalidAddressError

WORD_HEX = 64  # 32 bytes as hex characters

ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")
HASH_RE = re.compile(r"^0x[0-9a-fA-F]{64}$")
HEX_RE = re.compile(r"^(0x)?[0-9a-fA-F]*$")


def strip_0x(value: str) -> str:
    return value[2:] if value[:2] in ("0x", "0X") else value


def normalize_address(address: str) -> str:
    """Validate a 20-byte hex address and return it lower-cased."""
    if not isinstance(address, str) or not ADDRESS_RE.match(address.strip()):
        raise InvalidAddressError(str(address))
    return address.strip().lower()


def normalize_hash(value: str) -> str:
    """Validate a 32-byte hex hash (tx hash, topic) and return it lower-cased."""
    if not isinstance(value, str) or not HASH_RE.match(value.strip()):
        raise InvalidAddressError(str(value), kind="hash")
    return value.strip().lower()


def pad_address(address: str) -> str:
    """Left-zero-pad an address to a 32-byte topic word."""
    return "0x" + strip_0x(normalize_address(address)).rjust(WORD_HEX, "0")


def event_topic(canonical_signature: str) -> str:
    """keccak256 of a canonical signature such as ``Transfer(address,address,uint256)``."""
    return "0x" + keccak(text=canonical_signature).hex()


def function_selector(canonical_signature: str) -> str:
    return event_topic(canonical_signature)[:10]


def parse_quantity(value) -> int | None:
    """Parse an int, decimal string or hex quantity. None passes through."""
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError("quantity cannot be boolean")
    if isinstance(value, int):
        return value
    raw = str(value).strip()
    if raw.startswith(("0x", "0X")):
        return int(raw, 16) if len(raw) > 2 else 0
    return int(raw, 10)


def hex_to_bytes(payload: str | None) -> bytes:
    """Decode a hex payload to bytes, raising DecodeFailure on bad input."""
    if payload is None:
        raise DecodeFailure("missing payload")
    raw = strip_0x(str(payload).strip())
    if len(raw) % 2 or not HEX_RE.match(raw):
        raise DecodeFailure(f"malformed hex payload: {payload[:20]!r}")
    return bytes.fromhex(raw)


def _words(payload: str | None) -> str:
    raw = strip_0x(str(payload or "").strip())
    if not raw:
        raise DecodeFailure("empty return data")
    if not HEX_RE.match(raw):
        raise DecodeFailure(f"malformed hex payload: {payload[:20]!r}")
    return raw


def _word(raw: str, index: int) -> str:
    start = index * WORD_HEX
    word = raw[start:start + WORD_HEX]
    if len(word) != WORD_HEX:
        raise DecodeFailure(f"payload too short for word {index}")
    return word


def decode_uint256(payload: str | None) -> int:
    return int(_word(_words(payload), 0), 16)


def decode_uint8(payload: str | None) -> int:
    """Low-order byte of the first word."""
    return decode_uint256(payload) & 0xFF


def decode_address(payload: str | None) -> str:
    word = _word(_words(payload), 0)
    if int(word[:24], 16):
        raise DecodeFailure("address word has non-zero high bytes")
    return "0x" + word[24:].lower()


def decode_bytes32_string(payload: str | None) -> str:
    """Legacy tokens (e.g. MKR) return symbol/name as a NUL-padded bytes32."""
    data = bytes.fromhex(_word(_words(payload), 0)).rstrip(b"\x00")
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DecodeFailure(f"bytes32 is not utf-8: {e}") from e


def decode_string(payload: str | None) -> str:
    """Decode a dynamic ``string`` return: offset word, length word, UTF-8 bytes."""
    raw = _words(payload)
    if len(raw) == WORD_HEX:
        return decode_bytes32_string(payload)

    offset = int(_word(raw, 0), 16)
    if offset % 32:
        raise DecodeFailure(f"string offset {offset} is not word aligned")
    length = int(_word(raw, offset // 32), 16)
    start = (offset + 32) * 2
    data = raw[start:start + length * 2]
    if len(data) != length * 2:
        raise DecodeFailure(f"string payload shorter than declared length {length}")
    try:
        return bytes.fromhex(data).decode("utf-8")
    except (ValueError, UnicodeDecodeError) as e:
        raise DecodeFailure(f"string is not utf-8: {e}") from e
