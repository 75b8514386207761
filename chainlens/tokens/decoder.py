"""Decode raw logs against a fixed catalog of event signatures.

Signatures are written as Solidity declarations, e.g.
``Transfer(address indexed from, address indexed to, uint256 amount)``.
A log is matched on ``(topic0, number of indexed topics)`` so that events
sharing a hash but differing in indexing (ERC-20 vs ERC-721 ``Transfer``)
decode to different shapes.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from functools import cached_property
from typing import Any, Iterable

from eth_abi import decode as abi_decode
from eth_abi.exceptions import DecodingError
from pydantic import ValidationError

from chainlens.exceptions import DecodeFailure
from chainlens.models.schema import AbiValue, DecodedEvent, RawLog
from chainlens.tokens.abi import event_topic, hex_to_bytes

logger = logging.getLogger(__name__)

SIGNATURE_RE = re.compile(r"^\s*([A-Za-z_][A-Za-z0-9_]*)\s*\((.*)\)\s*$")


@dataclass(frozen=True)
class EventParam:
    type: str
    name: str = ""
    indexed: bool = False

    @property
    def is_dynamic(self) -> bool:
        return self.type in ("string", "bytes") or self.type.endswith("]") or self.type.startswith("(")


@dataclass(frozen=True)
class EventSignature:
    name: str
    params: tuple[EventParam, ...]

    @property
    def canonical(self) -> str:
        return f"{self.name}({','.join(p.type for p in self.params)})"

    @cached_property
    def topic0(self) -> str:
        return event_topic(self.canonical)

    @property
    def indexed_params(self) -> list[EventParam]:
        return [p for p in self.params if p.indexed]

    @property
    def body_params(self) -> list[EventParam]:
        return [p for p in self.params if not p.indexed]


def _split_params(raw: str) -> list[str]:
    parts: list[str] = []
    depth = 0
    start = 0
    for idx, ch in enumerate(raw):
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
        elif ch == "," and depth == 0:
            parts.append(raw[start:idx].strip())
            start = idx + 1
    tail = raw[start:].strip()
    if tail:
        parts.append(tail)
    return parts


def _canonical_type(raw_type: str) -> str:
    # Solidity shorthands hash as their full width
    if raw_type == "uint" or raw_type.startswith("uint["):
        return "uint256" + raw_type[4:]
    if raw_type == "int" or raw_type.startswith("int["):
        return "int256" + raw_type[3:]
    return raw_type


def parse_event_signature(text: str) -> EventSignature:
    """Parse ``Name(type [indexed] [name], ...)`` into an EventSignature."""
    match = SIGNATURE_RE.match(text)
    if not match:
        raise ValueError(f"Invalid event signature: {text!r}")
    name, raw_params = match.groups()
    params = []
    for part in _split_params(raw_params):
        tokens = part.split()
        indexed = "indexed" in tokens[1:]
        rest = [t for t in tokens[1:] if t != "indexed"]
        params.append(EventParam(
            type=_canonical_type(tokens[0]),
            name=rest[0] if rest else "",
            indexed=indexed,
        ))
    return EventSignature(name=name, params=tuple(params))


def _normalize_value(value: Any) -> Any:
    if isinstance(value, str) and value.startswith("0x") and len(value) == 42:
        return value.lower()
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    if isinstance(value, (list, tuple)):
        return [_normalize_value(v) for v in value]
    return value


class LogDecoder:
    """Decoder built once from a list of event signatures."""

    def __init__(self, signatures: Iterable[EventSignature]):
        self._by_key: dict[tuple[str, int], EventSignature] = {}
        for sig in signatures:
            self._by_key[(sig.topic0, len(sig.indexed_params))] = sig

    @classmethod
    def from_signatures(cls, signatures: Iterable[str]) -> LogDecoder:
        return cls(parse_event_signature(s) for s in signatures)

    @property
    def signatures(self) -> list[EventSignature]:
        return list(self._by_key.values())

    def match(self, log: RawLog) -> EventSignature | None:
        topics = [t for t in log.topics if t]
        if not topics:
            return None
        return self._by_key.get((topics[0].lower(), len(topics) - 1))

    def decode_log(self, log: RawLog | dict) -> DecodedEvent | None:
        """Decode one log. None if unmatched; DecodeFailure if the row or a matched payload is malformed."""
        if isinstance(log, dict):
            try:
                log = RawLog(**log)
            except ValidationError as e:
                raise DecodeFailure(f"malformed log row: {e.error_count()} invalid field(s)") from e
        sig = self.match(log)
        if sig is None:
            return None

        topics = [t for t in log.topics if t]
        try:
            indexed = []
            for param, topic in zip(sig.indexed_params, topics[1:]):
                if param.is_dynamic:
                    # Dynamic indexed values are stored as their keccak hash
                    value = topic.lower()
                else:
                    value = _normalize_value(abi_decode([param.type], hex_to_bytes(topic))[0])
                indexed.append(AbiValue(type=param.type, val=value))

            body_types = [p.type for p in sig.body_params]
            body_values = abi_decode(body_types, hex_to_bytes(log.data)) if body_types else ()
            body = [
                AbiValue(type=t, val=_normalize_value(v))
                for t, v in zip(body_types, body_values)
            ]
        except (DecodingError, ValueError, TypeError, OverflowError) as e:
            raise DecodeFailure(f"{sig.canonical} at {log.address}: {e}") from e

        return DecodedEvent(
            address=log.address.lower(),
            topic0=sig.topic0,
            name=sig.name,
            signature=sig.canonical,
            indexed=indexed,
            body=body,
            block_number=log.block_number,
            log_index=log.log_index,
            transaction_hash=log.transaction_hash,
        )

    def decode_logs(self, logs: Iterable[RawLog | dict]) -> list[DecodedEvent | None]:
        """Decode a batch one-to-one, in order. Failed logs become None."""
        decoded: list[DecodedEvent | None] = []
        for log in logs:
            try:
                decoded.append(self.decode_log(log))
            except DecodeFailure as e:
                logger.warning(f"Skipping undecodable log: {e.message}")
                decoded.append(None)
        return decoded


def default_decoder() -> LogDecoder:
    """Decoder over the full token and pool event catalog."""
    from chainlens.tokens.constants import EVENT_SIGNATURES

    return LogDecoder.from_signatures(EVENT_SIGNATURES)
