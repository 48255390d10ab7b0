"""Handshake message header, hello random values and cipher suite lists."""

from __future__ import annotations

import secrets
import time
from dataclasses import dataclass, field
from enum import IntEnum

from .errors import BufferTooSmallError

HEADER_LENGTH = 12
RANDOM_BYTES_LENGTH = 28
RANDOM_LENGTH = RANDOM_BYTES_LENGTH + 4

_U24_MASK = 0xFFFFFF


class HandshakeType(IntEnum):
    """Identifier of each handshake message."""

    HELLO_REQUEST = 0
    CLIENT_HELLO = 1
    SERVER_HELLO = 2
    HELLO_VERIFY_REQUEST = 3
    CERTIFICATE = 11
    SERVER_KEY_EXCHANGE = 12
    CERTIFICATE_REQUEST = 13
    SERVER_HELLO_DONE = 14
    CERTIFICATE_VERIFY = 15
    CLIENT_KEY_EXCHANGE = 16
    FINISHED = 20

    def __str__(self) -> str:
        if self is HandshakeType.CERTIFICATE:
            return "TypeCertificate"
        return "".join(part.capitalize() for part in self.name.split("_"))


def _handshake_type(value: int) -> int:
    try:
        return HandshakeType(value)
    except ValueError:
        return value


def _u24(value: int) -> bytes:
    return (value & _U24_MASK).to_bytes(3, "big")


def _read_u24(data: bytes, offset: int) -> int:
    return int.from_bytes(data[offset : offset + 3], "big")


@dataclass
class HandshakeHeader:
    """The fixed 12-byte header in front of every handshake message."""

    type: int = HandshakeType.HELLO_REQUEST
    length: int = 0
    message_sequence: int = 0
    fragment_offset: int = 0
    fragment_length: int = 0

    def marshal(self) -> bytes:
        return (
            bytes([int(self.type) & 0xFF])
            + _u24(self.length)
            + (self.message_sequence & 0xFFFF).to_bytes(2, "big")
            + _u24(self.fragment_offset)
            + _u24(self.fragment_length)
        )

    @classmethod
    def unmarshal(cls, data: bytes) -> "HandshakeHeader":
        if len(data) < HEADER_LENGTH:
            raise BufferTooSmallError()
        return cls(
            type=_handshake_type(data[0]),
            length=_read_u24(data, 1),
            message_sequence=int.from_bytes(data[4:6], "big"),
            fragment_offset=_read_u24(data, 6),
            fragment_length=_read_u24(data, 9),
        )


@dataclass(frozen=True)
class Random:
    """Random value of a hello message: a 32-bit timestamp and 28 random bytes."""

    gmt_unix_time: int = 0
    random_bytes: bytes = field(default=bytes(RANDOM_BYTES_LENGTH))

    def __post_init__(self) -> None:
        if len(self.random_bytes) != RANDOM_BYTES_LENGTH:
            raise ValueError(
                f"random_bytes must be {RANDOM_BYTES_LENGTH} bytes long, "
                f"got {len(self.random_bytes)}"
            )

    def marshal(self) -> bytes:
        return (self.gmt_unix_time & 0xFFFFFFFF).to_bytes(4, "big") + bytes(
            self.random_bytes
        )

    @classmethod
    def unmarshal(cls, data: bytes) -> "Random":
        if len(data) < RANDOM_LENGTH:
            raise BufferTooSmallError()
        return cls(
            int.from_bytes(data[0:4], "big"), bytes(data[4:RANDOM_LENGTH])
        )

    @classmethod
    def generate(cls) -> "Random":
        """Create a random value stamped with the current time."""
        return cls(int(time.time()), secrets.token_bytes(RANDOM_BYTES_LENGTH))


def decode_cipher_suite_ids(buf: bytes) -> list[int]:
    """Decode a 16-bit length-prefixed list of cipher suite identifiers."""
    if len(buf) < 2:
        raise BufferTooSmallError()
    count = int.from_bytes(buf[0:2], "big") // 2
    ids = []
    for i in range(count):
        start = 2 + i * 2
        if len(buf) < start + 2:
            raise BufferTooSmallError()
        ids.append(int.from_bytes(buf[start : start + 2], "big"))
    return ids


def encode_cipher_suite_ids(cipher_suite_ids: list[int]) -> bytes:
    """Encode cipher suite identifiers behind their 16-bit byte length."""
    body = b"".join((i & 0xFFFF).to_bytes(2, "big") for i in cipher_suite_ids)
    return (len(body) & 0xFFFF).to_bytes(2, "big") + body