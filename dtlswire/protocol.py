"""Record content types, protocol versions and the simplest record contents."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import IntEnum
from typing import ClassVar

from .errors import BufferTooSmallError, FatalError


class ContentType(IntEnum):
    """IANA registered record content types."""

    CHANGE_CIPHER_SPEC = 20
    ALERT = 21
    HANDSHAKE = 22
    APPLICATION_DATA = 23


@dataclass(frozen=True)
class Version:
    """Major/minor protocol version as carried on the wire."""

    major: int
    minor: int


VERSION_1_0 = Version(0xFE, 0xFF)
VERSION_1_2 = Version(0xFE, 0xFD)


class Content(ABC):
    """Top-level payload of a DTLS record."""

    content_type: ClassVar[ContentType]

    @abstractmethod
    def marshal(self) -> bytes:
        """Encode the content to bytes."""

    @classmethod
    @abstractmethod
    def unmarshal(cls, data: bytes) -> "Content":
        """Decode the content from bytes."""


@dataclass
class ApplicationData(Content):
    """Opaque application payload."""

    content_type: ClassVar[ContentType] = ContentType.APPLICATION_DATA

    data: bytes = b""

    def marshal(self) -> bytes:
        return bytes(self.data)

    @classmethod
    def unmarshal(cls, data: bytes) -> "ApplicationData":
        return cls(bytes(data))


@dataclass
class ChangeCipherSpec(Content):
    """Signal of a transition in ciphering strategy: a single byte of value 1."""

    content_type: ClassVar[ContentType] = ContentType.CHANGE_CIPHER_SPEC

    def marshal(self) -> bytes:
        return b"\x01"

    @classmethod
    def unmarshal(cls, data: bytes) -> "ChangeCipherSpec":
        if bytes(data) != b"\x01":
            raise FatalError("cipher spec invalid")
        return cls()


class CompressionMethodID(IntEnum):
    """Identifier of a compression method."""

    NULL = 0


@dataclass(frozen=True)
class CompressionMethod:
    """A TLS compression method."""

    id: CompressionMethodID = CompressionMethodID.NULL


def compression_methods() -> dict[CompressionMethodID, CompressionMethod]:
    """Return all supported compression methods keyed by identifier."""
    return {CompressionMethodID.NULL: CompressionMethod(CompressionMethodID.NULL)}


def decode_compression_methods(buf: bytes) -> list[CompressionMethod]:
    """Decode a length-prefixed list of compression methods, dropping unknown ones."""
    if len(buf) < 1:
        raise BufferTooSmallError()
    count = buf[0]
    if len(buf) < count + 1:
        raise BufferTooSmallError()
    supported = compression_methods()
    return [supported[b] for b in buf[1 : count + 1] if b in supported]


def encode_compression_methods(methods: list[CompressionMethod]) -> bytes:
    """Encode compression methods; the identifiers are written in reverse order."""
    return bytes([len(methods), *(int(m.id) for m in reversed(methods))])