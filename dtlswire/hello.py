"""ClientHello and ServerHello handshake messages."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, Optional

from .errors import BufferTooSmallError, FatalError
from .extension import Extension, marshal_extensions, unmarshal_extensions
from .handshake_header import (
    RANDOM_LENGTH,
    HandshakeType,
    Random,
    decode_cipher_suite_ids,
    encode_cipher_suite_ids,
)
from .messages import Message
from .protocol import (
    CompressionMethod,
    Version,
    compression_methods,
    decode_compression_methods,
    encode_compression_methods,
)

_VARIABLE_WIDTH_START = 2 + RANDOM_LENGTH


def _u8_prefixed(body: bytes) -> bytes:
    return bytes([len(body) & 0xFF]) + bytes(body)


def _read_u8_prefixed(data: bytes, offset: int) -> tuple[bytes, int]:
    """Read a one-byte length-prefixed field; return it and the next offset."""
    start = offset + 1
    if len(data) <= start:
        raise BufferTooSmallError()
    length = data[offset]
    if len(data) <= start + length:
        raise BufferTooSmallError()
    return data[start : start + length], start + length


def _fixed_prefix(version: Version, random: Random) -> bytes:
    return bytes([version.major, version.minor]) + random.marshal()


@dataclass
class MessageClientHello(Message):
    """The first message a client sends; also used to renegotiate."""

    handshake_type: ClassVar[HandshakeType] = HandshakeType.CLIENT_HELLO

    version: Version = Version(0, 0)
    random: Random = field(default_factory=Random)
    cookie: bytes = b""
    session_id: bytes = b""
    cipher_suite_ids: list[int] = field(default_factory=list)
    compression_methods: list[CompressionMethod] = field(default_factory=list)
    extensions: list[Extension] = field(default_factory=list)

    def marshal(self) -> bytes:
        if len(self.cookie) > 255:
            raise FatalError("cookie must not be longer then 255 bytes")
        return (
            _fixed_prefix(self.version, self.random)
            + _u8_prefixed(self.session_id)
            + _u8_prefixed(self.cookie)
            + encode_cipher_suite_ids(self.cipher_suite_ids)
            + encode_compression_methods(self.compression_methods)
            + marshal_extensions(self.extensions)
        )

    @classmethod
    def unmarshal(cls, data: bytes) -> "MessageClientHello":
        data = bytes(data)
        if len(data) < _VARIABLE_WIDTH_START:
            raise BufferTooSmallError()
        version = Version(data[0], data[1])
        random = Random.unmarshal(data[2:])

        session_id, offset = _read_u8_prefixed(data, _VARIABLE_WIDTH_START)
        cookie, offset = _read_u8_prefixed(data, offset)

        if len(data) < offset:
            raise BufferTooSmallError()
        cipher_suite_ids = decode_cipher_suite_ids(data[offset:])
        if len(data) < offset + 2:
            raise BufferTooSmallError()
        offset += int.from_bytes(data[offset : offset + 2], "big") + 2

        if len(data) < offset:
            raise BufferTooSmallError()
        methods = decode_compression_methods(data[offset:])
        offset += data[offset] + 1
        if len(data) < offset:
            raise BufferTooSmallError()

        extensions = unmarshal_extensions(data[offset:])
        return cls(
            version=version,
            random=random,
            cookie=cookie,
            session_id=session_id,
            cipher_suite_ids=cipher_suite_ids,
            compression_methods=methods,
            extensions=extensions,
        )


@dataclass
class MessageServerHello(Message):
    """The server's answer to a ClientHello with the chosen parameters."""

    handshake_type: ClassVar[HandshakeType] = HandshakeType.SERVER_HELLO

    version: Version = Version(0, 0)
    random: Random = field(default_factory=Random)
    session_id: bytes = b""
    cipher_suite_id: Optional[int] = None
    compression_method: Optional[CompressionMethod] = None
    extensions: list[Extension] = field(default_factory=list)

    def marshal(self) -> bytes:
        if self.cipher_suite_id is None:
            raise FatalError("server hello can not be created without a cipher suite")
        if self.compression_method is None:
            raise FatalError(
                "server hello can not be created without a compression method"
            )
        return (
            _fixed_prefix(self.version, self.random)
            + _u8_prefixed(self.session_id)
            + (self.cipher_suite_id & 0xFFFF).to_bytes(2, "big")
            + bytes([int(self.compression_method.id) & 0xFF])
            + marshal_extensions(self.extensions)
        )

    @classmethod
    def unmarshal(cls, data: bytes) -> "MessageServerHello":
        data = bytes(data)
        if len(data) < _VARIABLE_WIDTH_START:
            raise BufferTooSmallError()
        version = Version(data[0], data[1])
        random = Random.unmarshal(data[2:])

        session_id, offset = _read_u8_prefixed(data, _VARIABLE_WIDTH_START)

        if len(data) < offset + 2:
            raise BufferTooSmallError()
        cipher_suite_id = int.from_bytes(data[offset : offset + 2], "big")
        offset += 2

        if len(data) <= offset:
            raise BufferTooSmallError()
        method = compression_methods().get(data[offset])
        if method is None:
            raise FatalError("invalid or unknown compression method")
        offset += 1

        extensions = [] if len(data) <= offset else unmarshal_extensions(data[offset:])
        return cls(
            version=version,
            random=random,
            session_id=session_id,
            cipher_suite_id=cipher_suite_id,
            compression_method=method,
            extensions=extensions,
        )