"""Handshake message bodies other than the hellos and the server key exchange."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import IntEnum, IntFlag
from typing import ClassVar, Optional

from .errors import BufferTooSmallError, FatalError, LengthMismatchError
from .extension import HashAlgorithm, SignatureAlgorithm, SignatureHashAlgorithm
from .handshake_header import HandshakeType
from .protocol import Version


class KeyExchangeAlgorithm(IntFlag):
    """Key exchange algorithms of a cipher suite; PSK and ECDHE may combine."""

    NONE = 0
    PSK = 1
    ECDHE = 2


class ClientCertificateType(IntEnum):
    """Certificate types a server may request from a client."""

    RSA_SIGN = 1
    ECDSA_SIGN = 64


def _member(enum_cls, value: int):
    try:
        return enum_cls(value)
    except ValueError:
        return None


def _u16(value: int) -> bytes:
    return (value & 0xFFFF).to_bytes(2, "big")


def _read_u16(data: bytes, offset: int = 0) -> int:
    return int.from_bytes(data[offset : offset + 2], "big")


def _u24(value: int) -> bytes:
    return (value & 0xFFFFFF).to_bytes(3, "big")


def _read_u24(data: bytes, offset: int = 0) -> int:
    return int.from_bytes(data[offset : offset + 3], "big")


def _cookie_too_long() -> FatalError:
    return FatalError("cookie must not be longer then 255 bytes")


def _cipher_suite_unset() -> FatalError:
    return FatalError("server hello can not be created without a cipher suite")


class Message(ABC):
    """Body of a handshake message."""

    handshake_type: ClassVar[HandshakeType]

    @abstractmethod
    def marshal(self) -> bytes:
        """Encode the message body."""

    @classmethod
    @abstractmethod
    def unmarshal(cls, data: bytes) -> "Message":
        """Decode the message body."""


_CERTIFICATE_LENGTH_FIELD_SIZE = 3


@dataclass
class MessageCertificate(Message):
    """A chain of DER certificates sent by client or server."""

    handshake_type: ClassVar[HandshakeType] = HandshakeType.CERTIFICATE

    certificate: list[bytes] = field(default_factory=list)

    def marshal(self) -> bytes:
        body = b"".join(_u24(len(cert)) + bytes(cert) for cert in self.certificate)
        return _u24(len(body)) + body

    @classmethod
    def unmarshal(cls, data: bytes) -> "MessageCertificate":
        data = bytes(data)
        if len(data) < _CERTIFICATE_LENGTH_FIELD_SIZE:
            raise BufferTooSmallError()
        if _read_u24(data) + _CERTIFICATE_LENGTH_FIELD_SIZE != len(data):
            raise LengthMismatchError()

        certificates = []
        offset = _CERTIFICATE_LENGTH_FIELD_SIZE
        while offset < len(data):
            if offset + _CERTIFICATE_LENGTH_FIELD_SIZE > len(data):
                raise BufferTooSmallError()
            cert_len = _read_u24(data, offset)
            offset += _CERTIFICATE_LENGTH_FIELD_SIZE
            if offset + cert_len > len(data):
                raise LengthMismatchError()
            certificates.append(data[offset : offset + cert_len])
            offset += cert_len
        return cls(certificates)


_CERTIFICATE_REQUEST_MIN_LENGTH = 5


@dataclass
class MessageCertificateRequest(Message):
    """A server's request for a client certificate."""

    handshake_type: ClassVar[HandshakeType] = HandshakeType.CERTIFICATE_REQUEST

    certificate_types: list[ClientCertificateType] = field(default_factory=list)
    signature_hash_algorithms: list[SignatureHashAlgorithm] = field(
        default_factory=list
    )

    def marshal(self) -> bytes:
        types = bytes([len(self.certificate_types) & 0xFF]) + bytes(
            int(t) & 0xFF for t in self.certificate_types
        )
        pairs = b"".join(
            bytes([int(a.hash) & 0xFF, int(a.signature) & 0xFF])
            for a in self.signature_hash_algorithms
        )
        # Trailing zero length: no distinguished names.
        return types + _u16(len(pairs)) + pairs + b"\x00\x00"

    @classmethod
    def unmarshal(cls, data: bytes) -> "MessageCertificateRequest":
        data = bytes(data)
        if len(data) < _CERTIFICATE_REQUEST_MIN_LENGTH:
            raise BufferTooSmallError()

        types_length = data[0]
        offset = 1
        if offset + types_length > len(data):
            raise BufferTooSmallError()
        certificate_types = [
            member
            for member in (
                _member(ClientCertificateType, b)
                for b in data[offset : offset + types_length]
            )
            if member is not None
        ]
        offset += types_length

        if len(data) < offset + 2:
            raise BufferTooSmallError()
        pairs_length = _read_u16(data, offset)
        offset += 2
        if offset + pairs_length > len(data):
            raise BufferTooSmallError()

        algorithms = []
        for i in range(0, pairs_length, 2):
            if len(data) < offset + i + 2:
                raise BufferTooSmallError()
            hash_alg = _member(HashAlgorithm, data[offset + i])
            sig_alg = _member(SignatureAlgorithm, data[offset + i + 1])
            if hash_alg is None or sig_alg is None:
                continue
            algorithms.append(SignatureHashAlgorithm(hash_alg, sig_alg))
        return cls(certificate_types, algorithms)


_CERTIFICATE_VERIFY_MIN_LENGTH = 4


@dataclass
class MessageCertificateVerify(Message):
    """Explicit verification of a client certificate."""

    handshake_type: ClassVar[HandshakeType] = HandshakeType.CERTIFICATE_VERIFY

    hash_algorithm: HashAlgorithm = HashAlgorithm.NONE
    signature_algorithm: SignatureAlgorithm = SignatureAlgorithm.ANONYMOUS
    signature: bytes = b""

    def marshal(self) -> bytes:
        return (
            bytes([int(self.hash_algorithm) & 0xFF, int(self.signature_algorithm) & 0xFF])
            + _u16(len(self.signature))
            + bytes(self.signature)
        )

    @classmethod
    def unmarshal(cls, data: bytes) -> "MessageCertificateVerify":
        data = bytes(data)
        if len(data) < _CERTIFICATE_VERIFY_MIN_LENGTH:
            raise BufferTooSmallError()
        hash_alg = _member(HashAlgorithm, data[0])
        if hash_alg is None:
            raise FatalError("invalid hash algorithm")
        sig_alg = _member(SignatureAlgorithm, data[1])
        if sig_alg is None:
            raise FatalError("invalid signature algorithm")
        if _read_u16(data, 2) + 4 != len(data):
            raise BufferTooSmallError()
        return cls(hash_alg, sig_alg, data[4:])


@dataclass
class MessageFinished(Message):
    """The first message protected with the negotiated keys."""

    handshake_type: ClassVar[HandshakeType] = HandshakeType.FINISHED

    verify_data: bytes = b""

    def marshal(self) -> bytes:
        return bytes(self.verify_data)

    @classmethod
    def unmarshal(cls, data: bytes) -> "MessageFinished":
        return cls(bytes(data))


@dataclass
class MessageHelloVerifyRequest(Message):
    """A server's stateless cookie the client must echo in its next hello."""

    handshake_type: ClassVar[HandshakeType] = HandshakeType.HELLO_VERIFY_REQUEST

    version: Version = Version(0, 0)
    cookie: bytes = b""

    def marshal(self) -> bytes:
        if len(self.cookie) > 255:
            raise _cookie_too_long()
        return (
            bytes([self.version.major, self.version.minor, len(self.cookie)])
            + bytes(self.cookie)
        )

    @classmethod
    def unmarshal(cls, data: bytes) -> "MessageHelloVerifyRequest":
        data = bytes(data)
        if len(data) < 3:
            raise BufferTooSmallError()
        cookie_length = data[2]
        if len(data) < cookie_length + 3:
            raise BufferTooSmallError()
        return cls(Version(data[0], data[1]), data[3 : 3 + cookie_length])


@dataclass
class MessageServerHelloDone(Message):
    """Marks the end of the server's hello flight; it has no body."""

    handshake_type: ClassVar[HandshakeType] = HandshakeType.SERVER_HELLO_DONE

    def marshal(self) -> bytes:
        return b""

    @classmethod
    def unmarshal(cls, data: bytes) -> "MessageServerHelloDone":
        return cls()


@dataclass
class MessageClientKeyExchange(Message):
    """The client's PSK identity and/or ephemeral public key."""

    handshake_type: ClassVar[HandshakeType] = HandshakeType.CLIENT_KEY_EXCHANGE

    identity_hint: Optional[bytes] = None
    public_key: Optional[bytes] = None

    def marshal(self) -> bytes:
        if self.identity_hint is None and self.public_key is None:
            raise FatalError(
                "unable to determine if ClientKeyExchange is a public key or PSK Identity"
            )
        out = b""
        if self.identity_hint is not None:
            out += _u16(len(self.identity_hint)) + bytes(self.identity_hint)
        if self.public_key is not None:
            out += bytes([len(self.public_key) & 0xFF]) + bytes(self.public_key)
        return out

    @classmethod
    def unmarshal(
        cls, data: bytes, key_exchange_algorithm: KeyExchangeAlgorithm
    ) -> "MessageClientKeyExchange":
        data = bytes(data)
        if len(data) < 2:
            raise BufferTooSmallError()
        if key_exchange_algorithm == KeyExchangeAlgorithm.NONE:
            raise _cipher_suite_unset()

        identity_hint = None
        public_key = None
        offset = 0
        if key_exchange_algorithm & KeyExchangeAlgorithm.PSK:
            psk_length = _read_u16(data)
            if psk_length > len(data) - 2:
                raise BufferTooSmallError()
            identity_hint = data[2 : 2 + psk_length]
            offset += psk_length + 2

        if key_exchange_algorithm & KeyExchangeAlgorithm.ECDHE:
            if offset >= len(data):
                raise BufferTooSmallError()
            if data[offset] > len(data) - 1 - offset:
                raise BufferTooSmallError()
            public_key = data[offset + 1 :]

        return cls(identity_hint, public_key)