"""Hello message extensions: their wire encodings and list framing."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import IntEnum
from typing import ClassVar, Optional, TypeVar

from .errors import BufferTooSmallError, FatalError, InternalError, LengthMismatchError

_E = TypeVar("_E", bound=IntEnum)


class ExtensionType(IntEnum):
    """IANA registered extension type values."""

    SERVER_NAME = 0
    SUPPORTED_ELLIPTIC_CURVES = 10
    SUPPORTED_POINT_FORMATS = 11
    SUPPORTED_SIGNATURE_ALGORITHMS = 13
    USE_SRTP = 14
    ALPN = 16
    USE_EXTENDED_MASTER_SECRET = 23
    RENEGOTIATION_INFO = 65281


class SRTPProtectionProfile(IntEnum):
    """SRTP protection profiles that may be negotiated."""

    SRTP_AES128_CM_HMAC_SHA1_80 = 0x0001
    SRTP_AES128_CM_HMAC_SHA1_32 = 0x0002
    SRTP_AEAD_AES_128_GCM = 0x0007
    SRTP_AEAD_AES_256_GCM = 0x0008


class Curve(IntEnum):
    """Supported named elliptic curves."""

    P256 = 0x0017
    P384 = 0x0018
    X25519 = 0x001D


class CurvePointFormat(IntEnum):
    """Elliptic curve point formats."""

    UNCOMPRESSED = 0


class HashAlgorithm(IntEnum):
    """Hash algorithms of a signature/hash pair."""

    NONE = 0
    MD5 = 1
    SHA1 = 2
    SHA224 = 3
    SHA256 = 4
    SHA384 = 5
    SHA512 = 6
    ED25519 = 8


class SignatureAlgorithm(IntEnum):
    """Signature algorithms of a signature/hash pair."""

    ANONYMOUS = 0
    RSA = 1
    ECDSA = 3
    ED25519 = 7


@dataclass(frozen=True)
class SignatureHashAlgorithm:
    """A hash algorithm paired with a signature algorithm."""

    hash: HashAlgorithm
    signature: SignatureAlgorithm


def _member(enum_cls: type[_E], value: int) -> Optional[_E]:
    try:
        return enum_cls(value)
    except ValueError:
        return None


def _u8(value: int) -> bytes:
    return bytes([value & 0xFF])


def _u16(value: int) -> bytes:
    return (value & 0xFFFF).to_bytes(2, "big")


def _read_u16(data: bytes, offset: int = 0) -> int:
    return int.from_bytes(data[offset : offset + 2], "big")


def _prefixed(body: bytes, width: int) -> bytes:
    if len(body) >= 1 << (8 * width):
        raise InternalError(
            f"length {len(body)} exceeds {width}-byte length prefix"
        )
    return len(body).to_bytes(width, "big") + body


def _encode_text(text: str) -> bytes:
    return text.encode("utf-8", errors="surrogateescape")


def _decode_text(raw: bytes) -> str:
    return raw.decode("utf-8", errors="surrogateescape")


def _invalid_type() -> FatalError:
    return FatalError("invalid extension type")


def _check_type(data: bytes, expected: ExtensionType) -> None:
    if _read_u16(data) != expected:
        raise _invalid_type()


class _Reader:
    """Cursor over bytes; failed reads return None."""

    def __init__(self, data: bytes) -> None:
        self._data = bytes(data)
        self._pos = 0

    def empty(self) -> bool:
        return self._pos >= len(self._data)

    def _take(self, n: int) -> Optional[bytes]:
        if len(self._data) - self._pos < n:
            return None
        chunk = self._data[self._pos : self._pos + n]
        self._pos += n
        return chunk

    def read_int(self, width: int) -> Optional[int]:
        chunk = self._take(width)
        return None if chunk is None else int.from_bytes(chunk, "big")

    def read_prefixed(self, width: int) -> Optional[bytes]:
        length = self.read_int(width)
        if length is None:
            return None
        return self._take(length)


class Extension(ABC):
    """A single hello message extension."""

    type_value: ClassVar[ExtensionType]

    @abstractmethod
    def marshal(self) -> bytes:
        """Encode the extension, type and length included."""

    @classmethod
    @abstractmethod
    def unmarshal(cls, data: bytes) -> "Extension":
        """Decode the extension from data starting at its type field."""


@dataclass
class ALPN(Extension):
    """Application-layer protocol negotiation."""

    type_value: ClassVar[ExtensionType] = ExtensionType.ALPN

    protocol_name_list: list[str] = field(default_factory=list)

    def marshal(self) -> bytes:
        names = b"".join(
            _prefixed(_encode_text(name), 1) for name in self.protocol_name_list
        )
        return _u16(self.type_value) + _prefixed(_prefixed(names, 2), 2)

    @classmethod
    def unmarshal(cls, data: bytes) -> "ALPN":
        reader = _Reader(data)
        if (reader.read_int(2) or 0) != cls.type_value:
            raise _invalid_type()
        ext_data = _Reader(reader.read_prefixed(2) or b"")
        proto_list = ext_data.read_prefixed(2)
        if not proto_list:
            raise FatalError("invalid alpn format")
        protos = _Reader(proto_list)
        names = []
        while not protos.empty():
            proto = protos.read_prefixed(1)
            if not proto:
                raise FatalError("invalid alpn format")
            names.append(_decode_text(proto))
        return cls(names)


def alpn_protocol_selection(
    supported_protocols: list[str], peer_supported_protocols: list[str]
) -> str:
    """Pick the first of our protocols that the peer also supports.

    Returns an empty string when either side offers nothing.
    """
    if not supported_protocols or not peer_supported_protocols:
        return ""
    for proto in supported_protocols:
        if proto in peer_supported_protocols:
            return proto
    raise FatalError("no application protocol")


_SERVER_NAME_TYPE_DNS_HOST_NAME = 0


@dataclass
class ServerName(Extension):
    """Server name indication: the host name the client wants to reach."""

    type_value: ClassVar[ExtensionType] = ExtensionType.SERVER_NAME

    server_name: str = ""

    def marshal(self) -> bytes:
        entry = _u8(_SERVER_NAME_TYPE_DNS_HOST_NAME) + _prefixed(
            _encode_text(self.server_name), 2
        )
        return _u16(self.type_value) + _prefixed(_prefixed(entry, 2), 2)

    @classmethod
    def unmarshal(cls, data: bytes) -> "ServerName":
        reader = _Reader(data)
        if (reader.read_int(2) or 0) != cls.type_value:
            raise _invalid_type()
        ext_data = _Reader(reader.read_prefixed(2) or b"")
        name_list = ext_data.read_prefixed(2)
        if not name_list:
            raise FatalError("invalid server name format")
        names = _Reader(name_list)
        server_name = ""
        while not names.empty():
            name_type = names.read_int(1)
            raw = names.read_prefixed(2) if name_type is not None else None
            if name_type is None or not raw:
                raise FatalError("invalid server name format")
            if name_type != _SERVER_NAME_TYPE_DNS_HOST_NAME:
                continue
            if server_name:
                # Multiple names of the same type are prohibited.
                raise FatalError("invalid server name format")
            server_name = _decode_text(raw)
            if server_name.endswith("."):
                raise FatalError("invalid server name format")
        return cls(server_name)


_RENEGOTIATION_INFO_HEADER_SIZE = 5


@dataclass
class RenegotiationInfo(Extension):
    """Renegotiation support indication."""

    type_value: ClassVar[ExtensionType] = ExtensionType.RENEGOTIATION_INFO

    renegotiated_connection: int = 0

    def marshal(self) -> bytes:
        return _u16(self.type_value) + _u16(1) + _u8(self.renegotiated_connection)

    @classmethod
    def unmarshal(cls, data: bytes) -> "RenegotiationInfo":
        if len(data) < _RENEGOTIATION_INFO_HEADER_SIZE:
            raise BufferTooSmallError()
        _check_type(data, cls.type_value)
        return cls(data[4])


_USE_EXTENDED_MASTER_SECRET_HEADER_SIZE = 4


@dataclass
class UseExtendedMasterSecret(Extension):
    """Binds the master secret to the full handshake log."""

    type_value: ClassVar[ExtensionType] = ExtensionType.USE_EXTENDED_MASTER_SECRET

    supported: bool = False

    def marshal(self) -> bytes:
        if not self.supported:
            return b""
        return _u16(self.type_value) + _u16(0)

    @classmethod
    def unmarshal(cls, data: bytes) -> "UseExtendedMasterSecret":
        if len(data) < _USE_EXTENDED_MASTER_SECRET_HEADER_SIZE:
            raise BufferTooSmallError()
        _check_type(data, cls.type_value)
        return cls(True)


_USE_SRTP_HEADER_SIZE = 6
_SUPPORTED_GROUPS_HEADER_SIZE = 6


@dataclass
class UseSRTP(Extension):
    """Negotiation of SRTP protection profiles."""

    type_value: ClassVar[ExtensionType] = ExtensionType.USE_SRTP

    protection_profiles: list[SRTPProtectionProfile] = field(default_factory=list)

    def marshal(self) -> bytes:
        count = len(self.protection_profiles)
        profiles = b"".join(_u16(p) for p in self.protection_profiles)
        # The trailing zero byte is the empty MKI length.
        return (
            _u16(self.type_value)
            + _u16(2 + count * 2 + 1)
            + _u16(count * 2)
            + profiles
            + b"\x00"
        )

    @classmethod
    def unmarshal(cls, data: bytes) -> "UseSRTP":
        if len(data) <= _USE_SRTP_HEADER_SIZE:
            raise BufferTooSmallError()
        _check_type(data, cls.type_value)
        count = _read_u16(data, 4) // 2
        if _SUPPORTED_GROUPS_HEADER_SIZE + count * 2 > len(data):
            raise LengthMismatchError()
        profiles = []
        for offset in range(_USE_SRTP_HEADER_SIZE, _USE_SRTP_HEADER_SIZE + count * 2, 2):
            profile = _member(SRTPProtectionProfile, _read_u16(data, offset))
            if profile is not None:
                profiles.append(profile)
        return cls(profiles)


@dataclass
class SupportedEllipticCurves(Extension):
    """The elliptic curves a peer supports."""

    type_value: ClassVar[ExtensionType] = ExtensionType.SUPPORTED_ELLIPTIC_CURVES

    elliptic_curves: list[Curve] = field(default_factory=list)

    def marshal(self) -> bytes:
        count = len(self.elliptic_curves)
        curves = b"".join(_u16(c) for c in self.elliptic_curves)
        return _u16(self.type_value) + _u16(2 + count * 2) + _u16(count * 2) + curves

    @classmethod
    def unmarshal(cls, data: bytes) -> "SupportedEllipticCurves":
        if len(data) <= _SUPPORTED_GROUPS_HEADER_SIZE:
            raise BufferTooSmallError()
        _check_type(data, cls.type_value)
        count = _read_u16(data, 4) // 2
        start = _SUPPORTED_GROUPS_HEADER_SIZE
        if start + count * 2 > len(data):
            raise LengthMismatchError()
        curves = []
        for offset in range(start, start + count * 2, 2):
            curve = _member(Curve, _read_u16(data, offset))
            if curve is not None:
                curves.append(curve)
        return cls(curves)


_SUPPORTED_POINT_FORMATS_SIZE = 5


@dataclass
class SupportedPointFormats(Extension):
    """The elliptic curve point formats a peer supports."""

    type_value: ClassVar[ExtensionType] = ExtensionType.SUPPORTED_POINT_FORMATS

    point_formats: list[CurvePointFormat] = field(default_factory=list)

    def marshal(self) -> bytes:
        count = len(self.point_formats)
        return (
            _u16(self.type_value)
            + _u16(1 + count)
            + _u8(count)
            + bytes(int(p) & 0xFF for p in self.point_formats)
        )

    @classmethod
    def unmarshal(cls, data: bytes) -> "SupportedPointFormats":
        if len(data) <= _SUPPORTED_POINT_FORMATS_SIZE:
            raise BufferTooSmallError()
        _check_type(data, cls.type_value)
        # The count is taken as a 16-bit field starting at the one-byte length.
        count = _read_u16(data, 4)
        if _SUPPORTED_GROUPS_HEADER_SIZE + count > len(data):
            raise LengthMismatchError()
        start = _SUPPORTED_POINT_FORMATS_SIZE
        formats = [
            CurvePointFormat.UNCOMPRESSED
            for value in data[start : start + count]
            if value == CurvePointFormat.UNCOMPRESSED
        ]
        return cls(formats)


_SUPPORTED_SIGNATURE_ALGORITHMS_HEADER_SIZE = 6


@dataclass
class SupportedSignatureAlgorithms(Extension):
    """The signature/hash algorithm pairs a peer supports."""

    type_value: ClassVar[ExtensionType] = ExtensionType.SUPPORTED_SIGNATURE_ALGORITHMS

    signature_hash_algorithms: list[SignatureHashAlgorithm] = field(
        default_factory=list
    )

    def marshal(self) -> bytes:
        count = len(self.signature_hash_algorithms)
        pairs = b"".join(
            _u8(a.hash) + _u8(a.signature) for a in self.signature_hash_algorithms
        )
        return _u16(self.type_value) + _u16(2 + count * 2) + _u16(count * 2) + pairs

    @classmethod
    def unmarshal(cls, data: bytes) -> "SupportedSignatureAlgorithms":
        start = _SUPPORTED_SIGNATURE_ALGORITHMS_HEADER_SIZE
        if len(data) <= start:
            raise BufferTooSmallError()
        _check_type(data, cls.type_value)
        count = _read_u16(data, 4) // 2
        if start + count * 2 > len(data):
            raise LengthMismatchError()
        algorithms = []
        for offset in range(start, start + count * 2, 2):
            hash_alg = _member(HashAlgorithm, data[offset])
            sig_alg = _member(SignatureAlgorithm, data[offset + 1])
            if hash_alg is not None and sig_alg is not None:
                algorithms.append(SignatureHashAlgorithm(hash_alg, sig_alg))
        return cls(algorithms)


_DECODERS: dict[int, type[Extension]] = {
    ExtensionType.SERVER_NAME: ServerName,
    ExtensionType.SUPPORTED_ELLIPTIC_CURVES: SupportedEllipticCurves,
    ExtensionType.USE_SRTP: UseSRTP,
    ExtensionType.ALPN: ALPN,
    ExtensionType.USE_EXTENDED_MASTER_SECRET: UseExtendedMasterSecret,
    ExtensionType.RENEGOTIATION_INFO: RenegotiationInfo,
}


def unmarshal_extensions(buf: bytes) -> list[Extension]:
    """Decode a length-prefixed block of extensions, skipping unknown types."""
    buf = bytes(buf)
    if not buf:
        return []
    if len(buf) < 2:
        raise BufferTooSmallError()
    if len(buf) - 2 != _read_u16(buf):
        raise LengthMismatchError()

    extensions: list[Extension] = []
    offset = 2
    while offset < len(buf):
        if len(buf) < offset + 2:
            raise BufferTooSmallError()
        decoder = _DECODERS.get(_read_u16(buf, offset))
        if decoder is not None:
            extensions.append(decoder.unmarshal(buf[offset:]))
        if len(buf) < offset + 4:
            raise BufferTooSmallError()
        offset += 4 + _read_u16(buf, offset + 2)
    return extensions


def marshal_extensions(extensions: list[Extension]) -> bytes:
    """Encode extensions as one block prefixed with its 16-bit length."""
    body = b"".join(ext.marshal() for ext in extensions)
    return _u16(len(body)) + body