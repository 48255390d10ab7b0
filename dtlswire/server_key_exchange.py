"""ServerKeyExchange message for ECDHE and PSK key exchanges."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import ClassVar, Optional

from .errors import BufferTooSmallError, FatalError, LengthMismatchError
from .extension import Curve, HashAlgorithm, SignatureAlgorithm
from .handshake_header import HandshakeType
from .messages import KeyExchangeAlgorithm, Message


class CurveType(IntEnum):
    """How the elliptic curve of a key exchange is identified."""

    NAMED_CURVE = 0x03


def _member(enum_cls, value: int):
    try:
        return enum_cls(value)
    except ValueError:
        return None


def _u16(value: int) -> bytes:
    return (value & 0xFFFF).to_bytes(2, "big")


def _invalid_hash() -> FatalError:
    return FatalError("invalid hash algorithm")


def _invalid_signature() -> FatalError:
    return FatalError("invalid signature algorithm")


@dataclass
class MessageServerKeyExchange(Message):
    """The server's PSK identity hint and/or signed ephemeral public key."""

    handshake_type: ClassVar[HandshakeType] = HandshakeType.SERVER_KEY_EXCHANGE

    identity_hint: Optional[bytes] = None
    elliptic_curve_type: int = 0
    named_curve: int = 0
    public_key: bytes = b""
    hash_algorithm: HashAlgorithm = HashAlgorithm.NONE
    signature_algorithm: SignatureAlgorithm = SignatureAlgorithm.ANONYMOUS
    signature: bytes = b""

    def marshal(self) -> bytes:
        out = b""
        if self.identity_hint is not None:
            out += _u16(len(self.identity_hint)) + bytes(self.identity_hint)

        if self.elliptic_curve_type == 0 or not self.public_key:
            return out
        out += bytes([int(self.elliptic_curve_type) & 0xFF]) + _u16(self.named_curve)
        out += bytes([len(self.public_key) & 0xFF]) + bytes(self.public_key)

        has_hash = self.hash_algorithm != HashAlgorithm.NONE
        anonymous = self.signature_algorithm == SignatureAlgorithm.ANONYMOUS
        if has_hash and not self.signature:
            raise _invalid_hash()
        if not has_hash and self.signature:
            raise _invalid_hash()
        if anonymous and (has_hash or self.signature):
            raise _invalid_signature()
        if anonymous:
            return out

        return (
            out
            + bytes([int(self.hash_algorithm) & 0xFF, int(self.signature_algorithm) & 0xFF])
            + _u16(len(self.signature))
            + bytes(self.signature)
        )

    @classmethod
    def unmarshal(
        cls,
        data: bytes,
        key_exchange_algorithm: KeyExchangeAlgorithm = KeyExchangeAlgorithm.NONE,
    ) -> "MessageServerKeyExchange":
        data = bytes(data)
        if len(data) < 2:
            raise BufferTooSmallError()
        if key_exchange_algorithm == KeyExchangeAlgorithm.NONE:
            raise FatalError("server hello can not be created without a cipher suite")

        message = cls()
        hint_length = int.from_bytes(data[0:2], "big")
        if hint_length <= len(data) - 2 and key_exchange_algorithm & KeyExchangeAlgorithm.PSK:
            message.identity_hint = data[2 : 2 + hint_length]
            data = data[2 + hint_length :]

        if key_exchange_algorithm == KeyExchangeAlgorithm.PSK:
            if not data:
                return message
            raise LengthMismatchError()
        if not key_exchange_algorithm & KeyExchangeAlgorithm.ECDHE:
            raise LengthMismatchError()

        if not data:
            raise BufferTooSmallError()
        curve_type = _member(CurveType, data[0])
        if curve_type is None:
            raise FatalError("invalid or unknown elliptic curve type")
        message.elliptic_curve_type = curve_type

        if len(data) < 3:
            raise BufferTooSmallError()
        named_curve = _member(Curve, int.from_bytes(data[1:3], "big"))
        if named_curve is None:
            raise FatalError("invalid named curve")
        message.named_curve = named_curve
        if len(data) < 4:
            raise BufferTooSmallError()

        offset = 4 + data[3]
        if len(data) < offset:
            raise BufferTooSmallError()
        message.public_key = data[4:offset]

        # An anonymous exchange carries no hash, signature algorithm or signature.
        if len(data) == offset:
            return message

        hash_alg = _member(HashAlgorithm, data[offset])
        if hash_alg is None:
            raise _invalid_hash()
        message.hash_algorithm = hash_alg
        offset += 1
        if len(data) <= offset:
            raise BufferTooSmallError()
        sig_alg = _member(SignatureAlgorithm, data[offset])
        if sig_alg is None:
            raise _invalid_signature()
        message.signature_algorithm = sig_alg
        offset += 1
        if len(data) < offset + 2:
            raise BufferTooSmallError()
        signature_length = int.from_bytes(data[offset : offset + 2], "big")
        offset += 2
        if len(data) < offset + signature_length:
            raise BufferTooSmallError()
        message.signature = data[offset : offset + signature_length]
        return message