"""Handshake record content: a header followed by one handshake message."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import ClassVar, Optional

from .errors import InternalError, LengthMismatchError
from .handshake_header import HEADER_LENGTH, HandshakeHeader, HandshakeType
from .hello import MessageClientHello, MessageServerHello
from .messages import (
    KeyExchangeAlgorithm,
    Message,
    MessageCertificate,
    MessageCertificateRequest,
    MessageCertificateVerify,
    MessageClientKeyExchange,
    MessageFinished,
    MessageHelloVerifyRequest,
    MessageServerHelloDone,
)
from .protocol import Content, ContentType
from .server_key_exchange import MessageServerKeyExchange

_SIMPLE_MESSAGES: dict[int, type[Message]] = {
    HandshakeType.CLIENT_HELLO: MessageClientHello,
    HandshakeType.HELLO_VERIFY_REQUEST: MessageHelloVerifyRequest,
    HandshakeType.SERVER_HELLO: MessageServerHello,
    HandshakeType.CERTIFICATE: MessageCertificate,
    HandshakeType.CERTIFICATE_REQUEST: MessageCertificateRequest,
    HandshakeType.SERVER_HELLO_DONE: MessageServerHelloDone,
    HandshakeType.FINISHED: MessageFinished,
    HandshakeType.CERTIFICATE_VERIFY: MessageCertificateVerify,
}

_KEY_EXCHANGE_MESSAGES = {
    HandshakeType.SERVER_KEY_EXCHANGE: MessageServerKeyExchange,
    HandshakeType.CLIENT_KEY_EXCHANGE: MessageClientKeyExchange,
}


def _not_implemented() -> InternalError:
    return InternalError("feature has not been implemented yet")


@dataclass
class Handshake(Content):
    """A handshake message together with its DTLS handshake header."""

    content_type: ClassVar[ContentType] = ContentType.HANDSHAKE

    header: HandshakeHeader = field(default_factory=HandshakeHeader)
    message: Optional[Message] = None

    def marshal(self) -> bytes:
        """Encode header and message; the header's type and lengths are refreshed."""
        if self.message is None:
            raise InternalError("handshake message unset, unable to marshal")
        if self.header.fragment_offset != 0:
            raise InternalError("unable to marshal fragmented handshakes")

        body = self.message.marshal()
        self.header = replace(
            self.header,
            length=len(body),
            fragment_length=len(body),
            type=self.message.handshake_type,
        )
        return self.header.marshal() + body

    @classmethod
    def unmarshal(
        cls,
        data: bytes,
        key_exchange_algorithm: KeyExchangeAlgorithm = KeyExchangeAlgorithm.NONE,
    ) -> "Handshake":
        data = bytes(data)
        header = HandshakeHeader.unmarshal(data)

        reported_length = int.from_bytes(data[1:4], "big")
        if len(data) - HEADER_LENGTH != reported_length:
            raise LengthMismatchError()
        if reported_length != header.fragment_length:
            raise LengthMismatchError()

        body = data[HEADER_LENGTH:]
        message_type = data[0]
        if message_type in _SIMPLE_MESSAGES:
            message = _SIMPLE_MESSAGES[message_type].unmarshal(body)
        elif message_type in _KEY_EXCHANGE_MESSAGES:
            message = _KEY_EXCHANGE_MESSAGES[message_type].unmarshal(
                body, key_exchange_algorithm
            )
        else:
            raise _not_implemented()
        return cls(header=header, message=message)