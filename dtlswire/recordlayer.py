"""The DTLS record layer: record headers, records and datagram splitting."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Optional

from .alert import Alert
from .errors import BufferTooSmallError, FatalError, InternalError, TemporaryError
from .handshake import Handshake
from .protocol import (
    VERSION_1_0,
    VERSION_1_2,
    ApplicationData,
    ChangeCipherSpec,
    Content,
    ContentType,
    Version,
)

HEADER_SIZE = 13
MAX_SEQUENCE_NUMBER = 0x0000FFFFFFFFFFFF

_CONTENT_DECODERS: dict[int, type[Content]] = {
    ContentType.CHANGE_CIPHER_SPEC: ChangeCipherSpec,
    ContentType.ALERT: Alert,
    ContentType.HANDSHAKE: Handshake,
    ContentType.APPLICATION_DATA: ApplicationData,
}


def _content_type(value: int) -> int:
    try:
        return ContentType(value)
    except ValueError:
        return value


def _invalid_packet_length() -> TemporaryError:
    return TemporaryError("packet length and declared length do not match")


@dataclass
class RecordLayerHeader:
    """The 13-byte header of a DTLS record."""

    content_type: int = 0
    content_len: int = 0
    version: Version = Version(0, 0)
    epoch: int = 0
    sequence_number: int = 0

    def marshal(self) -> bytes:
        if self.sequence_number > MAX_SEQUENCE_NUMBER:
            raise InternalError("sequence number overflow")
        return (
            bytes(
                [
                    int(self.content_type) & 0xFF,
                    self.version.major & 0xFF,
                    self.version.minor & 0xFF,
                ]
            )
            + (self.epoch & 0xFFFF).to_bytes(2, "big")
            + self.sequence_number.to_bytes(6, "big")
            + (self.content_len & 0xFFFF).to_bytes(2, "big")
        )

    @classmethod
    def unmarshal(cls, data: bytes) -> "RecordLayerHeader":
        data = bytes(data)
        if len(data) < HEADER_SIZE:
            raise BufferTooSmallError()
        version = Version(data[1], data[2])
        if version not in (VERSION_1_0, VERSION_1_2):
            raise FatalError("unsupported protocol version")
        return cls(
            content_type=_content_type(data[0]),
            content_len=int.from_bytes(data[11:13], "big"),
            version=version,
            epoch=int.from_bytes(data[3:5], "big"),
            sequence_number=int.from_bytes(data[5:11], "big"),
        )


@dataclass
class RecordLayer:
    """A single DTLS record: a header and the content it carries."""

    header: RecordLayerHeader = field(default_factory=RecordLayerHeader)
    content: Optional[Content] = None

    def marshal(self) -> bytes:
        """Encode the record; the header's content type and length are refreshed."""
        if self.content is None:
            raise InternalError("record content unset, unable to marshal")
        raw = self.content.marshal()
        self.header = replace(
            self.header,
            content_len=len(raw),
            content_type=self.content.content_type,
        )
        return self.header.marshal() + raw

    @classmethod
    def unmarshal(cls, data: bytes) -> "RecordLayer":
        data = bytes(data)
        if len(data) < HEADER_SIZE:
            raise BufferTooSmallError()
        header = RecordLayerHeader.unmarshal(data)
        decoder = _CONTENT_DECODERS.get(data[0])
        if decoder is None:
            raise TemporaryError("invalid content type")
        return cls(header=header, content=decoder.unmarshal(data[HEADER_SIZE:]))


def unpack_datagram(buf: bytes) -> list[bytes]:
    """Split a datagram into the raw records it holds."""
    buf = bytes(buf)
    records = []
    offset = 0
    while offset != len(buf):
        if len(buf) - offset <= HEADER_SIZE:
            raise _invalid_packet_length()
        length_at = offset + HEADER_SIZE - 2
        packet_length = HEADER_SIZE + int.from_bytes(
            buf[length_at : length_at + 2], "big"
        )
        if offset + packet_length > len(buf):
            raise _invalid_packet_length()
        records.append(buf[offset : offset + packet_length])
        offset += packet_length
    return records