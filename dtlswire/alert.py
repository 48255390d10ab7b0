"""The alert protocol: severity level and description of an alert."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import ClassVar

from .errors import BufferTooSmallError
from .protocol import Content, ContentType


def _camel(name: str) -> str:
    return "".join(part.capitalize() for part in name.split("_"))


class AlertLevel(IntEnum):
    """Severity of an alert."""

    WARNING = 1
    FATAL = 2

    def __str__(self) -> str:
        return _camel(self.name)


class AlertDescription(IntEnum):
    """Reason carried by an alert."""

    CLOSE_NOTIFY = 0
    UNEXPECTED_MESSAGE = 10
    BAD_RECORD_MAC = 20
    DECRYPTION_FAILED = 21
    RECORD_OVERFLOW = 22
    DECOMPRESSION_FAILURE = 30
    HANDSHAKE_FAILURE = 40
    NO_CERTIFICATE = 41
    BAD_CERTIFICATE = 42
    UNSUPPORTED_CERTIFICATE = 43
    CERTIFICATE_REVOKED = 44
    CERTIFICATE_EXPIRED = 45
    CERTIFICATE_UNKNOWN = 46
    ILLEGAL_PARAMETER = 47
    UNKNOWN_CA = 48
    ACCESS_DENIED = 49
    DECODE_ERROR = 50
    DECRYPT_ERROR = 51
    EXPORT_RESTRICTION = 60
    PROTOCOL_VERSION = 70
    INSUFFICIENT_SECURITY = 71
    INTERNAL_ERROR = 80
    USER_CANCELED = 90
    NO_RENEGOTIATION = 100
    UNSUPPORTED_EXTENSION = 110
    NO_APPLICATION_PROTOCOL = 120

    def __str__(self) -> str:
        if self is AlertDescription.UNKNOWN_CA:
            return "UnknownCA"
        return _camel(self.name)


def _level_name(value: int) -> str:
    try:
        return str(AlertLevel(value))
    except ValueError:
        return "Invalid alert level"


def _description_name(value: int) -> str:
    try:
        return str(AlertDescription(value))
    except ValueError:
        return "Invalid alert description"


def _as_enum(enum_cls, value: int) -> int:
    try:
        return enum_cls(value)
    except ValueError:
        return value


@dataclass
class Alert(Content):
    """An alert record: a level and a description, one byte each."""

    content_type: ClassVar[ContentType] = ContentType.ALERT

    level: int
    description: int

    def marshal(self) -> bytes:
        return bytes([int(self.level), int(self.description)])

    @classmethod
    def unmarshal(cls, data: bytes) -> "Alert":
        if len(data) != 2:
            raise BufferTooSmallError()
        return cls(_as_enum(AlertLevel, data[0]), _as_enum(AlertDescription, data[1]))

    def __str__(self) -> str:
        return f"Alert {_level_name(self.level)}: {_description_name(self.description)}"