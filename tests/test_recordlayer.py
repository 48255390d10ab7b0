import pytest

from dtlswire.alert import Alert, AlertDescription, AlertLevel
from dtlswire.errors import (
    BufferTooSmallError,
    FatalError,
    InternalError,
    TemporaryError,
)
from dtlswire.handshake import Handshake
from dtlswire.messages import MessageFinished
from dtlswire.protocol import (
    VERSION_1_2,
    ApplicationData,
    ChangeCipherSpec,
    ContentType,
    Version,
)
from dtlswire.recordlayer import (
    MAX_SEQUENCE_NUMBER,
    RecordLayer,
    RecordLayerHeader,
    unpack_datagram,
)

CCS_18 = bytes(
    [0x14, 0xFE, 0xFF, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x12, 0x00, 0x01, 0x01]
)
CCS_19 = bytes(
    [0x14, 0xFE, 0xFF, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x13, 0x00, 0x01, 0x01]
)


@pytest.mark.parametrize(
    "data, want",
    [
        (CCS_18, [CCS_18]),
        (CCS_18 + CCS_19, [CCS_18, CCS_19]),
    ],
)
def test_unpack_datagram(data, want):
    assert unpack_datagram(data) == want


@pytest.mark.parametrize(
    "data",
    [
        bytes([0x14, 0xFE]),
        bytes(
            [0x14, 0xFE, 0xFF, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x00, 0x12, 0x00, 0xFF, 0x01]
        ),
    ],
)
def test_unpack_datagram_invalid_length(data):
    with pytest.raises(TemporaryError, match="packet length and declared length"):
        unpack_datagram(data)


def test_unpack_empty_datagram():
    assert unpack_datagram(b"") == []


def test_record_layer_round_trip_change_cipher_spec():
    record = RecordLayer.unmarshal(CCS_18)
    assert record.header.content_type == ContentType.CHANGE_CIPHER_SPEC
    assert record.header.version == Version(0xFE, 0xFF)
    assert record.header.epoch == 0
    assert record.header.sequence_number == 18
    assert record.content == ChangeCipherSpec()
    assert record.marshal() == CCS_18


def test_record_layer_alert_round_trip():
    record = RecordLayer(
        header=RecordLayerHeader(version=VERSION_1_2, epoch=1, sequence_number=7),
        content=Alert(AlertLevel.FATAL, AlertDescription.UNEXPECTED_MESSAGE),
    )
    raw = record.marshal()
    assert raw[0] == ContentType.ALERT
    decoded = RecordLayer.unmarshal(raw)
    assert decoded.content == Alert(AlertLevel.FATAL, AlertDescription.UNEXPECTED_MESSAGE)
    assert decoded.header.epoch == 1
    assert decoded.header.sequence_number == 7
    assert decoded.header.content_len == 2


def test_record_layer_application_data_round_trip():
    record = RecordLayer(
        header=RecordLayerHeader(version=VERSION_1_2),
        content=ApplicationData(b"hello"),
    )
    decoded = RecordLayer.unmarshal(record.marshal())
    assert decoded.content == ApplicationData(b"hello")
    assert decoded.header.content_type == ContentType.APPLICATION_DATA


def test_record_layer_handshake_round_trip():
    record = RecordLayer(
        header=RecordLayerHeader(version=VERSION_1_2, epoch=1, sequence_number=5),
        content=Handshake(message=MessageFinished(b"\x01\x02\x03")),
    )
    decoded = RecordLayer.unmarshal(record.marshal())
    assert isinstance(decoded.content, Handshake)
    assert decoded.content.message == MessageFinished(b"\x01\x02\x03")
    assert decoded.header.sequence_number == 5


def test_record_layer_too_small():
    with pytest.raises(BufferTooSmallError):
        RecordLayer.unmarshal(b"\x14\xfe")


def test_record_layer_invalid_content_type():
    data = bytes([0x30]) + CCS_18[1:]
    with pytest.raises(TemporaryError, match="invalid content type"):
        RecordLayer.unmarshal(data)


def test_header_unsupported_version():
    data = bytes([0x14, 0x03, 0x03]) + CCS_18[3:]
    with pytest.raises(FatalError, match="unsupported protocol version"):
        RecordLayerHeader.unmarshal(data)


def test_header_sequence_number_overflow():
    header = RecordLayerHeader(version=VERSION_1_2, sequence_number=MAX_SEQUENCE_NUMBER + 1)
    with pytest.raises(InternalError, match="sequence number overflow"):
        header.marshal()


def test_header_max_sequence_number_round_trip():
    header = RecordLayerHeader(
        content_type=ContentType.HANDSHAKE,
        content_len=3,
        version=VERSION_1_2,
        epoch=2,
        sequence_number=MAX_SEQUENCE_NUMBER,
    )
    assert RecordLayerHeader.unmarshal(header.marshal()) == header


def test_marshal_without_content():
    with pytest.raises(InternalError):
        RecordLayer().marshal()