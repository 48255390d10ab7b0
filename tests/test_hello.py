import pytest

from dtlswire.errors import BufferTooSmallError, FatalError
from dtlswire.extension import Curve, SupportedEllipticCurves
from dtlswire.handshake_header import Random
from dtlswire.hello import MessageClientHello, MessageServerHello
from dtlswire.protocol import CompressionMethod, Version

CLIENT_RANDOM_BYTES = bytes(
    [
        0x42, 0x54, 0xFF, 0x86, 0xE1, 0x24, 0x41, 0x91, 0x42, 0x62, 0x15, 0xAD,
        0x16, 0xC9, 0x15, 0x8D, 0x95, 0x71, 0x8A, 0xBB, 0x22, 0xD7, 0x47, 0xEC,
        0xD8, 0x3D, 0xDC, 0x4B,
    ]
)

RAW_CLIENT_HELLO = bytes(
    [
        0xFE, 0xFD, 0xB6, 0x2F, 0xCE, 0x5C, 0x42, 0x54, 0xFF, 0x86, 0xE1, 0x24, 0x41, 0x91, 0x42,
        0x62, 0x15, 0xAD, 0x16, 0xC9, 0x15, 0x8D, 0x95, 0x71, 0x8A, 0xBB, 0x22, 0xD7, 0x47, 0xEC,
        0xD8, 0x3D, 0xDC, 0x4B, 0x00, 0x14, 0xE6, 0x14, 0x3A, 0x1B, 0x04, 0xEA, 0x9E, 0x7A, 0x14,
        0xD6, 0x6C, 0x57, 0xD0, 0x0E, 0x32, 0x85, 0x76, 0x18, 0xDE, 0xD8, 0x00, 0x04, 0xC0, 0x2B,
        0xC0, 0x0A, 0x01, 0x00, 0x00, 0x08, 0x00, 0x0A, 0x00, 0x04, 0x00, 0x02, 0x00, 0x1D,
    ]
)

SESSION_ID = bytes(range(0xE0, 0x100))

RAW_CLIENT_HELLO_SESSION_ID = (
    RAW_CLIENT_HELLO[:34] + bytes([0x20]) + SESSION_ID + RAW_CLIENT_HELLO[35:]
)

SERVER_RANDOM_BYTES = bytes(
    [
        0x81, 0x0E, 0x98, 0x6C, 0x85, 0x3D, 0xA4, 0x39, 0xAF, 0x5F, 0xD6, 0x5C,
        0xCC, 0x20, 0x7F, 0x7C, 0x78, 0xF1, 0x5F, 0x7E, 0x1C, 0xB7, 0xA1, 0x1E,
        0xCF, 0x63, 0x84, 0x28,
    ]
)

RAW_SERVER_HELLO = bytes(
    [
        0xFE, 0xFD, 0x21, 0x63, 0x32, 0x21, 0x81, 0x0E, 0x98, 0x6C,
        0x85, 0x3D, 0xA4, 0x39, 0xAF, 0x5F, 0xD6, 0x5C, 0xCC, 0x20,
        0x7F, 0x7C, 0x78, 0xF1, 0x5F, 0x7E, 0x1C, 0xB7, 0xA1, 0x1E,
        0xCF, 0x63, 0x84, 0x28, 0x00, 0xC0, 0x2B, 0x00, 0x00, 0x00,
    ]
)

RAW_SERVER_HELLO_SESSION_ID = (
    RAW_SERVER_HELLO[:34] + bytes([0x20]) + SESSION_ID + RAW_SERVER_HELLO[35:]
)


def test_client_hello_unmarshal_and_marshal():
    expected = MessageClientHello(
        version=Version(0xFE, 0xFD),
        random=Random(3056586332, CLIENT_RANDOM_BYTES),
        session_id=b"",
        cookie=bytes(
            [
                0xE6, 0x14, 0x3A, 0x1B, 0x04, 0xEA, 0x9E, 0x7A, 0x14, 0xD6,
                0x6C, 0x57, 0xD0, 0x0E, 0x32, 0x85, 0x76, 0x18, 0xDE, 0xD8,
            ]
        ),
        cipher_suite_ids=[0xC02B, 0xC00A],
        compression_methods=[CompressionMethod()],
        extensions=[SupportedEllipticCurves([Curve.X25519])],
    )
    parsed = MessageClientHello.unmarshal(RAW_CLIENT_HELLO)
    assert parsed == expected
    assert parsed.marshal() == RAW_CLIENT_HELLO


def test_client_hello_session_id():
    parsed = MessageClientHello.unmarshal(RAW_CLIENT_HELLO_SESSION_ID)
    assert parsed.session_id == SESSION_ID
    assert parsed.marshal() == RAW_CLIENT_HELLO_SESSION_ID


def test_client_hello_cookie_too_long():
    hello = MessageClientHello(cookie=bytes(256))
    with pytest.raises(FatalError):
        hello.marshal()


@pytest.mark.parametrize("length", [0, 10, 34, 35, 36])
def test_client_hello_truncated(length):
    with pytest.raises(BufferTooSmallError):
        MessageClientHello.unmarshal(RAW_CLIENT_HELLO[:length])


def test_server_hello_unmarshal_and_marshal():
    expected = MessageServerHello(
        version=Version(0xFE, 0xFD),
        random=Random(560149025, SERVER_RANDOM_BYTES),
        session_id=b"",
        cipher_suite_id=0xC02B,
        compression_method=CompressionMethod(),
        extensions=[],
    )
    parsed = MessageServerHello.unmarshal(RAW_SERVER_HELLO)
    assert parsed == expected
    assert parsed.marshal() == RAW_SERVER_HELLO


def test_server_hello_session_id():
    parsed = MessageServerHello.unmarshal(RAW_SERVER_HELLO_SESSION_ID)
    assert parsed.session_id == SESSION_ID
    assert parsed.marshal() == RAW_SERVER_HELLO_SESSION_ID


def test_server_hello_without_extension_block():
    parsed = MessageServerHello.unmarshal(RAW_SERVER_HELLO[:-2])
    assert parsed.extensions == []
    assert parsed.cipher_suite_id == 0xC02B


def test_server_hello_requires_cipher_suite():
    hello = MessageServerHello(compression_method=CompressionMethod())
    with pytest.raises(FatalError, match="cipher suite"):
        hello.marshal()


def test_server_hello_requires_compression_method():
    hello = MessageServerHello(cipher_suite_id=0xC02B)
    with pytest.raises(FatalError, match="compression method"):
        hello.marshal()


def test_server_hello_invalid_compression_method():
    raw = RAW_SERVER_HELLO[:37] + b"\x05" + RAW_SERVER_HELLO[38:]
    with pytest.raises(FatalError, match="compression"):
        MessageServerHello.unmarshal(raw)


def test_server_hello_truncated():
    with pytest.raises(BufferTooSmallError):
        MessageServerHello.unmarshal(RAW_SERVER_HELLO[:36])