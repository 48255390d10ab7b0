"""Encoding and decoding of the DTLS 1.2 wire format: records, handshakes, extensions and alerts."""

__version__ = "0.1.0"

__all__ = [
    "alert",
    "errors",
    "extension",
    "handshake",
    "handshake_header",
    "hello",
    "messages",
    "protocol",
    "recordlayer",
    "server_key_exchange",
    "session",
]