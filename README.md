# dtlswire

`dtlswire` reads and writes the DTLS 1.2 wire format in pure Python. It turns
the bytes that go over the wire into plain dataclasses, and turns those objects
back into bytes.

## What it covers

- **Record layer** (`dtlswire.recordlayer`): `RecordLayerHeader`,
  `RecordLayer`, and `unpack_datagram`, which splits one datagram into the raw
  records it holds.
- **Record contents**: `ChangeCipherSpec` and `ApplicationData`
  (`dtlswire.protocol`), `Alert` with `AlertLevel` and `AlertDescription`
  (`dtlswire.alert`), and `Handshake` (`dtlswire.handshake`).
- **Handshake header and helpers** (`dtlswire.handshake_header`):
  `HandshakeHeader`, `HandshakeType`, `Random` (with `Random.generate()` for a
  fresh value stamped with the current time), `encode_cipher_suite_ids` and
  `decode_cipher_suite_ids`.
- **Handshake messages**:
  - `MessageClientHello` and `MessageServerHello` in `dtlswire.hello`.
  - `MessageCertificate`, `MessageCertificateRequest`,
    `MessageCertificateVerify`, `MessageHelloVerifyRequest`,
    `MessageClientKeyExchange`, `MessageServerHelloDone` and `MessageFinished`
    in `dtlswire.messages`.
  - `MessageServerKeyExchange` in `dtlswire.server_key_exchange`.
- **Hello extensions** (`dtlswire.extension`): `ALPN`, `ServerName`,
  `RenegotiationInfo`, `UseExtendedMasterSecret`, `UseSRTP`,
  `SupportedEllipticCurves`, `SupportedPointFormats` and
  `SupportedSignatureAlgorithms`, plus `marshal_extensions` and
  `unmarshal_extensions` for a whole length-prefixed block. Unknown extension
  types are skipped when decoding.
- **Negotiation helpers**: `alpn_protocol_selection` (`dtlswire.extension`),
  and `find_matching_srtp_profile`, `find_matching_cipher_suite` and
  `split_bytes` (`dtlswire.session`).
- **Session data** (`dtlswire.session`): the `Session` dataclass (identifier
  and master secret) and `SessionStore`, an in-memory store with `set`, `get`
  and `delete`.

## Installing

```
pip install .
```

No third-party libraries are needed.

## Usage

To encode a value, call its `marshal()` method; it returns `bytes`. To decode,
call the class method `unmarshal(data)`; it returns a new object.

Key exchange messages cannot be decoded without the negotiated key exchange
algorithm. Pass a `dtlswire.messages.KeyExchangeAlgorithm` as the second
argument to `MessageClientKeyExchange.unmarshal`,
`MessageServerKeyExchange.unmarshal` or `Handshake.unmarshal`.

```python
from dtlswire.recordlayer import RecordLayer, unpack_datagram

datagram = bytes.fromhex("14feff00000000000000120001" "01")
for raw in unpack_datagram(datagram):
    record = RecordLayer.unmarshal(raw)
    print(record.header.sequence_number, type(record.content).__name__)
    assert record.marshal() == raw
```

```python
from dtlswire.extension import ALPN, alpn_protocol_selection

raw = ALPN(protocol_name_list=["h2", "http/1.1"]).marshal()
print(ALPN.unmarshal(raw).protocol_name_list)
print(alpn_protocol_selection(["http/1.1"], ["h2", "http/1.1"]))
```

## Errors

Malformed or unsupported input raises an exception derived from
`dtlswire.errors.DTLSError`:

| Exception | Meaning |
| --- | --- |
| `FatalError` | The connection cannot continue. |
| `TemporaryError` | Only this request failed. `BufferTooSmallError` is one of these. |
| `InternalError` | The library could not proceed. `LengthMismatchError` is one of these. |
| `DTLSTimeoutError` | The operation timed out. |
| `HandshakeError` | The handshake failed; it wraps the underlying error. |

Every error answers `timeout()` and `temporary()`.

## What it does not do

This is a codec only. It opens no sockets and runs no handshake state machine,
so there is no client, server or connection object. It performs no
cryptography: no cipher suites, no record encryption or MAC checking, no key
derivation, no certificate validation, and no replay detection. Sessions are
kept only in memory by `SessionStore`.

## Tests

```
pip install .[test]
pytest
```