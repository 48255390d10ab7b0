from dataclasses import dataclass

import pytest

from dtlswire.session import (
    SRTPProtectionProfile,
    Session,
    SessionStore,
    find_matching_cipher_suite,
    find_matching_srtp_profile,
    split_bytes,
)


@dataclass(frozen=True)
class _Suite:
    id: int
    name: str


def test_store_round_trip():
    store = SessionStore()
    session = Session(id=b"\x01\x02", secret=b"secret")
    store.set(b"example.com", session)
    assert store.get(b"example.com") == session


def test_store_missing_key():
    assert SessionStore().get(b"missing") is None


def test_store_delete():
    store = SessionStore()
    store.set(b"key", Session(id=b"\x05", secret=b"secret"))
    store.delete(b"key")
    assert store.get(b"key") is None
    store.delete(b"key")
    assert store.get(b"key") is None


def test_store_overwrite():
    store = SessionStore()
    first = Session(id=b"\x01", secret=b"secret")
    second = Session(id=b"\x02", secret=b"secret")
    store.set(b"k", first)
    store.set(b"k", second)
    assert store.get(b"k") == second


def test_find_matching_srtp_profile_prefers_first_list_order():
    a = [
        SRTPProtectionProfile.SRTP_AEAD_AES_128_GCM,
        SRTPProtectionProfile.SRTP_AES128_CM_HMAC_SHA1_80,
    ]
    b = [
        SRTPProtectionProfile.SRTP_AES128_CM_HMAC_SHA1_80,
        SRTPProtectionProfile.SRTP_AEAD_AES_128_GCM,
    ]
    assert find_matching_srtp_profile(a, b) is SRTPProtectionProfile.SRTP_AEAD_AES_128_GCM


def test_find_matching_srtp_profile_none():
    a = [SRTPProtectionProfile.SRTP_AES128_CM_HMAC_SHA1_32]
    b = [SRTPProtectionProfile.SRTP_AEAD_AES_256_GCM]
    assert find_matching_srtp_profile(a, b) is None


@pytest.mark.parametrize(
    "value, profile",
    [
        (0x0001, SRTPProtectionProfile.SRTP_AES128_CM_HMAC_SHA1_80),
        (0x0002, SRTPProtectionProfile.SRTP_AES128_CM_HMAC_SHA1_32),
        (0x0007, SRTPProtectionProfile.SRTP_AEAD_AES_128_GCM),
        (0x0008, SRTPProtectionProfile.SRTP_AEAD_AES_256_GCM),
    ],
)
def test_srtp_profile_wire_value(value, profile):
    assert SRTPProtectionProfile(value) is profile


def test_find_matching_cipher_suite_by_id():
    ours = [_Suite(0xC02B, "ours-a"), _Suite(0xC00A, "ours-b")]
    theirs = [_Suite(0xC00A, "theirs-b")]
    assert find_matching_cipher_suite(ours, theirs) == ours[1]


def test_find_matching_cipher_suite_none():
    assert find_matching_cipher_suite([_Suite(1, "a")], [_Suite(2, "b")]) is None


@pytest.mark.parametrize("size", [1, 2, 3, 7, 100])
def test_split_bytes_invariants(size):
    data = bytes(range(20))
    chunks = split_bytes(data, size)
    assert b"".join(chunks) == data
    assert all(len(chunk) == size for chunk in chunks[:-1])
    assert 0 < len(chunks[-1]) <= size


def test_split_bytes_empty():
    assert split_bytes(b"", 4) == []


def test_split_bytes_rejects_non_positive():
    with pytest.raises(ValueError):
        split_bytes(b"abc", 0)