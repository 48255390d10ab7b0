"""Session resumption data and negotiation helpers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, TypeVar

from .extension import SRTPProtectionProfile

__all__ = [
    "SRTPProtectionProfile",
    "Session",
    "SessionStore",
    "find_matching_cipher_suite",
    "find_matching_srtp_profile",
    "split_bytes",
]

_S = TypeVar("_S")


@dataclass(frozen=True)
class Session:
    """Data needed to resume a session: its identifier and master secret."""

    id: bytes = b""
    secret: bytes = b""


class SessionStore:
    """In-memory store of sessions for resumption.

    Clients key sessions by server name, servers by session identifier.
    Subclass to persist sessions elsewhere.
    """

    def __init__(self) -> None:
        self._sessions: dict[bytes, Session] = {}

    def set(self, key: bytes, session: Session) -> None:
        """Save a session under the given key."""
        self._sessions[bytes(key)] = session

    def get(self, key: bytes) -> Optional[Session]:
        """Fetch the session saved under the key, or None."""
        return self._sessions.get(bytes(key))

    def delete(self, key: bytes) -> None:
        """Forget the session saved under the key, if any."""
        self._sessions.pop(bytes(key), None)


def find_matching_srtp_profile(
    a: Iterable[SRTPProtectionProfile], b: Sequence[SRTPProtectionProfile]
) -> Optional[SRTPProtectionProfile]:
    """Return the first profile of ``a`` also in ``b``, or None."""
    return next((profile for profile in a if profile in b), None)


def find_matching_cipher_suite(a: Iterable[_S], b: Sequence[_S]) -> Optional[_S]:
    """Return the first suite of ``a`` whose ``id`` matches a suite in ``b``, or None."""
    ids = {suite.id for suite in b}  # type: ignore[attr-defined]
    return next((suite for suite in a if suite.id in ids), None)  # type: ignore[attr-defined]


def split_bytes(data: bytes, split_len: int) -> list[bytes]:
    """Split data into chunks of ``split_len`` bytes; the last may be shorter."""
    if split_len <= 0:
        raise ValueError("split_len must be positive")
    return [data[i : i + split_len] for i in range(0, len(data), split_len)]