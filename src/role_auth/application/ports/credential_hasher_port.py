"""Port for keyed credential hashing used by the verifier."""

from __future__ import annotations

from typing import Protocol


class CredentialHashingError(RuntimeError):
    """Raised when the hashing backend cannot produce a digest."""


class CredentialHasherPort(Protocol):
    """Keyed hash contract shared by the name-keyed and session-salted digests."""

    marker: bytes

    def digest(self, secret: bytes, key: bytes) -> bytes:
        """Return marker-prefixed hex digest of secret keyed on key."""

    def is_hashed(self, value: bytes) -> bool:
        """Return whether a stored value is in this hasher's hashed form."""

    def strip_marker(self, value: bytes) -> bytes:
        """Return a hashed value without its marker prefix."""
