"""Stored and presented credential variants for role authentication."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime


@dataclass(frozen=True)
class LegacyPlaintextCredential:
    """Credential stored before hashing was enforced."""

    value: bytes = field(repr=False)


@dataclass(frozen=True)
class HashedCredential:
    """Credential stored in marker-prefixed hashed form."""

    value: bytes = field(repr=False)


StoredSecret = LegacyPlaintextCredential | HashedCredential


@dataclass(frozen=True)
class StoredCredential:
    """Directory record for one role; `secret` is None when none was assigned."""

    role_name: str
    secret: StoredSecret | None
    valid_until: datetime | None = None

    def __post_init__(self) -> None:
        # Naive expiry timestamps are stored in UTC.
        if self.valid_until is not None and self.valid_until.tzinfo is None:
            object.__setattr__(self, "valid_until", self.valid_until.replace(tzinfo=UTC))


@dataclass(frozen=True)
class PlaintextSecret:
    """Password sent by the client in clear form."""

    value: bytes = field(repr=False)


@dataclass(frozen=True)
class ChallengeResponse:
    """Digest computed by the client over its credential and a one-shot session salt."""

    digest: bytes = field(repr=False)
    session_salt: bytes

    def __post_init__(self) -> None:
        if not self.session_salt:
            raise ValueError("session salt cannot be empty")


PresentedSecret = PlaintextSecret | ChallengeResponse


def normalize_role_name(*, role_name: str) -> str:
    """Reject empty role names without altering the looked-up value."""

    if not role_name:
        raise ValueError("role name cannot be empty")
    return role_name


def encode_secret(value: str | bytes) -> bytes:
    """Return raw secret bytes, encoding text values as UTF-8."""

    if isinstance(value, bytes):
        return value
    return value.encode("utf-8")
