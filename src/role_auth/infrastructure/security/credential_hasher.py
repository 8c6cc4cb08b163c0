"""hashlib-backed keyed credential hashers."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Literal

from role_auth.application.ports.credential_hasher_port import (
    CredentialHasherPort,
    CredentialHashingError,
)
from role_auth.domain.auth.credentials import (
    HashedCredential,
    LegacyPlaintextCredential,
    StoredSecret,
)

HashAlgorithm = Literal["md5", "sha256"]


@dataclass(frozen=True)
class HexDigestCredentialHasher(CredentialHasherPort):
    """Keyed hasher producing `<marker><hex(digest(secret || key))>`.

    Stored values are recognized as hashed only when they carry the marker and
    have the exact encoded length, so legacy plaintext passwords that happen to
    start with the marker text still count as plaintext.
    """

    algorithm: str
    marker: bytes
    hex_length: int

    def digest(self, secret: bytes, key: bytes) -> bytes:
        try:
            hasher = hashlib.new(self.algorithm)
            hasher.update(secret)
            hasher.update(key)
            hex_digest = hasher.hexdigest()
        except (ValueError, MemoryError) as error:
            raise CredentialHashingError(
                f"{self.algorithm} digest unavailable: {error}"
            ) from error
        return self.marker + hex_digest.encode("ascii")

    def is_hashed(self, value: bytes) -> bool:
        return (
            value.startswith(self.marker)
            and len(value) == len(self.marker) + self.hex_length
        )

    def strip_marker(self, value: bytes) -> bytes:
        if not self.is_hashed(value):
            raise CredentialHashingError(f"value is not a {self.algorithm} hashed credential")
        return value[len(self.marker):]


class Md5CredentialHasher(HexDigestCredentialHasher):
    """Legacy MD5 hasher compatible with existing `md5`-prefixed credentials."""

    def __init__(self) -> None:
        super().__init__(algorithm="md5", marker=b"md5", hex_length=32)


class Sha256CredentialHasher(HexDigestCredentialHasher):
    """SHA-256 hasher with the same keyed shape as the legacy MD5 scheme."""

    def __init__(self) -> None:
        super().__init__(algorithm="sha256", marker=b"sha256", hex_length=64)


_KNOWN_HASHERS: tuple[CredentialHasherPort, ...] = (
    Md5CredentialHasher(),
    Sha256CredentialHasher(),
)


def build_credential_hasher(*, algorithm: HashAlgorithm) -> CredentialHasherPort:
    """Return the hasher configured for one algorithm name."""

    if algorithm == "md5":
        return Md5CredentialHasher()
    if algorithm == "sha256":
        return Sha256CredentialHasher()
    raise ValueError(f"unsupported credential hash algorithm: {algorithm}")


def classify_stored_secret(
    raw_password: str | bytes | None,
    *,
    hasher: CredentialHasherPort,
) -> StoredSecret | None:
    """Map a raw stored password onto its hashed or legacy plaintext variant.

    Values in any known hashed format stay hashed even when another algorithm is
    configured, so an old hash string never becomes a usable plaintext password.
    """

    if raw_password is None:
        return None
    value = raw_password.encode("utf-8") if isinstance(raw_password, str) else raw_password
    if hasher.is_hashed(value) or any(known.is_hashed(value) for known in _KNOWN_HASHERS):
        return HashedCredential(value=value)
    return LegacyPlaintextCredential(value=value)
