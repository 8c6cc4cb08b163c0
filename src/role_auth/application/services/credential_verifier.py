"""Credential verification for one role authentication attempt."""

from __future__ import annotations

import hmac
import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import assert_never

from role_auth.application.ports.credential_directory_port import (
    CredentialDirectoryPort,
    CredentialLookup,
)
from role_auth.application.ports.credential_hasher_port import (
    CredentialHasherPort,
    CredentialHashingError,
)
from role_auth.domain.auth.credentials import (
    ChallengeResponse,
    HashedCredential,
    LegacyPlaintextCredential,
    PlaintextSecret,
    PresentedSecret,
    StoredCredential,
    normalize_role_name,
)
from role_auth.domain.auth.outcome import VerificationFailure, VerificationOutcome

NowCallable = Callable[[], datetime]
logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


class CredentialVerifier:
    """Decide whether a presented secret matches a role's stored credential.

    Stored credentials may be hashed or legacy plaintext, and clients may send
    either a plaintext password or a salted challenge digest. Legacy plaintext
    credentials are hashed in memory, keyed on the role name, whenever they must
    meet a challenge digest; that intermediate value is never persisted or
    returned.
    """

    def __init__(
        self,
        *,
        hasher: CredentialHasherPort,
        now: NowCallable = _utc_now,
    ) -> None:
        self._hasher = hasher
        self._now = now

    def verify(
        self,
        *,
        role_name: str,
        presented: PresentedSecret,
        lookup: CredentialLookup,
    ) -> VerificationOutcome:
        """Verify against a synchronous directory lookup."""

        role_name = normalize_role_name(role_name=role_name)
        return self.decide(role_name=role_name, presented=presented, stored=lookup(role_name))

    async def verify_async(
        self,
        *,
        role_name: str,
        presented: PresentedSecret,
        directory: CredentialDirectoryPort,
    ) -> VerificationOutcome:
        """Verify against an async directory port."""

        role_name = normalize_role_name(role_name=role_name)
        stored = await directory.get_by_role_name(role_name=role_name)
        return self.decide(role_name=role_name, presented=presented, stored=stored)

    def decide(
        self,
        *,
        role_name: str,
        presented: PresentedSecret,
        stored: StoredCredential | None,
    ) -> VerificationOutcome:
        """Decide one attempt over an already resolved directory record."""

        if stored is None:
            return VerificationOutcome.reject(
                VerificationFailure.IDENTITY_NOT_FOUND,
                detail=f'Role "{role_name}" does not exist.',
            )
        if stored.secret is None:
            return VerificationOutcome.reject(
                VerificationFailure.EMPTY_CREDENTIAL,
                detail=f'Role "{role_name}" has no password assigned.',
            )
        if not stored.secret.value:
            return VerificationOutcome.reject(
                VerificationFailure.EMPTY_CREDENTIAL,
                detail=f'Role "{role_name}" has an empty password.',
            )

        try:
            expected, received = self._comparison_pair(
                role_name=role_name,
                presented=presented,
                stored=stored,
            )
        except CredentialHashingError as error:
            logger.error("credential_hashing_failed role=%s error=%s", role_name, error)
            return VerificationOutcome.reject(
                VerificationFailure.HASHING_FAILURE,
                detail=f'Could not hash or decode credential for role "{role_name}".',
            )

        if not hmac.compare_digest(expected, received):
            return VerificationOutcome.reject(
                VerificationFailure.MISMATCH,
                detail=f'Password does not match for role "{role_name}".',
            )

        if stored.valid_until is not None and self._now() > stored.valid_until:
            return VerificationOutcome.reject(
                VerificationFailure.EXPIRED,
                detail=f'Role "{role_name}" has an expired password.',
            )
        return VerificationOutcome.accept()

    def expected_challenge_digest(
        self,
        *,
        role_name: str,
        stored: HashedCredential | LegacyPlaintextCredential,
        session_salt: bytes,
    ) -> bytes:
        """Return the digest a client must send for a stored credential and salt."""

        match stored:
            case HashedCredential(value=hashed):
                pass
            case LegacyPlaintextCredential(value=plaintext):
                hashed = self._hasher.digest(plaintext, role_name.encode("utf-8"))
            case _:
                assert_never(stored)
        return self._hasher.digest(self._hasher.strip_marker(hashed), session_salt)

    def _comparison_pair(
        self,
        *,
        role_name: str,
        presented: PresentedSecret,
        stored: StoredCredential,
    ) -> tuple[bytes, bytes]:
        secret = stored.secret
        assert secret is not None
        if isinstance(secret, HashedCredential) and not self._hasher.is_hashed(secret.value):
            raise CredentialHashingError(
                f"stored credential is not in {self._hasher.marker.decode('ascii')} format"
            )

        match presented:
            case ChallengeResponse(digest=digest, session_salt=session_salt):
                expected = self.expected_challenge_digest(
                    role_name=role_name,
                    stored=secret,
                    session_salt=session_salt,
                )
                return expected, digest
            case PlaintextSecret(value=plaintext):
                match secret:
                    case HashedCredential(value=hashed):
                        candidate = self._hasher.digest(plaintext, role_name.encode("utf-8"))
                        return hashed, candidate
                    case LegacyPlaintextCredential(value=stored_plaintext):
                        return stored_plaintext, plaintext
                    case _:
                        assert_never(secret)
            case _:
                assert_never(presented)
