"""Verification outcome model shared by the verifier and its callers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class VerificationFailure(StrEnum):
    """Internal rejection kinds; all of them look identical to the client."""

    IDENTITY_NOT_FOUND = "identity_not_found"
    EMPTY_CREDENTIAL = "empty_credential"
    MISMATCH = "mismatch"
    EXPIRED = "expired"
    HASHING_FAILURE = "hashing_failure"


@dataclass(frozen=True)
class VerificationOutcome:
    """Accept/reject decision plus a server-log-only diagnostic."""

    accepted: bool
    failure: VerificationFailure | None = None
    detail: str | None = None

    @classmethod
    def accept(cls) -> VerificationOutcome:
        return cls(accepted=True)

    @classmethod
    def reject(cls, failure: VerificationFailure, *, detail: str) -> VerificationOutcome:
        return cls(accepted=False, failure=failure, detail=detail)

    @property
    def is_operational_fault(self) -> bool:
        """Return whether the rejection came from the server environment, not the client."""

        return self.failure is VerificationFailure.HASHING_FAILURE
