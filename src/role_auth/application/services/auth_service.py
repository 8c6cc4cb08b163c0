"""Application authentication service for role credential verification."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum

from role_auth.application.ports.auth_event_repository_port import (
    AuthEventCreateInput,
    AuthEventRepositoryPort,
)
from role_auth.application.ports.credential_directory_port import CredentialDirectoryPort
from role_auth.application.services.credential_verifier import CredentialVerifier
from role_auth.domain.auth.credentials import ChallengeResponse, PresentedSecret
from role_auth.domain.auth.outcome import VerificationOutcome

logger = logging.getLogger(__name__)


class AuthOutcome(StrEnum):
    """Client-visible authentication outcomes."""

    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True)
class AuthResult:
    """Authentication result safe to hand to the protocol layer."""

    outcome: AuthOutcome


class AuthService:
    """Authenticate role credentials and append auth audit events."""

    def __init__(
        self,
        *,
        directory: CredentialDirectoryPort,
        verifier: CredentialVerifier,
        auth_events: AuthEventRepositoryPort,
    ) -> None:
        self._directory = directory
        self._verifier = verifier
        self._auth_events = auth_events

    async def authenticate(
        self,
        *,
        role_name: str,
        presented: PresentedSecret,
        remote_host: str | None,
    ) -> AuthResult:
        """Authenticate one attempt and always emit an auth event."""

        verification = await self._verifier.verify_async(
            role_name=role_name,
            presented=presented,
            directory=self._directory,
        )
        if verification.accepted:
            logger.info("role_auth_accepted role=%s remote_host=%s", role_name, remote_host)
            await self._auth_events.append_event(
                AuthEventCreateInput(
                    role_name=role_name,
                    event_type="login_success",
                    remote_host=remote_host,
                    payload={"method": _method_name(presented)},
                )
            )
            return AuthResult(outcome=AuthOutcome.SUCCESS)

        _log_rejection(role_name=role_name, remote_host=remote_host, verification=verification)
        await self._auth_events.append_event(
            AuthEventCreateInput(
                role_name=role_name,
                event_type="login_failed",
                remote_host=remote_host,
                payload={
                    "method": _method_name(presented),
                    "reason": str(verification.failure),
                },
            )
        )
        return AuthResult(outcome=AuthOutcome.FAILED)


def _log_rejection(
    *,
    role_name: str,
    remote_host: str | None,
    verification: VerificationOutcome,
) -> None:
    level = logging.ERROR if verification.is_operational_fault else logging.WARNING
    logger.log(
        level,
        "role_auth_rejected role=%s remote_host=%s reason=%s detail=%s",
        role_name,
        remote_host,
        verification.failure,
        verification.detail,
    )


def _method_name(presented: PresentedSecret) -> str:
    if isinstance(presented, ChallengeResponse):
        return "challenge"
    return "password"
