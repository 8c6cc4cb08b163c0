from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime

import pytest

from role_auth.application.ports.auth_event_repository_port import AuthEventCreateInput
from role_auth.application.ports.credential_hasher_port import CredentialHashingError
from role_auth.application.services.auth_service import AuthOutcome, AuthResult, AuthService
from role_auth.application.services.credential_verifier import CredentialVerifier
from role_auth.domain.auth.credentials import (
    ChallengeResponse,
    HashedCredential,
    LegacyPlaintextCredential,
    PlaintextSecret,
    StoredCredential,
)
from role_auth.infrastructure.security.credential_hasher import (
    Md5CredentialHasher,
    Sha256CredentialHasher,
)

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


@dataclass
class FakeCredentialDirectory:
    credential: StoredCredential | None

    async def get_by_role_name(self, *, role_name: str) -> StoredCredential | None:
        _ = role_name
        return self.credential


class FakeAuthEventRepository:
    def __init__(self) -> None:
        self.events: list[AuthEventCreateInput] = []

    async def append_event(self, payload: AuthEventCreateInput) -> int:
        self.events.append(payload)
        return len(self.events)


class BrokenHasher:
    marker = b"md5"

    def digest(self, secret: bytes, key: bytes) -> bytes:
        raise CredentialHashingError("md5 digest unavailable")

    def is_hashed(self, value: bytes) -> bool:
        return False

    def strip_marker(self, value: bytes) -> bytes:
        return value


def _service(
    credential: StoredCredential | None,
    *,
    hasher: object | None = None,
) -> tuple[AuthService, FakeAuthEventRepository]:
    auth_events = FakeAuthEventRepository()
    service = AuthService(
        directory=FakeCredentialDirectory(credential=credential),
        verifier=CredentialVerifier(
            hasher=hasher or Md5CredentialHasher(),  # type: ignore[arg-type]
            now=lambda: NOW,
        ),
        auth_events=auth_events,
    )
    return service, auth_events


def _bob() -> StoredCredential:
    return StoredCredential(
        role_name="bob",
        secret=HashedCredential(value=Md5CredentialHasher().digest(b"p@ss", b"bob")),
    )


@pytest.mark.asyncio
async def test_authenticate_success_logs_success_event() -> None:
    service, auth_events = _service(_bob())

    result = await service.authenticate(
        role_name="bob",
        presented=PlaintextSecret(value=b"p@ss"),
        remote_host="10.0.0.5",
    )

    assert result == AuthResult(outcome=AuthOutcome.SUCCESS)
    assert len(auth_events.events) == 1
    event = auth_events.events[0]
    assert event.event_type == "login_success"
    assert event.role_name == "bob"
    assert event.remote_host == "10.0.0.5"
    assert event.payload == {"method": "password"}


@pytest.mark.asyncio
async def test_authenticate_mismatch_logs_failure_event_without_detail() -> None:
    service, auth_events = _service(_bob())

    result = await service.authenticate(
        role_name="bob",
        presented=PlaintextSecret(value=b"p@ss "),
        remote_host="10.0.0.5",
    )

    assert result == AuthResult(outcome=AuthOutcome.FAILED)
    assert len(auth_events.events) == 1
    event = auth_events.events[0]
    assert event.event_type == "login_failed"
    assert event.payload == {"method": "password", "reason": "mismatch"}


@pytest.mark.asyncio
async def test_unknown_role_and_wrong_password_look_identical_to_client() -> None:
    unknown_service, unknown_events = _service(None)
    wrong_service, _ = _service(_bob())

    unknown = await unknown_service.authenticate(
        role_name="ghost",
        presented=PlaintextSecret(value=b"p@ss"),
        remote_host=None,
    )
    wrong = await wrong_service.authenticate(
        role_name="bob",
        presented=PlaintextSecret(value=b"nope"),
        remote_host=None,
    )

    assert unknown == wrong == AuthResult(outcome=AuthOutcome.FAILED)
    assert unknown_events.events[0].payload == {
        "method": "password",
        "reason": "identity_not_found",
    }


@pytest.mark.asyncio
async def test_rejection_detail_goes_to_server_log_only(
    caplog: pytest.LogCaptureFixture,
) -> None:
    service, auth_events = _service(
        StoredCredential(role_name="alice", secret=LegacyPlaintextCredential(value=b"secret123"))
    )

    with caplog.at_level(logging.WARNING):
        result = await service.authenticate(
            role_name="alice",
            presented=ChallengeResponse(digest=b"md5" + b"f" * 32, session_salt=b"XY12"),
            remote_host="10.0.0.7",
        )

    assert result.outcome is AuthOutcome.FAILED
    assert 'Password does not match for role "alice".' in caplog.text
    assert "reason=mismatch" in caplog.text
    assert auth_events.events[0].payload == {"method": "challenge", "reason": "mismatch"}
    assert "secret123" not in caplog.text


@pytest.mark.asyncio
async def test_hashing_failure_logs_error_and_still_fails_closed(
    caplog: pytest.LogCaptureFixture,
) -> None:
    service, auth_events = _service(
        StoredCredential(role_name="alice", secret=LegacyPlaintextCredential(value=b"secret123")),
        hasher=BrokenHasher(),
    )

    with caplog.at_level(logging.WARNING):
        result = await service.authenticate(
            role_name="alice",
            presented=ChallengeResponse(digest=b"md5" + b"0" * 32, session_salt=b"XY12"),
            remote_host=None,
        )

    assert result.outcome is AuthOutcome.FAILED
    assert auth_events.events[0].payload["reason"] == "hashing_failure"
    rejected = [record for record in caplog.records if "role_auth_rejected" in record.getMessage()]
    assert [record.levelno for record in rejected] == [logging.ERROR]


@pytest.mark.asyncio
async def test_foreign_hash_format_still_appends_failure_event() -> None:
    service, auth_events = _service(_bob(), hasher=Sha256CredentialHasher())

    result = await service.authenticate(
        role_name="bob",
        presented=ChallengeResponse(digest=b"sha256" + b"0" * 64, session_salt=b"XY12"),
        remote_host="10.0.0.5",
    )

    assert result.outcome is AuthOutcome.FAILED
    assert len(auth_events.events) == 1
    assert auth_events.events[0].payload == {"method": "challenge", "reason": "hashing_failure"}
