from __future__ import annotations

from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest
import sqlalchemy as sa
from alembic.config import Config

from alembic import command
from apps.auth_check import main as auth_check_main
from apps.auth_check.main import build_auth_service
from role_auth.application.services.auth_service import AuthOutcome
from role_auth.config.settings import Settings, load_settings
from role_auth.domain.auth.credentials import ChallengeResponse, PlaintextSecret
from role_auth.infrastructure.db.metadata import roles
from role_auth.infrastructure.db.session import create_session_factory
from role_auth.infrastructure.security.credential_hasher import Md5CredentialHasher


def _prepare_database(tmp_path: Path) -> tuple[str, str]:
    db_path = tmp_path / "auth_check.db"
    sync_url = f"sqlite+pysqlite:///{db_path}"
    async_url = f"sqlite+aiosqlite:///{db_path}"

    alembic_config = Config("alembic.ini")
    alembic_config.set_main_option("sqlalchemy.url", sync_url)
    command.upgrade(alembic_config, "head")

    engine = sa.create_engine(sync_url)
    with engine.begin() as connection:
        connection.execute(
            sa.insert(roles),
            [
                {"role_name": "alice", "role_password": "secret123", "role_valid_until": None},
                {
                    "role_name": "bob",
                    "role_password": "md5d744bf46f348e1d8e29af72ce475c5ce",
                    "role_valid_until": None,
                },
                {
                    "role_name": "expired",
                    "role_password": "old-secret",
                    "role_valid_until": datetime.now(tz=UTC) - timedelta(days=1),
                },
            ],
        )
    return sync_url, async_url


def _settings(async_url: str, *, ttl: float = 0.0) -> Settings:
    return Settings(  # type: ignore[call-arg]
        _env_file=None,
        DATABASE_URL=async_url,
        DIRECTORY_CACHE_TTL_SECONDS=ttl,
    )


def _auth_event_types(sync_url: str) -> list[str]:
    engine = sa.create_engine(sync_url)
    with engine.begin() as connection:
        return list(
            connection.execute(sa.text("SELECT event_type FROM auth_events ORDER BY id")).scalars()
        )


@pytest.mark.asyncio
@pytest.mark.parametrize("ttl", [0.0, 60.0])
async def test_composed_service_authenticates_against_database(tmp_path: Path, ttl: float) -> None:
    sync_url, async_url = _prepare_database(tmp_path)
    service = build_auth_service(
        settings=_settings(async_url, ttl=ttl),
        session_factory=create_session_factory(async_url),
    )
    hasher = Md5CredentialHasher()
    alice_digest = hasher.digest(
        hasher.strip_marker(hasher.digest(b"secret123", b"alice")),
        b"XY12",
    )

    alice = await service.authenticate(
        role_name="alice",
        presented=ChallengeResponse(digest=alice_digest, session_salt=b"XY12"),
        remote_host="10.0.0.5",
    )
    bob = await service.authenticate(
        role_name="bob",
        presented=PlaintextSecret(value=b"p@ss"),
        remote_host="10.0.0.6",
    )
    expired = await service.authenticate(
        role_name="expired",
        presented=PlaintextSecret(value=b"old-secret"),
        remote_host=None,
    )
    ghost = await service.authenticate(
        role_name="ghost",
        presented=PlaintextSecret(value=b"p@ss"),
        remote_host=None,
    )

    assert alice.outcome is AuthOutcome.SUCCESS
    assert bob.outcome is AuthOutcome.SUCCESS
    assert expired.outcome is AuthOutcome.FAILED
    assert ghost.outcome is AuthOutcome.FAILED
    assert _auth_event_types(sync_url) == [
        "login_success",
        "login_success",
        "login_failed",
        "login_failed",
    ]


@pytest.mark.parametrize(
    ("password", "expected_code", "expected_output"),
    [
        ("p@ss", 0, "authentication succeeded"),
        ("p@ss ", 1, "authentication failed"),
    ],
)
def test_main_reports_only_binary_outcome(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
    password: str,
    expected_code: int,
    expected_output: str,
) -> None:
    _, async_url = _prepare_database(tmp_path)
    monkeypatch.setenv("DATABASE_URL", async_url)
    monkeypatch.delenv("DIRECTORY_CACHE_TTL_SECONDS", raising=False)
    monkeypatch.delenv("CREDENTIAL_HASH_ALGORITHM", raising=False)
    monkeypatch.setattr(auth_check_main.getpass, "getpass", lambda prompt: password)
    load_settings.cache_clear()

    try:
        code = auth_check_main.main(["bob"])
    finally:
        load_settings.cache_clear()

    assert code == expected_code
    assert capsys.readouterr().out.strip() == expected_output
