"""auth-check entrypoint for verifying one role password against the directory."""

from __future__ import annotations

import argparse
import asyncio
import getpass
import logging
import sys
from collections.abc import Sequence

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from role_auth.application.ports.credential_directory_port import CredentialDirectoryPort
from role_auth.application.services.auth_service import AuthOutcome, AuthService
from role_auth.application.services.credential_verifier import CredentialVerifier
from role_auth.config.settings import Settings, load_settings
from role_auth.domain.auth.credentials import PlaintextSecret, encode_secret
from role_auth.infrastructure.db.auth_event_repository import SqlAlchemyAuthEventRepository
from role_auth.infrastructure.db.role_credential_repository import (
    SqlAlchemyRoleCredentialRepository,
)
from role_auth.infrastructure.db.session import create_session_factory
from role_auth.infrastructure.directory.caching_directory import CachingRoleCredentialDirectory
from role_auth.infrastructure.logging import configure_logging
from role_auth.infrastructure.security.credential_hasher import build_credential_hasher

logger = logging.getLogger(__name__)


def build_auth_service(
    *,
    settings: Settings,
    session_factory: async_sessionmaker[AsyncSession],
) -> AuthService:
    """Compose the authentication service from settings and SQLAlchemy adapters."""

    hasher = build_credential_hasher(algorithm=settings.credential_hash_algorithm)
    directory: CredentialDirectoryPort = SqlAlchemyRoleCredentialRepository(
        session_factory,
        hasher=hasher,
    )
    if settings.directory_cache_ttl_seconds > 0:
        directory = CachingRoleCredentialDirectory(
            directory=directory,
            ttl_seconds=settings.directory_cache_ttl_seconds,
        )
    return AuthService(
        directory=directory,
        verifier=CredentialVerifier(hasher=hasher),
        auth_events=SqlAlchemyAuthEventRepository(session_factory),
    )


async def _run_check(*, role_name: str, password: str) -> AuthOutcome:
    settings = load_settings()
    configure_logging(level=settings.log_level)
    logger.info(
        "auth_check_starting role=%s algorithm=%s",
        role_name,
        settings.credential_hash_algorithm,
    )

    service = build_auth_service(
        settings=settings,
        session_factory=create_session_factory(settings.database_url),
    )
    result = await service.authenticate(
        role_name=role_name,
        presented=PlaintextSecret(value=encode_secret(password)),
        remote_host="local",
    )
    return result.outcome


def main(argv: Sequence[str] | None = None) -> int:
    """Prompt for a role password and report only success or failure."""

    parser = argparse.ArgumentParser(description="Check a role password against the directory.")
    parser.add_argument("role_name")
    args = parser.parse_args(argv)

    password = getpass.getpass(f"Password for role {args.role_name}: ")
    outcome = asyncio.run(_run_check(role_name=args.role_name, password=password))
    if outcome is AuthOutcome.SUCCESS:
        print("authentication succeeded")
        return 0
    print("authentication failed")
    return 1


if __name__ == "__main__":
    sys.exit(main())
