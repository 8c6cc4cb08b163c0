"""SQLAlchemy adapter for role credential lookups."""

from __future__ import annotations

from datetime import datetime
from typing import cast

import sqlalchemy as sa
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from role_auth.application.ports.credential_directory_port import CredentialDirectoryPort
from role_auth.application.ports.credential_hasher_port import CredentialHasherPort
from role_auth.domain.auth.credentials import StoredCredential
from role_auth.infrastructure.db.metadata import roles
from role_auth.infrastructure.security.credential_hasher import classify_stored_secret


class SqlAlchemyRoleCredentialRepository(CredentialDirectoryPort):
    """Read-only role credential directory backed by SQLAlchemy async sessions."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        hasher: CredentialHasherPort,
    ) -> None:
        self._session_factory = session_factory
        self._hasher = hasher

    async def get_by_role_name(self, *, role_name: str) -> StoredCredential | None:
        """Return stored credential for role name or None when the role is unknown."""

        statement = sa.select(
            roles.c.role_name,
            roles.c.role_password,
            roles.c.role_valid_until,
        ).where(roles.c.role_name == role_name).limit(1)

        async with self._session_factory() as session:
            result = await session.execute(statement)

        row = result.mappings().first()
        if row is None:
            return None
        return StoredCredential(
            role_name=cast(str, row["role_name"]),
            secret=classify_stored_secret(
                cast(str | None, row["role_password"]),
                hasher=self._hasher,
            ),
            valid_until=cast(datetime | None, row["role_valid_until"]),
        )
