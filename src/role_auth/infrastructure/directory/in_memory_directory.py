"""Dictionary-backed role credential directory."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime

from role_auth.application.ports.credential_directory_port import CredentialDirectoryPort
from role_auth.application.ports.credential_hasher_port import CredentialHasherPort
from role_auth.domain.auth.credentials import StoredCredential
from role_auth.infrastructure.security.credential_hasher import classify_stored_secret


class InMemoryRoleCredentialDirectory(CredentialDirectoryPort):
    """Role directory over an immutable snapshot of stored credentials.

    Instances are callable, so they can be handed to the synchronous
    `CredentialVerifier.verify` entry point as the lookup capability.
    """

    def __init__(self, credentials: Mapping[str, StoredCredential]) -> None:
        self._credentials = dict(credentials)

    @classmethod
    def from_raw(
        cls,
        rows: Mapping[str, tuple[str | None, datetime | None]],
        *,
        hasher: CredentialHasherPort,
    ) -> InMemoryRoleCredentialDirectory:
        """Build a directory from `role_name -> (raw_password, valid_until)` rows."""

        return cls(
            {
                role_name: StoredCredential(
                    role_name=role_name,
                    secret=classify_stored_secret(raw_password, hasher=hasher),
                    valid_until=valid_until,
                )
                for role_name, (raw_password, valid_until) in rows.items()
            }
        )

    def __call__(self, role_name: str) -> StoredCredential | None:
        return self._credentials.get(role_name)

    async def get_by_role_name(self, *, role_name: str) -> StoredCredential | None:
        return self._credentials.get(role_name)
