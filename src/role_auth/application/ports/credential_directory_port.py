"""Port for role credential lookups used by authentication services."""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol

from role_auth.domain.auth.credentials import StoredCredential

CredentialLookup = Callable[[str], StoredCredential | None]


class CredentialDirectoryPort(Protocol):
    """Read-only role credential directory contract."""

    async def get_by_role_name(self, *, role_name: str) -> StoredCredential | None:
        """Return stored credential for role name or None when the role is unknown."""
