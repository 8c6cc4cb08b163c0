"""TTL cache in front of a role credential directory."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from role_auth.application.ports.credential_directory_port import CredentialDirectoryPort
from role_auth.domain.auth.credentials import StoredCredential

NowCallable = Callable[[], datetime]
logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass(frozen=True)
class _CacheEntry:
    credential: StoredCredential
    expires_at: datetime


class CachingRoleCredentialDirectory(CredentialDirectoryPort):
    """Cache positive role lookups for a bounded time.

    Unknown roles are never cached, so probing arbitrary names does not grow
    the cache. Callers own the cache lifecycle and must `invalidate` a role
    after changing its credential.
    """

    def __init__(
        self,
        *,
        directory: CredentialDirectoryPort,
        ttl_seconds: float,
        now: NowCallable = _utc_now,
    ) -> None:
        if ttl_seconds < 0:
            raise ValueError("ttl_seconds must be non-negative")
        self._directory = directory
        self._ttl = timedelta(seconds=ttl_seconds)
        self._now = now
        self._entries: dict[str, _CacheEntry] = {}

    async def get_by_role_name(self, *, role_name: str) -> StoredCredential | None:
        now = self._now()
        entry = self._entries.get(role_name)
        if entry is not None and now < entry.expires_at:
            return entry.credential

        credential = await self._directory.get_by_role_name(role_name=role_name)
        if credential is None:
            self._entries.pop(role_name, None)
            return None
        if self._ttl > timedelta(0):
            self._entries[role_name] = _CacheEntry(
                credential=credential,
                expires_at=now + self._ttl,
            )
        return credential

    def invalidate(self, role_name: str) -> None:
        """Drop one cached role so the next lookup hits the directory."""

        if self._entries.pop(role_name, None) is not None:
            logger.info("role_credential_cache_invalidated role=%s", role_name)

    def clear(self) -> None:
        """Drop every cached role."""

        self._entries.clear()
