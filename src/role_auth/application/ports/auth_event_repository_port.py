"""Port for appending authentication audit events."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol


@dataclass(frozen=True)
class AuthEventCreateInput:
    """Auth event insert payload."""

    role_name: str
    event_type: str
    remote_host: str | None
    payload: dict[str, Any] = field(default_factory=dict)


class AuthEventRepositoryPort(Protocol):
    """Auth event repository contract."""

    async def append_event(self, payload: AuthEventCreateInput) -> int:
        """Append one auth event and return its id."""
