from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol


class SignalKeyStore(Protocol):
    async def get(self, key_type: str, ids: list[str]) -> dict[str, Any]: ...

    async def set(self, data: Mapping[str, Mapping[str, Any | None]]) -> None: ...

    async def clear(self) -> None: ...


@dataclass(slots=True, eq=False)
class AuthState:
    """
    The persisted unit: identity credentials plus raw key buckets.

    `keys` maps a bucket name (see `constants.KEY_MAP`) to `{record id: value}`.
    The adapter mutates both fields in place; callers keep a reference and
    serialize it whenever they want the session to survive a restart.
    """

    creds: Any
    keys: dict[str, dict[str, Any]] = field(default_factory=dict)


@dataclass(slots=True)
class AuthenticationState:
    """The live pair handed to the protocol client."""

    creds: Any
    keys: SignalKeyStore
