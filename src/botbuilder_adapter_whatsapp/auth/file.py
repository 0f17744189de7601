from __future__ import annotations

import asyncio
from pathlib import Path

from ..exceptions import AuthError
from ..util import json as bufferjson
from .serde import auth_state_from_dict, auth_state_to_dict
from .state import AuthState

_FILE_LOCKS: dict[Path, asyncio.Lock] = {}


def _lock_for(path: Path) -> asyncio.Lock:
    lock = _FILE_LOCKS.get(path)
    if lock is None:
        lock = asyncio.Lock()
        _FILE_LOCKS[path] = lock
    return lock


def _write_atomic(path: Path, data: str) -> None:
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(data, "utf-8")
    tmp.replace(path)


async def load_auth_file(path: str | Path) -> AuthState | None:
    """
    Load an `AuthState` written by `save_auth_file`.

    Returns `None` when the file does not exist yet (first run, before pairing).
    """

    p = Path(path).expanduser()
    if not p.exists():
        return None
    try:
        async with _lock_for(p):
            raw = await asyncio.to_thread(p.read_text, "utf-8")
        d = bufferjson.loads(raw)
        if not isinstance(d, dict):
            raise TypeError(f"{p.name} did not contain an object")
        return auth_state_from_dict(d)
    except (OSError, ValueError, TypeError, KeyError) as e:
        raise AuthError(f"failed to load auth state from {p}: {e}") from e


async def save_auth_file(path: str | Path, auth: AuthState) -> None:
    p = Path(path).expanduser()
    await asyncio.to_thread(p.parent.mkdir, parents=True, exist_ok=True)
    data = bufferjson.dumps(auth_state_to_dict(auth), indent=2)
    async with _lock_for(p):
        await asyncio.to_thread(_write_atomic, p, data)
