from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

from ..constants import KEY_MAP
from ..util.asyncio import ensure_task
from .keys import DEFAULT_DECODERS, KeyDecoder
from .state import AuthenticationState, AuthState
from .utils import init_auth_creds

if TYPE_CHECKING:
    from ..config import WhatsAppAdapterOptions

logger = logging.getLogger(__name__)


class InMemoryKeyStore:
    """
    Signal key store over the raw bucket mapping of an `AuthState`.

    Buckets are created on first write. Every `set`/`clear` ends with exactly
    one call to `on_change`; reads never trigger it.
    """

    def __init__(
        self,
        keys: dict[str, dict[str, Any]],
        *,
        on_change: Callable[[], None],
        decoders: Mapping[str, KeyDecoder] | None = None,
    ) -> None:
        self._keys = keys
        self._on_change = on_change
        self._decoders = dict(DEFAULT_DECODERS if decoders is None else decoders)

    async def get(self, key_type: str, ids: list[str]) -> dict[str, Any]:
        bucket = self._keys.get(KEY_MAP[key_type]) or {}
        decode = self._decoders.get(key_type)
        out: dict[str, Any] = {}
        for key_id in ids:
            value = bucket.get(key_id)
            if value is None:
                continue
            out[key_id] = decode(value) if decode else value
        return out

    async def set(self, data: Mapping[str, Mapping[str, Any | None]]) -> None:
        # Resolve every category first so an unknown one leaves the state untouched.
        updates = [(KEY_MAP[key_type], items) for key_type, items in data.items()]
        for name, items in updates:
            self._keys.setdefault(name, {}).update(items)
        self._on_change()

    async def clear(self) -> None:
        self._keys.clear()
        self._on_change()


class AuthStateStore:
    """
    Owns the adapter's `AuthState` and writes it back to the options object.

    The state is adopted (or freshly generated) once, at construction. Every
    session opened afterwards gets the same, by then possibly mutated, objects.
    """

    def __init__(
        self,
        options: WhatsAppAdapterOptions,
        *,
        decoders: Mapping[str, KeyDecoder] | None = None,
    ) -> None:
        self._options = options
        if options.auth is not None:
            self.auth = options.auth
        else:
            self.auth = AuthState(creds=init_auth_creds(), keys={})
        self.keys = InMemoryKeyStore(self.auth.keys, on_change=self.save_state, decoders=decoders)

    def snapshot(self) -> tuple[AuthenticationState, Callable[[], None]]:
        """The live state for a new session plus the routine that persists it."""

        return AuthenticationState(creds=self.auth.creds, keys=self.keys), self.save_state

    def save_state(self) -> None:
        self._options.auth = self.auth

        hook = self._options.on_auth_update
        if hook is None:
            return
        try:
            res = hook(self.auth)
        except Exception:
            logger.exception("on_auth_update hook failed")
            return
        if asyncio.iscoroutine(res):
            ensure_task(_report_failure(res), name="whatsapp.auth_update")


async def _report_failure(coro: Any) -> None:
    try:
        await coro
    except Exception:
        logger.exception("on_auth_update hook failed")
