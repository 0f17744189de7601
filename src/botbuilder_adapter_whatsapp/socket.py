from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, Protocol

from .auth.state import AuthenticationState
from .auth.utils import me_jid
from .constants import (
    EV_CONNECTION_UPDATE,
    EV_CREDS_UPDATE,
    EV_MESSAGES_UPSERT,
    DisconnectReason,
)
from .exceptions import ConnectionClosedError
from .messages import WAMessage
from .util.events import AsyncEventEmitter, Listener


class WhatsAppSocket(Protocol):
    """
    What the supervisor needs from a protocol session.

    Events: `messages.upsert` / `messages.set` (`{"messages": [...]}`),
    `connection.update` (`ConnectionUpdate`), `creds.update`.
    """

    def on(self, event: str, listener: Listener) -> None: ...

    async def connect(self) -> None: ...

    async def close(self) -> None: ...


SocketFactory = Callable[..., WhatsAppSocket]


@dataclass(slots=True)
class ConnectionUpdate:
    connection: str | None = None  # "connecting" | "open" | "close"
    qr: str | None = None
    is_new_login: bool | None = None
    last_disconnect: Any | None = None

    @classmethod
    def coerce(cls, raw: Any) -> ConnectionUpdate:
        if isinstance(raw, ConnectionUpdate):
            return raw
        if isinstance(raw, Mapping):
            last = raw.get("last_disconnect", raw.get("lastDisconnect"))
            # Baileys wraps the error: {"error": Boom, "date": ...}
            if isinstance(last, Mapping) and "error" in last:
                last = last["error"]
            return cls(
                connection=raw.get("connection"),
                qr=raw.get("qr"),
                is_new_login=raw.get("is_new_login", raw.get("isNewLogin")),
                last_disconnect=last,
            )
        return cls(
            connection=getattr(raw, "connection", None),
            qr=getattr(raw, "qr", None),
            is_new_login=getattr(raw, "is_new_login", None),
            last_disconnect=getattr(raw, "last_disconnect", None),
        )


def _as_int(v: Any) -> int | None:
    if isinstance(v, bool) or v is None:
        return None
    try:
        return int(v)
    except (TypeError, ValueError):
        return None


def disconnect_status_code(error: Any) -> int | None:
    """
    Status code of a disconnect error, Baileys style.

    Understands `ConnectionClosedError`, objects with `status_code`/`code`,
    Boom-like `output.statusCode`, and the same keys on mappings.
    """

    if error is None:
        return None
    if isinstance(error, Mapping):
        output = error.get("output")
        if isinstance(output, Mapping):
            code = _as_int(output.get("statusCode"))
            if code is not None:
                return code
        for name in ("statusCode", "status_code", "code"):
            code = _as_int(error.get(name))
            if code is not None:
                return code
        return None

    for name in ("status_code", "code"):
        code = _as_int(getattr(error, name, None))
        if code is not None:
            return code
    output = getattr(error, "output", None)
    if output is not None:
        return disconnect_status_code(output)
    return None


def is_logged_out(update: ConnectionUpdate) -> bool:
    return disconnect_status_code(update.last_disconnect) == DisconnectReason.LOGGED_OUT


class PyaileysSocket:
    """
    Presents a `pyaileys.WhatsAppClient` as a `WhatsAppSocket`.

    pyaileys emits one `message.decrypted` event per message and reports
    protocol-level disconnect causes as separate stanzas; this bridge turns
    them into Baileys-shaped batches and status codes.
    """

    def __init__(self, *, auth: AuthenticationState, config: Any | None = None) -> None:
        from pyaileys import WhatsAppClient
        from pyaileys.auth import AuthenticationState as ClientAuthState

        self.events = AsyncEventEmitter()
        self._auth = auth
        self._pending_code: int | None = None
        self.client = WhatsAppClient(
            auth=ClientAuthState(creds=auth.creds, keys=auth.keys), config=config
        )
        self.client.on("message.decrypted", self._on_decrypted)
        self.client.on("connection.update", self._on_connection_update)
        self.client.on("creds.update", self._on_creds_update)
        self.client.on("stanza.stream:error", self._on_stream_error)
        self.client.on("stanza.failure", self._on_failure)

    def on(self, event: str, listener: Listener) -> None:
        self.events.on(event, listener)

    async def connect(self) -> None:
        await self.client.connect()

    async def close(self) -> None:
        await self.client.disconnect()

    async def _on_decrypted(self, payload: dict[str, Any]) -> None:
        sender = payload.get("sender_jid")
        push_name = self.client.get_display_name(sender) if sender else None
        msg = WAMessage.from_decrypted(payload, me=me_jid(self._auth.creds), push_name=push_name)
        await self.events.emit(EV_MESSAGES_UPSERT, {"messages": [msg], "type": "notify"})

    async def _on_connection_update(self, update: Any) -> None:
        upd = ConnectionUpdate.coerce(update)
        if upd.connection == "close":
            code, self._pending_code = self._pending_code, None
            if code == DisconnectReason.RESTART_REQUIRED:
                # pyaileys reconnects this same socket itself.
                return
            if code is None:
                code = disconnect_status_code(upd.last_disconnect)
            upd.last_disconnect = ConnectionClosedError(
                code if code is not None else DisconnectReason.CONNECTION_CLOSED,
                str(upd.last_disconnect) if upd.last_disconnect else None,
            )
        await self.events.emit(EV_CONNECTION_UPDATE, upd)

    async def _on_creds_update(self, creds: Any) -> None:
        await self.events.emit(EV_CREDS_UPDATE, creds)

    def _on_stream_error(self, stanza: Any) -> None:
        self._pending_code = _as_int(stanza.attrs.get("code")) or self._pending_code
        # `<stream:error><conflict type="device_removed"/>` is a remote logout.
        for child in stanza.content if isinstance(stanza.content, list) else []:
            if child.tag == "conflict" and child.attrs.get("type") == "device_removed":
                self._pending_code = DisconnectReason.LOGGED_OUT

    def _on_failure(self, stanza: Any) -> None:
        self._pending_code = _as_int(stanza.attrs.get("reason")) or self._pending_code


def make_wa_socket(*, auth: AuthenticationState, config: Any | None = None) -> WhatsAppSocket:
    return PyaileysSocket(auth=auth, config=config)
