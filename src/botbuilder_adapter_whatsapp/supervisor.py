from __future__ import annotations

import asyncio
import functools
import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from botbuilder.core import BotAdapter, TurnContext
from botbuilder.schema import Activity

from .activity import message_to_activity
from .auth.utils import me_jid
from .config import ReconnectPolicy
from .constants import (
    EV_CONNECTION_UPDATE,
    EV_CREDS_UPDATE,
    MESSAGE_BATCH_EVENTS,
)
from .messages import coerce_message
from .socket import (
    ConnectionUpdate,
    WhatsAppSocket,
    disconnect_status_code,
    is_logged_out,
    make_wa_socket,
)
from .util.asyncio import cancel_suppress, ensure_task
from .util.events import AsyncEventEmitter

if TYPE_CHECKING:
    from .auth.store import AuthStateStore
    from .config import WhatsAppAdapterOptions

logger = logging.getLogger(__name__)

TurnHandler = Callable[[TurnContext], Awaitable[Any]]


class ConnectionState(str, Enum):
    IDLE = "idle"
    CONNECTING = "connecting"
    OPEN = "open"
    TERMINATED = "terminated"


@dataclass(frozen=True, slots=True)
class _Envelope:
    generation: int
    event: str
    payload: Any


class ConnectionSupervisor:
    """
    Keeps exactly one protocol session alive and feeds its messages to the bot.

    Socket listeners only enqueue; a single loop (`run`) consumes the inbox in
    order, so reconnect decisions never race each other. Each session gets a
    generation number. Connection updates from a superseded session are
    ignored, while its messages and credential updates are still handled.

    Lifecycle events on `events`: `state` (ConnectionState), `qr` (str).
    """

    def __init__(
        self,
        adapter: BotAdapter,
        store: AuthStateStore,
        options: WhatsAppAdapterOptions,
    ) -> None:
        self._adapter = adapter
        self._store = store
        self._options = options
        self._policy = options.reconnect or ReconnectPolicy()
        self._socket_factory = options.socket_factory or functools.partial(
            make_wa_socket, config=options.client_config
        )

        self.events = AsyncEventEmitter()
        self.state = ConnectionState.IDLE
        self.socket: WhatsAppSocket | None = None
        self.generation = 0

        self._inbox: asyncio.Queue[_Envelope] = asyncio.Queue()
        self._task: asyncio.Task[None] | None = None
        self._connect_task: asyncio.Task[None] | None = None
        self._inflight: set[asyncio.Task[None]] = set()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self, logic: TurnHandler) -> asyncio.Task[None]:
        if self.running:
            raise RuntimeError("supervisor is already running")
        self._inbox = asyncio.Queue()
        self._task = ensure_task(self.run(logic), name="whatsapp.supervisor")
        return self._task

    async def stop(self) -> None:
        """Stop reconnecting and close the current session. In-flight turns keep running."""

        await cancel_suppress(self._connect_task)
        await cancel_suppress(self._task)
        self._task = None
        self._connect_task = None
        # Anything the old socket still emits is now stale.
        self.generation += 1

        sock, self.socket = self.socket, None
        if sock is not None:
            try:
                await sock.close()
            except Exception:
                logger.warning("error while closing WhatsApp session", exc_info=True)
        await self._set_state(ConnectionState.IDLE)

    async def drain(self) -> None:
        """Wait for every dispatched turn to finish."""

        while self._inflight:
            await asyncio.gather(*list(self._inflight))

    async def run(self, logic: TurnHandler) -> None:
        attempt = 0
        while True:
            opened, update = await self._run_session(logic)
            if is_logged_out(update):
                logger.warning("WhatsApp session logged out; not reconnecting")
                await self._set_state(ConnectionState.TERMINATED)
                return

            attempt = 1 if opened else attempt + 1
            if not self._policy.allows(attempt):
                logger.error("WhatsApp connection failed %d times in a row; giving up", attempt)
                await self._set_state(ConnectionState.TERMINATED)
                return

            delay = self._policy.delay_for(attempt)
            logger.info(
                "connection closed due to %s (status=%s), reconnecting in %.1fs",
                update.last_disconnect,
                disconnect_status_code(update.last_disconnect),
                delay,
            )
            if delay > 0:
                await asyncio.sleep(delay)

    async def _run_session(self, logic: TurnHandler) -> tuple[bool, ConnectionUpdate]:
        """Open one session and process its events until it reports `close`."""

        state, save_state = self._store.snapshot()
        self.generation += 1
        generation = self.generation

        sock = self._socket_factory(auth=state)
        self.socket = sock
        for event in (*MESSAGE_BATCH_EVENTS, EV_CONNECTION_UPDATE, EV_CREDS_UPDATE):
            sock.on(event, functools.partial(self._post, generation, event))

        await self._set_state(ConnectionState.CONNECTING)
        self._connect_task = ensure_task(
            self._connect(sock, generation), name=f"whatsapp.connect.{generation}"
        )

        opened = False
        while True:
            env = await self._inbox.get()

            if env.event == EV_CREDS_UPDATE:
                save_state()
                continue
            if env.event in MESSAGE_BATCH_EVENTS:
                self._dispatch_batch(env.payload, logic)
                continue

            if env.generation != generation:
                logger.debug("ignoring connection update from stale session %d", env.generation)
                continue

            update = ConnectionUpdate.coerce(env.payload)
            if update.qr:
                self._options.qr = update.qr
                await self.events.emit("qr", update.qr)

            if update.connection == "open":
                opened = True
                # The pairing code has been used up.
                self._options.qr = None
                logger.info("opened WhatsApp connection")
                await self._set_state(ConnectionState.OPEN)
            elif update.connection == "close":
                return opened, update

    def _post(self, generation: int, event: str, payload: Any = None) -> None:
        self._inbox.put_nowait(_Envelope(generation, event, payload))

    async def _connect(self, sock: WhatsAppSocket, generation: int) -> None:
        try:
            await sock.connect()
        except Exception as e:
            logger.warning("WhatsApp connect failed: %s", e)
            self._post(
                generation,
                EV_CONNECTION_UPDATE,
                ConnectionUpdate(connection="close", last_disconnect=e),
            )

    def _dispatch_batch(self, payload: Any, logic: TurnHandler) -> None:
        if isinstance(payload, Mapping):
            messages = payload.get("messages") or []
        else:
            messages = payload or []

        me = me_jid(self._store.auth.creds)
        for raw in messages:
            try:
                activity = message_to_activity(coerce_message(raw), me=me)
            except Exception:
                logger.exception("dropping WhatsApp message that could not be mapped")
                continue
            task = ensure_task(self.dispatch(activity, logic), name="whatsapp.turn")
            self._inflight.add(task)
            task.add_done_callback(self._inflight.discard)

    async def dispatch(self, activity: Activity, logic: TurnHandler) -> None:
        """Run one activity through the adapter pipeline; failures are logged, not raised."""

        context = TurnContext(self._adapter, activity)
        try:
            await self._adapter.run_pipeline(context, logic)
        except Exception:
            logger.exception("turn handler failed for WhatsApp message %s", activity.id)

    async def _set_state(self, state: ConnectionState) -> None:
        self.state = state
        await self.events.emit("state", state)
