from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any

from botbuilder.core import BotAdapter, TurnContext
from botbuilder.schema import Activity, ConversationReference, ResourceResponse

from .auth.file import load_auth_file, save_auth_file
from .auth.state import AuthState
from .auth.store import AuthStateStore
from .config import WhatsAppAdapterOptions
from .constants import INCOMPLETE_CONFIG_WARNING, MISSING_AUTH_WARNING
from .exceptions import ConfigurationError, LoginCodeUnavailableError
from .supervisor import ConnectionState, ConnectionSupervisor, TurnHandler
from .util.events import Listener

logger = logging.getLogger(__name__)

OnTurnError = Callable[[TurnContext, Exception], Awaitable[None]]


class WhatsAppAdapter(BotAdapter):
    """
    Connect a Bot Framework bot to WhatsApp Web (multi-device).

    Inbound messages arrive over a pyaileys session and are run through the
    adapter's middleware pipeline as message activities. The session's
    authentication state lives in `options.auth` and is kept current there;
    sessions are re-established automatically unless WhatsApp logs the
    device out.
    """

    name = "WhatsApp Adapter"

    def __init__(
        self,
        options: WhatsAppAdapterOptions,
        *,
        on_turn_error: OnTurnError | None = None,
    ) -> None:
        super().__init__(on_turn_error)
        self.options = options

        if options.auth is None:
            logger.warning(MISSING_AUTH_WARNING)
            if not options.enable_incomplete:
                raise ConfigurationError(
                    "Required: include auth (a saved AuthState) to restore the WhatsApp session"
                )

        if options.enable_incomplete:
            logger.warning(INCOMPLETE_CONFIG_WARNING)

        self.auth_store = AuthStateStore(options)
        self.supervisor = ConnectionSupervisor(self, self.auth_store, options)

    @classmethod
    async def from_auth_file(
        cls,
        path: str | Path,
        options: WhatsAppAdapterOptions | None = None,
        *,
        on_turn_error: OnTurnError | None = None,
    ) -> WhatsAppAdapter:
        """
        Build an adapter whose auth state is loaded from, and saved back to, a JSON file.

        A missing file means "not paired yet"; pass `enable_incomplete=True`
        in `options` to start with fresh credentials and pair via QR.
        """

        opts = options or WhatsAppAdapterOptions()
        p = Path(path).expanduser()
        opts.auth = await load_auth_file(p)

        previous = opts.on_auth_update

        async def _persist(auth: AuthState) -> None:
            await save_auth_file(p, auth)
            if previous is not None:
                res = previous(auth)
                if asyncio.iscoroutine(res):
                    await res

        opts.on_auth_update = _persist
        return cls(opts, on_turn_error=on_turn_error)

    @property
    def state(self) -> ConnectionState:
        return self.supervisor.state

    def on(self, event: str, listener: Listener) -> None:
        """Subscribe to connection lifecycle events (`state`, `qr`)."""

        self.supervisor.events.on(event, listener)

    async def create_socket_server(self, logic: TurnHandler) -> asyncio.Task[None]:
        """
        Open the WhatsApp session and start handing inbound messages to `logic`.

        `logic` is a turn handler of the form `async def logic(context): ...`.
        Returns the supervising task; it finishes only when the device is
        logged out, the reconnect policy gives up, or `close()` is called.
        """

        return self.supervisor.start(logic)

    async def close(self) -> None:
        await self.supervisor.stop()

    def get_install_data(self) -> str:
        """The QR code WhatsApp issued for linking this device."""

        if self.options.qr:
            return self.options.qr
        raise LoginCodeUnavailableError(
            "get_install_data() cannot be called before a QR code has been received"
        )

    async def send_activities(
        self, context: TurnContext, activities: list[Activity]
    ) -> list[ResourceResponse]:
        logger.debug("send_activities is not supported yet; dropping %d activities", len(activities))
        return []

    async def update_activity(self, context: TurnContext, activity: Activity) -> Any:
        logger.debug("update_activity is not supported yet")
        return None

    async def delete_activity(self, context: TurnContext, reference: ConversationReference) -> None:
        logger.debug("delete_activity is not supported yet")
