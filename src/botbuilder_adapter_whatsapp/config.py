from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .auth.state import AuthState
    from .socket import SocketFactory

AuthUpdateHook = Callable[["AuthState"], Awaitable[None] | None]


@dataclass(slots=True)
class ReconnectPolicy:
    """
    How the supervisor reacts to a non-logout disconnect.

    The defaults reconnect immediately and without limit. Set `initial_delay_s`
    to enable exponential backoff and `max_attempts` to give up after that many
    consecutive failed sessions (a session that reaches "open" resets the count).
    """

    initial_delay_s: float = 0.0
    multiplier: float = 2.0
    max_delay_s: float = 30.0
    max_attempts: int | None = None

    def delay_for(self, attempt: int) -> float:
        if attempt <= 0 or self.initial_delay_s <= 0:
            return 0.0
        delay = self.initial_delay_s * (self.multiplier ** (attempt - 1))
        return min(delay, self.max_delay_s)

    def allows(self, attempt: int) -> bool:
        return self.max_attempts is None or attempt <= self.max_attempts


@dataclass(slots=True)
class WhatsAppAdapterOptions:
    """
    Caller-owned adapter configuration.

    `auth` and `qr` are written back by the adapter: `auth` on every credential
    or key change, `qr` whenever WhatsApp rotates the pairing code. Making
    `auth` durable is up to the caller (see `on_auth_update`).
    """

    auth: AuthState | None = None
    qr: str | None = None
    enable_incomplete: bool = False

    # Called with the live AuthState after every save.
    on_auth_update: AuthUpdateHook | None = None

    reconnect: ReconnectPolicy = field(default_factory=ReconnectPolicy)

    # Builds the protocol session; defaults to the pyaileys bridge.
    socket_factory: SocketFactory | None = None
    # Passed through to `pyaileys.client.ClientConfig` by the default factory.
    client_config: Any | None = None
