from __future__ import annotations

from enum import IntEnum

CHANNEL_ID = "whatsapp"
GROUP_JID_SUFFIX = "@g.us"

# Signal key category (as requested by the protocol client) -> storage bucket.
KEY_MAP: dict[str, str] = {
    "pre-key": "preKeys",
    "session": "sessions",
    "sender-key": "senderKeys",
    "app-state-sync-key": "appStateSyncKeys",
    "app-state-sync-version": "appStateVersions",
    "sender-key-memory": "senderKeyMemory",
    # pyaileys also keeps peer identities and privacy tokens in the key store.
    "identity-key": "identityKeys",
    "tctoken": "tcTokens",
}

# Socket events consumed by the supervisor.
EV_MESSAGES_UPSERT = "messages.upsert"
EV_MESSAGES_SET = "messages.set"
EV_CONNECTION_UPDATE = "connection.update"
EV_CREDS_UPDATE = "creds.update"

MESSAGE_BATCH_EVENTS = (EV_MESSAGES_UPSERT, EV_MESSAGES_SET)


class DisconnectReason(IntEnum):
    """Baileys-compatible disconnect status codes."""

    CONNECTION_CLOSED = 428
    CONNECTION_LOST = 408
    CONNECTION_REPLACED = 440
    TIMED_OUT = 408
    LOGGED_OUT = 401
    BAD_SESSION = 500
    RESTART_REQUIRED = 515
    MULTIDEVICE_MISMATCH = 411
    FORBIDDEN = 403
    UNAVAILABLE_SERVICE = 503


MISSING_AUTH_WARNING = "\n".join(
    [
        "",
        "****************************************************************************************",
        "* WARNING: Your bot is operating without recommended security mechanisms in place.     *",
        "* Initialize your adapter with an auth parameter to reuse a paired WhatsApp session:   *",
        "*                                                                                      *",
        "* adapter = WhatsAppAdapter(WhatsAppAdapterOptions(auth=<saved AuthState>))            *",
        "*                                                                                      *",
        "****************************************************************************************",
        "",
    ]
)

INCOMPLETE_CONFIG_WARNING = "\n".join(
    [
        "",
        "****************************************************************************************",
        "* WARNING: Your adapter may be running with an incomplete/unsafe configuration.        *",
        "* - Ensure all required configuration options are present                              *",
        "* - Disable the \"enable_incomplete\" option!                                            *",
        "****************************************************************************************",
        "",
    ]
)
