from __future__ import annotations


class WhatsAppAdapterError(Exception):
    """Base error for the WhatsApp bot adapter."""


class ConfigurationError(WhatsAppAdapterError):
    """The adapter options are incomplete and incomplete mode is not enabled."""


class AuthError(WhatsAppAdapterError):
    """Authentication state could not be loaded or saved."""


class LoginCodeUnavailableError(WhatsAppAdapterError):
    """No QR login code has been observed (or it was consumed by a login)."""


class ConnectionClosedError(WhatsAppAdapterError):
    """
    The protocol session was closed.

    `status_code` follows Baileys' `DisconnectReason` numbering; it is what the
    supervisor inspects to decide whether to reconnect.
    """

    def __init__(self, status_code: int | None, message: str | None = None) -> None:
        super().__init__(message or f"connection closed (status={status_code})")
        self.status_code = status_code
