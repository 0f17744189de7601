"""
botbuilder-adapter-whatsapp: connect Bot Framework bots to WhatsApp Web.

Inbound messages come from a pyaileys multi-device session and are delivered
as message activities; the session's auth state is kept in the adapter options
and the connection is re-established automatically.
"""

from __future__ import annotations

from .adapter import WhatsAppAdapter
from .auth import AuthState, load_auth_file, save_auth_file
from .config import ReconnectPolicy, WhatsAppAdapterOptions
from .constants import DisconnectReason
from .exceptions import (
    AuthError,
    ConfigurationError,
    ConnectionClosedError,
    LoginCodeUnavailableError,
    WhatsAppAdapterError,
)
from .supervisor import ConnectionState

__all__ = [
    "AuthError",
    "AuthState",
    "ConfigurationError",
    "ConnectionClosedError",
    "ConnectionState",
    "DisconnectReason",
    "LoginCodeUnavailableError",
    "ReconnectPolicy",
    "WhatsAppAdapter",
    "WhatsAppAdapterError",
    "WhatsAppAdapterOptions",
    "load_auth_file",
    "save_auth_file",
]

__version__ = "0.1.0"
