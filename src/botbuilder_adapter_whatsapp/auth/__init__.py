from __future__ import annotations

from .file import load_auth_file, save_auth_file
from .keys import decode_app_state_sync_key
from .serde import auth_state_from_dict, auth_state_to_dict
from .state import AuthenticationState, AuthState, SignalKeyStore
from .store import AuthStateStore, InMemoryKeyStore
from .utils import init_auth_creds

__all__ = [
    "AuthState",
    "AuthStateStore",
    "AuthenticationState",
    "InMemoryKeyStore",
    "SignalKeyStore",
    "auth_state_from_dict",
    "auth_state_to_dict",
    "decode_app_state_sync_key",
    "init_auth_creds",
    "load_auth_file",
    "save_auth_file",
]
