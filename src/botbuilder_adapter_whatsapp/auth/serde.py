from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from typing import Any

from .state import AuthState


def creds_from_dict(d: dict[str, Any]) -> Any:
    from pyaileys.auth.serde import creds_from_dict as _from_dict

    return _from_dict(d)


def _creds_to_dict(creds: Any) -> Any:
    if dataclasses.is_dataclass(creds) and not isinstance(creds, type):
        return dataclasses.asdict(creds)
    return creds


def auth_state_to_dict(auth: AuthState) -> dict[str, Any]:
    return {"creds": _creds_to_dict(auth.creds), "keys": auth.keys}


def auth_state_from_dict(d: Mapping[str, Any]) -> AuthState:
    creds = d.get("creds")
    if not isinstance(creds, dict):
        raise TypeError("auth state has no 'creds' object")
    keys = d.get("keys") or {}
    if not isinstance(keys, dict):
        raise TypeError("auth state 'keys' must be an object")
    return AuthState(
        creds=creds_from_dict(creds),
        keys={str(bucket): dict(items or {}) for bucket, items in keys.items()},
    )
