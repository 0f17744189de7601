from __future__ import annotations

from typing import Any


def init_auth_creds() -> Any:
    """Generate a fresh credential bundle (identity, signed pre-key, noise key)."""

    from pyaileys.auth import init_auth_creds as _init

    return _init()


def me_jid(creds: Any) -> str | None:
    """The paired account JID, once WhatsApp has assigned one."""

    me = getattr(creds, "me", None)
    if me is None and isinstance(creds, dict):
        me = creds.get("me")
    if me is None:
        return None
    jid = me.get("id") if isinstance(me, dict) else getattr(me, "id", None)
    return str(jid) if jid else None
