from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from .constants import GROUP_JID_SUFFIX


@dataclass(slots=True)
class MessageKey:
    remote_jid: str | None = None
    from_me: bool = False
    id: str | None = None
    participant: str | None = None  # sender inside a group chat


@dataclass(slots=True)
class WAMessage:
    """
    Inbound message in Baileys' `WAMessage` shape.

    `message` is the decrypted payload: a WAProto `Message` from pyaileys, or
    a plain mapping when the session emits JSON.
    """

    key: MessageKey
    message: Any | None = None
    message_timestamp: int | None = None
    push_name: str | None = None

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> WAMessage:
        """Accept Baileys JSON (`key.remoteJid`, `messageTimestamp`, `pushName`, ...)."""

        k = d.get("key") or {}
        return cls(
            key=MessageKey(
                remote_jid=_first(k, "remote_jid", "remoteJid"),
                from_me=bool(_first(k, "from_me", "fromMe")),
                id=_first(k, "id"),
                participant=_first(k, "participant"),
            ),
            message=d.get("message"),
            message_timestamp=_int_or_none(_first(d, "message_timestamp", "messageTimestamp")),
            push_name=_first(d, "push_name", "pushName"),
        )

    @classmethod
    def from_decrypted(
        cls,
        payload: Mapping[str, Any],
        *,
        me: str | None = None,
        push_name: str | None = None,
    ) -> WAMessage:
        """Build from a pyaileys `message.decrypted` event payload."""

        chat = payload.get("chat_jid") or None
        sender = payload.get("sender_jid") or None
        from_me = bool(me and sender and user_part(sender) == user_part(me))
        return cls(
            key=MessageKey(
                remote_jid=chat,
                from_me=from_me,
                id=payload.get("id") or None,
                participant=sender if is_group_jid(chat) else None,
            ),
            message=payload.get("message"),
            message_timestamp=_int_or_none(payload.get("timestamp_s")),
            push_name=push_name,
        )


def coerce_message(raw: Any) -> WAMessage:
    if isinstance(raw, WAMessage):
        return raw
    if isinstance(raw, Mapping):
        return WAMessage.from_dict(raw)
    raise TypeError(f"unsupported message type: {type(raw).__name__}")


def is_group_jid(jid: str | None) -> bool:
    return bool(jid) and jid.endswith(GROUP_JID_SUFFIX)


def user_part(jid: str) -> str:
    """`123:4@s.whatsapp.net` -> `123`."""

    user = jid.split("@", 1)[0]
    return user.split(":", 1)[0]


def _field(obj: Any, name: str) -> Any:
    if obj is None:
        return None
    if isinstance(obj, Mapping):
        return obj.get(name)
    return getattr(obj, name, None)


def extract_message_text(msg: Any) -> str:
    """
    Best-effort text of a message payload; empty string when there is none.

    Plain conversations and extended text come first, then media captions.
    """

    conv = _field(msg, "conversation")
    if isinstance(conv, str) and conv:
        return conv

    text = _field(_field(msg, "extendedTextMessage"), "text")
    if isinstance(text, str) and text:
        return text

    for media in ("imageMessage", "videoMessage", "documentMessage"):
        cap = _field(_field(msg, media), "caption")
        if isinstance(cap, str) and cap:
            return cap

    return ""


def _first(d: Mapping[str, Any], *names: str) -> Any:
    for name in names:
        v = d.get(name)
        if v is not None:
            return v
    return None


def _int_or_none(v: Any) -> int | None:
    if v is None or v == "":
        return None
    # Baileys serializes Long timestamps as {"low": .., "high": .., "unsigned": ..}.
    if isinstance(v, Mapping):
        return (int(v.get("high") or 0) << 32) | (int(v.get("low") or 0) & 0xFFFFFFFF)
    return int(v)
