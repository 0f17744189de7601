from __future__ import annotations

import datetime as dt

from botbuilder.schema import (
    Activity,
    ActivityTypes,
    ChannelAccount,
    ConversationAccount,
    TextFormatTypes,
)

from .constants import CHANNEL_ID
from .messages import WAMessage, extract_message_text, is_group_jid


def _timestamp(seconds: int | None) -> dt.datetime | None:
    if not seconds:
        return None
    return dt.datetime.fromtimestamp(seconds, tz=dt.UTC)


def message_to_activity(message: WAMessage, *, me: str | None = None) -> Activity:
    """
    Map one inbound WhatsApp message onto a Bot Framework message activity.

    `me` is the bot's own JID; it becomes the sender of messages the paired
    account sent itself (from another device).
    """

    key = message.key
    remote = key.remote_jid or ""
    if key.from_me:
        sender = me or ""
    else:
        sender = key.participant or remote

    return Activity(
        type=ActivityTypes.message,
        id=key.id or None,
        timestamp=_timestamp(message.message_timestamp),
        channel_id=CHANNEL_ID,
        conversation=ConversationAccount(
            id=remote,
            is_group=is_group_jid(remote),
            name="",
            conversation_type="default",
        ),
        from_property=ChannelAccount(id=sender, name=message.push_name or ""),
        recipient=ChannelAccount(id=remote, name=""),
        value=message,
        text=extract_message_text(message.message),
        text_format=TextFormatTypes.markdown,
        caller_id="",
        label="",
        listen_for=[],
        local_timezone="",
        service_url="",
        value_type="",
    )
