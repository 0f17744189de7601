from __future__ import annotations

from types import SimpleNamespace

import pytest

from botbuilder_adapter_whatsapp.messages import (
    MessageKey,
    WAMessage,
    coerce_message,
    extract_message_text,
    is_group_jid,
    user_part,
)


def test_from_dict_reads_baileys_json() -> None:
    msg = WAMessage.from_dict(
        {
            "key": {
                "remoteJid": "120363@g.us",
                "fromMe": False,
                "id": "3EB0ABC",
                "participant": "4915@s.whatsapp.net",
            },
            "message": {"conversation": "hi"},
            "messageTimestamp": 1700000000,
            "pushName": "Ana",
        }
    )

    assert msg.key == MessageKey(
        remote_jid="120363@g.us", from_me=False, id="3EB0ABC", participant="4915@s.whatsapp.net"
    )
    assert msg.message_timestamp == 1700000000
    assert msg.push_name == "Ana"


def test_from_dict_accepts_long_timestamps() -> None:
    msg = WAMessage.from_dict({"key": {}, "messageTimestamp": {"low": 5, "high": 1, "unsigned": True}})

    assert msg.message_timestamp == (1 << 32) | 5


def test_from_decrypted_group_message() -> None:
    msg = WAMessage.from_decrypted(
        {
            "id": "ABC",
            "chat_jid": "120363@g.us",
            "sender_jid": "4915:3@s.whatsapp.net",
            "timestamp_s": 1700000001,
            "message": {"conversation": "yo"},
        },
        me="4477@s.whatsapp.net",
        push_name="Ben",
    )

    assert msg.key.participant == "4915:3@s.whatsapp.net"
    assert msg.key.from_me is False
    assert msg.push_name == "Ben"
    assert msg.message_timestamp == 1700000001


def test_from_decrypted_recognises_own_device() -> None:
    msg = WAMessage.from_decrypted(
        {"id": "X", "chat_jid": "4915@s.whatsapp.net", "sender_jid": "4477:12@s.whatsapp.net"},
        me="4477:2@s.whatsapp.net",
    )

    assert msg.key.from_me is True
    assert msg.key.participant is None


def test_coerce_message_rejects_other_types() -> None:
    assert coerce_message({"key": {"id": "1"}}).key.id == "1"
    with pytest.raises(TypeError):
        coerce_message(42)


@pytest.mark.parametrize(
    ("payload", "expected"),
    [
        ({"conversation": "plain"}, "plain"),
        ({"extendedTextMessage": {"text": "with link"}}, "with link"),
        ({"imageMessage": {"caption": "look"}}, "look"),
        ({"audioMessage": {"seconds": 3}}, ""),
        (None, ""),
    ],
)
def test_extract_message_text(payload, expected) -> None:
    assert extract_message_text(payload) == expected


def test_extract_message_text_from_attribute_objects() -> None:
    proto_like = SimpleNamespace(conversation="", extendedTextMessage=SimpleNamespace(text="ext"))

    assert extract_message_text(proto_like) == "ext"


def test_jid_helpers() -> None:
    assert is_group_jid("1203@g.us")
    assert not is_group_jid("4915@s.whatsapp.net")
    assert not is_group_jid(None)
    assert user_part("4915:3@s.whatsapp.net") == "4915"
