"""
Read-side decoding for key categories whose stored form differs from what the
protocol client consumes.
"""

from __future__ import annotations

import base64
from collections.abc import Callable, Mapping
from typing import Any

KeyDecoder = Callable[[Any], Any]


def _get_proto() -> Any:
    # Import lazily; the WAProto bundle is large.
    from pyaileys.proto import WAProto_pb2 as proto

    return proto


def _json_ready(value: Any) -> Any:
    # protobuf's JSON mapping expects base64 text for bytes fields.
    if isinstance(value, (bytes, bytearray, memoryview)):
        return base64.b64encode(bytes(value)).decode("ascii")
    if isinstance(value, Mapping):
        return {str(k): _json_ready(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_json_ready(v) for v in value]
    return value


def decode_app_state_sync_key(value: Any) -> Any:
    """
    Materialize an `app-state-sync-key` record as serialized `AppStateSyncKeyData`.

    pyaileys stores and parses the serialized protobuf, so bytes pass through.
    Structured records (as written by Baileys' JSON auth stores:
    `{"keyData": ..., "fingerprint": {...}, "timestamp": ...}`) are parsed into
    the protobuf message and serialized.
    """

    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, Mapping):
        from google.protobuf import json_format

        msg = _get_proto().Message.AppStateSyncKeyData()
        json_format.ParseDict(_json_ready(value), msg, ignore_unknown_fields=True)
        return msg.SerializeToString()
    serialize = getattr(value, "SerializeToString", None)
    if callable(serialize):
        return serialize()
    raise TypeError(f"cannot decode app-state-sync-key from {type(value).__name__}")


DEFAULT_DECODERS: dict[str, KeyDecoder] = {
    "app-state-sync-key": decode_app_state_sync_key,
}
