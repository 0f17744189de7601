from __future__ import annotations

import base64
import dataclasses
import json
from typing import Any

_BUFFER = "Buffer"


def _default(obj: Any) -> Any:
    if isinstance(obj, (bytes, bytearray, memoryview)):
        return {"type": _BUFFER, "data": base64.b64encode(bytes(obj)).decode("ascii")}
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return dataclasses.asdict(obj)
    # Protobuf messages (e.g. from the WAProto bundle) are stored serialized.
    serialize = getattr(obj, "SerializeToString", None)
    if callable(serialize):
        return _default(serialize())
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def _object_hook(obj: dict[str, Any]) -> Any:
    if obj.get("type") == _BUFFER:
        data = obj.get("data")
        if isinstance(data, str):
            return base64.b64decode(data.encode("ascii"))
        # Node's Buffer#toJSON emits a list of byte values.
        if isinstance(data, list):
            return bytes(data)
    return obj


def dumps(obj: Any, *, indent: int | None = None) -> str:
    """JSON serialize with Baileys-compatible Buffer encoding."""

    return json.dumps(obj, default=_default, indent=indent, sort_keys=True)


def loads(data: str) -> Any:
    """JSON deserialize, turning Buffer objects back into `bytes`."""

    return json.loads(data, object_hook=_object_hook)
