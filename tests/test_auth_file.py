from __future__ import annotations

from typing import Any

import pytest

from botbuilder_adapter_whatsapp.auth import serde
from botbuilder_adapter_whatsapp.auth.file import load_auth_file, save_auth_file
from botbuilder_adapter_whatsapp.auth.state import AuthState
from botbuilder_adapter_whatsapp.exceptions import AuthError

from conftest import FakeCreds


@pytest.fixture(autouse=True)
def fake_creds_loader(monkeypatch: pytest.MonkeyPatch) -> None:
    def _from_dict(d: dict[str, Any]) -> FakeCreds:
        return FakeCreds(noise_key=d["noise_key"], registered=d["registered"])

    monkeypatch.setattr(serde, "creds_from_dict", _from_dict)


@pytest.mark.asyncio
async def test_auth_file_roundtrip(tmp_path) -> None:
    path = tmp_path / "auth" / "state.json"
    auth = AuthState(
        creds=FakeCreds(noise_key=b"\x01\x02", registered=True),
        keys={
            "sessions": {"123@s.whatsapp.net.0": b"\xde\xad"},
            "senderKeyMemory": {"g@g.us": {"123@s.whatsapp.net": True}},
        },
    )

    await save_auth_file(path, auth)
    loaded = await load_auth_file(path)

    assert loaded is not None
    assert loaded.creds.noise_key == b"\x01\x02"
    assert loaded.creds.registered is True
    assert loaded.keys == auth.keys


@pytest.mark.asyncio
async def test_missing_file_means_not_paired(tmp_path) -> None:
    assert await load_auth_file(tmp_path / "nope.json") is None


@pytest.mark.asyncio
async def test_corrupt_file_raises_auth_error(tmp_path) -> None:
    path = tmp_path / "state.json"
    path.write_text("[1, 2", "utf-8")

    with pytest.raises(AuthError):
        await load_auth_file(path)


@pytest.mark.asyncio
async def test_file_without_creds_raises_auth_error(tmp_path) -> None:
    path = tmp_path / "state.json"
    path.write_text('{"keys": {}}', "utf-8")

    with pytest.raises(AuthError):
        await load_auth_file(path)
