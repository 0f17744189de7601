from __future__ import annotations

import asyncio
import contextlib
import logging
from pathlib import Path

from botbuilder.core import TurnContext

from botbuilder_adapter_whatsapp import ConnectionState, WhatsAppAdapter, WhatsAppAdapterOptions


async def logic(context: TurnContext) -> None:
    activity = context.activity
    where = "group" if activity.conversation.is_group else "chat"
    print(f"[{where} {activity.conversation.id}] {activity.from_property.name or activity.from_property.id}: {activity.text}")


def on_qr(qr: str) -> None:
    print("\nScan this QR in WhatsApp -> Settings -> Linked devices -> Link a device\n")
    with contextlib.suppress(ImportError):
        import qrcode  # optional

        code = qrcode.QRCode(border=1)
        code.add_data(qr)
        code.make(fit=True)
        code.print_ascii(invert=True)
        return
    print("QR string:", qr)


def on_state(state: ConnectionState) -> None:
    print("connection:", state.value)


async def main() -> None:
    logging.basicConfig(level=logging.INFO)

    auth_file = Path("./auth.json").resolve()
    adapter = await WhatsAppAdapter.from_auth_file(
        auth_file, WhatsAppAdapterOptions(enable_incomplete=not auth_file.exists())
    )
    adapter.on("qr", on_qr)
    adapter.on("state", on_state)

    task = await adapter.create_socket_server(logic)
    try:
        await task
    finally:
        await adapter.close()


if __name__ == "__main__":
    asyncio.run(main())
