import unittest
from unittest.mock import AsyncMock, MagicMock

from starlette.websockets import WebSocketDisconnect

from statickit.runtime.websocket import FULL_RELOAD, SPRITE_UPDATED, LiveReloadHandler


def fake_socket() -> MagicMock:
    websocket = MagicMock()
    websocket.accept = AsyncMock()
    websocket.send_json = AsyncMock()
    websocket.receive_text = AsyncMock()
    return websocket


class TestLiveReloadHandler(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.handler = LiveReloadHandler()

    async def test_broadcast_without_clients(self) -> None:
        self.assertEqual(await self.handler.broadcast_reload(), 0)

    async def test_broadcast_reload_reaches_every_client(self) -> None:
        first, second = fake_socket(), fake_socket()
        self.handler.active_connections.update({first, second})

        delivered = await self.handler.broadcast_reload()

        self.assertEqual(delivered, 2)
        first.send_json.assert_awaited_once_with({"type": FULL_RELOAD})
        second.send_json.assert_awaited_once_with({"type": FULL_RELOAD})

    async def test_sprite_update_carries_timestamp(self) -> None:
        client = fake_socket()
        self.handler.active_connections.add(client)

        await self.handler.broadcast_sprite_update(1700000000000)

        client.send_json.assert_awaited_once_with(
            {"type": SPRITE_UPDATED, "timestamp": 1700000000000}
        )

    async def test_failing_clients_are_dropped(self) -> None:
        healthy, broken = fake_socket(), fake_socket()
        broken.send_json.side_effect = RuntimeError("closed")
        self.handler.active_connections.update({healthy, broken})

        delivered = await self.handler.broadcast_reload()

        self.assertEqual(delivered, 1)
        self.assertEqual(self.handler.active_connections, {healthy})

    async def test_handle_registers_until_disconnect(self) -> None:
        websocket = fake_socket()
        seen = []

        async def receive():
            seen.append(websocket in self.handler.active_connections)
            if len(seen) > 1:
                raise WebSocketDisconnect()
            return "ping"

        websocket.receive_text.side_effect = receive

        await self.handler.handle(websocket)

        websocket.accept.assert_awaited_once()
        self.assertEqual(seen, [True, True])
        self.assertNotIn(websocket, self.handler.active_connections)


if __name__ == "__main__":
    unittest.main()
