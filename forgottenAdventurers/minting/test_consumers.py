import pytest
from channels.layers import get_channel_layer
from channels.routing import URLRouter
from channels.testing import WebsocketCommunicator

from minting.consumers import request_group_name
from minting.routing import websocket_urlpatterns
from minting.signals import broadcast_status

application = URLRouter(websocket_urlpatterns)


@pytest.mark.asyncio
async def test_subscriber_receives_fulfillment_signal():
    communicator = WebsocketCommunicator(application, "/ws/mint/0x2a/")
    connected, _ = await communicator.connect()
    assert connected

    await get_channel_layer().group_send(
        request_group_name(42),
        {
            "type": "mint_status_broadcast",
            "request_id": "0x" + "0" * 62 + "2a",
            "status": "fulfilled",
            "token_id": None,
        },
    )
    message = await communicator.receive_json_from()
    assert message == {
        "type": "status",
        "request_id": "0x" + "0" * 62 + "2a",
        "status": "fulfilled",
        "token_id": None,
    }
    await communicator.disconnect()


@pytest.mark.asyncio
async def test_decimal_and_hex_ids_share_a_group():
    communicator = WebsocketCommunicator(application, "/ws/mint/42/")
    connected, _ = await communicator.connect()
    assert connected

    await get_channel_layer().group_send(
        request_group_name(0x2A),
        {"type": "mint_status_broadcast", "request_id": "42", "status": "completed", "token_id": 7},
    )
    message = await communicator.receive_json_from()
    assert message["token_id"] == 7
    await communicator.disconnect()


@pytest.mark.asyncio
async def test_out_of_range_id_is_refused():
    communicator = WebsocketCommunicator(application, f"/ws/mint/{2**256}/")
    connected, _ = await communicator.connect()
    assert not connected


@pytest.mark.asyncio
async def test_channel_is_read_only():
    communicator = WebsocketCommunicator(application, "/ws/mint/1/")
    await communicator.connect()
    await communicator.send_json_to({"type": "finish"})
    message = await communicator.receive_json_from()
    assert "error" in message
    await communicator.disconnect()


def test_broadcast_status_targets_request_group(monkeypatch):
    sent = []

    class RecordingLayer:
        async def group_send(self, group, message):
            sent.append((group, message))

    monkeypatch.setattr("minting.signals.get_channel_layer", lambda: RecordingLayer())
    broadcast_status(42, "completed", 3)

    assert sent == [
        (
            request_group_name(42),
            {
                "type": "mint_status_broadcast",
                "request_id": "0x" + "0" * 62 + "2a",
                "status": "completed",
                "token_id": 3,
            },
        )
    ]
