import json

from channels.generic.websocket import AsyncWebsocketConsumer

from .coordinator import format_request_id, parse_request_id


def request_group_name(request_id: int) -> str:
    return f"mint_{format_request_id(request_id)}"


class MintStatusConsumer(AsyncWebsocketConsumer):
    """Pushes status changes of one mint request to subscribed clients."""

    async def connect(self):
        try:
            request_id = parse_request_id(self.scope["url_route"]["kwargs"]["request_id"])
        except ValueError:
            await self.close()
            return

        self.room_group_name = request_group_name(request_id)
        await self.channel_layer.group_add(self.room_group_name, self.channel_name)
        await self.accept()

    async def disconnect(self, close_code):
        if hasattr(self, "room_group_name"):
            await self.channel_layer.group_discard(self.room_group_name, self.channel_name)

    async def receive(self, text_data=None, bytes_data=None):
        # Clients only listen; anything they send is answered with an error.
        await self.send(text_data=json.dumps({"error": "This channel is read-only."}))

    async def mint_status_broadcast(self, event):
        await self.send(
            text_data=json.dumps(
                {
                    "type": "status",
                    "request_id": event["request_id"],
                    "status": event["status"],
                    "token_id": event["token_id"],
                }
            )
        )
