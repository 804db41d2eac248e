import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.db import transaction
from django.db.models.signals import post_save
from django.dispatch import receiver

from .consumers import request_group_name
from .coordinator import format_request_id
from .models import MintRequest

logger = logging.getLogger(__name__)


def broadcast_status(request_id: int, status: str, token_id):
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return
    async_to_sync(channel_layer.group_send)(
        request_group_name(request_id),
        {
            "type": "mint_status_broadcast",
            "request_id": format_request_id(request_id),
            "status": status,
            "token_id": token_id,
        },
    )


@receiver(post_save, sender=MintRequest)
def announce_request_status(sender, instance, created, **kwargs):
    request_id = int(instance.request_id, 16)
    status, token_id = instance.status, instance.token_id

    def _send():
        try:
            broadcast_status(request_id, status, token_id)
        except Exception as exc:
            logger.warning("Could not broadcast status of %s: %s", instance.request_id, exc)

    # Only announce state that actually committed.
    transaction.on_commit(_send)
