from django.urls import re_path
from . import consumers

websocket_urlpatterns = [
    # One group per request id, so clients waiting on the oracle get the
    # fulfillment signal without polling.
    re_path(r"ws/mint/(?P<request_id>0x[0-9a-fA-F]{1,64}|\d+)/$", consumers.MintStatusConsumer.as_asgi()),
]
