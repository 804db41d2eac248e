from .middleware import current_request_id
from .models import MintEvent


def log_mint_event(event_type, status="ok", request_id="", details=None):
    details = dict(details or {})
    details.setdefault("http_request_id", current_request_id())
    MintEvent.objects.create(
        event_type=event_type,
        status=status,
        request_id=request_id,
        details=details,
    )
