import secrets

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError
from eth_account import Account

from minting.audit import log_mint_event
from minting.blockchain_utils import recover_fulfillment_signer, sign_fulfillment
from minting.coordinator import MintError
from minting.models import MintRequest
from minting.services import get_coordinator


class Command(BaseCommand):
    help = "Act as the randomness oracle locally: sign and deliver randomness for open requests."

    def add_arguments(self, parser):
        parser.add_argument("--limit", type=int, default=None)

    def handle(self, *args, **options):
        key = settings.ORACLE_PRIVATE_KEY
        if not key:
            raise CommandError("ORACLE_PRIVATE_KEY not set")

        coordinator = get_coordinator()
        if Account.from_key(key).address != coordinator.oracle_address:
            raise CommandError("ORACLE_PRIVATE_KEY does not belong to the configured VRF coordinator")

        pending = MintRequest.objects.filter(
            coordinator__address=coordinator.address, status="requested"
        ).order_by("created_at")
        if options["limit"]:
            pending = pending[: options["limit"]]

        delivered = 0
        for row in pending:
            request_id = int(row.request_id, 16)
            randomness = secrets.randbits(256)
            v, r, s = sign_fulfillment(request_id, randomness, coordinator.address, key)
            caller = recover_fulfillment_signer(request_id, randomness, coordinator.address, v, r, s)
            try:
                coordinator.fulfill_randomness(request_id, randomness, caller=caller)
            except MintError as exc:
                self.stderr.write(f"{row.request_id}: {exc}")
                continue
            log_mint_event("randomness_fulfilled", request_id=row.request_id, details={"oracle": caller})
            delivered += 1

        self.stdout.write(self.style.SUCCESS(f"Delivered randomness for {delivered} request(s)"))
