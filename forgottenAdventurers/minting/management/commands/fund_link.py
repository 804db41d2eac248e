from django.conf import settings
from django.core.management.base import BaseCommand, CommandError
from web3 import Web3

from minting.ledger import DjangoFeeToken


class Command(BaseCommand):
    help = "Credit LINK to an address (defaults to the coordinator), like a testnet faucet."

    def add_arguments(self, parser):
        parser.add_argument("amount", type=int, help="Amount in the token's smallest unit")
        parser.add_argument("--address", default=None)

    def handle(self, *args, **options):
        address = options["address"] or settings.MINT_COORDINATOR_ADDRESS
        if not Web3.is_address(address or ""):
            raise CommandError(f"Invalid address: {address!r}")
        if options["amount"] <= 0:
            raise CommandError("Amount must be positive")

        fee_token = DjangoFeeToken()
        fee_token.fund(address, options["amount"])
        balance = fee_token.balance_of(address)
        self.stdout.write(self.style.SUCCESS(f"{Web3.to_checksum_address(address)} now holds {balance}"))
