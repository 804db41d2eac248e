"""Wire the mint coordinator to the database and the configured network."""

from django.conf import settings

from .coordinator import MintCoordinator
from .ledger import DjangoFeeToken, DjangoMintLedger
from .oracle import CallbackOracle


def get_coordinator() -> MintCoordinator:
    network = settings.CURRENT_NETWORK_CONFIG
    address = settings.MINT_COORDINATOR_ADDRESS
    if not address:
        raise ValueError("MINT_COORDINATOR_ADDRESS not configured")

    fee_token = DjangoFeeToken()
    return MintCoordinator(
        ledger=DjangoMintLedger(address),
        oracle=CallbackOracle(fee_token, network["vrf_coordinator"]),
        fee_token=fee_token,
        address=address,
        key_hash=network["key_hash"],
        fee=network["fee"],
        oracle_address=network["vrf_coordinator"],
    )
