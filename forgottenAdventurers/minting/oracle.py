"""Randomness oracle and fee token collaborators of the mint coordinator."""

import logging
from collections import defaultdict

from web3 import Web3

logger = logging.getLogger(__name__)


class InsufficientFeeBalance(Exception):
    pass


class FeeToken:
    """Process-local LINK-style token balances."""

    def __init__(self):
        self.balances = defaultdict(int)

    def balance_of(self, address: str) -> int:
        return self.balances[Web3.to_checksum_address(address)]

    def fund(self, address: str, amount: int) -> None:
        if amount <= 0:
            raise ValueError("Funding amount must be positive")
        self.balances[Web3.to_checksum_address(address)] += amount

    def transfer(self, sender: str, recipient: str, amount: int) -> None:
        sender = Web3.to_checksum_address(sender)
        recipient = Web3.to_checksum_address(recipient)
        if self.balances[sender] < amount:
            raise InsufficientFeeBalance(f"{sender} holds {self.balances[sender]}, needs {amount}")
        self.balances[sender] -= amount
        self.balances[recipient] += amount


class CallbackOracle:
    """Charges the fee; the oracle service later posts the randomness back."""

    def __init__(self, fee_token, address: str):
        self.fee_token = fee_token
        self.address = Web3.to_checksum_address(address)

    def request_randomness(self, key_hash: bytes, fee: int, request_id: int, consumer: str) -> None:
        self.fee_token.transfer(consumer, self.address, fee)
        logger.info(
            "Randomness requested from %s (key hash 0x%s, fee %s)", self.address, key_hash.hex(), fee
        )


class LocalRandomnessOracle(CallbackOracle):
    """In-process VRF coordinator: remembers requests, callbacks are explicit."""

    def __init__(self, fee_token, address: str):
        super().__init__(fee_token, address)
        self.pending = {}

    def request_randomness(self, key_hash: bytes, fee: int, request_id: int, consumer: str) -> None:
        super().request_randomness(key_hash, fee, request_id, consumer)
        self.pending[request_id] = Web3.to_checksum_address(consumer)

    def callback_with_randomness(self, request_id: int, randomness: int, coordinator):
        if self.pending.get(request_id) != coordinator.address:
            raise KeyError(f"No pending randomness request {request_id:#x} for {coordinator.address}")
        fulfilled = coordinator.fulfill_randomness(request_id, randomness, caller=self.address)
        del self.pending[request_id]
        return fulfilled
