"""Two-phase mint protocol: supply accounting, price checks and request states."""

import enum
import logging
from dataclasses import dataclass, replace
from typing import Optional

import eth_abi
from web3 import Web3

from .attributes import derive_attributes, token_metadata

logger = logging.getLogger(__name__)

MAX_SUPPLY = 2007
MINT_PRICE_WEI = 30000000000000000


class MintError(Exception):
    """Base class for failed coordinator calls. No state is changed."""


class InsufficientPayment(MintError):
    pass


class SupplyExhausted(MintError):
    pass


class OracleFundsMissing(MintError):
    pass


class UnknownOrFulfilledRequest(MintError):
    pass


class InvalidTransition(MintError):
    pass


class UnauthorizedCallback(MintError):
    pass


class RequestStatus(str, enum.Enum):
    NONE = "none"
    REQUESTED = "requested"
    FULFILLED = "fulfilled"
    COMPLETED = "completed"


ALLOWED_TRANSITIONS = {
    RequestStatus.NONE: {RequestStatus.REQUESTED},
    RequestStatus.REQUESTED: {RequestStatus.FULFILLED},
    RequestStatus.FULFILLED: {RequestStatus.COMPLETED},
    RequestStatus.COMPLETED: set(),
}


@dataclass(frozen=True)
class PendingRequest:
    request_id: int
    requester: str
    payment: int
    status: RequestStatus = RequestStatus.REQUESTED
    randomness: Optional[int] = None
    token_id: Optional[int] = None


def advance(request: PendingRequest, target: RequestStatus, **changes) -> PendingRequest:
    if target not in ALLOWED_TRANSITIONS[request.status]:
        raise InvalidTransition(
            f"Request {format_request_id(request.request_id)} cannot move "
            f"from {request.status.value} to {target.value}"
        )
    return replace(request, status=target, **changes)


def format_request_id(request_id: int) -> str:
    return "0x" + request_id.to_bytes(32, byteorder="big").hex()


def parse_request_id(value) -> int:
    """Accept an int, a decimal string or a 0x-prefixed 32-byte hex string."""
    if isinstance(value, int) and not isinstance(value, bool):
        request_id = value
    elif isinstance(value, str) and value.lower().startswith("0x"):
        request_id = int(value, 16)
    elif isinstance(value, str) and value.isdigit():
        request_id = int(value)
    else:
        raise ValueError(f"Invalid request id: {value!r}")
    if not 0 <= request_id < 2**256:
        raise ValueError(f"Request id out of range: {value!r}")
    return request_id


def make_vrf_input_seed(key_hash: bytes, user_seed: int, consumer: str, nonce: int) -> int:
    encoded = eth_abi.encode(
        ["bytes32", "uint256", "address", "uint256"],
        [key_hash, user_seed, Web3.to_checksum_address(consumer), nonce],
    )
    return int.from_bytes(Web3.keccak(encoded), byteorder="big")


def make_request_id(key_hash: bytes, vrf_seed: int) -> int:
    return int.from_bytes(Web3.solidity_keccak(["bytes32", "uint256"], [key_hash, vrf_seed]), byteorder="big")


class MintCoordinator:
    """Coordinates mint requests with an asynchronous randomness oracle.

    ``ledger`` is the explicit state handle; every entry point runs inside
    ``ledger.atomic()`` so effects never interleave and failures leave the
    ledger untouched.
    """

    def __init__(self, ledger, oracle, fee_token, address, key_hash, fee, oracle_address):
        self.ledger = ledger
        self.oracle = oracle
        self.fee_token = fee_token
        self.address = Web3.to_checksum_address(address)
        self.key_hash = Web3.to_bytes(hexstr=key_hash) if isinstance(key_hash, str) else key_hash
        if len(self.key_hash) != 32:
            raise ValueError("key_hash must be 32 bytes")
        self.fee = int(fee)
        self.oracle_address = Web3.to_checksum_address(oracle_address)

    def get_total_minted_so_far(self) -> int:
        return self.ledger.total_minted()

    def get_max_available(self) -> int:
        return MAX_SUPPLY

    def get_mint_price(self) -> int:
        return MINT_PRICE_WEI

    def get_request(self, request_id: int) -> Optional[PendingRequest]:
        return self.ledger.get_request(request_id)

    def get_adventurer(self, token_id: int):
        return self.ledger.get_adventurer(token_id)

    def token_uri(self, token_id: int, base_uri: str) -> str:
        if self.ledger.get_adventurer(token_id) is None:
            raise LookupError(f"Token {token_id} has not been minted")
        return f"{base_uri.rstrip('/')}/{token_id}/"

    def token_metadata(self, token_id: int, image_base_uri: str = "") -> dict:
        adventurer = self.ledger.get_adventurer(token_id)
        if adventurer is None:
            raise LookupError(f"Token {token_id} has not been minted")
        return token_metadata(token_id, adventurer.attributes, image_base_uri)

    def request_mint(self, requester: str, payment: int, user_seed: int = 0) -> int:
        requester = Web3.to_checksum_address(requester)
        with self.ledger.atomic():
            if payment != MINT_PRICE_WEI:
                raise InsufficientPayment(
                    f"Mint price is {MINT_PRICE_WEI} wei, received {payment}"
                )
            reserved = self.ledger.total_minted() + self.ledger.outstanding_requests()
            if reserved >= MAX_SUPPLY:
                raise SupplyExhausted(f"All {MAX_SUPPLY} adventurers are minted or reserved")
            if self.fee_token.balance_of(self.address) < self.fee:
                raise OracleFundsMissing("Not enough LINK to pay the randomness fee")

            nonce = self.ledger.vrf_nonce()
            vrf_seed = make_vrf_input_seed(self.key_hash, user_seed, self.address, nonce)
            request_id = make_request_id(self.key_hash, vrf_seed)
            if self.ledger.get_request(request_id) is not None:
                raise InvalidTransition(f"Request {format_request_id(request_id)} already exists")

            self.oracle.request_randomness(self.key_hash, self.fee, request_id, self.address)
            pending = PendingRequest(request_id=request_id, requester=requester, payment=payment, status=RequestStatus.NONE)
            self.ledger.put_request(advance(pending, RequestStatus.REQUESTED))
            self.ledger.bump_vrf_nonce()

        logger.info("Mint requested by %s: %s", requester, format_request_id(request_id))
        return request_id

    def fulfill_randomness(self, request_id: int, randomness: int, caller: str) -> PendingRequest:
        if Web3.to_checksum_address(caller) != self.oracle_address:
            raise UnauthorizedCallback("Only the randomness oracle can fulfill")
        if not 0 <= randomness < 2**256:
            raise ValueError("Randomness must be a uint256")

        with self.ledger.atomic():
            request = self.ledger.get_request(request_id, for_update=True)
            if request is None:
                raise InvalidTransition(f"Unknown request {format_request_id(request_id)}")
            fulfilled = advance(request, RequestStatus.FULFILLED, randomness=randomness)
            self.ledger.put_request(fulfilled)

        logger.info("Randomness delivered for %s", format_request_id(request_id))
        return fulfilled

    def finish_mint(self, request_id: int) -> int:
        with self.ledger.atomic():
            request = self.ledger.get_request(request_id, for_update=True)
            if request is None or request.status != RequestStatus.FULFILLED:
                raise UnknownOrFulfilledRequest(
                    f"Request {format_request_id(request_id)} has no delivered randomness"
                )
            token_id = self.ledger.total_minted()
            if token_id >= MAX_SUPPLY:
                raise SupplyExhausted(f"All {MAX_SUPPLY} adventurers are minted")

            attributes = derive_attributes(request.randomness)
            completed = advance(request, RequestStatus.COMPLETED, token_id=token_id)
            self.ledger.complete_mint(completed, attributes)

        logger.info("Adventurer #%s minted for %s", token_id, request.requester)
        return token_id
