"""
Tests for the two-phase mint protocol
Run with: pytest minting/test_coordinator.py
"""

import pytest
from web3 import Web3

from minting.coordinator import (
    InsufficientPayment,
    InvalidTransition,
    MintCoordinator,
    OracleFundsMissing,
    RequestStatus,
    SupplyExhausted,
    UnauthorizedCallback,
    UnknownOrFulfilledRequest,
    format_request_id,
    parse_request_id,
)
from minting.ledger import InMemoryMintLedger
from minting.oracle import FeeToken, LocalRandomnessOracle

COORDINATOR = Web3.to_checksum_address("0xe7f1725e7734ce288f8367e1bb143e90bb3f0512")
ORACLE = Web3.to_checksum_address("0xb3dccb4cf7a26f6cf6b120cf5a73875b7bbc655b")
ALICE = Web3.to_checksum_address("0x742d35cc6634c0532925a3b844bc9e7595f0beb4")
BOB = Web3.to_checksum_address("0x5aaeb6053f3e94c9b9a09f33669435e7ef1beaed")
KEY_HASH = "0x2ed0feb3e7fd2022120aa84fab1945545a9f2ffc9076fd6156fa96eaff4c1311"
FEE = 100000000000000000
PRICE = 30000000000000000


def make_coordinator(fee_token=None):
    fee_token = fee_token or FeeToken()
    oracle = LocalRandomnessOracle(fee_token, ORACLE)
    coordinator = MintCoordinator(
        ledger=InMemoryMintLedger(),
        oracle=oracle,
        fee_token=fee_token,
        address=COORDINATOR,
        key_hash=KEY_HASH,
        fee=FEE,
        oracle_address=ORACLE,
    )
    return coordinator, oracle, fee_token


@pytest.fixture
def deployed():
    """A freshly deployed coordinator that holds no LINK"""
    return make_coordinator()


@pytest.fixture
def funded():
    coordinator, oracle, fee_token = make_coordinator()
    fee_token.fund(COORDINATOR, 10 * FEE)
    return coordinator, oracle, fee_token


class TestFreshDeployment:
    def test_nothing_minted_after_deployment(self, deployed):
        coordinator, _, _ = deployed
        assert coordinator.get_total_minted_so_far() == 0

    def test_max_available_is_2007(self, deployed):
        coordinator, _, _ = deployed
        assert coordinator.get_max_available() == 2007

    def test_mint_price_is_003_eth(self, deployed):
        coordinator, _, _ = deployed
        assert coordinator.get_mint_price() == 30000000000000000

    def test_request_fails_without_link(self, deployed):
        coordinator, oracle, _ = deployed
        with pytest.raises(OracleFundsMissing):
            coordinator.request_mint(ALICE, PRICE)

        # Failed call leaves nothing behind
        assert coordinator.ledger.vrf_nonce() == 0
        assert coordinator.ledger.outstanding_requests() == 0
        assert oracle.pending == {}

    def test_finish_mint_before_oracle_responds_fails(self, deployed):
        coordinator, _, _ = deployed
        with pytest.raises(UnknownOrFulfilledRequest):
            coordinator.finish_mint(0)


class TestRequestMint:
    @pytest.mark.parametrize("payment", [0, PRICE - 1, PRICE + 1])
    def test_wrong_payment_rejected(self, funded, payment):
        coordinator, _, fee_token = funded
        with pytest.raises(InsufficientPayment):
            coordinator.request_mint(ALICE, payment)
        assert fee_token.balance_of(COORDINATOR) == 10 * FEE

    def test_request_pays_oracle_fee(self, funded):
        coordinator, oracle, fee_token = funded
        request_id = coordinator.request_mint(ALICE, PRICE)

        assert fee_token.balance_of(COORDINATOR) == 9 * FEE
        assert fee_token.balance_of(ORACLE) == FEE
        assert oracle.pending[request_id] == COORDINATOR

    def test_request_does_not_mint(self, funded):
        coordinator, _, _ = funded
        request_id = coordinator.request_mint(ALICE, PRICE)

        request = coordinator.get_request(request_id)
        assert request.status == RequestStatus.REQUESTED
        assert request.requester == ALICE
        assert request.token_id is None
        assert coordinator.get_total_minted_so_far() == 0

    def test_request_ids_are_deterministic(self, funded):
        coordinator, _, _ = funded
        other, _, other_token = make_coordinator()
        other_token.fund(COORDINATOR, FEE)

        first = coordinator.request_mint(ALICE, PRICE)
        second = coordinator.request_mint(ALICE, PRICE)
        assert first != second
        assert other.request_mint(BOB, PRICE) == first

    def test_user_seed_changes_request_id(self):
        a, _, token_a = make_coordinator()
        b, _, token_b = make_coordinator()
        token_a.fund(COORDINATOR, FEE)
        token_b.fund(COORDINATOR, FEE)
        assert a.request_mint(ALICE, PRICE, user_seed=1) != b.request_mint(ALICE, PRICE, user_seed=2)

    def test_fee_exhaustion(self):
        coordinator, _, fee_token = make_coordinator()
        fee_token.fund(COORDINATOR, FEE)
        coordinator.request_mint(ALICE, PRICE)
        with pytest.raises(OracleFundsMissing):
            coordinator.request_mint(ALICE, PRICE)


class TestFulfillment:
    def test_only_oracle_can_fulfill(self, funded):
        coordinator, _, _ = funded
        request_id = coordinator.request_mint(ALICE, PRICE)
        with pytest.raises(UnauthorizedCallback):
            coordinator.fulfill_randomness(request_id, 42, caller=ALICE)
        assert coordinator.get_request(request_id).status == RequestStatus.REQUESTED

    def test_fulfillment_does_not_mint(self, funded):
        coordinator, oracle, _ = funded
        request_id = coordinator.request_mint(ALICE, PRICE)
        oracle.callback_with_randomness(request_id, 42, coordinator)

        request = coordinator.get_request(request_id)
        assert request.status == RequestStatus.FULFILLED
        assert request.randomness == 42
        assert coordinator.get_total_minted_so_far() == 0

    def test_cannot_fulfill_twice(self, funded):
        coordinator, _, _ = funded
        request_id = coordinator.request_mint(ALICE, PRICE)
        coordinator.fulfill_randomness(request_id, 1, caller=ORACLE)
        with pytest.raises(InvalidTransition):
            coordinator.fulfill_randomness(request_id, 2, caller=ORACLE)
        assert coordinator.get_request(request_id).randomness == 1

    def test_unknown_request_cannot_be_fulfilled(self, funded):
        coordinator, _, _ = funded
        with pytest.raises(InvalidTransition):
            coordinator.fulfill_randomness(12345, 1, caller=ORACLE)

    def test_local_oracle_rejects_unknown_request(self, funded):
        coordinator, oracle, _ = funded
        with pytest.raises(KeyError):
            oracle.callback_with_randomness(999, 1, coordinator)


class TestFinishMint:
    def test_finish_before_fulfillment_fails(self, funded):
        coordinator, _, _ = funded
        request_id = coordinator.request_mint(ALICE, PRICE)
        with pytest.raises(UnknownOrFulfilledRequest):
            coordinator.finish_mint(request_id)
        assert coordinator.get_request(request_id).status == RequestStatus.REQUESTED

    def test_full_mint(self, funded):
        coordinator, oracle, _ = funded
        request_id = coordinator.request_mint(ALICE, PRICE)
        oracle.callback_with_randomness(request_id, 2**200 + 7, coordinator)

        token_id = coordinator.finish_mint(request_id)

        assert token_id == 0
        assert coordinator.get_total_minted_so_far() == 1
        request = coordinator.get_request(request_id)
        assert request.status == RequestStatus.COMPLETED
        assert request.token_id == 0
        adventurer = coordinator.get_adventurer(0)
        assert adventurer.owner == ALICE
        assert adventurer.request_id == request_id

    def test_finish_twice_fails(self, funded):
        coordinator, oracle, _ = funded
        request_id = coordinator.request_mint(ALICE, PRICE)
        oracle.callback_with_randomness(request_id, 5, coordinator)
        coordinator.finish_mint(request_id)

        with pytest.raises(UnknownOrFulfilledRequest):
            coordinator.finish_mint(request_id)
        assert coordinator.get_total_minted_so_far() == 1

    def test_token_ids_follow_completion_order(self, funded):
        coordinator, oracle, _ = funded
        first = coordinator.request_mint(ALICE, PRICE)
        second = coordinator.request_mint(BOB, PRICE)
        oracle.callback_with_randomness(first, 11, coordinator)
        oracle.callback_with_randomness(second, 22, coordinator)

        assert coordinator.finish_mint(second) == 0
        assert coordinator.finish_mint(first) == 1
        assert coordinator.get_adventurer(0).owner == BOB
        assert coordinator.get_adventurer(1).owner == ALICE

    def test_counter_increments_by_one_per_mint(self, funded):
        coordinator, oracle, _ = funded
        for expected in range(1, 4):
            request_id = coordinator.request_mint(ALICE, PRICE)
            oracle.callback_with_randomness(request_id, expected, coordinator)
            coordinator.finish_mint(request_id)
            assert coordinator.get_total_minted_so_far() == expected

    def test_token_metadata(self, funded):
        coordinator, oracle, _ = funded
        request_id = coordinator.request_mint(ALICE, PRICE)
        oracle.callback_with_randomness(request_id, 99, coordinator)
        coordinator.finish_mint(request_id)

        metadata = coordinator.token_metadata(0)
        assert metadata["name"] == "Forgotten Adventurer #0"
        assert coordinator.token_uri(0, "https://example.org/token") == "https://example.org/token/0/"
        with pytest.raises(LookupError):
            coordinator.token_metadata(1)


class TestSupplyCap:
    @pytest.fixture(autouse=True)
    def small_supply(self, monkeypatch):
        monkeypatch.setattr("minting.coordinator.MAX_SUPPLY", 2)

    def test_outstanding_requests_reserve_supply(self, funded):
        coordinator, _, _ = funded
        coordinator.request_mint(ALICE, PRICE)
        coordinator.request_mint(BOB, PRICE)
        with pytest.raises(SupplyExhausted):
            coordinator.request_mint(ALICE, PRICE)

    def test_supply_never_exceeds_maximum(self, funded):
        coordinator, oracle, _ = funded
        for seed in range(2):
            request_id = coordinator.request_mint(ALICE, PRICE, user_seed=seed)
            oracle.callback_with_randomness(request_id, seed + 1, coordinator)
            coordinator.finish_mint(request_id)

        assert coordinator.get_total_minted_so_far() == coordinator.get_max_available() == 2
        with pytest.raises(SupplyExhausted):
            coordinator.request_mint(ALICE, PRICE)


class TestRequestIds:
    def test_format_is_32_byte_hex(self):
        assert format_request_id(0) == "0x" + "0" * 64
        assert format_request_id(255).endswith("ff")

    @pytest.mark.parametrize("value, expected", [(0, 0), ("0", 0), ("42", 42), ("0x2a", 42)])
    def test_parse(self, value, expected):
        assert parse_request_id(value) == expected

    @pytest.mark.parametrize("value", ["", "abc", "-1", str(2**256), True, None])
    def test_parse_rejects_garbage(self, value):
        with pytest.raises(ValueError):
            parse_request_id(value)
