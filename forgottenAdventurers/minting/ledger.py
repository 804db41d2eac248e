"""State handles for the mint coordinator.

A ledger stores protocol state and nothing else; the coordinator decides
every transition. ``InMemoryMintLedger`` serves local runs and tests,
``DjangoMintLedger`` persists the same state in the database.
"""

import threading
from collections import namedtuple
from contextlib import contextmanager

from django.db import transaction
from django.utils import timezone
from web3 import Web3

from .attributes import AdventurerAttributes
from .coordinator import PendingRequest, RequestStatus, format_request_id
from .models import Adventurer, CoordinatorState, FeeTokenBalance, MintRequest
from .oracle import InsufficientFeeBalance

MintedAdventurer = namedtuple("MintedAdventurer", ["token_id", "owner", "request_id", "attributes"])

OUTSTANDING = (RequestStatus.REQUESTED, RequestStatus.FULFILLED)


class InMemoryMintLedger:
    def __init__(self):
        self._lock = threading.RLock()
        self._requests = {}
        self._adventurers = {}
        self._total_minted = 0
        self._vrf_nonce = 0

    def atomic(self):
        return self._lock

    def total_minted(self):
        return self._total_minted

    def outstanding_requests(self):
        return sum(1 for r in self._requests.values() if r.status in OUTSTANDING)

    def vrf_nonce(self):
        return self._vrf_nonce

    def bump_vrf_nonce(self):
        self._vrf_nonce += 1

    def get_request(self, request_id, for_update=False):
        return self._requests.get(request_id)

    def put_request(self, request):
        self._requests[request.request_id] = request

    def complete_mint(self, request, attributes):
        self._adventurers[request.token_id] = MintedAdventurer(
            request.token_id, request.requester, request.request_id, attributes
        )
        self._requests[request.request_id] = request
        self._total_minted += 1

    def get_adventurer(self, token_id):
        return self._adventurers.get(token_id)


class DjangoMintLedger:
    def __init__(self, address):
        self.address = Web3.to_checksum_address(address)

    @contextmanager
    def atomic(self):
        # Every entry point serializes on the coordinator row before reading counters.
        with transaction.atomic():
            self._state(for_update=True)
            yield

    def _state(self, for_update=False):
        if not for_update:
            return CoordinatorState.objects.filter(address=self.address).first()
        state, _ = CoordinatorState.objects.select_for_update().get_or_create(address=self.address)
        return state

    def total_minted(self):
        state = self._state()
        return state.total_minted if state else 0

    def outstanding_requests(self):
        return MintRequest.objects.filter(
            coordinator__address=self.address,
            status__in=[status.value for status in OUTSTANDING],
        ).count()

    def vrf_nonce(self):
        return self._state(for_update=True).vrf_nonce

    def bump_vrf_nonce(self):
        state = self._state(for_update=True)
        state.vrf_nonce += 1
        state.save(update_fields=["vrf_nonce", "updated_at"])

    def get_request(self, request_id, for_update=False):
        queryset = MintRequest.objects
        if for_update:
            queryset = queryset.select_for_update()
        row = queryset.filter(
            coordinator__address=self.address, request_id=format_request_id(request_id)
        ).first()
        if row is None:
            return None
        return PendingRequest(
            request_id=request_id,
            requester=row.requester,
            payment=int(row.payment_wei),
            status=RequestStatus(row.status),
            randomness=int(row.randomness) if row.randomness else None,
            token_id=row.token_id,
        )

    def put_request(self, request):
        now = timezone.now()
        defaults = {
            "coordinator": self._state(for_update=True),
            "requester": request.requester,
            "payment_wei": str(request.payment),
            "status": request.status.value,
            "randomness": "" if request.randomness is None else str(request.randomness),
            "token_id": request.token_id,
        }
        if request.status == RequestStatus.FULFILLED:
            defaults["fulfilled_at"] = now
        elif request.status == RequestStatus.COMPLETED:
            defaults["completed_at"] = now
        row, created = MintRequest.objects.get_or_create(
            request_id=format_request_id(request.request_id), defaults=defaults
        )
        if not created:
            # save() rather than update() so post_save listeners see the change
            for field, value in defaults.items():
                setattr(row, field, value)
            row.save()
        return row

    def complete_mint(self, request, attributes):
        state = self._state(for_update=True)
        row = self.put_request(request)
        Adventurer.objects.create(
            coordinator=state,
            token_id=request.token_id,
            owner=request.requester,
            request=row,
            **attributes._asdict(),
        )
        state.total_minted += 1
        state.collected_wei = str(int(state.collected_wei) + request.payment)
        state.save(update_fields=["total_minted", "collected_wei", "updated_at"])

    def get_adventurer(self, token_id):
        row = (
            Adventurer.objects.select_related("request")
            .filter(coordinator__address=self.address, token_id=token_id)
            .first()
        )
        if row is None:
            return None
        attributes = AdventurerAttributes(
            **{field: getattr(row, field) for field in AdventurerAttributes._fields}
        )
        return MintedAdventurer(row.token_id, row.owner, int(row.request.request_id, 16), attributes)


class DjangoFeeToken:
    """Fee token balances kept in ``FeeTokenBalance`` rows."""

    def balance_of(self, address):
        row = FeeTokenBalance.objects.filter(address=Web3.to_checksum_address(address)).first()
        return int(row.balance) if row else 0

    def _locked(self, address):
        row, _ = FeeTokenBalance.objects.select_for_update().get_or_create(
            address=Web3.to_checksum_address(address)
        )
        return row

    def fund(self, address, amount):
        if amount <= 0:
            raise ValueError("Funding amount must be positive")
        with transaction.atomic():
            row = self._locked(address)
            row.balance = str(int(row.balance) + amount)
            row.save(update_fields=["balance", "updated_at"])

    def transfer(self, sender, recipient, amount):
        with transaction.atomic():
            source = self._locked(sender)
            if int(source.balance) < amount:
                raise InsufficientFeeBalance(f"{source.address} holds {source.balance}, needs {amount}")
            source.balance = str(int(source.balance) - amount)
            source.save(update_fields=["balance", "updated_at"])
            target = self._locked(recipient)
            target.balance = str(int(target.balance) + amount)
            target.save(update_fields=["balance", "updated_at"])
