"""HTTP views for the two-phase mint protocol."""

import json
import logging

from django.conf import settings
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_http_methods
from web3 import Web3

from .audit import log_mint_event
from .blockchain_utils import recover_fulfillment_signer
from .coordinator import (
    InsufficientPayment,
    InvalidTransition,
    MintError,
    OracleFundsMissing,
    SupplyExhausted,
    UnauthorizedCallback,
    UnknownOrFulfilledRequest,
    format_request_id,
    parse_request_id,
)
from .services import get_coordinator

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    InsufficientPayment: 400,
    SupplyExhausted: 409,
    OracleFundsMissing: 409,
    UnknownOrFulfilledRequest: 409,
    InvalidTransition: 409,
    UnauthorizedCallback: 403,
}


def _load_json_body(request):
    try:
        data = json.loads(request.body or "{}")
    except json.JSONDecodeError:
        return None
    return data if isinstance(data, dict) else None


def _bad_request(message):
    return JsonResponse({"success": False, "message": message}, status=400)


def _mint_error_response(exc, event_type, request_id=""):
    log_mint_event(
        event_type,
        status="error",
        request_id=request_id,
        details={"error": type(exc).__name__, "message": str(exc)},
    )
    return JsonResponse(
        {"success": False, "error": type(exc).__name__, "message": str(exc)},
        status=ERROR_STATUS.get(type(exc), 409),
    )


def _uint(value):
    if isinstance(value, (bool, float)):
        raise ValueError(f"{type(value).__name__} is not a uint256")
    number = int(value, 0) if isinstance(value, str) else int(value)
    if not 0 <= number < 2**256:
        raise ValueError("Value out of uint256 range")
    return number


@require_GET
def mint_stats(request):
    coordinator = get_coordinator()
    return JsonResponse(
        {
            "success": True,
            "total_minted": coordinator.get_total_minted_so_far(),
            "max_available": coordinator.get_max_available(),
            "mint_price": str(coordinator.get_mint_price()),
            "fee": str(coordinator.fee),
            "fee_token_balance": str(coordinator.fee_token.balance_of(coordinator.address)),
        }
    )


@csrf_exempt
@require_http_methods(["POST"])
def request_mint(request):
    data = _load_json_body(request)
    if data is None:
        return _bad_request("Invalid JSON payload")

    requester = data.get("requester", "")
    if not Web3.is_address(requester):
        return _bad_request("Invalid requester address")
    try:
        payment = _uint(data.get("payment_wei"))
        seed = _uint(data.get("seed", 0))
    except (TypeError, ValueError):
        return _bad_request("payment_wei and seed must be uint256 values")

    try:
        request_id = get_coordinator().request_mint(requester, payment, user_seed=seed)
    except MintError as exc:
        logger.info("Mint request from %s rejected: %s", requester, exc)
        return _mint_error_response(exc, "mint_request_failed")

    hex_id = format_request_id(request_id)
    log_mint_event("mint_requested", request_id=hex_id, details={"requester": requester})
    return JsonResponse({"success": True, "request_id": hex_id, "status": "requested"}, status=201)


@csrf_exempt
@require_http_methods(["POST"])
def fulfill_randomness(request):
    data = _load_json_body(request)
    if data is None:
        return _bad_request("Invalid JSON payload")

    signature = data.get("signature") or {}
    try:
        request_id = parse_request_id(data.get("request_id"))
        randomness = _uint(data.get("randomness"))
        v = int(signature["v"])
        r, s = signature["r"], signature["s"]
    except (KeyError, TypeError, ValueError):
        return _bad_request("request_id, randomness and signature {v, r, s} are required")

    coordinator = get_coordinator()
    hex_id = format_request_id(request_id)
    try:
        caller = recover_fulfillment_signer(request_id, randomness, coordinator.address, v, r, s)
    except Exception as exc:
        logger.warning("Unrecoverable fulfillment signature for %s: %s", hex_id, exc)
        log_mint_event("fulfillment_rejected", status="error", request_id=hex_id, details={"error": str(exc)})
        return JsonResponse({"success": False, "message": "Invalid signature"}, status=403)

    try:
        coordinator.fulfill_randomness(request_id, randomness, caller=caller)
    except MintError as exc:
        return _mint_error_response(exc, "fulfillment_rejected", request_id=hex_id)

    log_mint_event("randomness_fulfilled", request_id=hex_id, details={"oracle": caller})
    return JsonResponse({"success": True, "request_id": hex_id, "status": "fulfilled"})


@csrf_exempt
@require_http_methods(["POST"])
def finish_mint(request, request_id):
    try:
        parsed_id = parse_request_id(request_id)
    except ValueError:
        return _bad_request("Invalid request id")

    hex_id = format_request_id(parsed_id)
    coordinator = get_coordinator()
    try:
        token_id = coordinator.finish_mint(parsed_id)
    except MintError as exc:
        return _mint_error_response(exc, "finish_mint_failed", request_id=hex_id)

    log_mint_event("adventurer_minted", request_id=hex_id, details={"token_id": token_id})
    return JsonResponse(
        {
            "success": True,
            "request_id": hex_id,
            "token_id": token_id,
            "token_uri": coordinator.token_uri(token_id, settings.TOKEN_BASE_URI),
        }
    )


@require_GET
def request_status(request, request_id):
    try:
        parsed_id = parse_request_id(request_id)
    except ValueError:
        return _bad_request("Invalid request id")

    pending = get_coordinator().get_request(parsed_id)
    if pending is None:
        return JsonResponse({"success": False, "message": "Unknown request"}, status=404)
    return JsonResponse(
        {
            "success": True,
            "request_id": format_request_id(parsed_id),
            "requester": pending.requester,
            "status": pending.status.value,
            "token_id": pending.token_id,
        }
    )


@require_GET
def token_metadata(request, token_id):
    try:
        metadata = get_coordinator().token_metadata(token_id, settings.TOKEN_IMAGE_BASE_URI)
    except LookupError:
        return JsonResponse({"success": False, "message": "Token not minted"}, status=404)
    return JsonResponse(metadata)
