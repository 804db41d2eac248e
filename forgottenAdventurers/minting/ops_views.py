from django.conf import settings
from django.db import DatabaseError
from django.http import JsonResponse
from django.views.decorators.http import require_GET
from web3 import Web3

from .blockchain_utils import get_contract_stats, get_link_balance, get_network_info
from .ledger import DjangoFeeToken
from .models import CoordinatorState


@require_GET
def health_live(request):
    return JsonResponse({"status": "ok", "network": settings.BLOCKCHAIN_NETWORK})


@require_GET
def health_ready(request):
    coordinator = settings.MINT_COORDINATOR_ADDRESS or ""
    network = settings.CURRENT_NETWORK_CONFIG
    checks = {
        "database": False,
        "coordinator_configured": Web3.is_address(coordinator),
        "oracle_configured": Web3.is_address(network.get("vrf_coordinator") or ""),
        "channel_layer_configured": bool(settings.CHANNEL_LAYERS.get("default")),
    }

    accepting_mints = False
    try:
        CoordinatorState.objects.exists()
        checks["database"] = True
        if checks["coordinator_configured"]:
            accepting_mints = DjangoFeeToken().balance_of(coordinator) >= network["fee"]
    except DatabaseError:
        checks["database"] = False

    # An unfunded coordinator is still ready; it just refuses new requests.
    ok = all(checks.values())
    return JsonResponse(
        {"status": "ok" if ok else "degraded", "checks": checks, "accepting_mints": accepting_mints},
        status=200 if ok else 503,
    )


@require_GET
def network_info(request):
    info = get_network_info()
    return JsonResponse(info, status=200 if info.get("success") else 503)


@require_GET
def onchain_stats(request):
    stats = get_contract_stats()
    if stats is None:
        return JsonResponse({"success": False, "message": "Contract unavailable"}, status=503)
    stats["link_balance"] = get_link_balance()
    return JsonResponse({"success": True, **{key: None if value is None else str(value) for key, value in stats.items()}})
