"""Load the compiled ForgottenAdventurers artifact."""

import json
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

# The view/entry points this service talks to, used when no build is present.
FALLBACK_ABI = [
    {
        "inputs": [],
        "name": "getTotalNFTsMintedSoFar",
        "outputs": [{"internalType": "uint256", "name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [],
        "name": "getMaxAvailable",
        "outputs": [{"internalType": "uint256", "name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [],
        "name": "getMintPrice",
        "outputs": [{"internalType": "uint256", "name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [],
        "name": "create",
        "outputs": [{"internalType": "bytes32", "name": "requestId", "type": "bytes32"}],
        "stateMutability": "payable",
        "type": "function",
    },
    {
        "inputs": [{"internalType": "uint256", "name": "tokenId", "type": "uint256"}],
        "name": "finishMint",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    },
]

ERC20_BALANCE_ABI = [
    {
        "constant": True,
        "inputs": [{"name": "_owner", "type": "address"}],
        "name": "balanceOf",
        "outputs": [{"name": "balance", "type": "uint256"}],
        "payable": False,
        "stateMutability": "view",
        "type": "function",
    }
]


def _artifact_path() -> Path:
    django_root = Path(__file__).parent.parent
    project_root = django_root.parent
    return project_root / "build" / "contracts" / "ForgottenAdventurers.json"


def _load_artifact() -> dict:
    path = _artifact_path()
    if not path.exists():
        raise FileNotFoundError(
            f"Contract artifact not found at {path}. Compile the contract first."
        )
    with path.open("r", encoding="utf-8") as file_handle:
        return json.load(file_handle)


def get_contract_abi():
    artifact = _load_artifact()
    abi = artifact.get("abi")
    if not abi:
        raise ValueError("ABI missing from compiled artifact")
    return abi


try:
    CONTRACT_ABI = get_contract_abi()
except (OSError, ValueError) as exc:
    logger.warning("Contract artifact unavailable, using built-in ABI: %s", exc)
    CONTRACT_ABI = FALLBACK_ABI
