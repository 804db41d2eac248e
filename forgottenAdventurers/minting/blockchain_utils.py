"""Blockchain utilities for oracle signatures, contract reads and transaction checks."""

from decimal import Decimal, InvalidOperation
from functools import lru_cache
import logging
from typing import Optional

import eth_abi
from django.conf import settings
from eth_account import Account
from eth_account.messages import encode_defunct
from web3 import Web3

from .contract_loader import CONTRACT_ABI, ERC20_BALANCE_ABI
from .coordinator import MINT_PRICE_WEI

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_web3():
    rpc_url = settings.BLOCKCHAIN_RPC_URL
    if not rpc_url:
        raise ValueError("BLOCKCHAIN_RPC_URL not configured")

    w3 = Web3(Web3.HTTPProvider(rpc_url))
    if not w3.is_connected():
        raise ConnectionError(f"No node answering at {rpc_url}")

    expected = settings.CURRENT_NETWORK_CONFIG.get("chain_id", settings.CHAIN_ID)
    actual = w3.eth.chain_id
    if actual != expected:
        raise ValueError(
            f"Node at {rpc_url} serves chain {actual}, but {settings.BLOCKCHAIN_NETWORK} expects {expected}"
        )
    return w3


@lru_cache(maxsize=1)
def get_adventurers_contract():
    if not settings.ADVENTURERS_CONTRACT_ADDRESS:
        raise ValueError("ADVENTURERS_CONTRACT_ADDRESS not set")

    w3 = get_web3()
    address = w3.to_checksum_address(settings.ADVENTURERS_CONTRACT_ADDRESS)
    code = w3.eth.get_code(address)
    if code == b"" or code == b"0x":
        raise ValueError(f"No contract found at {address}")
    return w3.eth.contract(address=address, abi=CONTRACT_ABI)


def get_link_token_contract():
    w3 = get_web3()
    address = w3.to_checksum_address(settings.CURRENT_NETWORK_CONFIG["link_token"])
    return w3.eth.contract(address=address, abi=ERC20_BALANCE_ABI)


def fulfillment_digest(request_id: int, randomness: int, coordinator_address: str) -> bytes:
    encoded = eth_abi.encode(
        ["bytes32", "uint256", "address"],
        [
            request_id.to_bytes(32, byteorder="big"),
            randomness,
            Web3.to_checksum_address(coordinator_address),
        ],
    )
    return Web3.keccak(encoded)


def sign_fulfillment(request_id: int, randomness: int, coordinator_address: str, private_key: str) -> tuple:
    """Sign a randomness delivery the way the oracle service does."""
    message = encode_defunct(primitive=fulfillment_digest(request_id, randomness, coordinator_address))
    signed = Account.sign_message(message, private_key=private_key)
    return (
        signed.v,
        "0x" + signed.r.to_bytes(32, byteorder="big").hex(),
        "0x" + signed.s.to_bytes(32, byteorder="big").hex(),
    )


def recover_fulfillment_signer(
    request_id: int, randomness: int, coordinator_address: str, v: int, r: str, s: str
) -> str:
    message = encode_defunct(primitive=fulfillment_digest(request_id, randomness, coordinator_address))
    return Account.recover_message(message, vrs=(v, r, s))


def get_contract_stats() -> Optional[dict]:
    try:
        functions = get_adventurers_contract().functions
        return {
            "total_minted": functions.getTotalNFTsMintedSoFar().call(),
            "max_available": functions.getMaxAvailable().call(),
            "mint_price": functions.getMintPrice().call(),
        }
    except Exception as exc:
        logger.error("Error fetching contract stats: %s", exc)
        return None


def get_link_balance(address: Optional[str] = None) -> Optional[int]:
    try:
        holder = address or settings.ADVENTURERS_CONTRACT_ADDRESS
        if not holder:
            raise ValueError("No LINK holder address given")
        holder = Web3.to_checksum_address(holder)
        return get_link_token_contract().functions.balanceOf(holder).call()
    except Exception as exc:
        logger.error("Error fetching LINK balance: %s", exc)
        return None


def verify_mint_transaction(tx_hash: str, expected_amount: int = MINT_PRICE_WEI) -> bool:
    w3 = get_web3()
    contract = get_adventurers_contract()
    try:
        receipt = w3.eth.get_transaction_receipt(tx_hash)
        if receipt["status"] != 1:
            return False

        tx = w3.eth.get_transaction(tx_hash)
        if (tx.get("to") or "").lower() != contract.address.lower():
            return False
        if tx["value"] != expected_amount:
            return False

        fn, _ = contract.decode_function_input(tx["input"])
        return fn.fn_name == "create"
    except Exception as exc:
        logger.error("Error verifying transaction %s: %s", tx_hash, exc)
        return False


def eth_to_wei(eth_amount) -> int:
    try:
        amount = Decimal(str(eth_amount))
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise ValueError(f"Invalid ETH amount: {eth_amount}") from exc
    return Web3.to_wei(amount, "ether")


def wei_to_eth(wei_amount: int) -> Decimal:
    return Web3.from_wei(wei_amount, "ether")


def get_network_info() -> dict:
    network = settings.CURRENT_NETWORK_CONFIG
    try:
        w3 = get_web3()
        contract = get_adventurers_contract()
        return {
            "success": True,
            "network": settings.BLOCKCHAIN_NETWORK,
            "network_name": network["name"],
            "rpc_url": settings.BLOCKCHAIN_RPC_URL,
            "chain_id": w3.eth.chain_id,
            "contract_address": contract.address,
            "vrf_coordinator": network["vrf_coordinator"],
            "link_token": network["link_token"],
            "key_hash": network["key_hash"],
            "fee": str(network["fee"]),
            "link_balance": get_link_balance(contract.address),
            "is_connected": w3.is_connected(),
            "latest_block": w3.eth.block_number,
            "explorer_url": network.get("explorer_url"),
        }
    except Exception as exc:
        logger.error("Error getting network info: %s", exc)
        return {
            "success": False,
            "error": str(exc),
            "network": settings.BLOCKCHAIN_NETWORK,
        }
