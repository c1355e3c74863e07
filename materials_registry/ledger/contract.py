# materials_registry/ledger/contract.py
"""
Materials Registry Ledger: Contract Client

Python interface to the MaterialsRegistry smart contract, a generic
string → bytes store exposing isAvailable(), getData(key) and
setData(key, value).

Requirements:
    pip install web3

Usage:
    ledger = ContractLedgerClient(
        contract_address="0x...",
        rpc_url="https://...",
        private_key="0x...",  # Optional, for write ops
    )

    if await ledger.is_available():
        raw = await ledger.get("material_keys")
        tx_hash = await ledger.set("material_keys", b'["a"]')

Updated: 2026-10-19
Version: 0.1.0
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from eth_account import Account
from web3 import AsyncWeb3

from .base import LedgerClient, LedgerReadError, LedgerWriteError


logger = logging.getLogger("materials-registry.ledger")


# =============================================================================
# Constants
# =============================================================================

ABI_PATH = Path(__file__).parent / "abi" / "MaterialsRegistry.json"

DEFAULT_GAS_LIMIT = 300000

# Substrings wallets/nodes use when the signer refuses a transaction
_REJECTION_MARKERS = ("user rejected", "user denied", "rejected by user")


def _load_abi() -> List[Dict]:
    """Load contract ABI from JSON file."""
    if ABI_PATH.exists():
        with open(ABI_PATH) as f:
            data = json.load(f)
            return data.get("abi", data)
    return []

CONTRACT_ABI = _load_abi()


def _is_rejection(exc: BaseException) -> bool:
    message = str(exc).lower()
    return any(marker in message for marker in _REJECTION_MARKERS)


# =============================================================================
# ContractLedgerClient
# =============================================================================

class ContractLedgerClient(LedgerClient):
    """
    MaterialsRegistry contract interface (async).

    Reads are eth_calls. Each write is a signed transaction that is
    considered acknowledged once its receipt reports status 1.
    """

    def __init__(
        self,
        contract_address: str,
        rpc_url: str,
        private_key: Optional[str] = None,
        chain_id: Optional[int] = None,
        gas_limit: int = DEFAULT_GAS_LIMIT,
    ):
        """
        Initialize ContractLedgerClient.

        Args:
            contract_address: Deployed MaterialsRegistry address
            rpc_url: RPC endpoint URL
            private_key: Private key for write operations (optional)
            chain_id: Chain ID (fetched on first write if not provided)
            gas_limit: Gas limit for setData transactions
        """
        self.contract_address = AsyncWeb3.to_checksum_address(contract_address)
        self.rpc_url = rpc_url
        self._chain_id = chain_id
        self._gas_limit = gas_limit

        self._w3 = AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(rpc_url))

        self._contract = self._w3.eth.contract(
            address=self.contract_address,
            abi=CONTRACT_ABI,
        )

        self._account = None
        if private_key:
            self._account = Account.from_key(private_key)

    @property
    def account_address(self) -> Optional[str]:
        """Get account address (if private key provided)."""
        return self._account.address if self._account else None

    async def _get_chain_id(self) -> int:
        if self._chain_id is None:
            self._chain_id = await self._w3.eth.chain_id
        return self._chain_id

    # =========================================================================
    # Read Operations
    # =========================================================================

    async def is_available(self) -> bool:
        """Ask the contract whether it accepts traffic."""
        try:
            return bool(await self._contract.functions.isAvailable().call())
        except Exception as e:
            logger.error("Availability probe failed for %s: %s",
                         self.contract_address, e)
            return False

    async def get(self, key: str) -> bytes:
        """Read raw bytes under key (b"" if unset)."""
        try:
            data = await self._contract.functions.getData(key).call()
        except Exception as e:
            raise LedgerReadError(key, str(e)) from e
        return bytes(data or b"")

    # =========================================================================
    # Write Operations
    # =========================================================================

    async def set(self, key: str, value: bytes) -> str:
        """
        Write bytes under key.

        Returns:
            tx_hash: Transaction hash (0x-prefixed hex)
        """
        if not self._account:
            raise LedgerWriteError(
                key, "Private key required for write operations", rejected=True
            )

        try:
            tx = await self._contract.functions.setData(
                key,
                value,
            ).build_transaction(await self._tx_params())

            signed = self._account.sign_transaction(tx)
            tx_hash = await self._w3.eth.send_raw_transaction(signed.raw_transaction)
            receipt = await self._w3.eth.wait_for_transaction_receipt(tx_hash)
        except LedgerWriteError:
            raise
        except Exception as e:
            raise LedgerWriteError(key, str(e), rejected=_is_rejection(e)) from e

        tx_hex = AsyncWeb3.to_hex(tx_hash)
        if receipt["status"] != 1:
            raise LedgerWriteError(key, f"Transaction failed: {tx_hex}")

        logger.debug("setData(%s) confirmed in %s", key, tx_hex)
        return tx_hex

    async def _tx_params(self) -> Dict[str, Any]:
        return {
            'from': self._account.address,
            'chainId': await self._get_chain_id(),
            'nonce': await self._w3.eth.get_transaction_count(self._account.address),
            'gas': self._gas_limit,
            'gasPrice': await self._w3.eth.gas_price,
        }
