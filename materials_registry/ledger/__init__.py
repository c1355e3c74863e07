# materials_registry/ledger/__init__.py
"""
Materials Registry Ledger Layer

Key-value ledger clients consumed by the registry core.

Components:
    LedgerClient: Abstract get/set/is_available interface
    ContractLedgerClient: MaterialsRegistry contract over web3.py
    MockLedgerClient: In-memory ledger for tests and demos

Usage:
    from materials_registry.ledger import ContractLedgerClient

    ledger = ContractLedgerClient(
        contract_address="0x...",
        rpc_url="https://...",
        private_key="0x...",  # For write operations
    )
    raw = await ledger.get("material_keys")
"""

from .base import (
    LedgerClient,
    LedgerError,
    LedgerReadError,
    LedgerWriteError,
)

from .contract import ContractLedgerClient

from .mock import MockLedgerClient

__all__ = [
    "LedgerClient",
    "LedgerError",
    "LedgerReadError",
    "LedgerWriteError",
    "ContractLedgerClient",
    "MockLedgerClient",
]
