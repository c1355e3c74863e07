# materials_registry/ledger/base.py
"""
Materials Registry Ledger: Abstract Key-Value Interface

The ledger is a remote key-value store with three primitives and nothing
else: no listing, no transactions, no access control.

    is_available() -> bool
    get(key)       -> bytes      (b"" means "not set", not an error)
    set(key, val)  -> ack        (raises LedgerWriteError on failure)

Concrete implementations:
    - ContractLedgerClient (EVM contract via web3.py)
    - MockLedgerClient (in memory)

Updated: 2026-10-19
Version: 0.1.0
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional


# =============================================================================
# Exceptions
# =============================================================================

class LedgerError(Exception):
    """Base ledger error."""
    pass


class LedgerReadError(LedgerError):
    """Read from the ledger failed."""
    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Failed to read {key}: {reason}")


class LedgerWriteError(LedgerError):
    """Write to the ledger failed or was refused by the signer."""
    def __init__(self, key: str, reason: str, rejected: bool = False):
        self.key = key
        self.reason = reason
        self.rejected = rejected
        super().__init__(f"Failed to write {key}: {reason}")


# =============================================================================
# LedgerClient
# =============================================================================

class LedgerClient(ABC):
    """Abstract ledger client consumed by the registry core."""

    @property
    @abstractmethod
    def account_address(self) -> Optional[str]:
        """Address writes are signed with (None if read-only)."""
        pass

    @property
    def can_write(self) -> bool:
        """Check if this client holds a write capability."""
        return self.account_address is not None

    @abstractmethod
    async def is_available(self) -> bool:
        """Probe the ledger. Never raises."""
        pass

    @abstractmethod
    async def get(self, key: str) -> bytes:
        """
        Read raw bytes stored under key.

        Returns:
            Stored bytes, or b"" when the key was never set

        Raises:
            LedgerReadError: If the ledger cannot be queried
        """
        pass

    @abstractmethod
    async def set(self, key: str, value: bytes) -> str:
        """
        Store bytes under key.

        Returns:
            Acknowledgement (transaction hash for on-chain ledgers)

        Raises:
            LedgerWriteError: If the write is refused or fails
        """
        pass
