# materials_registry/config.py
"""
Runtime configuration for the materials registry client.

    RegistryConfig     – structured config object
    load_config()      – read MATERIALS_* environment variables
    configure_logging()

Recognized variables:
    MATERIALS_RPC_URL                 JSON-RPC endpoint
    MATERIALS_CONTRACT_ADDRESS        deployed registry contract
    MATERIALS_PRIVATE_KEY             signing key (omit for read-only)
    MATERIALS_CHAIN_ID                chain id (auto-detected if unset)
    MATERIALS_MAX_CONCURRENCY         parallel record fetches per sync
    MATERIALS_INDEX_APPEND_ATTEMPTS   1 = plain read-modify-write
    MATERIALS_GAS_LIMIT               gas limit for setData transactions
    MATERIALS_LOG_LEVEL               DEBUG / INFO / WARNING / ...
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional


DEFAULT_RPC_URL = "http://127.0.0.1:8545"
DEFAULT_MAX_CONCURRENCY = 8
DEFAULT_GAS_LIMIT = 300000
LOGGER_NAME = "materials-registry"


@dataclass
class RegistryConfig:
    """
    Configuration for a contract-backed registry client.

    Attributes:
        rpc_url: JSON-RPC endpoint URL
        contract_address: Deployed registry contract address
        private_key: Key granting write capability (None = read-only)
        chain_id: Chain ID (auto-detected if None)
        max_concurrency: Bound on concurrent per-record fetches
        index_append_attempts: Write/verify rounds per index append
        gas_limit: Gas limit for each setData transaction
        log_level: Level applied by MaterialsRegistryClient.from_config()
    """
    rpc_url: str = DEFAULT_RPC_URL
    contract_address: str = ""
    private_key: Optional[str] = None
    chain_id: Optional[int] = None
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY
    index_append_attempts: int = 1
    gas_limit: int = DEFAULT_GAS_LIMIT
    log_level: str = "WARNING"


def _env_int(name: str, default: Optional[int]) -> Optional[int]:
    val = os.getenv(name)
    if val is None or not val.strip():
        return default
    return int(val.strip())


def load_config() -> RegistryConfig:
    """Load RegistryConfig from environment variables, falling back to defaults."""
    return RegistryConfig(
        rpc_url=os.getenv("MATERIALS_RPC_URL", DEFAULT_RPC_URL),
        contract_address=os.getenv("MATERIALS_CONTRACT_ADDRESS", ""),
        private_key=os.getenv("MATERIALS_PRIVATE_KEY") or None,
        chain_id=_env_int("MATERIALS_CHAIN_ID", None),
        max_concurrency=_env_int(
            "MATERIALS_MAX_CONCURRENCY", DEFAULT_MAX_CONCURRENCY
        ),
        index_append_attempts=_env_int("MATERIALS_INDEX_APPEND_ATTEMPTS", 1),
        gas_limit=_env_int("MATERIALS_GAS_LIMIT", DEFAULT_GAS_LIMIT),
        log_level=os.getenv("MATERIALS_LOG_LEVEL", "WARNING").upper(),
    )


def configure_logging(level: str = "INFO") -> None:
    """
    Install a basic handler and set the materials-registry logger level.

    The package logger level is applied even when the root logger already
    has handlers (basicConfig is then a no-op).
    """
    resolved = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=resolved,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    logging.getLogger(LOGGER_NAME).setLevel(resolved)
