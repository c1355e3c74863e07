# materials_registry/registry/__init__.py
"""
Materials Registry Storage Layer

Record codec, id index and keyed record store on top of a LedgerClient.

Components:
    MaterialRecord / MaterialStatus: Record model
    encode_record / decode_record: Stored JSON codec
    IndexManager: Scannable id catalog under "material_keys"
    RegistryStore: Records under "material_{id}"

Usage:
    from materials_registry.registry import IndexManager, RegistryStore

    index = IndexManager(ledger)
    store = RegistryStore(ledger)

    for record_id in await index.list_ids():
        record = await store.get(record_id)
"""

from .codec import (
    MaterialRecord,
    MaterialStatus,
    encode_record,
    decode_record,
)

from .index import (
    INDEX_KEY,
    IndexManager,
    append_merge,
    parse_index,
)

from .store import (
    RECORD_KEY_PREFIX,
    RegistryStore,
    record_key,
)

__all__ = [
    # Codec
    "MaterialRecord",
    "MaterialStatus",
    "encode_record",
    "decode_record",
    # Index
    "INDEX_KEY",
    "IndexManager",
    "append_merge",
    "parse_index",
    # Store
    "RECORD_KEY_PREFIX",
    "RegistryStore",
    "record_key",
]
