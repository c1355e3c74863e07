# materials_registry/registry/codec.py
"""
Materials Registry: Record Codec

Wire format of a record stored under `material_{id}` (UTF-8 JSON):

    {
      "data": "<opaque payload>",
      "timestamp": 1718000000,
      "owner": "0x...",
      "materialType": "...",
      "properties": "...",
      "researchInstitution": "...",
      "status": "pending" | "verified" | "rejected"
    }

The id is not part of the stored object; it is the key suffix.
Decoding is strict on materialType, properties, owner and timestamp and
lenient on the rest: a missing status reads as pending, a missing data or
researchInstitution reads as "".
"""

from __future__ import annotations

import json
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict

from ..errors import DecodeError


class MaterialStatus(str, Enum):
    """Verification workflow status."""
    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"

    @property
    def is_terminal(self) -> bool:
        return self is not MaterialStatus.PENDING


@dataclass(frozen=True)
class MaterialRecord:
    """
    A registered material.

    Attributes:
        id: Record id (key suffix, assigned at creation)
        payload: Opaque, already-sealed payload (never inspected)
        timestamp: Creation time, epoch seconds
        owner: Registrant address
        material_type: Free-form material type
        properties: Free-form properties description
        research_institution: Submitting institution
        status: Workflow status
    """
    id: str
    payload: str
    timestamp: int
    owner: str
    material_type: str
    properties: str
    research_institution: str = ""
    status: MaterialStatus = MaterialStatus.PENDING

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    def with_status(self, status: MaterialStatus) -> "MaterialRecord":
        """Copy with only the status changed."""
        return replace(self, status=MaterialStatus(status))

    def to_dict(self) -> Dict[str, Any]:
        """Stored JSON object (without the id)."""
        return {
            "data": self.payload,
            "timestamp": self.timestamp,
            "owner": self.owner,
            "materialType": self.material_type,
            "properties": self.properties,
            "researchInstitution": self.research_institution,
            "status": self.status.value,
        }


# =============================================================================
# Encode / Decode
# =============================================================================

_REQUIRED_STR = ("materialType", "properties", "owner")


def encode_record(record: MaterialRecord) -> bytes:
    """Serialize a record to its stored bytes."""
    return json.dumps(
        record.to_dict(), separators=(",", ":"), ensure_ascii=False
    ).encode("utf-8")


def _optional_str(obj: Dict[str, Any], field: str, record_id: str) -> str:
    value = obj.get(field)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise DecodeError(f"{field} must be a string", record_id)
    return value


def decode_record(record_id: str, raw: bytes) -> MaterialRecord:
    """
    Deserialize stored bytes into a MaterialRecord.

    Raises:
        DecodeError: If bytes are not a JSON object with all required fields
    """
    try:
        obj = json.loads(bytes(raw).decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as e:
        raise DecodeError(f"Undecodable record: {e}", record_id) from e

    if not isinstance(obj, dict):
        raise DecodeError("Record is not a JSON object", record_id)

    for field in _REQUIRED_STR:
        if not isinstance(obj.get(field), str):
            raise DecodeError(f"Missing or invalid field: {field}", record_id)

    timestamp = obj.get("timestamp")
    if isinstance(timestamp, float) and timestamp.is_integer():
        timestamp = int(timestamp)
    if isinstance(timestamp, bool) or not isinstance(timestamp, int):
        raise DecodeError("Missing or invalid field: timestamp", record_id)

    status = obj.get("status") or MaterialStatus.PENDING.value
    try:
        status = MaterialStatus(status)
    except ValueError:
        raise DecodeError(f"Unknown status: {status!r}", record_id)

    return MaterialRecord(
        id=record_id,
        payload=_optional_str(obj, "data", record_id),
        timestamp=timestamp,
        owner=obj["owner"],
        material_type=obj["materialType"],
        properties=obj["properties"],
        research_institution=_optional_str(obj, "researchInstitution", record_id),
        status=status,
    )
