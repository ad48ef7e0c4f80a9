"""
Curve state snapshot encoding.

Goals:
- Deterministic JSON serialization for hashing / snapshot distribution.
- Round-trippable into `CurveState` (price cache included, so a restored curve
  keeps pricing fractional units without recomputation).
- Explicit versioning.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass
from typing import Any, Dict, Mapping

from ..core.curve.state import state_from_dict, state_to_dict
from ..core.curve.types import CurveState
from ..state.canonical import canonical_json_bytes, domain_sep_bytes, sha256_hex


CURVE_SNAPSHOT_VERSION = 1


@dataclass(frozen=True)
class CurveSnapshot:
    """
    Deterministic, versioned snapshot of `CurveState`.

    The commitment is *not* included inside `data` to avoid self-reference.
    """

    version: int
    data: Dict[str, Any]

    def canonical_bytes(self) -> bytes:
        return canonical_json_bytes(self.data)

    def commitment_bytes(self) -> bytes:
        payload = domain_sep_bytes("curve_snapshot", version=self.version) + self.canonical_bytes()
        return hashlib.sha256(payload).digest()

    def commitment_hex(self) -> str:
        payload = domain_sep_bytes("curve_snapshot", version=self.version) + self.canonical_bytes()
        return sha256_hex(payload)

    def to_json(self) -> str:
        return json.dumps({"version": self.version, "data": self.data}, sort_keys=True, separators=(",", ":"))


def snapshot_from_state(state: CurveState, *, version: int = CURVE_SNAPSHOT_VERSION) -> CurveSnapshot:
    if not isinstance(version, int) or isinstance(version, bool) or version <= 0:
        raise ValueError("version must be a positive int")
    return CurveSnapshot(version=version, data=state_to_dict(state))


def state_from_snapshot(obj: Mapping[str, Any]) -> CurveState:
    """Decode `{"version": ..., "data": ...}` (as produced by `CurveSnapshot.to_json`)."""
    if not isinstance(obj, Mapping):
        raise TypeError("snapshot must be an object")
    version = obj.get("version")
    if version != CURVE_SNAPSHOT_VERSION:
        raise ValueError(f"unsupported curve snapshot version: {version!r}")
    data = obj.get("data")
    if not isinstance(data, Mapping):
        raise TypeError("snapshot data must be an object")
    return state_from_dict(data)
