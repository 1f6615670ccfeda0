"""Canonical cache keys.

A key is ``"{policy}_{stable_serialize(data_id)}"``. Serialization is compact
JSON with sorted object keys, so structurally equal identifiers always map to
the same key and ``"a"`` keeps its quotes (``force_"a"``).
"""

from __future__ import annotations

import dataclasses
import datetime as dt
import enum
import json
import typing as t

from .errors import KeyEncodingError
from .models import CachePolicy


def _encode(obj: t.Any) -> t.Any:
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return dataclasses.asdict(obj)
    if hasattr(obj, "model_dump"):
        return obj.model_dump()  # type: ignore[attr-defined]
    if isinstance(obj, enum.Enum):
        return obj.value
    if isinstance(obj, (set, frozenset)):
        return sorted(obj, key=stable_serialize)
    if isinstance(obj, (dt.datetime, dt.date, dt.time)):
        return obj.isoformat()
    if isinstance(obj, (bytes, bytearray)):
        return obj.hex()
    raise TypeError(f"Object of type {type(obj).__name__} is not serializable")


def stable_serialize(data_id: t.Any) -> str:
    try:
        return json.dumps(
            data_id,
            sort_keys=True,
            separators=(",", ":"),
            ensure_ascii=False,
            default=_encode,
        )
    except (TypeError, ValueError) as exc:
        raise KeyEncodingError(f"cannot build a cache key from {data_id!r}: {exc}") from exc


def canonical_key(policy: t.Union[CachePolicy, str], data_id: t.Any) -> str:
    return f"{CachePolicy.coerce(policy).value}_{stable_serialize(data_id)}"
