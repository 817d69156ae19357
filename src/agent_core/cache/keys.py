"""Deterministic content-addressed cache keys."""

from __future__ import annotations

import hashlib
import json
from collections.abc import Mapping
from datetime import date, datetime
from typing import Any

CIRCULAR_SENTINEL = '"[Circular]"'


def canonical_serialize(value: Any) -> str:
    """Serialize ``value`` so that logically equal inputs give equal strings.

    Mapping keys are sorted, sequences keep their order, sets are sorted by
    the canonical form of their members. A container that refers back to one
    of its ancestors is rendered as ``"[Circular]"``.
    """

    on_path: set[int] = set()

    def _encode(item: Any) -> str:
        if isinstance(item, Mapping | list | tuple | set | frozenset):
            marker = id(item)
            if marker in on_path:
                return CIRCULAR_SENTINEL
            on_path.add(marker)
            try:
                return _encode_container(item)
            finally:
                on_path.discard(marker)
        return _encode_scalar(item)

    def _encode_container(item: Any) -> str:
        if isinstance(item, Mapping):
            members = sorted(
                ((str(key), member) for key, member in item.items()),
                key=lambda pair: pair[0],
            )
            return (
                "{"
                + ",".join(f"{_json(key)}:{_encode(member)}" for key, member in members)
                + "}"
            )
        if isinstance(item, set | frozenset):
            return "[" + ",".join(sorted(_encode(member) for member in item)) + "]"
        return "[" + ",".join(_encode(member) for member in item) + "]"

    return _encode(value)


def create_cache_key(agent_id: str, version: str, inputs: Mapping[str, Any]) -> str:
    """Key for one invocation of ``agent_id`` at ``version`` with ``inputs``."""

    return canonical_serialize({"id": agent_id, "version": version, "inputs": inputs})


def cache_key_digest(cache_key: str) -> str:
    """Short stable fingerprint of a cache key for logs and CLI output."""

    return hashlib.sha256(cache_key.encode("utf-8")).hexdigest()[:16]


def _encode_scalar(item: Any) -> str:
    if item is None or isinstance(item, str | bool | int | float):
        return _json(item)
    if isinstance(item, datetime | date):
        return _json(item.isoformat())
    return _json(str(item))


def _json(item: Any) -> str:
    return json.dumps(item, ensure_ascii=False)
