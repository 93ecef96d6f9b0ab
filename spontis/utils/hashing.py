import hashlib
import json
from typing import Any, Optional


def canonical_json(payload: Any) -> str:
    return json.dumps(payload, sort_keys=True, default=str)


def payload_hash(payload: Any) -> str:
    return hashlib.sha256(canonical_json(payload).encode()).hexdigest()


def quote_cache_key_prefix(pricing_set_id: Optional[int]) -> str:
    return f"quote:{pricing_set_id}:"


def quote_cache_key(request_payload: dict, pricing_set_id: Optional[int]) -> str:
    # sets are never edited in place; deleting one drops its keys so a reused id starts cold
    return quote_cache_key_prefix(pricing_set_id) + payload_hash(request_payload)
