import hashlib
import uuid

def new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:16]}"


def stable_id(prefix: str, value: str) -> str:
    digest = hashlib.sha256(value.encode("utf-8")).hexdigest()
    return f"{prefix}_{digest[:16]}"

"""
ID generation utilities & it provides:
- Goal / lesson / plan record IDs
- Stable user IDs derived from bearer tokens (dev auth)

The main purpose:
Consistent identifier creation across system.
"""
