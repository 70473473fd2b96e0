"""Credential helpers shared by the embedding and reranker configs."""
from __future__ import annotations

from typing import Optional

# What the settings UI sends back instead of a stored key.
MASKED_API_KEY = "********"


def is_credential(value: Optional[str]) -> bool:
    """True when value looks like a usable API key (not empty, not masked)."""
    if value is None:
        return False
    value = value.strip()
    # Masked exports keep the last four characters after the mask
    return bool(value) and not value.startswith(MASKED_API_KEY)


def mask_api_key(value: Optional[str]) -> str:
    """Mask a key for export/logging, keeping only the last four characters."""
    if not is_credential(value):
        return ""
    value = (value or "").strip()
    if len(value) <= 8:
        return MASKED_API_KEY
    return f"{MASKED_API_KEY}{value[-4:]}"
