"""
Domain Services Package

Architectural Intent:
- Request signing and the declarative action catalog
- No I/O: everything here is pure and deterministic
"""

from ncloud_mcp.domain.services.signer import sign, sign_request, current_timestamp
from ncloud_mcp.domain.services.action_catalog import (
    ACTION_CATALOG,
    list_descriptors,
    get_descriptor,
)

__all__ = [
    "sign",
    "sign_request",
    "current_timestamp",
    "ACTION_CATALOG",
    "list_descriptors",
    "get_descriptor",
]
