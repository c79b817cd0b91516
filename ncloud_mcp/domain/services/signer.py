"""
NCP API Gateway Signer

Architectural Intent:
- Computes the x-ncp-apigw-signature-v2 header value
- Pure function of its inputs: no clock, no randomness

The signed message is:

    {method} {path_with_query}\\n{timestamp}\\n{access_key}

keyed with the secret key, HMAC-SHA256, base64 encoded. The path excludes
scheme and host and must be byte-identical to the request line.
"""

import base64
import hashlib
import hmac
import time

from ncloud_mcp.domain.value_objects.credentials import Credentials
from ncloud_mcp.domain.value_objects.signed_request import SignedRequest


def sign(
    method: str,
    url: str,
    timestamp: str,
    access_key: str,
    secret_key: str,
) -> str:
    message = f"{method} {url}\n{timestamp}\n{access_key}"
    digest = hmac.new(
        secret_key.encode("utf-8"),
        message.encode("utf-8"),
        hashlib.sha256,
    ).digest()
    return base64.b64encode(digest).decode("ascii")


def current_timestamp() -> str:
    """Epoch milliseconds as a string, the format the gateway expects."""
    return str(int(time.time() * 1000))


def sign_request(
    method: str,
    path: str,
    credentials: Credentials,
    timestamp: str = "",
) -> SignedRequest:
    timestamp = timestamp or current_timestamp()
    return SignedRequest(
        method=method,
        path=path,
        timestamp=timestamp,
        signature=sign(
            method,
            path,
            timestamp,
            credentials.access_key,
            credentials.secret_key,
        ),
    )
