"""
Signed Request Value Object

Architectural Intent:
- One-shot description of an outbound NCP call after signing
- The path carried here is exactly what goes on the HTTP request line,
  since the gateway recomputes the signature over it
"""

from dataclasses import dataclass

TIMESTAMP_HEADER = "x-ncp-apigw-timestamp"
ACCESS_KEY_HEADER = "x-ncp-iam-access-key"
SIGNATURE_HEADER = "x-ncp-apigw-signature-v2"


@dataclass(frozen=True)
class SignedRequest:
    method: str
    path: str
    timestamp: str
    signature: str

    def headers(self, access_key: str) -> dict[str, str]:
        """Authentication headers for this request."""
        return {
            TIMESTAMP_HEADER: self.timestamp,
            ACCESS_KEY_HEADER: access_key,
            SIGNATURE_HEADER: self.signature,
        }
