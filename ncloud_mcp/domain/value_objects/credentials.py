"""
Credentials Value Object

Architectural Intent:
- Immutable NCP API key pair held for the lifetime of the process
- Keys are excluded from repr so they never reach logs or tracebacks
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Credentials:
    access_key: str = field(repr=False)
    secret_key: str = field(repr=False)

    def __post_init__(self) -> None:
        if not self.access_key:
            raise ValueError("Access key cannot be empty")
        if not self.secret_key:
            raise ValueError("Secret key cannot be empty")
