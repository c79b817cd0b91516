"""
Domain Ports Package

Architectural Intent:
- Contains port interfaces (abstract contracts) for external dependencies
- Ports define what the domain needs, adapters implement how
- Follows Hexagonal Architecture principles
"""

from ncloud_mcp.domain.ports.ncloud_api_port import NcloudApiPort

__all__ = ["NcloudApiPort"]
