"""
MCP Servers Package

Architectural Intent:
- Contains the MCP server exposing the NCP action catalog as tools
- Transport (stdio JSON-RPC) is kept separate from tool semantics
"""

from ncloud_mcp.infrastructure.mcp_servers.ncloud_server import (
    MCPServer,
    MCPTool,
    create_ncloud_server,
)
from ncloud_mcp.infrastructure.mcp_servers.stdio_transport import run_stdio

__all__ = ["MCPServer", "MCPTool", "create_ncloud_server", "run_stdio"]
