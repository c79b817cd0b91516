"""
MCP Server Infrastructure

Architectural Intent:
- MCP server exposing the NCP action catalog as tools
- tools/list serializes the catalog; tools/call goes through the Dispatcher
- Protocol-agnostic: framing and JSON-RPC live in stdio_transport

MCP Integration:
- Exposed as 'ncp-compute-server' MCP server
- Tools: one per catalog action (list_servers, create_vpc, ...)
"""

from typing import Any, Mapping, Optional
from dataclasses import dataclass

from ncloud_mcp.application.dispatcher import Dispatcher

DEFAULT_SERVER_NAME = "ncp-compute-server"
DEFAULT_SERVER_VERSION = "2.0.0"


@dataclass(frozen=True)
class MCPTool:
    name: str
    description: str
    input_schema: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }


class MCPServer:
    """
    MCP server backed by a Dispatcher.

    The tool list is computed once; the catalog never changes at runtime.
    """

    def __init__(
        self,
        name: str,
        dispatcher: Dispatcher,
        version: str = DEFAULT_SERVER_VERSION,
    ) -> None:
        self.name = name
        self.version = version
        self._dispatcher = dispatcher
        self._tools = tuple(
            MCPTool(
                name=d.name,
                description=d.description,
                input_schema=d.input_schema(),
            )
            for d in dispatcher.descriptors
        )

    async def list_tools(self) -> list[MCPTool]:
        return list(self._tools)

    async def call_tool(
        self, name: str, arguments: Optional[Mapping[str, Any]]
    ) -> dict[str, Any]:
        envelope = await self._dispatcher.invoke(name, arguments)
        return envelope.to_dict()


def create_ncloud_server(
    dispatcher: Dispatcher,
    name: str = DEFAULT_SERVER_NAME,
    version: str = DEFAULT_SERVER_VERSION,
) -> MCPServer:
    """Factory function to create the NCP MCP server around a dispatcher."""
    return MCPServer(name, dispatcher, version=version)
