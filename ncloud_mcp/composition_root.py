"""
Composition Root

Architectural Intent:
- Dependency injection composition root for the ncloud-mcp server
- Single place where client, dispatcher, telemetry and MCP server are wired
- No adapter instantiation should occur outside this module (except tests)

Design Decisions:
- Uses a simple dataclass container instead of a DI framework
- Telemetry is constructed here but initialized by the caller, since the
  OTEL SDK setup is async
"""

from dataclasses import dataclass
from typing import Optional

import httpx

from ncloud_mcp.application.dispatcher import Dispatcher
from ncloud_mcp.domain.value_objects.credentials import Credentials
from ncloud_mcp.infrastructure.adapters.ncloud_client import NcloudClient
from ncloud_mcp.infrastructure.config import NcloudMCPConfig
from ncloud_mcp.infrastructure.mcp_servers.ncloud_server import (
    MCPServer,
    create_ncloud_server,
)
from ncloud_mcp.infrastructure.telemetry.otel_exporter import OTELConfig, OTELExporter


@dataclass
class NcloudContainer:
    """DI container holding all wired dependencies."""

    config: NcloudMCPConfig
    client: NcloudClient
    telemetry: OTELExporter
    dispatcher: Dispatcher
    server: MCPServer

    async def aclose(self) -> None:
        await self.client.aclose()
        await self.telemetry.shutdown()


def create_container(
    config: NcloudMCPConfig,
    credentials: Credentials,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> NcloudContainer:
    """Create and wire all dependencies."""
    client = NcloudClient(
        credentials,
        api_url=config.api.url,
        verify_tls=not config.api.insecure,
        timeout=config.api.timeout_seconds,
        transport=transport,
    )
    telemetry = OTELExporter(
        OTELConfig(
            endpoint=config.telemetry.endpoint,
            service_name=config.server.name,
            insecure=config.telemetry.insecure,
        )
    )
    dispatcher = Dispatcher(client, telemetry=telemetry)
    server = create_ncloud_server(
        dispatcher, name=config.server.name, version=config.server.version
    )

    return NcloudContainer(
        config=config,
        client=client,
        telemetry=telemetry,
        dispatcher=dispatcher,
        server=server,
    )
