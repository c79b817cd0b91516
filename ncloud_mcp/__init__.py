"""ncloud-mcp: NAVER Cloud Platform management API exposed as MCP tools."""

__version__ = "2.0.0"
