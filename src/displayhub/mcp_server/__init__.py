"""display-hub MCP Server"""

from .server import DisplayMCPServer, ToolExecutionError, main, serve

__all__ = ["DisplayMCPServer", "ToolExecutionError", "main", "serve"]
