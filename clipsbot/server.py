"""
clips-bot MCP Server

Exposes Twitch clip search to MCP clients.
"""

from .app import mcp

# Import tools to register them with the mcp instance
from .tools import clips  # noqa: F401


def main():
    """Run the MCP server."""
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
