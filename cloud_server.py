#!/usr/bin/env python3
"""Twitter Ads MCP Server for cloud deployment (SSE transport).

Works with Railway, Render, or any platform that sets PORT env var.
"""

import os

# FastMCP reads FASTMCP_ settings at import time
os.environ.setdefault("FASTMCP_HOST", "0.0.0.0")
if "PORT" in os.environ:
    os.environ["FASTMCP_PORT"] = os.environ["PORT"]

from twitter_ads_mcp.server import mcp


def main() -> None:
    """Run the Twitter Ads MCP server with SSE transport."""
    mcp.run(transport="sse")


if __name__ == "__main__":
    main()
