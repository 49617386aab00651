"""MCP tool handlers for the IPTV catalog."""

from mcp_server.handlers.accounts import AccountHandlers
from mcp_server.handlers.catalog import CatalogHandlers
from mcp_server.handlers.discovery import handle_discover_tools
from mcp_server.handlers.epg import GuideHandlers
from mcp_server.handlers.recommendations import RecommendationHandlers
from mcp_server.handlers.streaming import StreamingHandlers
from mcp_server.handlers.viewing import ViewingHandlers

__all__ = [
    "handle_discover_tools",
    "AccountHandlers",
    "CatalogHandlers",
    "GuideHandlers",
    "RecommendationHandlers",
    "StreamingHandlers",
    "ViewingHandlers",
]
