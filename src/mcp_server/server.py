"""MCP server implementation for the IPTV catalog."""

import asyncio
import json
import logging
from typing import Any, Awaitable, Callable

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent

from config import AppConfig, AuthSettings
from mcp_server.handlers import (
    AccountHandlers,
    CatalogHandlers,
    GuideHandlers,
    RecommendationHandlers,
    StreamingHandlers,
    ViewingHandlers,
    handle_discover_tools,
)
from mcp_server.tools import get_all_tools
from persistence import Database
from utils.errors import (
    DEFAULT_HANDLER_TIMEOUT,
    ErrorCategory,
    ToolError,
    classify_exception,
    generate_request_id,
    get_recovery_suggestion,
)

logger = logging.getLogger(__name__)

# Timeout for tool handler execution
TOOL_TIMEOUT = DEFAULT_HANDLER_TIMEOUT

Handler = Callable[[dict[str, Any]], Awaitable[dict[str, Any]]]

# Categories that are ordinary outcomes rather than faults
EXPECTED_ERRORS = {
    ErrorCategory.NOT_FOUND,
    ErrorCategory.INVALID_INPUT,
    ErrorCategory.UNAUTHORIZED,
    ErrorCategory.CONFLICT,
}


class IptvMcpServer:
    """MCP server for the IPTV catalog."""

    def __init__(self, config: AppConfig, auth_settings: AuthSettings, database: Database):
        self.config = config
        self.database = database

        # Initialize handlers
        self.viewing = ViewingHandlers(database, config.recommendations)
        self.recommendations = RecommendationHandlers(database, config.recommendations)
        self.catalog = CatalogHandlers(database)
        self.guide = GuideHandlers(database)
        self.streaming = StreamingHandlers(database)
        self.accounts = AccountHandlers(database, auth_settings)

        self.routes: dict[str, Handler] = {
            "discover_tools": handle_discover_tools,
            # Viewing
            "start_viewing": self.viewing.start_viewing,
            "update_viewing_progress": self.viewing.update_viewing_progress,
            "get_viewing_history": self.viewing.get_viewing_history,
            "get_continue_watching": self.viewing.get_continue_watching,
            "get_genre_stats": self.viewing.get_genre_stats,
            "get_total_watch_time": self.viewing.get_total_watch_time,
            "get_top_content": self.viewing.get_top_content,
            "get_top_channels": self.viewing.get_top_channels,
            # Recommendations
            "recommend_content": self.recommendations.recommend_content,
            "recommend_similar": self.recommendations.recommend_similar,
            "recommend_by_genre": self.recommendations.recommend_by_genre,
            "recommend_channels": self.recommendations.recommend_channels,
            # Catalog
            "list_content": self.catalog.list_content,
            "get_content": self.catalog.get_content,
            "search_content": self.catalog.search_content,
            "get_trending_content": self.catalog.get_trending_content,
            "get_recent_content": self.catalog.get_recent_content,
            "create_content": self.catalog.create_content,
            "update_content": self.catalog.update_content,
            "delete_content": self.catalog.delete_content,
            # Guide
            "list_channels": self.guide.list_channels,
            "get_channel": self.guide.get_channel,
            "get_channel_programs": self.guide.get_channel_programs,
            "get_current_programs": self.guide.get_current_programs,
            "get_programs_in_range": self.guide.get_programs_in_range,
            # Streaming
            "get_stream_url": self.streaming.get_stream_url,
            "get_stream_manifest": self.streaming.get_stream_manifest,
            # Accounts
            "register_user": self.accounts.register_user,
            "login": self.accounts.login,
            "verify_token": self.accounts.verify_token,
            "get_user_profile": self.accounts.get_user_profile,
            "change_password": self.accounts.change_password,
            "get_preferences": self.accounts.get_preferences,
            "update_preferences": self.accounts.update_preferences,
        }

        # Set up MCP server
        self.server = Server("iptv")
        self._setup_handlers()

    def _setup_handlers(self) -> None:
        """Set up MCP tool handlers."""

        @self.server.list_tools()
        async def list_tools() -> list:
            return get_all_tools()

        @self.server.call_tool()
        async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
            result = await self.dispatch(name, arguments or {})
            return [TextContent(type="text", text=json.dumps(result, indent=2))]

    async def dispatch(self, name: str, arguments: dict[str, Any]) -> dict[str, Any]:
        """Run one tool call and return its JSON-ready result.

        Failures come back as error payloads; nothing is raised.
        """
        request_id = generate_request_id()
        logger.info(f"[{request_id}] Tool call: {name}")

        try:
            # Execute with timeout protection
            async with asyncio.timeout(TOOL_TIMEOUT):
                result = await self._handle_tool(name, arguments)

            # Add request_id to successful responses for tracing
            if isinstance(result, dict) and "error" not in result:
                result["request_id"] = request_id

            logger.info(f"[{request_id}] Tool {name} completed")
            return result

        except asyncio.TimeoutError:
            logger.error(f"[{request_id}] Tool {name} timed out after {TOOL_TIMEOUT}s")
            return ToolError(
                category=ErrorCategory.TIMEOUT,
                message=f"Operation timed out after {TOOL_TIMEOUT} seconds",
                request_id=request_id,
                recovery=get_recovery_suggestion(ErrorCategory.TIMEOUT),
            ).to_dict()

        except Exception as e:
            error = classify_exception(e)
            error.request_id = request_id
            if error.category in EXPECTED_ERRORS:
                logger.info(f"[{request_id}] Tool {name} failed: {error.message}")
            else:
                logger.exception(f"[{request_id}] Error handling tool {name}: {e}")
            return error.to_dict()

    async def _handle_tool(self, name: str, args: dict[str, Any]) -> dict[str, Any]:
        """Route tool calls to the appropriate handler."""
        handler = self.routes.get(name)
        if handler is None:
            return ToolError(
                category=ErrorCategory.INVALID_INPUT,
                message=f"Unknown tool: {name}",
                recovery="Use 'discover_tools' to list available tools.",
            ).to_dict()
        return await handler(args)

    async def run(self) -> None:
        """Run the MCP server."""
        async with stdio_server() as (read_stream, write_stream):
            await self.server.run(
                read_stream, write_stream, self.server.create_initialization_options()
            )


def create_server(
    config: AppConfig,
    auth_settings: AuthSettings,
    database: Database,
) -> IptvMcpServer:
    """Create a new IPTV MCP server instance."""
    return IptvMcpServer(config, auth_settings, database)
