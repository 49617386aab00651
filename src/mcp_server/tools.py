"""MCP tool definitions for the IPTV catalog.

Tools are organized by category: discovery, viewing, recommendations,
catalog, guide, streaming and accounts. Each definition carries a JSON
schema and a few input examples.
"""

from mcp.types import Tool

CONTENT_TYPES = ["LiveTV", "VOD", "Series", "Movie"]

# Tool category metadata for discovery
TOOL_CATEGORIES = {
    "discovery": {
        "name": "Discovery & Help",
        "description": "Tools for discovering available capabilities",
        "tags": ["help", "discover", "tools"],
        "tools": ["discover_tools"],
    },
    "viewing": {
        "name": "Viewing Activity",
        "description": "Tools for recording playback and reading watch statistics",
        "tags": ["viewing", "history", "progress", "watch", "stats", "popular"],
        "tools": ["start_viewing", "update_viewing_progress", "get_viewing_history",
                  "get_continue_watching", "get_genre_stats", "get_total_watch_time",
                  "get_top_content", "get_top_channels"],
    },
    "recommendations": {
        "name": "Recommendations",
        "description": "Tools for suggesting unseen content and channels",
        "tags": ["recommend", "suggest", "similar", "genre", "discover"],
        "tools": ["recommend_content", "recommend_similar", "recommend_by_genre",
                  "recommend_channels"],
    },
    "catalog": {
        "name": "Catalog",
        "description": "Tools for browsing and managing on-demand content",
        "tags": ["content", "catalog", "movies", "series", "vod", "search"],
        "tools": ["list_content", "get_content", "search_content", "get_trending_content",
                  "get_recent_content", "create_content", "update_content", "delete_content"],
    },
    "guide": {
        "name": "Channels & Program Guide",
        "description": "Tools for the channel lineup and electronic program guide",
        "tags": ["channels", "epg", "guide", "schedule", "live", "now"],
        "tools": ["list_channels", "get_channel", "get_channel_programs",
                  "get_current_programs", "get_programs_in_range"],
    },
    "streaming": {
        "name": "Streaming",
        "description": "Tools for resolving playable stream and manifest URLs",
        "tags": ["stream", "play", "hls", "manifest", "url"],
        "tools": ["get_stream_url", "get_stream_manifest"],
    },
    "accounts": {
        "name": "Accounts",
        "description": "Tools for registration, login and user preferences",
        "tags": ["user", "account", "login", "register", "token", "preferences"],
        "tools": ["register_user", "login", "verify_token", "get_user_profile",
                  "change_password", "get_preferences", "update_preferences"],
    },
}


def _add_examples(schema: dict, examples: list[dict]) -> dict:
    """Attach input examples to a tool schema."""
    schema["examples"] = examples
    return schema


def _limit_property(default: int, description: str = "Maximum items to return") -> dict:
    return {"type": "integer", "description": description, "default": default, "minimum": 0}


def get_discovery_tools() -> list[Tool]:
    """Get discovery tool definitions."""
    return [
        Tool(
            name="discover_tools",
            description=(
                "List all available IPTV catalog tools organized by category. "
                "Use this first to understand what actions are possible."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "category": {
                        "type": "string",
                        "enum": list(TOOL_CATEGORIES.keys()),
                        "description": "Filter to a specific category (optional)",
                    },
                    "query": {
                        "type": "string",
                        "description": "Only list tools matching a keyword (optional)",
                    },
                },
            },
        ),
    ]


def get_viewing_tools() -> list[Tool]:
    """Get viewing activity tool definitions."""
    return [
        Tool(
            name="start_viewing",
            description=(
                "Record that a user started playing a catalog item or a channel. "
                "Returns the new session, whose id is used for progress updates."
            ),
            inputSchema=_add_examples(
                {
                    "type": "object",
                    "properties": {
                        "user_id": {"type": "integer", "description": "Viewer id"},
                        "content_id": {
                            "type": "integer",
                            "description": "Catalog item being played (optional)",
                        },
                        "channel_id": {
                            "type": "integer",
                            "description": "Channel being played (optional)",
                        },
                        "device_info": {
                            "type": "string",
                            "description": "Free-text description of the playback device",
                        },
                    },
                    "required": ["user_id"],
                },
                [
                    {"user_id": 2, "content_id": 3},
                    {"user_id": 2, "channel_id": 1, "device_info": "Living room TV"},
                ],
            ),
        ),
        Tool(
            name="update_viewing_progress",
            description=(
                "Update the resume position of a viewing session and optionally mark it "
                "completed. Completing a session records its end time and duration. "
                "Unknown session ids are ignored."
            ),
            inputSchema=_add_examples(
                {
                    "type": "object",
                    "properties": {
                        "session_id": {"type": "integer", "description": "Viewing session id"},
                        "progress": {
                            "type": "integer",
                            "description": "Resume position in seconds",
                            "minimum": 0,
                        },
                        "completed": {
                            "type": "boolean",
                            "description": "Whether playback finished",
                            "default": False,
                        },
                    },
                    "required": ["session_id", "progress"],
                },
                [
                    {"session_id": 7, "progress": 1200},
                    {"session_id": 7, "progress": 7200, "completed": True},
                ],
            ),
        ),
        Tool(
            name="get_viewing_history",
            description="Get a user's viewing sessions, most recent first.",
            inputSchema=_add_examples(
                {
                    "type": "object",
                    "properties": {
                        "user_id": {"type": "integer", "description": "Viewer id"},
                        "limit": _limit_property(50),
                    },
                    "required": ["user_id"],
                },
                [{"user_id": 2}, {"user_id": 2, "limit": 10}],
            ),
        ),
        Tool(
            name="get_continue_watching",
            description=(
                "Get catalog items a user started but did not finish, "
                "most recently started first."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "user_id": {"type": "integer", "description": "Viewer id"},
                },
                "required": ["user_id"],
            },
        ),
        Tool(
            name="get_genre_stats",
            description="Count distinct watched catalog items per genre for a user.",
            inputSchema={
                "type": "object",
                "properties": {
                    "user_id": {"type": "integer", "description": "Viewer id"},
                },
                "required": ["user_id"],
            },
        ),
        Tool(
            name="get_total_watch_time",
            description="Get the total recorded watch time of a user, in seconds and hours.",
            inputSchema={
                "type": "object",
                "properties": {
                    "user_id": {"type": "integer", "description": "Viewer id"},
                },
                "required": ["user_id"],
            },
        ),
        Tool(
            name="get_top_content",
            description="Get the most viewed catalog items across all users.",
            inputSchema=_add_examples(
                {
                    "type": "object",
                    "properties": {"limit": _limit_property(10)},
                },
                [{}, {"limit": 3}],
            ),
        ),
        Tool(
            name="get_top_channels",
            description="Get the most viewed channels across all users.",
            inputSchema=_add_examples(
                {
                    "type": "object",
                    "properties": {"limit": _limit_property(10)},
                },
                [{}, {"limit": 3}],
            ),
        ),
    ]


def get_recommendation_tools() -> list[Tool]:
    """Get recommendation tool definitions."""
    return [
        Tool(
            name="recommend_content",
            description=(
                "Recommend unseen catalog items in the genres a user has watched, "
                "best rated first, padded with other well rated unseen items."
            ),
            inputSchema=_add_examples(
                {
                    "type": "object",
                    "properties": {
                        "user_id": {"type": "integer", "description": "Viewer id"},
                        "count": _limit_property(10, "Number of items wanted"),
                    },
                    "required": ["user_id"],
                },
                [{"user_id": 2}, {"user_id": 2, "count": 5}],
            ),
        ),
        Tool(
            name="recommend_similar",
            description=(
                "Find catalog items sharing genre or type with a given item, "
                "same-genre items first."
            ),
            inputSchema=_add_examples(
                {
                    "type": "object",
                    "properties": {
                        "content_id": {"type": "integer", "description": "Source item id"},
                        "count": _limit_property(10, "Number of items wanted"),
                    },
                    "required": ["content_id"],
                },
                [{"content_id": 3}, {"content_id": 3, "count": 3}],
            ),
        ),
        Tool(
            name="recommend_by_genre",
            description="Recommend unseen catalog items of exactly one genre.",
            inputSchema=_add_examples(
                {
                    "type": "object",
                    "properties": {
                        "user_id": {"type": "integer", "description": "Viewer id"},
                        "genre": {"type": "string", "description": "Genre, matched exactly"},
                        "count": _limit_property(10, "Number of items wanted"),
                    },
                    "required": ["user_id", "genre"],
                },
                [{"user_id": 2, "genre": "Comedy"}],
            ),
        ),
        Tool(
            name="recommend_channels",
            description=(
                "Recommend unseen active channels in the categories a user has watched, "
                "in channel number order."
            ),
            inputSchema=_add_examples(
                {
                    "type": "object",
                    "properties": {
                        "user_id": {"type": "integer", "description": "Viewer id"},
                        "count": _limit_property(10, "Number of channels wanted"),
                    },
                    "required": ["user_id"],
                },
                [{"user_id": 2}, {"user_id": 2, "count": 3}],
            ),
        ),
    ]


def _content_properties() -> dict:
    return {
        "title": {"type": "string", "description": "Display title"},
        "stream_url": {"type": "string", "description": "Playback URL"},
        "type": {"type": "string", "enum": CONTENT_TYPES, "description": "Content type"},
        "description": {"type": "string", "description": "Synopsis"},
        "thumbnail_url": {"type": "string", "description": "Artwork URL"},
        "duration": {"type": "integer", "description": "Running time in seconds"},
        "release_date": {"type": "string", "description": "ISO 8601 date or datetime"},
        "genre": {"type": "string", "description": "Genre label"},
        "rating": {"type": "number", "description": "Rating from 0 to 5"},
    }


def get_catalog_tools() -> list[Tool]:
    """Get catalog tool definitions."""
    return [
        Tool(
            name="list_content",
            description="List catalog items, optionally filtered by type or genre.",
            inputSchema=_add_examples(
                {
                    "type": "object",
                    "properties": {
                        "type": {
                            "type": "string",
                            "enum": CONTENT_TYPES,
                            "description": "Filter by content type (optional)",
                        },
                        "genre": {
                            "type": "string",
                            "description": "Filter by genre (optional)",
                        },
                    },
                },
                [{}, {"type": "Movie"}, {"genre": "Comedy"}],
            ),
        ),
        Tool(
            name="get_content",
            description="Get one catalog item by id.",
            inputSchema={
                "type": "object",
                "properties": {
                    "content_id": {"type": "integer", "description": "Catalog item id"},
                },
                "required": ["content_id"],
            },
        ),
        Tool(
            name="search_content",
            description="Search catalog titles and descriptions, case-insensitively.",
            inputSchema=_add_examples(
                {
                    "type": "object",
                    "properties": {
                        "query": {"type": "string", "description": "Text to look for"},
                    },
                    "required": ["query"],
                },
                [{"query": "mystery"}],
            ),
        ),
        Tool(
            name="get_trending_content",
            description="Get trending catalog items.",
            inputSchema={
                "type": "object",
                "properties": {"count": _limit_property(10)},
            },
        ),
        Tool(
            name="get_recent_content",
            description="Get the most recently added catalog items.",
            inputSchema={
                "type": "object",
                "properties": {"count": _limit_property(10)},
            },
        ),
        Tool(
            name="create_content",
            description="Add a catalog item. Returns the stored item with its id.",
            inputSchema=_add_examples(
                {
                    "type": "object",
                    "properties": _content_properties(),
                    "required": ["title", "stream_url", "type"],
                },
                [
                    {
                        "title": "Night Train",
                        "stream_url": "https://cdn.example.com/night-train/index.m3u8",
                        "type": "Movie",
                        "genre": "Thriller",
                        "rating": 4.1,
                    },
                ],
            ),
        ),
        Tool(
            name="update_content",
            description="Change fields of an existing catalog item.",
            inputSchema=_add_examples(
                {
                    "type": "object",
                    "properties": {
                        "content_id": {"type": "integer", "description": "Catalog item id"},
                        **_content_properties(),
                    },
                    "required": ["content_id"],
                },
                [{"content_id": 3, "rating": 4.9}],
            ),
        ),
        Tool(
            name="delete_content",
            description="Delete a catalog item.",
            inputSchema={
                "type": "object",
                "properties": {
                    "content_id": {"type": "integer", "description": "Catalog item id"},
                },
                "required": ["content_id"],
            },
        ),
    ]


def get_guide_tools() -> list[Tool]:
    """Get channel and program guide tool definitions."""
    return [
        Tool(
            name="list_channels",
            description="List channels in lineup order.",
            inputSchema={
                "type": "object",
                "properties": {
                    "active_only": {
                        "type": "boolean",
                        "description": "Only return active channels",
                        "default": True,
                    },
                },
            },
        ),
        Tool(
            name="get_channel",
            description="Get one channel with the program currently on air.",
            inputSchema={
                "type": "object",
                "properties": {
                    "channel_id": {"type": "integer", "description": "Channel id"},
                },
                "required": ["channel_id"],
            },
        ),
        Tool(
            name="get_channel_programs",
            description="Get a channel's program schedule in start order.",
            inputSchema={
                "type": "object",
                "properties": {
                    "channel_id": {"type": "integer", "description": "Channel id"},
                },
                "required": ["channel_id"],
            },
        ),
        Tool(
            name="get_current_programs",
            description="Get the programs on air right now across all channels.",
            inputSchema={"type": "object", "properties": {}},
        ),
        Tool(
            name="get_programs_in_range",
            description="Get programs that start and end within a time window.",
            inputSchema=_add_examples(
                {
                    "type": "object",
                    "properties": {
                        "start": {"type": "string", "description": "ISO 8601 window start"},
                        "end": {"type": "string", "description": "ISO 8601 window end"},
                    },
                    "required": ["start", "end"],
                },
                [{"start": "2026-01-01T18:00:00+00:00", "end": "2026-01-01T23:00:00+00:00"}],
            ),
        ),
    ]


def get_streaming_tools() -> list[Tool]:
    """Get streaming tool definitions."""
    target = {
        "content_id": {"type": "integer", "description": "Catalog item id"},
        "channel_id": {"type": "integer", "description": "Channel id"},
    }
    return [
        Tool(
            name="get_stream_url",
            description="Get the playback URL of a catalog item or channel (give exactly one id).",
            inputSchema=_add_examples(
                {"type": "object", "properties": dict(target)},
                [{"content_id": 3}, {"channel_id": 1}],
            ),
        ),
        Tool(
            name="get_stream_manifest",
            description="Get the HLS manifest URL of a catalog item or channel (give exactly one id).",
            inputSchema=_add_examples(
                {"type": "object", "properties": dict(target)},
                [{"content_id": 3}, {"channel_id": 1}],
            ),
        ),
    ]


def get_account_tools() -> list[Tool]:
    """Get account tool definitions."""
    return [
        Tool(
            name="register_user",
            description="Create a user account with default preferences.",
            inputSchema=_add_examples(
                {
                    "type": "object",
                    "properties": {
                        "username": {"type": "string", "description": "Unique login name"},
                        "email": {"type": "string", "description": "Unique email address"},
                        "password": {"type": "string", "description": "Plain-text password"},
                        "full_name": {"type": "string", "description": "Display name"},
                    },
                    "required": ["username", "email", "password"],
                },
                [{"username": "alex", "email": "alex@example.com", "password": "s3cret!"}],
            ),
        ),
        Tool(
            name="login",
            description="Log in with username or email. Returns a bearer token.",
            inputSchema={
                "type": "object",
                "properties": {
                    "username": {"type": "string", "description": "Username or email"},
                    "password": {"type": "string", "description": "Password"},
                },
                "required": ["username", "password"],
            },
        ),
        Tool(
            name="verify_token",
            description="Validate a bearer token and return its claims.",
            inputSchema={
                "type": "object",
                "properties": {
                    "token": {"type": "string", "description": "Bearer token"},
                },
                "required": ["token"],
            },
        ),
        Tool(
            name="get_user_profile",
            description="Get a user's profile.",
            inputSchema={
                "type": "object",
                "properties": {
                    "user_id": {"type": "integer", "description": "User id"},
                },
                "required": ["user_id"],
            },
        ),
        Tool(
            name="change_password",
            description="Change a user's password after checking the current one.",
            inputSchema={
                "type": "object",
                "properties": {
                    "user_id": {"type": "integer", "description": "User id"},
                    "current_password": {"type": "string"},
                    "new_password": {"type": "string"},
                },
                "required": ["user_id", "current_password", "new_password"],
            },
        ),
        Tool(
            name="get_preferences",
            description="Get a user's playback and personalization preferences.",
            inputSchema={
                "type": "object",
                "properties": {
                    "user_id": {"type": "integer", "description": "User id"},
                },
                "required": ["user_id"],
            },
        ),
        Tool(
            name="update_preferences",
            description="Change some of a user's preferences; omitted fields stay as they are.",
            inputSchema=_add_examples(
                {
                    "type": "object",
                    "properties": {
                        "user_id": {"type": "integer", "description": "User id"},
                        "favorite_genres": {
                            "type": "string",
                            "description": "Comma-separated genres",
                        },
                        "favorite_channels": {
                            "type": "string",
                            "description": "Comma-separated channel ids",
                        },
                        "language": {"type": "string"},
                        "enable_notifications": {"type": "boolean"},
                        "auto_play_next": {"type": "boolean"},
                        "preferred_quality": {"type": "integer"},
                        "subtitles_enabled": {"type": "boolean"},
                        "subtitle_language": {"type": "string"},
                    },
                    "required": ["user_id"],
                },
                [{"user_id": 2, "auto_play_next": True, "preferred_quality": 720}],
            ),
        ),
    ]


def get_all_tools() -> list[Tool]:
    """Get all tool definitions."""
    return (
        get_discovery_tools()
        + get_viewing_tools()
        + get_recommendation_tools()
        + get_catalog_tools()
        + get_guide_tools()
        + get_streaming_tools()
        + get_account_tools()
    )


def search_tools(query: str) -> list[str]:
    """Find tool names by keyword.

    Matches category tags first, then tool names and descriptions.
    """
    query_lower = query.lower()
    matches: list[str] = []

    for cat_info in TOOL_CATEGORIES.values():
        if any(query_lower in tag.lower() for tag in cat_info["tags"]):
            matches.extend(t for t in cat_info["tools"] if t not in matches)

    for tool in get_all_tools():
        if query_lower in tool.name.lower() or query_lower in tool.description.lower():
            if tool.name not in matches:
                matches.append(tool.name)

    return matches
