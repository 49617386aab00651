"""Tool discovery handler."""

from typing import Any

from mcp_server.tools import TOOL_CATEGORIES, get_all_tools, search_tools


async def handle_discover_tools(args: dict[str, Any]) -> dict[str, Any]:
    """Handle the discover_tools tool.

    Returns organized information about all available tools, optionally
    narrowed to one category or to tools matching a keyword.
    """
    category_filter = args.get("category")
    query = args.get("query")

    tool_lookup = {tool.name: tool for tool in get_all_tools()}
    wanted = set(search_tools(query)) if query else None

    result: dict[str, Any] = {
        "message": "Available IPTV catalog tools",
        "categories": [],
    }

    for cat_id, cat_info in TOOL_CATEGORIES.items():
        if category_filter and cat_id != category_filter:
            continue

        cat_tools = []
        for tool_name in cat_info["tools"]:
            tool = tool_lookup.get(tool_name)
            if tool is None or (wanted is not None and tool_name not in wanted):
                continue

            schema = tool.inputSchema
            required = schema.get("required", [])
            params = []
            for prop_name, prop_info in schema.get("properties", {}).items():
                param: dict[str, Any] = {
                    "name": prop_name,
                    "type": prop_info.get("type", "any"),
                    "description": prop_info.get("description", ""),
                    "required": prop_name in required,
                }
                if "enum" in prop_info:
                    param["options"] = prop_info["enum"]
                if "default" in prop_info:
                    param["default"] = prop_info["default"]
                params.append(param)

            cat_tools.append({
                "name": tool.name,
                "description": tool.description,
                "parameters": params,
            })

        if cat_tools:
            result["categories"].append({
                "id": cat_id,
                "name": cat_info["name"],
                "description": cat_info["description"],
                "tools": cat_tools,
            })

    result["hints"] = {
        "getting_started": [
            "Use 'list_content' and 'list_channels' to browse what is available",
            "Use 'login' to obtain a token for a user",
            "Use 'recommend_content' with a user_id for personal suggestions",
        ],
        "playback": [
            "Call 'start_viewing' when playback begins and keep the returned session id",
            "Report position with 'update_viewing_progress'; set completed=true at the end",
        ],
    }

    return result
