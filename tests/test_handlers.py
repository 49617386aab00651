"""Tests for MCP tool dispatch and handlers."""

import asyncio
from datetime import timedelta

import pytest

from mcp_server import server as server_module
from mcp_server.handlers.discovery import handle_discover_tools
from mcp_server.server import IptvMcpServer
from mcp_server.tools import TOOL_CATEGORIES, get_all_tools, search_tools
from models import ContentType, EpgProgram, utcnow
from persistence import UnitOfWork


@pytest.fixture
def server(app_config, auth_settings, database) -> IptvMcpServer:
    return IptvMcpServer(app_config, auth_settings, database)


@pytest.fixture
async def registered(server):
    """A registered user, returned as the tool payload."""
    result = await server.dispatch("register_user", {
        "username": "viewer",
        "email": "viewer@example.com",
        "password": "correct horse",
    })
    return result["user"]


class TestToolRegistry:
    """Tests for tool definitions and routing."""

    def test_every_tool_is_routed(self, server):
        names = {tool.name for tool in get_all_tools()}
        assert names == set(server.routes)

    def test_categories_reference_real_tools(self):
        names = {tool.name for tool in get_all_tools()}
        for cat_info in TOOL_CATEGORIES.values():
            assert set(cat_info["tools"]) <= names

    def test_search_tools(self):
        assert "get_stream_manifest" in search_tools("manifest")
        assert search_tools("no-such-thing-anywhere") == []

    @pytest.mark.asyncio
    async def test_unknown_tool(self, server):
        result = await server.dispatch("turn_on_lights", {})

        assert result["error_category"] == "invalid_input"
        assert "Unknown tool" in result["error"]


class TestDiscovery:
    """Tests for discover_tools."""

    @pytest.mark.asyncio
    async def test_all_categories(self):
        result = await handle_discover_tools({})

        assert len(result["categories"]) == len(TOOL_CATEGORIES)
        assert "hints" in result

    @pytest.mark.asyncio
    async def test_by_category(self):
        result = await handle_discover_tools({"category": "streaming"})

        assert [c["id"] for c in result["categories"]] == ["streaming"]
        tools = {t["name"] for t in result["categories"][0]["tools"]}
        assert tools == {"get_stream_url", "get_stream_manifest"}

    @pytest.mark.asyncio
    async def test_by_query(self):
        result = await handle_discover_tools({"query": "password"})

        tools = [t["name"] for c in result["categories"] for t in c["tools"]]
        assert tools == ["change_password"]

    @pytest.mark.asyncio
    async def test_parameters_describe_schema(self):
        result = await handle_discover_tools({"category": "viewing"})
        tools = {t["name"]: t for t in result["categories"][0]["tools"]}

        params = {p["name"]: p for p in tools["start_viewing"]["parameters"]}
        assert params["user_id"]["required"] is True
        assert params["device_info"]["required"] is False


class TestDispatch:
    """Tests for error handling at the tool boundary."""

    @pytest.mark.asyncio
    async def test_success_carries_request_id(self, server):
        result = await server.dispatch("list_content", {})

        assert result["content"] == []
        assert len(result["request_id"]) == 8

    @pytest.mark.asyncio
    async def test_missing_argument(self, server):
        result = await server.dispatch("get_content", {})

        assert result["error_category"] == "invalid_input"
        assert "request_id" in result

    @pytest.mark.asyncio
    async def test_bad_integer(self, server):
        result = await server.dispatch("get_content", {"content_id": "seven"})
        assert result["error_category"] == "invalid_input"

    @pytest.mark.asyncio
    async def test_not_found(self, server):
        result = await server.dispatch("get_content", {"content_id": 99})

        assert result["error_category"] == "not_found"
        assert result["error"] == "Content 99 not found"
        assert "recovery" in result

    @pytest.mark.asyncio
    async def test_timed_out_registration_frees_database(self, server, database, monkeypatch):
        """A registration cut off mid-transaction leaves no lock and no user."""
        save_changes = UnitOfWork.save_changes

        async def slow_save(uow):
            if uow.in_transaction:
                await asyncio.sleep(1)
            return await save_changes(uow)

        monkeypatch.setattr(server_module, "TOOL_TIMEOUT", 0.2)
        monkeypatch.setattr(UnitOfWork, "save_changes", slow_save)

        result = await server.dispatch("register_user", {
            "username": "slow", "email": "slow@example.com", "password": "pw",
        })

        assert result["error_category"] == "timeout"
        assert not database.lock.locked()

        listing = await server.dispatch("list_content", {})
        assert listing["content"] == []
        assert await database.unit_of_work().users.get_all() == []


class TestViewingTools:
    """Tests for session and statistics tools."""

    @pytest.mark.asyncio
    async def test_playback_flow(self, server, add_content):
        item = await add_content(title="Heist", genre="Action")

        started = await server.dispatch("start_viewing", {
            "user_id": 1, "content_id": item.id, "device_info": "Living room TV",
        })
        session_id = started["session"]["id"]
        await server.dispatch("update_viewing_progress", {
            "session_id": session_id, "progress": 600,
        })

        history = await server.dispatch("get_viewing_history", {"user_id": 1})
        resume = await server.dispatch("get_continue_watching", {"user_id": 1})
        genres = await server.dispatch("get_genre_stats", {"user_id": 1})

        assert history["count"] == 1
        assert history["history"][0]["progress"] == 600
        assert [c["title"] for c in resume["items"]] == ["Heist"]
        assert genres["genres"] == {"Action": 1}

    @pytest.mark.asyncio
    async def test_unknown_session_is_accepted(self, server):
        result = await server.dispatch("update_viewing_progress", {
            "session_id": 404, "progress": 10, "completed": True,
        })
        assert result["success"] is True

    @pytest.mark.asyncio
    async def test_total_watch_time(self, server, add_session):
        await add_session(content_id=1, duration=5400, completed=True)

        result = await server.dispatch("get_total_watch_time", {"user_id": 1})

        assert result["total_seconds"] == 5400
        assert result["total_hours"] == 1.5

    @pytest.mark.asyncio
    async def test_top_lists(self, server, add_content, add_channel, add_session):
        item = await add_content(title="Hit")
        channel = await add_channel(name="News 24")
        await add_session(content_id=item.id)
        await add_session(user_id=2, content_id=item.id)
        await add_session(channel_id=channel.id)

        top_content = await server.dispatch("get_top_content", {"limit": 5})
        top_channels = await server.dispatch("get_top_channels", {})

        assert top_content["content"] == [{"title": "Hit", "views": 2}]
        assert top_channels["channels"] == [{"name": "News 24", "views": 1}]

    @pytest.mark.asyncio
    async def test_nothing_to_resume(self, server):
        result = await server.dispatch("get_continue_watching", {"user_id": 1})

        assert result["items"] == []
        assert "message" in result

    @pytest.mark.asyncio
    async def test_completed_must_be_boolean(self, server, uow, add_session):
        session = await add_session(content_id=1)

        result = await server.dispatch("update_viewing_progress", {
            "session_id": session.id, "progress": 10, "completed": "false",
        })
        stored = await uow.viewing_sessions.get_by_id(session.id)

        assert result["error_category"] == "invalid_input"
        assert stored.completed is False
        assert stored.end_time is None


class TestRecommendationTools:
    """Tests for recommendation tools."""

    @pytest.mark.asyncio
    async def test_recommend_content_default_count(self, server, add_content):
        for n in range(12):
            await add_content(title=f"Item {n}")

        result = await server.dispatch("recommend_content", {"user_id": 1})

        assert result["count"] == 10

    @pytest.mark.asyncio
    async def test_recommend_similar(self, server, add_content):
        source = await add_content(title="Source", genre="Drama")
        await add_content(title="Sibling", genre="Drama")

        result = await server.dispatch("recommend_similar", {"content_id": source.id})

        assert [c["title"] for c in result["similar"]] == ["Sibling"]

    @pytest.mark.asyncio
    async def test_recommend_by_genre_requires_genre(self, server):
        result = await server.dispatch("recommend_by_genre", {"user_id": 1})
        assert result["error_category"] == "invalid_input"

    @pytest.mark.asyncio
    async def test_recommend_channels(self, server, add_channel):
        await add_channel(name="One")
        await add_channel(name="Two")

        result = await server.dispatch("recommend_channels", {"user_id": 1, "count": 1})

        assert [c["name"] for c in result["channels"]] == ["One"]


class TestCatalogTools:
    """Tests for catalog browsing and management tools."""

    @pytest.mark.asyncio
    async def test_create_update_delete(self, server):
        created = await server.dispatch("create_content", {
            "title": "Pilot",
            "stream_url": "https://cdn.example.com/pilot.m3u8",
            "type": "Series",
            "genre": "Drama",
            "release_date": "2024-05-01T00:00:00+00:00",
        })
        content_id = created["content"]["id"]
        assert created["content"]["type"] == "Series"

        updated = await server.dispatch("update_content", {
            "content_id": content_id, "rating": 4.5,
        })
        assert updated["content"]["rating"] == 4.5
        assert updated["content"]["title"] == "Pilot"

        deleted = await server.dispatch("delete_content", {"content_id": content_id})
        assert deleted["success"] is True

        again = await server.dispatch("delete_content", {"content_id": content_id})
        assert again["error_category"] == "not_found"

    @pytest.mark.asyncio
    async def test_create_rejects_unknown_type(self, server):
        result = await server.dispatch("create_content", {
            "title": "Odd", "stream_url": "https://cdn.example.com/odd", "type": "Podcast",
        })
        assert result["error_category"] == "invalid_input"

    @pytest.mark.asyncio
    async def test_create_requires_type(self, server):
        result = await server.dispatch("create_content", {
            "title": "Odd", "stream_url": "https://cdn.example.com/odd",
        })
        assert result["error_category"] == "invalid_input"

    @pytest.mark.asyncio
    async def test_list_filters(self, server, add_content):
        await add_content(title="Film", type=ContentType.MOVIE, genre="Drama")
        await add_content(title="Show", type=ContentType.SERIES, genre="Drama")
        await add_content(title="Cartoon", type=ContentType.SERIES, genre="Kids")

        by_type = await server.dispatch("list_content", {"type": "Series"})
        by_both = await server.dispatch("list_content", {"type": "Series", "genre": "Drama"})
        by_genre = await server.dispatch("list_content", {"genre": "Drama"})

        assert by_type["count"] == 2
        assert [c["title"] for c in by_both["content"]] == ["Show"]
        assert by_genre["count"] == 2

    @pytest.mark.asyncio
    async def test_search(self, server, add_content):
        await add_content(title="Night Train", description="A thriller")
        await add_content(title="Morning Show")

        result = await server.dispatch("search_content", {"query": "night"})

        assert [c["title"] for c in result["content"]] == ["Night Train"]


class TestGuideTools:
    """Tests for channel and EPG tools."""

    @pytest.mark.asyncio
    async def test_get_channel_with_now_playing(self, server, uow, add_channel):
        channel = await add_channel(name="News 24")
        now = utcnow()
        uow.epg_programs.add(EpgProgram(
            channel_id=channel.id,
            title="Headlines",
            start_time=now - timedelta(minutes=10),
            end_time=now + timedelta(minutes=20),
        ))
        await uow.save_changes()

        result = await server.dispatch("get_channel", {"channel_id": channel.id})

        assert result["channel"]["name"] == "News 24"
        assert result["now_playing"]["title"] == "Headlines"

    @pytest.mark.asyncio
    async def test_get_channel_nothing_on(self, server, add_channel):
        channel = await add_channel()
        result = await server.dispatch("get_channel", {"channel_id": channel.id})
        assert result["now_playing"] is None

    @pytest.mark.asyncio
    async def test_list_channels_active_only(self, server, add_channel):
        await add_channel(name="Live")
        await add_channel(name="Dark", is_active=False)

        active = await server.dispatch("list_channels", {})
        everything = await server.dispatch("list_channels", {"active_only": False})

        assert [c["name"] for c in active["channels"]] == ["Live"]
        assert [c["name"] for c in everything["channels"]] == ["Live", "Dark"]

    @pytest.mark.asyncio
    async def test_active_only_must_be_boolean(self, server):
        result = await server.dispatch("list_channels", {"active_only": "false"})
        assert result["error_category"] == "invalid_input"

    @pytest.mark.asyncio
    async def test_range_rejects_reversed_window(self, server):
        result = await server.dispatch("get_programs_in_range", {
            "start": "2024-01-02T00:00:00+00:00",
            "end": "2024-01-01T00:00:00+00:00",
        })
        assert result["error_category"] == "invalid_input"

    @pytest.mark.asyncio
    async def test_range_rejects_bad_datetime(self, server):
        result = await server.dispatch("get_programs_in_range", {
            "start": "yesterday", "end": "2024-01-01T00:00:00+00:00",
        })
        assert result["error_category"] == "invalid_input"


class TestStreamingTools:
    """Tests for stream and manifest tools."""

    @pytest.mark.asyncio
    async def test_content_stream(self, server, add_content):
        item = await add_content(title="Film", stream_url="https://cdn.example.com/film/")

        stream = await server.dispatch("get_stream_url", {"content_id": item.id})
        manifest = await server.dispatch("get_stream_manifest", {"content_id": item.id})

        assert stream["content_type"] == "VOD"
        assert stream["content_id"] == item.id
        assert manifest["manifest_url"] == "https://cdn.example.com/film/manifest.m3u8"
        assert manifest["type"] == "application/vnd.apple.mpegurl"

    @pytest.mark.asyncio
    async def test_channel_stream(self, server, add_channel):
        channel = await add_channel(name="News 24")

        stream = await server.dispatch("get_stream_url", {"channel_id": channel.id})

        assert stream["content_type"] == "LiveTV"
        assert stream["title"] == "News 24"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("args", [{}, {"content_id": 1, "channel_id": 1}])
    async def test_requires_exactly_one_target(self, server, args):
        result = await server.dispatch("get_stream_url", args)
        assert result["error_category"] == "invalid_input"

    @pytest.mark.asyncio
    async def test_missing_channel(self, server):
        result = await server.dispatch("get_stream_manifest", {"channel_id": 5})

        assert result["error_category"] == "not_found"
        assert result["error"] == "Channel 5 not found"


class TestAccountTools:
    """Tests for registration, login and preferences."""

    @pytest.mark.asyncio
    async def test_register_hides_hash(self, registered):
        assert registered["username"] == "viewer"
        assert "password_hash" not in registered

    @pytest.mark.asyncio
    async def test_register_duplicate(self, server, registered):
        result = await server.dispatch("register_user", {
            "username": "someone",
            "email": "viewer@example.com",
            "password": "whatever",
        })
        assert result["error_category"] == "conflict"

    @pytest.mark.asyncio
    async def test_login_and_verify(self, server, registered, auth_settings):
        login = await server.dispatch("login", {
            "username": "viewer@example.com", "password": "correct horse",
        })

        assert login["token_type"] == "Bearer"
        assert login["expires_in"] == auth_settings.expiration_minutes * 60

        verified = await server.dispatch("verify_token", {"token": login["token"]})

        assert verified["valid"] is True
        assert verified["claims"]["sub"] == str(registered["id"])
        assert verified["claims"]["name"] == "viewer"

    @pytest.mark.asyncio
    async def test_login_wrong_password(self, server, registered):
        result = await server.dispatch("login", {"username": "viewer", "password": "nope"})
        assert result["error_category"] == "unauthorized"

    @pytest.mark.asyncio
    async def test_verify_garbage_token(self, server):
        result = await server.dispatch("verify_token", {"token": "not.a.token"})
        assert result["error_category"] == "unauthorized"

    @pytest.mark.asyncio
    async def test_change_password(self, server, registered):
        user_id = registered["id"]

        wrong = await server.dispatch("change_password", {
            "user_id": user_id, "current_password": "guess", "new_password": "new secret",
        })
        right = await server.dispatch("change_password", {
            "user_id": user_id, "current_password": "correct horse", "new_password": "new secret",
        })
        login = await server.dispatch("login", {"username": "viewer", "password": "new secret"})

        assert wrong["error_category"] == "unauthorized"
        assert right["success"] is True
        assert "token" in login

    @pytest.mark.asyncio
    async def test_profile_missing_user(self, server):
        result = await server.dispatch("get_user_profile", {"user_id": 77})
        assert result["error_category"] == "not_found"

    @pytest.mark.asyncio
    async def test_preferences_partial_update(self, server, registered):
        user_id = registered["id"]

        defaults = await server.dispatch("get_preferences", {"user_id": user_id})
        assert defaults["preferences"]["enable_notifications"] is True

        result = await server.dispatch("update_preferences", {
            "user_id": user_id, "language": "en", "subtitles_enabled": True,
        })
        prefs = result["preferences"]

        assert prefs["language"] == "en"
        assert prefs["subtitles_enabled"] is True
        assert prefs["enable_notifications"] is True

    @pytest.mark.asyncio
    async def test_preferences_created_when_missing(self, server, add_user):
        user = await add_user()

        result = await server.dispatch("update_preferences", {
            "user_id": user.id, "preferred_quality": 1080,
        })
        fetched = await server.dispatch("get_preferences", {"user_id": user.id})

        assert result["success"] is True
        assert fetched["preferences"]["preferred_quality"] == 1080

    @pytest.mark.asyncio
    async def test_preferences_unknown_user(self, server):
        result = await server.dispatch("update_preferences", {"user_id": 9, "language": "en"})
        assert result["error_category"] == "not_found"

    @pytest.mark.asyncio
    async def test_preference_flags_must_be_boolean(self, server, registered):
        result = await server.dispatch("update_preferences", {
            "user_id": registered["id"], "subtitles_enabled": "yes",
        })
        fetched = await server.dispatch("get_preferences", {"user_id": registered["id"]})

        assert result["error_category"] == "invalid_input"
        assert fetched["preferences"]["subtitles_enabled"] is False
