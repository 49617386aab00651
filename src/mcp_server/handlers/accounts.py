"""MCP handlers for user accounts and preferences."""

import logging
from typing import Any

from config import AuthSettings
from mcp_server.handlers.params import optional_bool, optional_int, require_int, require_str
from models import UserPreference
from persistence import Database
from services import AuthService
from utils.errors import (
    AuthenticationError,
    ErrorCategory,
    NotFoundError,
    ToolError,
    get_recovery_suggestion,
)

logger = logging.getLogger(__name__)

STRING_PREFERENCES = ("favorite_genres", "favorite_channels", "language", "subtitle_language")
BOOL_PREFERENCES = ("enable_notifications", "auto_play_next", "subtitles_enabled")


class AccountHandlers:
    """Handlers for registration, login and preferences."""

    def __init__(self, database: Database, settings: AuthSettings):
        self.database = database
        self.settings = settings

    def _service(self) -> AuthService:
        return AuthService(self.database.unit_of_work(), self.settings)

    async def register_user(self, args: dict[str, Any]) -> dict[str, Any]:
        user = await self._service().register(
            username=require_str(args, "username"),
            email=require_str(args, "email"),
            password=require_str(args, "password"),
            full_name=args.get("full_name"),
        )
        return {"success": True, "user": user.to_dict()}

    async def login(self, args: dict[str, Any]) -> dict[str, Any]:
        """Exchange credentials for a bearer token."""
        username = require_str(args, "username")
        result = await self._service().login(username, require_str(args, "password"))

        if result is None:
            return ToolError(
                category=ErrorCategory.UNAUTHORIZED,
                message="Invalid username or password",
                recovery="Check the credentials and try again.",
            ).to_dict()

        user, token = result
        return {
            "success": True,
            "token": token,
            "token_type": "Bearer",
            "expires_in": self.settings.expiration_minutes * 60,
            "user": user.to_dict(),
        }

    async def verify_token(self, args: dict[str, Any]) -> dict[str, Any]:
        token = require_str(args, "token")
        try:
            claims = self._service().verify_token(token)
        except AuthenticationError as e:
            return ToolError(
                category=ErrorCategory.UNAUTHORIZED,
                message=str(e),
                recovery=get_recovery_suggestion(ErrorCategory.UNAUTHORIZED),
            ).to_dict()
        return {"valid": True, "claims": claims}

    async def get_user_profile(self, args: dict[str, Any]) -> dict[str, Any]:
        user_id = require_int(args, "user_id")
        user = await self._service().get_user(user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        return {"user": user.to_dict()}

    async def change_password(self, args: dict[str, Any]) -> dict[str, Any]:
        user_id = require_int(args, "user_id")
        changed = await self._service().change_password(
            user_id,
            require_str(args, "current_password"),
            require_str(args, "new_password"),
        )
        if not changed:
            return ToolError(
                category=ErrorCategory.UNAUTHORIZED,
                message="Current password is incorrect or the user does not exist",
                recovery="Check the user id and current password.",
            ).to_dict()
        return {"success": True, "user_id": user_id}

    async def get_preferences(self, args: dict[str, Any]) -> dict[str, Any]:
        user_id = require_int(args, "user_id")
        preferences = await self._service().get_preferences(user_id)
        if preferences is None:
            raise NotFoundError("Preferences for user", user_id)
        return {"preferences": preferences.to_dict()}

    async def update_preferences(self, args: dict[str, Any]) -> dict[str, Any]:
        """Apply the given fields; others keep their values."""
        user_id = require_int(args, "user_id")
        service = self._service()

        if await service.get_user(user_id) is None:
            raise NotFoundError("User", user_id)

        preferences = await service.get_preferences(user_id)
        if preferences is None:
            preferences = UserPreference(user_id=user_id)

        for name in STRING_PREFERENCES:
            if name in args:
                setattr(preferences, name, args[name])
        for name in BOOL_PREFERENCES:
            if name in args:
                setattr(preferences, name, optional_bool(args, name, getattr(preferences, name)))
        if "preferred_quality" in args:
            preferences.preferred_quality = optional_int(args, "preferred_quality")

        await service.update_preferences(preferences)
        logger.info(f"Updated preferences for user {user_id}")
        return {"success": True, "preferences": preferences.to_dict()}
