"""User accounts, password hashing and bearer tokens."""

import logging
from datetime import timedelta
from typing import Any

import jwt
from passlib.context import CryptContext

from config import AuthSettings
from models import User, UserPreference, UserRole, utcnow
from persistence import UnitOfWork
from utils.errors import AuthenticationError, UserExistsError

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"

# PBKDF2-HMAC-SHA256, 16 byte salt, 32 byte key
PASSWORD_ROUNDS = 10000

pwd_context = CryptContext(
    schemes=["pbkdf2_sha256"],
    pbkdf2_sha256__default_rounds=PASSWORD_ROUNDS,
)


def hash_password(password: str) -> str:
    """Hash a password for storage."""
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Check a password against a stored hash. Malformed hashes never match."""
    try:
        return pwd_context.verify(password, password_hash)
    except (ValueError, TypeError):
        return False


class AuthService:
    """Registration, login and account management.

    Token settings are fixed at construction; configuration is not
    re-read per call.
    """

    def __init__(self, uow: UnitOfWork, settings: AuthSettings):
        self.uow = uow
        self.settings = settings

    async def register(
        self,
        username: str,
        email: str,
        password: str,
        full_name: str | None = None,
    ) -> User:
        """Create a user together with default preferences.

        Both rows are written in one transaction.

        Raises:
            UserExistsError: If the username or email is already taken
        """
        existing = await self.uow.users.first_or_default(
            lambda u: u.username == username or u.email == email
        )
        if existing is not None:
            raise UserExistsError()

        now = utcnow()
        user = User(
            username=username,
            email=email,
            password_hash=hash_password(password),
            full_name=full_name,
            is_active=True,
            role=UserRole.USER,
            created_at=now,
        )

        async with self.uow.transaction():
            self.uow.users.add(user)
            await self.uow.save_changes()

            self.uow.user_preferences.add(
                UserPreference(
                    user_id=user.id,
                    enable_notifications=True,
                    auto_play_next=False,
                    subtitles_enabled=False,
                    created_at=now,
                    updated_at=now,
                )
            )

        logger.info(f"Registered user {user.id} ({username})")
        return user

    async def login(self, username: str, password: str) -> tuple[User, str] | None:
        """Authenticate by username or email.

        Returns:
            The user and a fresh token, or None for unknown or inactive
            accounts and wrong passwords
        """
        user = await self.uow.users.first_or_default(
            lambda u: u.username == username or u.email == username
        )
        if user is None or not user.is_active:
            return None

        if not verify_password(password, user.password_hash):
            logger.info(f"Failed login for user {user.id}")
            return None

        user.last_login_at = utcnow()
        self.uow.users.update(user)
        await self.uow.save_changes()

        return user, self.generate_token(user)

    async def get_user(self, user_id: int) -> User | None:
        return await self.uow.users.get_by_id(user_id)

    async def get_user_by_username(self, username: str) -> User | None:
        return await self.uow.users.first_or_default(username=username)

    async def get_user_by_email(self, email: str) -> User | None:
        return await self.uow.users.first_or_default(email=email)

    async def update_user(self, user: User) -> None:
        self.uow.users.update(user)
        await self.uow.save_changes()

    async def change_password(
        self, user_id: int, current_password: str, new_password: str
    ) -> bool:
        """Replace the password if the current one checks out."""
        user = await self.uow.users.get_by_id(user_id)
        if user is None:
            return False

        if not verify_password(current_password, user.password_hash):
            return False

        user.password_hash = hash_password(new_password)
        self.uow.users.update(user)
        await self.uow.save_changes()
        logger.info(f"Changed password for user {user_id}")
        return True

    async def get_preferences(self, user_id: int) -> UserPreference | None:
        return await self.uow.user_preferences.first_or_default(user_id=user_id)

    async def update_preferences(self, preferences: UserPreference) -> None:
        """Persist preferences, inserting them if the user had none yet."""
        preferences.updated_at = utcnow()
        if preferences.id is None:
            self.uow.user_preferences.add(preferences)
        else:
            self.uow.user_preferences.update(preferences)
        await self.uow.save_changes()

    def generate_token(self, user: User) -> str:
        """Issue a signed bearer token for a user."""
        now = utcnow()
        payload = {
            "sub": str(user.id),
            "name": user.username,
            "email": user.email,
            "role": user.role.value,
            "iss": self.settings.issuer,
            "aud": self.settings.audience,
            "iat": now,
            "exp": now + timedelta(minutes=self.settings.expiration_minutes),
        }
        return jwt.encode(payload, self.settings.secret_key, algorithm=JWT_ALGORITHM)

    def verify_token(self, token: str) -> dict[str, Any]:
        """Decode and validate a token.

        Raises:
            AuthenticationError: If the token is expired, forged or malformed
        """
        try:
            return jwt.decode(
                token,
                self.settings.secret_key,
                algorithms=[JWT_ALGORITHM],
                audience=self.settings.audience,
                issuer=self.settings.issuer,
            )
        except jwt.ExpiredSignatureError as e:
            raise AuthenticationError("Token has expired") from e
        except jwt.InvalidTokenError as e:
            raise AuthenticationError(f"Invalid token: {e}") from e
