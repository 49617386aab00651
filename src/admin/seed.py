"""Demo data for a fresh catalog database."""

import logging
from datetime import datetime, timedelta, timezone

from models import (
    CatalogItem,
    Channel,
    ContentType,
    EpgProgram,
    User,
    UserPreference,
    UserRole,
    utcnow,
)
from persistence import UnitOfWork
from services.auth import hash_password

logger = logging.getLogger(__name__)

DEMO_STREAM_URL = (
    "https://demo.unified-streaming.com/k8s/features/stable/video/"
    "tears-of-steel/tears-of-steel.ism/.m3u8"
)

# Hours of guide data generated per channel
PROGRAM_HOURS = 24

# username, email, password, full name, role
DEMO_USERS = [
    ("admin", "admin@iptv.com", "Admin@123", "System Administrator", UserRole.ADMIN),
    ("testuser", "test@iptv.com", "Test@123", "Test User", UserRole.PREMIUM),
]

DEMO_CONTENT = [
    {
        "title": "Breaking News Live",
        "description": "24/7 breaking news coverage from around the world",
        "type": ContentType.LIVE_TV,
        "genre": "News",
        "rating": 4.5,
    },
    {
        "title": "Sports World",
        "description": "Live sports coverage and highlights",
        "type": ContentType.LIVE_TV,
        "genre": "Sports",
        "rating": 4.8,
    },
    {
        "title": "The Amazing Adventure",
        "description": "An epic adventure movie with stunning visuals",
        "type": ContentType.MOVIE,
        "duration": 7200,
        "release_date": datetime(2023, 6, 15, tzinfo=timezone.utc),
        "genre": "Adventure",
        "rating": 4.6,
    },
    {
        "title": "Mystery Mansion",
        "description": "A thrilling mystery series",
        "type": ContentType.SERIES,
        "duration": 2400,
        "release_date": datetime(2023, 9, 1, tzinfo=timezone.utc),
        "genre": "Mystery",
        "rating": 4.3,
    },
    {
        "title": "Comedy Central Live",
        "description": "Stand-up comedy and comedy shows",
        "type": ContentType.VOD,
        "duration": 3600,
        "genre": "Comedy",
        "rating": 4.7,
    },
]

# name, category
DEMO_CHANNELS = [
    ("CNN International", "News"),
    ("ESPN Sports", "Sports"),
    ("Discovery Channel", "Documentary"),
    ("HBO Entertainment", "Entertainment"),
    ("Kids Network", "Kids"),
]


async def is_seeded(uow: UnitOfWork) -> bool:
    """True once any user or catalog item exists."""
    rows = await uow.fetch(
        "SELECT EXISTS(SELECT 1 FROM users) OR EXISTS(SELECT 1 FROM contents)"
    )
    return bool(rows[0][0])


async def seed_database(uow: UnitOfWork) -> bool:
    """Load the demo users, catalog, lineup and guide.

    Does nothing if the database already holds users or content.

    Returns:
        True if data was written
    """
    if await is_seeded(uow):
        logger.info("Database already contains data, skipping seed")
        return False

    now = utcnow()

    async with uow.transaction():
        users = [
            User(
                username=username,
                email=email,
                password_hash=hash_password(password),
                full_name=full_name,
                role=role,
                created_at=now,
            )
            for username, email, password, full_name, role in DEMO_USERS
        ]
        for user in users:
            uow.users.add(user)

        for index, fields in enumerate(DEMO_CONTENT, start=1):
            uow.contents.add(
                CatalogItem(
                    stream_url=DEMO_STREAM_URL,
                    thumbnail_url=f"https://picsum.photos/400/225?random={index}",
                    created_at=now,
                    updated_at=now,
                    **fields,
                )
            )

        channels = [
            Channel(
                name=name,
                stream_url=DEMO_STREAM_URL,
                logo_url=f"https://picsum.photos/100/100?random={10 + number}",
                channel_number=number,
                category=category,
                language="English",
                is_active=True,
                created_at=now,
                updated_at=now,
            )
            for number, (name, category) in enumerate(DEMO_CHANNELS, start=1)
        ]
        for channel in channels:
            uow.channels.add(channel)

        # Ids are needed for the guide and preferences
        await uow.save_changes()

        for channel in channels:
            for hour in range(PROGRAM_HOURS):
                uow.epg_programs.add(
                    EpgProgram(
                        channel_id=channel.id,
                        title=f"{channel.name} Program {hour + 1}",
                        description=f"Description for program {hour + 1} on {channel.name}",
                        start_time=now + timedelta(hours=hour),
                        end_time=now + timedelta(hours=hour + 1),
                        category=channel.category,
                        rating="PG",
                        created_at=now,
                    )
                )

        test_user = users[1]
        uow.user_preferences.add(
            UserPreference(
                user_id=test_user.id,
                favorite_genres="Action,Adventure,Comedy",
                favorite_channels="1,2,4",
                language="en",
                enable_notifications=True,
                auto_play_next=True,
                preferred_quality=1080,
                subtitles_enabled=False,
                created_at=now,
                updated_at=now,
            )
        )

    logger.info(
        f"Seeded {len(users)} users, {len(DEMO_CONTENT)} content items, "
        f"{len(channels)} channels and {len(channels) * PROGRAM_HOURS} programs"
    )
    return True
