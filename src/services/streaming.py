"""Stream locator lookups for catalog items and channels."""

from models import ContentType, ManifestInfo, StreamInfo
from persistence import UnitOfWork

MANIFEST_NAME = "manifest.m3u8"


class StreamingService:
    """Resolve where a catalog item or channel can be played."""

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def get_content_stream(self, content_id: int) -> StreamInfo | None:
        content = await self.uow.contents.get_by_id(content_id)
        if content is None:
            return None
        return StreamInfo(
            content_id=content.id,
            stream_url=content.stream_url,
            content_type=content.type.value,
            title=content.title,
        )

    async def get_channel_stream(self, channel_id: int) -> StreamInfo | None:
        channel = await self.uow.channels.get_by_id(channel_id)
        if channel is None:
            return None
        return StreamInfo(
            channel_id=channel.id,
            stream_url=channel.stream_url,
            content_type=ContentType.LIVE_TV.value,
            title=channel.name,
        )

    async def get_content_manifest(self, content_id: int) -> ManifestInfo | None:
        stream = await self.get_content_stream(content_id)
        return _manifest_for(stream) if stream else None

    async def get_channel_manifest(self, channel_id: int) -> ManifestInfo | None:
        stream = await self.get_channel_stream(channel_id)
        return _manifest_for(stream) if stream else None


def _manifest_for(stream: StreamInfo) -> ManifestInfo:
    return ManifestInfo(manifest_url=f"{stream.stream_url.rstrip('/')}/{MANIFEST_NAME}")
