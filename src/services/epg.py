"""Electronic program guide and channel lineup service."""

import logging
from datetime import datetime

from models import Channel, EpgProgram, utcnow
from persistence import UnitOfWork

logger = logging.getLogger(__name__)


class EpgService:
    """Program schedule and channel lookups."""

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    # Programs
    async def get_all_programs(self) -> list[EpgProgram]:
        return await self.uow.epg_programs.get_all()

    async def get_programs_by_channel(self, channel_id: int) -> list[EpgProgram]:
        programs = await self.uow.epg_programs.find(channel_id=channel_id)
        programs.sort(key=lambda p: p.start_time)
        return programs

    async def get_current_programs(
        self, now: datetime | None = None
    ) -> list[EpgProgram]:
        """Programs on air at `now` (defaults to the current time)."""
        at = now or utcnow()
        return await self.uow.epg_programs.find(lambda p: p.is_airing(at))

    async def get_programs_in_range(
        self, start: datetime, end: datetime
    ) -> list[EpgProgram]:
        """Programs that start and end within [start, end]."""
        programs = await self.uow.epg_programs.find(
            lambda p: p.start_time >= start and p.end_time <= end
        )
        programs.sort(key=lambda p: (p.start_time, p.channel_id))
        return programs

    async def get_current_program_for_channel(
        self, channel_id: int, now: datetime | None = None
    ) -> EpgProgram | None:
        at = now or utcnow()
        return await self.uow.epg_programs.first_or_default(
            lambda p: p.is_airing(at), channel_id=channel_id
        )

    async def get_program(self, program_id: int) -> EpgProgram | None:
        return await self.uow.epg_programs.get_by_id(program_id)

    async def create_program(self, program: EpgProgram) -> EpgProgram:
        program.created_at = utcnow()
        self.uow.epg_programs.add(program)
        await self.uow.save_changes()
        logger.debug(f"Created program {program.id} on channel {program.channel_id}")
        return program

    async def update_program(self, program: EpgProgram) -> None:
        self.uow.epg_programs.update(program)
        await self.uow.save_changes()

    async def delete_program(self, program_id: int) -> bool:
        program = await self.uow.epg_programs.get_by_id(program_id)
        if program is None:
            return False

        self.uow.epg_programs.remove(program)
        await self.uow.save_changes()
        return True

    # Channels
    async def get_all_channels(self) -> list[Channel]:
        return await self.uow.channels.get_all()

    async def get_channel(self, channel_id: int) -> Channel | None:
        return await self.uow.channels.get_by_id(channel_id)

    async def get_active_channels(self) -> list[Channel]:
        """Active channels in lineup order."""
        channels = await self.uow.channels.find(is_active=True)
        channels.sort(key=lambda c: c.channel_number)
        return channels
