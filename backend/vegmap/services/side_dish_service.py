from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import Dict, Any, Optional, List
from datetime import datetime, timezone
import logging

from vegmap.models.restaurant import SideDishNote

logger = logging.getLogger(__name__)

NOTE_FIELDS = (
    "side_dish_name_ko",
    "side_dish_name_en",
    "description_en",
    "description_ko",
    "is_vegetarian",
    "is_vegan",
    "notes",
    "ordering_phrase_ko",
    "ordering_phrase_en",
    "is_verified",
)


class SideDishService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_notes(self, restaurant_id: str) -> List[SideDishNote]:
        """Verified side-dish notes for a restaurant, newest first"""
        result = await self.db.execute(
            select(SideDishNote)
            .where(
                SideDishNote.restaurant_id == restaurant_id,
                SideDishNote.is_verified.is_(True),
            )
            .order_by(SideDishNote.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_note(self, note_id: str) -> Optional[SideDishNote]:
        result = await self.db.execute(select(SideDishNote).where(SideDishNote.id == note_id))
        return result.scalar_one_or_none()

    async def create_note(
        self,
        restaurant_id: str,
        data: Dict[str, Any],
        created_by: Optional[str] = None,
    ) -> SideDishNote:
        now = datetime.now(timezone.utc)
        note = SideDishNote(
            restaurant_id=restaurant_id,
            created_by=created_by,
            created_at=now,
            updated_at=now,
            **{k: v for k, v in data.items() if k in NOTE_FIELDS},
        )
        self.db.add(note)
        await self.db.commit()
        await self.db.refresh(note)
        return note

    async def update_note(self, note_id: str, updates: Dict[str, Any]) -> Optional[SideDishNote]:
        note = await self.get_note(note_id)
        if note is None:
            return None

        for name, value in updates.items():
            if name in NOTE_FIELDS:
                setattr(note, name, value)
        note.updated_at = datetime.now(timezone.utc)

        await self.db.commit()
        await self.db.refresh(note)
        return note

    async def delete_note(self, note_id: str) -> bool:
        note = await self.get_note(note_id)
        if note is None:
            return False

        await self.db.delete(note)
        await self.db.commit()
        return True
