"""
Lookup Service - ordered option lists (classes, streams, team colours, transport types)

Listings go through the query cache under the table's own name; every
add/delete invalidates that table.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, update
from typing import List
import logging

from app.core.exceptions import InvalidLookupTableError, LookupNotFoundError, DuplicateRecordError
from app.models.lookups import LOOKUP_MODELS
from app.models.student import Student
from app.schemas.lookup import LookupCreate, LookupResponse
from app.services.cache_service import cache_service

logger = logging.getLogger(__name__)


# Student columns that reference each lookup table
STUDENT_REFERENCES = {
    "classes": ("class_admitted_to_id", "current_class_id"),
    "streams": ("stream_id",),
    "team_colours": ("team_colour_id",),
    "transport_types": ("transport_type_id",),
}


class LookupService:
    """Service for the generic lookup tables"""

    @property
    def allowed_tables(self) -> List[str]:
        return list(LOOKUP_MODELS)

    def get_model(self, table: str):
        model = LOOKUP_MODELS.get(table)
        if model is None:
            raise InvalidLookupTableError(table, self.allowed_tables)
        return model

    async def _load_entries(self, db: AsyncSession, table: str) -> List[dict]:
        model = self.get_model(table)
        result = await db.execute(
            select(model).order_by(model.sort_order.is_(None), model.sort_order, model.id)
        )
        return [
            LookupResponse.model_validate(row).model_dump(mode="json")
            for row in result.scalars().all()
        ]

    async def list_entries(self, db: AsyncSession, table: str) -> List[dict]:
        """
        List a lookup table ordered by sort_order (nulls last), then id.

        Served from the query cache when enabled.
        """
        self.get_model(table)

        async def loader():
            return await self._load_entries(db, table)

        return await cache_service.cached_query(table, loader, ttl=cache_service.TTL_LOOKUPS)

    async def add_entry(self, db: AsyncSession, table: str, data: LookupCreate):
        """Append an entry at the end of the table's ordering"""
        model = self.get_model(table)

        existing = await db.execute(
            select(model.id).where(func.lower(model.name) == data.name.lower())
        )
        if existing.first():
            raise DuplicateRecordError(table, "name", data.name)

        max_order = (await db.execute(select(func.max(model.sort_order)))).scalar()
        entry = model(
            name=data.name,
            sort_order=(max_order + 1) if max_order is not None else 0,
        )

        db.add(entry)
        await db.commit()
        await db.refresh(entry)
        await cache_service.invalidate_table(table)

        logger.info(f"Added '{entry.name}' to {table} (sort_order={entry.sort_order})")
        return entry

    async def delete_entry(self, db: AsyncSession, table: str, row_id: str) -> int:
        """
        Delete an entry and clear it from any student referencing it.

        Returns the number of student references cleared.
        """
        model = self.get_model(table)

        entry = await db.get(model, row_id)
        if not entry:
            raise LookupNotFoundError(table, row_id)

        cleared = 0
        for column in STUDENT_REFERENCES.get(table, ()):
            result = await db.execute(
                update(Student)
                .where(getattr(Student, column) == row_id)
                .values({column: None})
            )
            cleared += result.rowcount or 0

        await db.delete(entry)
        await db.commit()
        await cache_service.invalidate_table(table)

        logger.info(f"Deleted {table}/{row_id}, cleared {cleared} student references")
        return cleared

    async def ensure_exists(self, db: AsyncSession, table: str, row_id: str) -> None:
        """Raise LookupNotFoundError unless row_id exists in table"""
        model = self.get_model(table)
        result = await db.execute(select(model.id).where(model.id == row_id))
        if result.first() is None:
            raise LookupNotFoundError(table, row_id)


# Singleton instance
lookup_service = LookupService()
