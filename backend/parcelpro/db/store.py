"""
Entity Store.

A thin persistence facade over an async SQLAlchemy session exposing the
operations the services need: point lookups, filtered scans, partial
updates, deletes, counts and aggregation statements.

Mutating calls commit by default. Pass ``commit=False`` to stage several
mutations and finish them with a single ``commit()``, so multi-record
workflows land in one transaction.
"""

from typing import Any, AsyncIterator, Dict, List, Optional, Sequence, Type

from fastapi import Depends
from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Executable

from backend.parcelpro.db.identifiers import parse_id
from backend.parcelpro.db.session import get_db


class EntityStore:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def insert(self, instance, commit: bool = True):
        self.db.add(instance)
        if commit:
            await self.db.commit()
            await self.db.refresh(instance)
        else:
            await self.db.flush()
        return instance

    async def find_one(self, model: Type, *criteria) -> Optional[Any]:
        result = await self.db.execute(select(model).where(*criteria).limit(1))
        return result.scalars().first()

    async def get_by_id(self, model: Type, raw_id, field: str = "id") -> Optional[Any]:
        """Look up a record by identifier, rejecting malformed identifiers."""
        return await self.find_one(model, model.id == parse_id(raw_id, field))

    async def find(
        self,
        model: Type,
        *criteria,
        order_by: Optional[Sequence] = None,
        offset: Optional[int] = None,
        limit: Optional[int] = None
    ) -> List[Any]:
        query = select(model).where(*criteria)
        if order_by is not None:
            query = query.order_by(*order_by)
        if offset:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def update(self, model: Type, *criteria, values: Dict[str, Any], commit: bool = True) -> int:
        """
        Merge ``values`` into every record matching ``criteria``.

        Returns:
            Number of affected records
        """
        stmt = (
            update(model)
            .where(*criteria)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        if commit:
            await self.db.commit()
        return result.rowcount

    async def delete(self, model: Type, *criteria, commit: bool = True) -> int:
        stmt = delete(model).where(*criteria).execution_options(synchronize_session=False)
        result = await self.db.execute(stmt)
        if commit:
            await self.db.commit()
        return result.rowcount

    async def count(self, model: Type, *criteria) -> int:
        result = await self.db.execute(select(func.count()).select_from(model).where(*criteria))
        return result.scalar() or 0

    async def aggregate(self, stmt: Executable) -> List[Any]:
        """Run an aggregation statement and return its rows."""
        result = await self.db.execute(stmt)
        return list(result.all())

    async def stream(self, stmt: Executable, batch_size: int = 1000) -> AsyncIterator[Any]:
        """Yield the rows of ``stmt`` in batches instead of loading them all."""
        result = await self.db.stream(stmt.execution_options(yield_per=batch_size))
        async for row in result:
            yield row

    async def scalar(self, stmt: Executable) -> Any:
        result = await self.db.execute(stmt)
        return result.scalar()

    async def refresh(self, instance):
        await self.db.refresh(instance)
        return instance

    async def commit(self):
        await self.db.commit()

    async def rollback(self):
        await self.db.rollback()


async def get_store(db: AsyncSession = Depends(get_db)) -> EntityStore:
    """FastAPI dependency providing an Entity Store bound to the request session."""
    return EntityStore(db)
