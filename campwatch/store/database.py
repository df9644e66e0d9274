"""
Watch store backed by SQLite (SQLAlchemy async + aiosqlite)

Every mutation the monitor performs is a single UPDATE statement, so
counters stay correct while other writers touch the same rows.
"""
import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import select, update, func, and_
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

from .models import Base, WatchRow, utcnow
from ..common.models import WatchCreate, WatchRecord

logger = logging.getLogger(__name__)


def _to_utc_naive(ts: datetime) -> datetime:
    if ts.tzinfo is not None:
        ts = ts.astimezone(timezone.utc).replace(tzinfo=None)
    return ts


class WatchStore:
    """
    Durable watch records.
    
    The monitor uses list_active / deactivate / increment_attempts /
    record_success; the remaining operations serve the CLI.
    """
    
    def __init__(self, database_url: str = "sqlite+aiosqlite:///reservations.db"):
        self.database_url = database_url
        self.engine = create_async_engine(database_url, echo=False)
        self.session_factory = async_sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            expire_on_commit=False
        )
    
    async def init(self):
        """Create tables if they don't exist"""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info(f"Database ready at {self.database_url}")
    
    async def close(self):
        await self.engine.dispose()
    
    async def __aenter__(self):
        await self.init()
        return self
    
    async def __aexit__(self, *args):
        await self.close()
    
    async def _update(self, record_id: int, *criteria, **values) -> bool:
        async with self.session_factory() as session:
            result = await session.execute(
                update(WatchRow)
                .where(WatchRow.id == record_id, *criteria)
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            await session.commit()
            return result.rowcount > 0
    
    # ========================================
    # Monitor interface
    # ========================================
    
    async def list_active(self) -> List[WatchRecord]:
        """Records with monitoring on that the user hasn't deleted"""
        async with self.session_factory() as session:
            result = await session.execute(
                select(WatchRow)
                .where(and_(WatchRow.monitoring_active.is_(True), WatchRow.user_deleted.is_(False)))
                .order_by(WatchRow.id)
            )
            return [WatchRecord.model_validate(row) for row in result.scalars().all()]
    
    async def deactivate(self, record_id: int) -> bool:
        """Stop monitoring an expired record and reset its success counter"""
        return await self._update(
            record_id,
            monitoring_active=False,
            success_sent=0,
            updated_at=utcnow()
        )
    
    async def increment_attempts(self, record_id: int) -> bool:
        return await self._update(
            record_id,
            attempts_made=WatchRow.attempts_made + 1
        )
    
    async def record_success(self, record_id: int, timestamp: datetime) -> bool:
        """Count a delivered alert"""
        ts = _to_utc_naive(timestamp)
        return await self._update(
            record_id,
            success_sent=WatchRow.success_sent + 1,
            last_success_sent_at=ts,
            updated_at=ts
        )
    
    # ========================================
    # Record management
    # ========================================
    
    async def add(self, watch: WatchCreate) -> WatchRecord:
        async with self.session_factory() as session:
            row = WatchRow(**watch.model_dump())
            session.add(row)
            await session.commit()
            await session.refresh(row)
            logger.info(f"Created watch {row.id} for campsite {row.campsite_id} ({row.email_address})")
            return WatchRecord.model_validate(row)
    
    async def get(self, record_id: int) -> Optional[WatchRecord]:
        async with self.session_factory() as session:
            row = await session.get(WatchRow, record_id)
            return WatchRecord.model_validate(row) if row else None
    
    async def list_all(self, include_deleted: bool = False) -> List[WatchRecord]:
        query = select(WatchRow).order_by(WatchRow.id)
        if not include_deleted:
            query = query.where(WatchRow.user_deleted.is_(False))
        async with self.session_factory() as session:
            result = await session.execute(query)
            return [WatchRecord.model_validate(row) for row in result.scalars().all()]
    
    async def set_monitoring(self, record_id: int, active: bool) -> bool:
        return await self._update(
            record_id,
            WatchRow.user_deleted.is_(False),
            monitoring_active=active,
            updated_at=utcnow()
        )
    
    async def disable_for_owner(self, record_id: int, email_address: str) -> bool:
        """Turn monitoring off only if `email_address` owns the record"""
        return await self._update(
            record_id,
            func.lower(WatchRow.email_address) == email_address.strip().lower(),
            monitoring_active=False,
            updated_at=utcnow()
        )
    
    async def soft_delete(self, record_id: int) -> bool:
        return await self._update(
            record_id,
            user_deleted=True,
            monitoring_active=False,
            updated_at=utcnow()
        )
