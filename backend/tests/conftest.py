import os

# must be set before vegmap.database.connection builds its engine
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")
os.environ.pop("NAVER_CLIENT_ID", None)
os.environ.pop("NAVER_CLIENT_SECRET", None)

from typing import Iterable, List, Optional
import uuid

import pytest
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from vegmap.database.connection import Base
import vegmap.models  # noqa: F401
from vegmap.services.record_store import (
    VISIT_COUNTER_FIELDS,
    VisitRecord,
    RestaurantViewRecord,
    SearchQueryRecord,
    RestaurantRecord,
)


class FakeRecordStore:
    """In-memory RecordStore"""

    def __init__(self):
        self.users: List[str] = []
        self.visits: List[VisitRecord] = []
        self.views: List[RestaurantViewRecord] = []
        self.searches: List[SearchQueryRecord] = []
        self.restaurants: List[RestaurantRecord] = []
        self.photo_restaurant_ids: List[str] = []

    async def count_users(self) -> int:
        return len(self.users)

    async def list_visits(self, user_id: Optional[str] = None) -> List[VisitRecord]:
        return [v for v in self.visits if user_id is None or v.user_id == user_id]

    async def list_restaurant_views(self, user_id: Optional[str] = None) -> List[RestaurantViewRecord]:
        return [v for v in self.views if user_id is None or v.user_id == user_id]

    async def list_search_queries(self, user_id: Optional[str] = None) -> List[SearchQueryRecord]:
        return [s for s in self.searches if user_id is None or s.user_id == user_id]

    async def list_restaurants(self, ids: Optional[Iterable[str]] = None) -> List[RestaurantRecord]:
        if ids is None:
            return list(self.restaurants)
        wanted = set(ids)
        return [r for r in self.restaurants if r.id in wanted]

    async def list_photo_restaurant_ids(self) -> List[str]:
        return list(self.photo_restaurant_ids)

    async def add_restaurant_view(self, restaurant_id, session_id, viewed_at, user_id=None, source=None):
        self.views.append(RestaurantViewRecord(
            id=str(uuid.uuid4()),
            restaurant_id=restaurant_id,
            session_id=session_id,
            viewed_at=viewed_at,
            user_id=user_id,
            source=source,
        ))

    async def add_search_query(self, session_id, query_text, searched_at, user_id=None,
                               filter_category=None, results_count=0):
        self.searches.append(SearchQueryRecord(
            id=str(uuid.uuid4()),
            session_id=session_id,
            query_text=query_text,
            searched_at=searched_at,
            user_id=user_id,
            filter_category=filter_category,
            results_count=results_count,
        ))

    async def start_visit(self, session_id, started_at, user_id=None, user_agent=None, referrer=None):
        self.visits.append(VisitRecord(
            id=str(uuid.uuid4()),
            session_id=session_id,
            started_at=started_at,
            user_id=user_id,
        ))

    def current_visit(self, session_id: str) -> Optional[VisitRecord]:
        visits = [v for v in self.visits if v.session_id == session_id]
        return max(visits, key=lambda v: v.started_at) if visits else None

    async def increment_visit_counter(self, session_id, field, now, user_id=None):
        if field not in VISIT_COUNTER_FIELDS:
            raise ValueError(f"Unknown visit counter: {field}")
        visit = self.current_visit(session_id)
        if visit is None:
            await self.start_visit(session_id, now, user_id=user_id)
            visit = self.current_visit(session_id)
        setattr(visit, field, getattr(visit, field) + 1)

    async def end_visit(self, session_id, ended_at):
        visit = self.current_visit(session_id)
        if visit is None:
            return
        visit.ended_at = ended_at
        visit.duration_seconds = max(0, int((ended_at - visit.started_at).total_seconds()))


class FailingRecordStore(FakeRecordStore):
    """Every call blows up, as if the database were unreachable"""

    def __getattribute__(self, name):
        if name.startswith(("list_", "count_", "add_", "start_", "increment_", "end_")):
            async def fail(*args, **kwargs):
                raise RuntimeError("database unavailable")
            return fail
        return super().__getattribute__(name)


@pytest.fixture
def store() -> FakeRecordStore:
    return FakeRecordStore()


@pytest.fixture
def failing_store() -> FailingRecordStore:
    return FailingRecordStore()


@pytest.fixture
async def db():
    """Fresh in-memory SQLite database per test"""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    await engine.dispose()
