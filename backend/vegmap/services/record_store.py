"""
Record store: the read/write seam between the tracking/analytics services
and the database.

Aggregators only ever see the plain records defined here, so they can be
exercised against any object that satisfies ``RecordStore``.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Protocol

from sqlalchemy import select, func, distinct
from sqlalchemy.ext.asyncio import AsyncSession

from vegmap.models.user import User
from vegmap.models.restaurant import Restaurant, RestaurantPhoto
from vegmap.models.user_visit import UserVisit
from vegmap.models.restaurant_view import RestaurantView
from vegmap.models.search_query import SearchQuery

VISIT_COUNTER_FIELDS = ("page_views", "restaurants_viewed", "searches_performed")
# width of the user_agent and referrer columns
HEADER_MAX_LENGTH = 500


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normalise a DB timestamp to an aware UTC datetime (SQLite drops tzinfo)."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _clip(value: Optional[str], limit: int = HEADER_MAX_LENGTH) -> Optional[str]:
    return value[:limit] if value else value


@dataclass
class VisitRecord:
    id: str
    session_id: str
    started_at: datetime
    user_id: Optional[str] = None
    ended_at: Optional[datetime] = None
    duration_seconds: Optional[int] = None
    page_views: int = 0
    restaurants_viewed: int = 0
    searches_performed: int = 0


@dataclass
class RestaurantViewRecord:
    id: str
    restaurant_id: str
    session_id: str
    viewed_at: datetime
    user_id: Optional[str] = None
    source: Optional[str] = None


@dataclass
class SearchQueryRecord:
    id: str
    session_id: str
    query_text: str
    searched_at: datetime
    user_id: Optional[str] = None
    filter_category: Optional[str] = None
    results_count: int = 0

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "session_id": self.session_id,
            "query_text": self.query_text,
            "filter_category": self.filter_category,
            "results_count": self.results_count,
            "searched_at": self.searched_at.isoformat(),
        }


@dataclass
class RestaurantRecord:
    id: str
    name_en: Optional[str]
    name_ko: Optional[str]
    category: str
    naver_place_id: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.name_en or self.name_ko or "Unknown"


class RecordStore(Protocol):
    """Everything the tracker and the aggregators need from persistence."""

    async def count_users(self) -> int: ...

    async def list_visits(self, user_id: Optional[str] = None) -> List[VisitRecord]: ...

    async def list_restaurant_views(self, user_id: Optional[str] = None) -> List[RestaurantViewRecord]: ...

    async def list_search_queries(self, user_id: Optional[str] = None) -> List[SearchQueryRecord]: ...

    async def list_restaurants(self, ids: Optional[Iterable[str]] = None) -> List[RestaurantRecord]: ...

    async def list_photo_restaurant_ids(self) -> List[str]: ...

    async def add_restaurant_view(
        self,
        restaurant_id: str,
        session_id: str,
        viewed_at: datetime,
        user_id: Optional[str] = None,
        source: Optional[str] = None,
    ) -> None: ...

    async def add_search_query(
        self,
        session_id: str,
        query_text: str,
        searched_at: datetime,
        user_id: Optional[str] = None,
        filter_category: Optional[str] = None,
        results_count: int = 0,
    ) -> None: ...

    async def start_visit(
        self,
        session_id: str,
        started_at: datetime,
        user_id: Optional[str] = None,
        user_agent: Optional[str] = None,
        referrer: Optional[str] = None,
    ) -> None: ...

    async def increment_visit_counter(
        self,
        session_id: str,
        field: str,
        now: datetime,
        user_id: Optional[str] = None,
    ) -> None: ...

    async def end_visit(self, session_id: str, ended_at: datetime) -> None: ...


def _visit_record(v: UserVisit) -> VisitRecord:
    return VisitRecord(
        id=v.id,
        session_id=v.session_id,
        started_at=as_utc(v.started_at),
        user_id=v.user_id,
        ended_at=as_utc(v.ended_at),
        duration_seconds=v.duration_seconds,
        page_views=v.page_views or 0,
        restaurants_viewed=v.restaurants_viewed or 0,
        searches_performed=v.searches_performed or 0,
    )


class SqlRecordStore:
    """``RecordStore`` backed by an async SQLAlchemy session."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _commit(self) -> None:
        try:
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

    async def count_users(self) -> int:
        result = await self.db.execute(select(func.count(User.id)))
        return result.scalar() or 0

    async def list_visits(self, user_id: Optional[str] = None) -> List[VisitRecord]:
        query = select(UserVisit)
        if user_id:
            query = query.where(UserVisit.user_id == user_id)
        query = query.order_by(UserVisit.started_at)

        result = await self.db.execute(query)
        return [_visit_record(v) for v in result.scalars().all()]

    async def list_restaurant_views(self, user_id: Optional[str] = None) -> List[RestaurantViewRecord]:
        query = select(RestaurantView)
        if user_id:
            query = query.where(RestaurantView.user_id == user_id)
        query = query.order_by(RestaurantView.viewed_at)

        result = await self.db.execute(query)
        return [
            RestaurantViewRecord(
                id=v.id,
                restaurant_id=v.restaurant_id,
                session_id=v.session_id,
                viewed_at=as_utc(v.viewed_at),
                user_id=v.user_id,
                source=v.source,
            )
            for v in result.scalars().all()
        ]

    async def list_search_queries(self, user_id: Optional[str] = None) -> List[SearchQueryRecord]:
        query = select(SearchQuery)
        if user_id:
            query = query.where(SearchQuery.user_id == user_id)
        query = query.order_by(SearchQuery.searched_at)

        result = await self.db.execute(query)
        return [
            SearchQueryRecord(
                id=s.id,
                session_id=s.session_id,
                query_text=s.query_text,
                searched_at=as_utc(s.searched_at),
                user_id=s.user_id,
                filter_category=s.filter_category,
                results_count=s.results_count or 0,
            )
            for s in result.scalars().all()
        ]

    async def list_restaurants(self, ids: Optional[Iterable[str]] = None) -> List[RestaurantRecord]:
        query = select(
            Restaurant.id,
            Restaurant.name_en,
            Restaurant.name_ko,
            Restaurant.category,
            Restaurant.naver_place_id,
        )
        if ids is not None:
            ids = list(set(ids))
            if not ids:
                return []
            query = query.where(Restaurant.id.in_(ids))

        result = await self.db.execute(query)
        return [
            RestaurantRecord(
                id=row.id,
                name_en=row.name_en,
                name_ko=row.name_ko,
                category=row.category,
                naver_place_id=row.naver_place_id,
            )
            for row in result.all()
        ]

    async def list_photo_restaurant_ids(self) -> List[str]:
        result = await self.db.execute(
            select(distinct(RestaurantPhoto.restaurant_id)).where(
                RestaurantPhoto.restaurant_id.isnot(None)
            )
        )
        return list(result.scalars().all())

    async def add_restaurant_view(
        self,
        restaurant_id: str,
        session_id: str,
        viewed_at: datetime,
        user_id: Optional[str] = None,
        source: Optional[str] = None,
    ) -> None:
        self.db.add(RestaurantView(
            restaurant_id=restaurant_id,
            user_id=user_id,
            session_id=session_id,
            viewed_at=viewed_at,
            source=source,
        ))
        await self._commit()

    async def add_search_query(
        self,
        session_id: str,
        query_text: str,
        searched_at: datetime,
        user_id: Optional[str] = None,
        filter_category: Optional[str] = None,
        results_count: int = 0,
    ) -> None:
        self.db.add(SearchQuery(
            user_id=user_id,
            session_id=session_id,
            query_text=query_text,
            filter_category=filter_category,
            results_count=results_count,
            searched_at=searched_at,
        ))
        await self._commit()

    async def start_visit(
        self,
        session_id: str,
        started_at: datetime,
        user_id: Optional[str] = None,
        user_agent: Optional[str] = None,
        referrer: Optional[str] = None,
    ) -> None:
        self.db.add(UserVisit(
            user_id=user_id,
            session_id=session_id,
            started_at=started_at,
            page_views=0,
            restaurants_viewed=0,
            searches_performed=0,
            user_agent=_clip(user_agent),
            referrer=_clip(referrer),
        ))
        await self._commit()

    async def _current_visit(self, session_id: str) -> Optional[UserVisit]:
        result = await self.db.execute(
            select(UserVisit)
            .where(UserVisit.session_id == session_id)
            .order_by(UserVisit.started_at.desc())
            .limit(1)
            .with_for_update()
        )
        return result.scalar_one_or_none()

    async def increment_visit_counter(
        self,
        session_id: str,
        field: str,
        now: datetime,
        user_id: Optional[str] = None,
    ) -> None:
        if field not in VISIT_COUNTER_FIELDS:
            raise ValueError(f"Unknown visit counter: {field}")

        visit = await self._current_visit(session_id)
        if visit is None:
            # upsert: a counter update always lands on some visit of the session
            visit = UserVisit(
                user_id=user_id,
                session_id=session_id,
                started_at=now,
                page_views=0,
                restaurants_viewed=0,
                searches_performed=0,
            )
            self.db.add(visit)

        setattr(visit, field, (getattr(visit, field) or 0) + 1)
        await self._commit()

    async def end_visit(self, session_id: str, ended_at: datetime) -> None:
        visit = await self._current_visit(session_id)
        if visit is None:
            await self.db.rollback()
            return

        visit.ended_at = ended_at
        started_at = as_utc(visit.started_at)
        visit.duration_seconds = max(0, int((as_utc(ended_at) - started_at).total_seconds()))
        await self._commit()
