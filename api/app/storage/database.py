"""
SQLAlchemy Storage - repositories backed by PostgreSQL

Each operation is its own round trip on the request's session. Uniqueness of
destination image URLs and of live bookings is enforced by the schema, so a
conflicting write fails atomically and is translated into a domain error here.
"""
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any, Dict, List, Optional
import logging
import uuid

from sqlalchemy import Float, select, update, delete, func
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from app.config import settings
from app.models import ActivityLog, Booking, Destination, Review, User
from app.models.booking import CANCELLED
from app.schemas.analytics import BookingStats, RevenueSummary, UserStats
from app.schemas.review import ReviewStats
from app.storage.base import (
    ActivityLogRepository,
    AnalyticsRepository,
    BookingRepository,
    DestinationRepository,
    DestinationWithStats,
    PlaceholderAnalyticsRepository,
    ReviewRepository,
    Storage,
    UserRepository,
)
from app.storage.exceptions import (
    DuplicateBookingError,
    ImageUrlConflictError,
    NotFoundError,
    UsernameConflictError,
)
from app.utils.dates import as_date, growth_percent, month_bounds, to_naive_utc, utcnow
from app.utils.numbers import column_values
from app.utils.security import hash_password_fields, verify_password

logger = logging.getLogger(__name__)


class SQLUserRepository(UserRepository):

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_user(self, user_id: str) -> Optional[User]:
        return await self.db.get(User, user_id)

    async def get_user_by_username(self, username: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.username == username))
        return result.scalar_one_or_none()

    async def authenticate_user(self, username: str, password: str) -> Optional[User]:
        user = await self.get_user_by_username(username)
        if not user or not user.password:
            return None

        if not verify_password(password, user.password):
            return None

        user.last_login_at = utcnow()
        await self.db.commit()
        return user

    async def create_user(self, data: Dict[str, Any]) -> User:
        user = User(**hash_password_fields(data))
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            username = data.get("username")
            if username and await self.get_user_by_username(username):
                logger.warning(f"Username already taken: {username}")
                raise UsernameConflictError(username) from e
            raise

        logger.info(f"User created: {user.id} ({user.username})")
        return user

    async def upsert_user(self, data: Dict[str, Any]) -> User:
        data = hash_password_fields(data)
        data.setdefault("id", str(uuid.uuid4()))

        dialect = self.db.get_bind().dialect.name
        insert = sqlite.insert if dialect == "sqlite" else postgresql.insert

        stmt = (
            insert(User)
            .values(**data)
            .on_conflict_do_update(
                index_elements=[User.id],
                set_={**data, "updated_at": utcnow()},
            )
            .returning(User)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        user = result.scalar_one()
        await self.db.commit()
        return user

    async def update_user(self, user_id: str, data: Dict[str, Any]) -> User:
        user = await self.get_user(user_id)
        if not user:
            raise NotFoundError("User", user_id)

        for field, value in hash_password_fields(data).items():
            setattr(user, field, value)
        user.updated_at = utcnow()

        await self.db.commit()
        return user

    async def get_all_users(self) -> List[User]:
        result = await self.db.execute(
            select(User).order_by(User.created_at.desc(), User.id.desc())
        )
        return list(result.scalars().all())

    async def update_user_last_login(self, user_id: str) -> None:
        await self.db.execute(
            update(User).where(User.id == user_id).values(last_login_at=utcnow())
        )
        await self.db.commit()

    async def delete_user(self, user_id: str) -> None:
        await self.db.execute(delete(User).where(User.id == user_id))
        await self.db.commit()
        logger.info(f"User deleted: {user_id}")


class SQLDestinationRepository(DestinationRepository):

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_all_destinations(self) -> List[Destination]:
        result = await self.db.execute(
            select(Destination)
            .where(Destination.is_active == True)  # noqa: E712
            .order_by(Destination.rating.desc().nulls_last(), Destination.id)
        )
        return list(result.scalars().all())

    async def get_destination(self, destination_id: int) -> Optional[Destination]:
        return await self.db.get(Destination, destination_id)

    async def create_destination(self, data: Dict[str, Any]) -> Destination:
        destination = Destination(**column_values(Destination, data))
        self.db.add(destination)
        await self._commit_checking_image_url(data.get("image_url"))

        logger.info(f"Destination created: {destination.id} ({destination.name})")
        return destination

    async def update_destination(self, destination_id: int, data: Dict[str, Any]) -> Destination:
        destination = await self.get_destination(destination_id)
        if not destination:
            raise NotFoundError("Destination", destination_id)

        for field, value in column_values(Destination, data).items():
            setattr(destination, field, value)
        destination.updated_at = utcnow()

        await self._commit_checking_image_url(data.get("image_url"), exclude_id=destination_id)

        logger.info(f"Destination updated: {destination_id}")
        return destination

    async def _commit_checking_image_url(self, image_url: Optional[str], exclude_id: Optional[int] = None):
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            if image_url:
                existing = await self.check_image_url_exists(image_url, exclude_id)
                if existing:
                    logger.warning(f"Image URL {image_url} already used by destination {existing.id}")
                    raise ImageUrlConflictError(existing.name) from e
            raise

    async def delete_destination(self, destination_id: int) -> None:
        await self.db.execute(delete(Destination).where(Destination.id == destination_id))
        await self.db.commit()
        logger.info(f"Destination deleted: {destination_id}")

    async def check_image_url_exists(
        self,
        image_url: str,
        exclude_id: Optional[int] = None,
    ) -> Optional[Destination]:
        query = select(Destination).where(Destination.image_url == image_url)
        if exclude_id is not None:
            query = query.where(Destination.id != exclude_id)

        result = await self.db.execute(query.limit(1))
        return result.scalars().first()

    async def get_destinations_with_stats(self) -> List[DestinationWithStats]:
        result = await self.db.execute(select(Destination).order_by(Destination.id))
        destinations = result.scalars().all()

        stats_result = await self.db.execute(
            select(
                Booking.destination_id,
                func.count(Booking.id),
                func.sum(Booking.total_amount),
            ).group_by(Booking.destination_id)
        )
        stats = {row[0]: (row[1], row[2]) for row in stats_result.all()}

        with_stats = []
        for destination in destinations:
            booking_count, revenue = stats.get(destination.id, (0, None))
            with_stats.append(DestinationWithStats(
                destination=destination,
                booking_count=booking_count or 0,
                revenue=str(revenue) if revenue is not None else "0",
            ))
        return with_stats


class SQLBookingRepository(BookingRepository):

    def __init__(self, db: AsyncSession):
        self.db = db

    def _with_details(self):
        # Inner joins: bookings whose destination or user is gone are left out
        return select(Booking).options(
            joinedload(Booking.destination, innerjoin=True),
            joinedload(Booking.user, innerjoin=True),
        )

    async def create_booking(self, data: Dict[str, Any]) -> Booking:
        booking = Booking(**column_values(Booking, data))
        self.db.add(booking)
        await self._commit_checking_duplicate(booking)

        logger.info(f"Booking created: {booking.id} for user {booking.user_id}")
        return booking

    async def _commit_checking_duplicate(self, booking: Booking):
        # Capture the stay before a rollback expires the instance
        stay = (booking.user_id, booking.destination_id, booking.check_in, booking.check_out)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            if await self.check_duplicate_booking(*stay):
                logger.warning(f"Duplicate booking rejected for user {stay[0]}, destination {stay[1]}")
                raise DuplicateBookingError(*stay) from e
            raise

    async def get_user_bookings(self, user_id: str) -> List[Booking]:
        result = await self.db.execute(
            self._with_details()
            .where(Booking.user_id == user_id)
            .order_by(Booking.created_at.desc(), Booking.id.desc())
        )
        return list(result.scalars().all())

    async def get_all_bookings(self) -> List[Booking]:
        result = await self.db.execute(
            self._with_details().order_by(Booking.created_at.desc(), Booking.id.desc())
        )
        return list(result.scalars().all())

    async def get_booking(self, booking_id: int) -> Optional[Booking]:
        result = await self.db.execute(
            self._with_details().where(Booking.id == booking_id)
        )
        return result.scalar_one_or_none()

    async def update_booking(self, booking_id: int, data: Dict[str, Any]) -> Booking:
        booking = await self.db.get(Booking, booking_id)
        if not booking:
            raise NotFoundError("Booking", booking_id)

        for field, value in column_values(Booking, data).items():
            setattr(booking, field, value)
        booking.updated_at = utcnow()

        await self._commit_checking_duplicate(booking)
        return booking

    async def cancel_booking(self, booking_id: int) -> None:
        await self.db.execute(
            update(Booking)
            .where(Booking.id == booking_id)
            .values(status=CANCELLED, updated_at=utcnow())
        )
        await self.db.commit()
        logger.info(f"Booking cancelled: {booking_id}")

    async def check_duplicate_booking(
        self,
        user_id: str,
        destination_id: int,
        check_in: date,
        check_out: date,
    ) -> bool:
        result = await self.db.execute(
            select(Booking.id).where(
                Booking.user_id == user_id,
                Booking.destination_id == destination_id,
                Booking.check_in == as_date(check_in),
                Booking.check_out == as_date(check_out),
                Booking.status != CANCELLED,
            ).limit(1)
        )
        return result.first() is not None


class SQLActivityLogRepository(ActivityLogRepository):

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_activity_log(self, data: Dict[str, Any]) -> ActivityLog:
        log = ActivityLog(**data)
        self.db.add(log)
        await self.db.commit()
        return log

    async def get_activity_logs(self, limit: int = 50) -> List[ActivityLog]:
        result = await self.db.execute(
            select(ActivityLog)
            .order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())
            .limit(limit)
        )
        return list(result.scalars().all())


class SQLReviewRepository(ReviewRepository):

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_destination_reviews(self, destination_id: int) -> List[Review]:
        result = await self.db.execute(
            select(Review)
            .options(joinedload(Review.user, innerjoin=True))
            .where(Review.destination_id == destination_id)
            .order_by(Review.created_at.desc(), Review.id.desc())
        )
        return list(result.scalars().all())

    async def create_review(self, data: Dict[str, Any]) -> Review:
        review = Review(**data)
        self.db.add(review)
        await self.db.commit()

        logger.info(f"Review created: {review.id} for destination {review.destination_id}")
        return review

    async def get_review_stats(self, destination_id: int) -> ReviewStats:
        result = await self.db.execute(
            select(
                func.round(func.avg(Review.rating), 1, type_=Float),
                func.count(Review.id),
            ).where(Review.destination_id == destination_id)
        )
        average, total = result.one()
        return ReviewStats(
            average_rating=float(average) if average is not None else 0,
            total_reviews=total or 0,
        )


class SQLAnalyticsRepository(AnalyticsRepository):
    """Dashboard figures aggregated from the bookings and users tables"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _revenue_between(self, start: Optional[datetime], end: Optional[datetime], end_inclusive=True) -> Decimal:
        query = select(func.sum(Booking.total_amount)).where(Booking.status != CANCELLED)
        if start is not None:
            query = query.where(Booking.created_at >= start)
        if end is not None:
            query = query.where(Booking.created_at <= end if end_inclusive else Booking.created_at < end)

        result = await self.db.execute(query)
        total = result.scalar()
        return Decimal(str(total)) if total is not None else Decimal("0")

    async def _count_created(self, model, start: datetime, end: Optional[datetime] = None) -> int:
        query = select(func.count(model.id)).where(model.created_at >= start)
        if end is not None:
            query = query.where(model.created_at < end)
        result = await self.db.execute(query)
        return result.scalar() or 0

    async def get_revenue(self, start_date=None, end_date=None) -> RevenueSummary:
        total = await self._revenue_between(to_naive_utc(start_date), to_naive_utc(end_date))

        this_month, last_month = month_bounds(utcnow())
        current = await self._revenue_between(this_month, None)
        previous = await self._revenue_between(last_month, this_month, end_inclusive=False)

        return RevenueSummary(
            total=f"{total:.2f}",
            period=f"{growth_percent(current, previous):+d}% from last month",
        )

    async def get_booking_stats(self) -> BookingStats:
        result = await self.db.execute(select(func.count(Booking.id)))
        total = result.scalar() or 0

        this_month, last_month = month_bounds(utcnow())
        current = await self._count_created(Booking, this_month)
        previous = await self._count_created(Booking, last_month, this_month)

        return BookingStats(total=total, this_month=current, growth=growth_percent(current, previous))

    async def get_user_stats(self) -> UserStats:
        result = await self.db.execute(select(func.count(User.id)))
        total = result.scalar() or 0

        active_since = utcnow() - timedelta(days=settings.ACTIVE_USER_WINDOW_DAYS)
        result = await self.db.execute(
            select(func.count(User.id)).where(User.last_login_at >= active_since)
        )
        active = result.scalar() or 0

        this_month, last_month = month_bounds(utcnow())
        current = await self._count_created(User, this_month)
        previous = await self._count_created(User, last_month, this_month)

        return UserStats(total=total, active=active, growth=growth_percent(current, previous))


class DatabaseStorage(Storage):
    """All repositories sharing one session"""

    def __init__(self, db: AsyncSession):
        if settings.ANALYTICS_MODE == "placeholder":
            analytics = PlaceholderAnalyticsRepository()
        else:
            analytics = SQLAnalyticsRepository(db)

        super().__init__(
            users=SQLUserRepository(db),
            destinations=SQLDestinationRepository(db),
            bookings=SQLBookingRepository(db),
            activity_logs=SQLActivityLogRepository(db),
            reviews=SQLReviewRepository(db),
            analytics=analytics,
        )
        self.db = db
