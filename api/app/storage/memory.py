"""
In-Memory Storage - process-local repositories for tests and demos

Rows are kept as model instances in plain dicts. Every check-and-write happens
without an `await` in between, so on a single event loop it is atomic in the
same way the database constraints are.
"""
from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP
from itertools import count
from typing import Any, Dict, List, Optional
import logging

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
from app.utils.numbers import column_value, column_values
from app.utils.security import hash_password_fields, verify_password

logger = logging.getLogger(__name__)


def _build(model, data: Dict[str, Any]):
    """Instantiate `model` and fill in the column defaults a database would apply"""
    instance = model(**column_values(model, data))
    for column in model.__table__.columns:
        if getattr(instance, column.key) is None and column.default is not None:
            default = column.default
            setattr(instance, column.key, default.arg(None) if default.is_callable else default.arg)
    return instance


def _apply(instance, data: Dict[str, Any]):
    for field, value in data.items():
        setattr(instance, field, column_value(type(instance), field, value))
    instance.updated_at = utcnow()


def _newest_first(rows):
    return sorted(rows, key=lambda row: (row.created_at, row.id), reverse=True)


class MemoryDatabase:
    """The tables shared by every in-memory repository"""

    def __init__(self):
        self.users: Dict[str, User] = {}
        self.destinations: Dict[int, Destination] = {}
        self.bookings: Dict[int, Booking] = {}
        self.activity_logs: Dict[int, ActivityLog] = {}
        self.reviews: Dict[int, Review] = {}
        self._sequences = {}

    def next_id(self, table: str) -> int:
        return next(self._sequences.setdefault(table, count(1)))


class MemoryUserRepository(UserRepository):

    def __init__(self, store: MemoryDatabase):
        self.store = store

    async def get_user(self, user_id: str) -> Optional[User]:
        return self.store.users.get(user_id)

    async def get_user_by_username(self, username: str) -> Optional[User]:
        return next((u for u in self.store.users.values() if u.username == username), None)

    async def authenticate_user(self, username: str, password: str) -> Optional[User]:
        user = await self.get_user_by_username(username)
        if not user or not user.password:
            return None

        if not verify_password(password, user.password):
            return None

        await self.update_user_last_login(user.id)
        return user

    async def create_user(self, data: Dict[str, Any]) -> User:
        data = hash_password_fields(data)
        if any(u.username == data.get("username") for u in self.store.users.values()):
            logger.warning(f"Username already taken: {data.get('username')}")
            raise UsernameConflictError(data.get("username"))

        user = _build(User, data)
        self.store.users[user.id] = user

        logger.info(f"User created: {user.id} ({user.username})")
        return user

    async def upsert_user(self, data: Dict[str, Any]) -> User:
        data = hash_password_fields(data)
        existing = self.store.users.get(data.get("id"))
        if existing:
            _apply(existing, data)
            return existing

        user = _build(User, data)
        self.store.users[user.id] = user
        return user

    async def update_user(self, user_id: str, data: Dict[str, Any]) -> User:
        user = self.store.users.get(user_id)
        if not user:
            raise NotFoundError("User", user_id)

        _apply(user, hash_password_fields(data))
        return user

    async def get_all_users(self) -> List[User]:
        return _newest_first(self.store.users.values())

    async def update_user_last_login(self, user_id: str) -> None:
        user = self.store.users.get(user_id)
        if user:
            user.last_login_at = utcnow()

    async def delete_user(self, user_id: str) -> None:
        self.store.users.pop(user_id, None)
        logger.info(f"User deleted: {user_id}")


class MemoryDestinationRepository(DestinationRepository):

    def __init__(self, store: MemoryDatabase):
        self.store = store

    async def get_all_destinations(self) -> List[Destination]:
        active = [d for d in self.store.destinations.values() if d.is_active]
        rated = sorted((d for d in active if d.rating is not None), key=lambda d: (-d.rating, d.id))
        unrated = sorted((d for d in active if d.rating is None), key=lambda d: d.id)
        return rated + unrated

    async def get_destination(self, destination_id: int) -> Optional[Destination]:
        return self.store.destinations.get(destination_id)

    def _claim_image_url(self, image_url: Optional[str], exclude_id: Optional[int] = None):
        if not image_url:
            return
        existing = self._find_by_image_url(image_url, exclude_id)
        if existing:
            logger.warning(f"Image URL {image_url} already used by destination {existing.id}")
            raise ImageUrlConflictError(existing.name)

    def _find_by_image_url(self, image_url: str, exclude_id: Optional[int] = None) -> Optional[Destination]:
        for destination in self.store.destinations.values():
            if destination.image_url == image_url and destination.id != exclude_id:
                return destination
        return None

    async def create_destination(self, data: Dict[str, Any]) -> Destination:
        self._claim_image_url(data.get("image_url"))

        destination = _build(Destination, data)
        destination.id = self.store.next_id("destinations")
        self.store.destinations[destination.id] = destination

        logger.info(f"Destination created: {destination.id} ({destination.name})")
        return destination

    async def update_destination(self, destination_id: int, data: Dict[str, Any]) -> Destination:
        destination = self.store.destinations.get(destination_id)
        if not destination:
            raise NotFoundError("Destination", destination_id)

        self._claim_image_url(data.get("image_url"), exclude_id=destination_id)
        _apply(destination, data)

        logger.info(f"Destination updated: {destination_id}")
        return destination

    async def delete_destination(self, destination_id: int) -> None:
        self.store.destinations.pop(destination_id, None)
        logger.info(f"Destination deleted: {destination_id}")

    async def check_image_url_exists(
        self,
        image_url: str,
        exclude_id: Optional[int] = None,
    ) -> Optional[Destination]:
        return self._find_by_image_url(image_url, exclude_id)

    async def get_destinations_with_stats(self) -> List[DestinationWithStats]:
        with_stats = []
        for destination in sorted(self.store.destinations.values(), key=lambda d: d.id):
            bookings = [b for b in self.store.bookings.values() if b.destination_id == destination.id]
            revenue = sum((b.total_amount for b in bookings), Decimal("0"))
            with_stats.append(DestinationWithStats(
                destination=destination,
                booking_count=len(bookings),
                revenue=str(revenue) if bookings else "0",
            ))
        return with_stats


class MemoryBookingRepository(BookingRepository):

    def __init__(self, store: MemoryDatabase):
        self.store = store

    def _with_details(self, booking: Booking) -> Optional[Booking]:
        destination = self.store.destinations.get(booking.destination_id)
        user = self.store.users.get(booking.user_id)
        if destination is None or user is None:
            return None
        booking.destination = destination
        booking.user = user
        return booking

    def _joined(self, bookings) -> List[Booking]:
        joined = (self._with_details(b) for b in _newest_first(bookings))
        return [b for b in joined if b is not None]

    def _find_duplicate(self, user_id, destination_id, check_in, check_out, exclude_id=None) -> Optional[Booking]:
        check_in, check_out = as_date(check_in), as_date(check_out)
        for booking in self.store.bookings.values():
            if (
                booking.id != exclude_id
                and booking.user_id == user_id
                and booking.destination_id == destination_id
                and booking.check_in == check_in
                and booking.check_out == check_out
                and booking.status != CANCELLED
            ):
                return booking
        return None

    async def create_booking(self, data: Dict[str, Any]) -> Booking:
        data = {**data, "check_in": as_date(data["check_in"]), "check_out": as_date(data["check_out"])}
        if data.get("status") != CANCELLED and self._find_duplicate(
            data["user_id"], data["destination_id"], data["check_in"], data["check_out"]
        ):
            logger.warning(f"Duplicate booking rejected for user {data['user_id']}, destination {data['destination_id']}")
            raise DuplicateBookingError(data["user_id"], data["destination_id"], data["check_in"], data["check_out"])

        booking = _build(Booking, data)
        booking.id = self.store.next_id("bookings")
        self.store.bookings[booking.id] = booking

        logger.info(f"Booking created: {booking.id} for user {booking.user_id}")
        return booking

    async def get_user_bookings(self, user_id: str) -> List[Booking]:
        return self._joined(b for b in self.store.bookings.values() if b.user_id == user_id)

    async def get_all_bookings(self) -> List[Booking]:
        return self._joined(self.store.bookings.values())

    async def get_booking(self, booking_id: int) -> Optional[Booking]:
        booking = self.store.bookings.get(booking_id)
        return self._with_details(booking) if booking else None

    async def update_booking(self, booking_id: int, data: Dict[str, Any]) -> Booking:
        booking = self.store.bookings.get(booking_id)
        if not booking:
            raise NotFoundError("Booking", booking_id)

        merged = {
            "user_id": booking.user_id,
            "destination_id": booking.destination_id,
            "check_in": booking.check_in,
            "check_out": booking.check_out,
            "status": booking.status,
            **data,
        }
        if merged["status"] != CANCELLED and self._find_duplicate(
            merged["user_id"], merged["destination_id"], merged["check_in"], merged["check_out"],
            exclude_id=booking_id,
        ):
            raise DuplicateBookingError(merged["user_id"], merged["destination_id"], merged["check_in"], merged["check_out"])

        _apply(booking, data)
        return booking

    async def cancel_booking(self, booking_id: int) -> None:
        booking = self.store.bookings.get(booking_id)
        if booking:
            booking.status = CANCELLED
            booking.updated_at = utcnow()
            logger.info(f"Booking cancelled: {booking_id}")

    async def check_duplicate_booking(
        self,
        user_id: str,
        destination_id: int,
        check_in: date,
        check_out: date,
    ) -> bool:
        return self._find_duplicate(user_id, destination_id, check_in, check_out) is not None


class MemoryActivityLogRepository(ActivityLogRepository):

    def __init__(self, store: MemoryDatabase):
        self.store = store

    async def create_activity_log(self, data: Dict[str, Any]) -> ActivityLog:
        log = _build(ActivityLog, data)
        log.id = self.store.next_id("activity_logs")
        self.store.activity_logs[log.id] = log
        return log

    async def get_activity_logs(self, limit: int = 50) -> List[ActivityLog]:
        return _newest_first(self.store.activity_logs.values())[:limit]


class MemoryReviewRepository(ReviewRepository):

    def __init__(self, store: MemoryDatabase):
        self.store = store

    async def get_destination_reviews(self, destination_id: int) -> List[Review]:
        reviews = []
        for review in _newest_first(self.store.reviews.values()):
            user = self.store.users.get(review.user_id)
            if review.destination_id == destination_id and user is not None:
                review.user = user
                reviews.append(review)
        return reviews

    async def create_review(self, data: Dict[str, Any]) -> Review:
        review = _build(Review, data)
        review.id = self.store.next_id("reviews")
        self.store.reviews[review.id] = review

        logger.info(f"Review created: {review.id} for destination {review.destination_id}")
        return review

    async def get_review_stats(self, destination_id: int) -> ReviewStats:
        ratings = [r.rating for r in self.store.reviews.values() if r.destination_id == destination_id]
        if not ratings:
            return ReviewStats(average_rating=0, total_reviews=0)
        # Half away from zero, like SQL ROUND
        average = (Decimal(sum(ratings)) / len(ratings)).quantize(Decimal("0.1"), ROUND_HALF_UP)
        return ReviewStats(
            average_rating=float(average),
            total_reviews=len(ratings),
        )


class MemoryAnalyticsRepository(AnalyticsRepository):

    def __init__(self, store: MemoryDatabase):
        self.store = store

    def _revenue(self, start=None, end=None, end_inclusive=True) -> Decimal:
        total = Decimal("0")
        for booking in self.store.bookings.values():
            if booking.status == CANCELLED:
                continue
            if start is not None and booking.created_at < start:
                continue
            if end is not None and (booking.created_at > end if end_inclusive else booking.created_at >= end):
                continue
            total += booking.total_amount
        return total

    @staticmethod
    def _count_created(rows, start, end=None) -> int:
        return sum(1 for row in rows if row.created_at >= start and (end is None or row.created_at < end))

    async def get_revenue(self, start_date=None, end_date=None) -> RevenueSummary:
        total = self._revenue(to_naive_utc(start_date), to_naive_utc(end_date))

        this_month, last_month = month_bounds(utcnow())
        current = self._revenue(this_month)
        previous = self._revenue(last_month, this_month, end_inclusive=False)

        return RevenueSummary(
            total=f"{total:.2f}",
            period=f"{growth_percent(current, previous):+d}% from last month",
        )

    async def get_booking_stats(self) -> BookingStats:
        bookings = list(self.store.bookings.values())
        this_month, last_month = month_bounds(utcnow())
        current = self._count_created(bookings, this_month)
        previous = self._count_created(bookings, last_month, this_month)
        return BookingStats(total=len(bookings), this_month=current, growth=growth_percent(current, previous))

    async def get_user_stats(self) -> UserStats:
        users = list(self.store.users.values())
        active_since = utcnow() - timedelta(days=settings.ACTIVE_USER_WINDOW_DAYS)
        active = sum(1 for u in users if u.last_login_at and u.last_login_at >= active_since)

        this_month, last_month = month_bounds(utcnow())
        current = self._count_created(users, this_month)
        previous = self._count_created(users, last_month, this_month)
        return UserStats(total=len(users), active=active, growth=growth_percent(current, previous))


class MemoryStorage(Storage):

    def __init__(self, store: Optional[MemoryDatabase] = None):
        self.store = store or MemoryDatabase()
        if settings.ANALYTICS_MODE == "placeholder":
            analytics = PlaceholderAnalyticsRepository()
        else:
            analytics = MemoryAnalyticsRepository(self.store)

        super().__init__(
            users=MemoryUserRepository(self.store),
            destinations=MemoryDestinationRepository(self.store),
            bookings=MemoryBookingRepository(self.store),
            activity_logs=MemoryActivityLogRepository(self.store),
            reviews=MemoryReviewRepository(self.store),
            analytics=analytics,
        )
