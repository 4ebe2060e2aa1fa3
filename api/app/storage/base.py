"""
Storage Interfaces - one abstract repository per entity family

Route handlers only ever talk to these interfaces. `database.py` implements
them on top of SQLAlchemy, `memory.py` keeps everything in process.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from app.models import ActivityLog, Booking, Destination, Review, User
from app.schemas.analytics import BookingStats, RevenueSummary, UserStats
from app.schemas.review import ReviewStats


@dataclass
class DestinationWithStats:
    """A destination together with its booking totals"""
    destination: Destination
    booking_count: int = 0
    revenue: str = "0"


class UserRepository(ABC):

    @abstractmethod
    async def get_user(self, user_id: str) -> Optional[User]:
        pass

    @abstractmethod
    async def get_user_by_username(self, username: str) -> Optional[User]:
        pass

    @abstractmethod
    async def authenticate_user(self, username: str, password: str) -> Optional[User]:
        """
        Return the user when `password` matches the stored hash, else None.

        A successful match stamps `last_login_at`. Unknown usernames and wrong
        passwords are indistinguishable to the caller.
        """
        pass

    @abstractmethod
    async def create_user(self, data: Dict[str, Any]) -> User:
        """
        Insert a user; a plaintext `password` is hashed first.

        Raises:
            UsernameConflictError: the username is already taken
        """
        pass

    @abstractmethod
    async def upsert_user(self, data: Dict[str, Any]) -> User:
        """Insert, or update the row with the same `id`"""
        pass

    @abstractmethod
    async def update_user(self, user_id: str, data: Dict[str, Any]) -> User:
        pass

    @abstractmethod
    async def get_all_users(self) -> List[User]:
        """All users, newest first"""
        pass

    @abstractmethod
    async def update_user_last_login(self, user_id: str) -> None:
        pass

    @abstractmethod
    async def delete_user(self, user_id: str) -> None:
        pass


class DestinationRepository(ABC):

    @abstractmethod
    async def get_all_destinations(self) -> List[Destination]:
        """Active destinations, best rated first"""
        pass

    @abstractmethod
    async def get_destination(self, destination_id: int) -> Optional[Destination]:
        """Any destination, active or not"""
        pass

    @abstractmethod
    async def create_destination(self, data: Dict[str, Any]) -> Destination:
        """
        Raises:
            ImageUrlConflictError: another destination already uses `image_url`
        """
        pass

    @abstractmethod
    async def update_destination(self, destination_id: int, data: Dict[str, Any]) -> Destination:
        """
        Raises:
            ImageUrlConflictError: a different destination already uses `image_url`
            NotFoundError: no destination with that id
        """
        pass

    @abstractmethod
    async def delete_destination(self, destination_id: int) -> None:
        pass

    @abstractmethod
    async def get_destinations_with_stats(self) -> List[DestinationWithStats]:
        pass

    @abstractmethod
    async def check_image_url_exists(
        self,
        image_url: str,
        exclude_id: Optional[int] = None,
    ) -> Optional[Destination]:
        pass


class BookingRepository(ABC):

    @abstractmethod
    async def create_booking(self, data: Dict[str, Any]) -> Booking:
        """
        Insert a booking exactly as given.

        Raises:
            DuplicateBookingError: the user already holds a live booking for the same stay
        """
        pass

    @abstractmethod
    async def get_user_bookings(self, user_id: str) -> List[Booking]:
        """A user's bookings with destination and user loaded, newest first"""
        pass

    @abstractmethod
    async def get_all_bookings(self) -> List[Booking]:
        pass

    @abstractmethod
    async def get_booking(self, booking_id: int) -> Optional[Booking]:
        pass

    @abstractmethod
    async def update_booking(self, booking_id: int, data: Dict[str, Any]) -> Booking:
        pass

    @abstractmethod
    async def cancel_booking(self, booking_id: int) -> None:
        """Mark the booking cancelled; bookings are never physically deleted"""
        pass

    @abstractmethod
    async def check_duplicate_booking(
        self,
        user_id: str,
        destination_id: int,
        check_in: date,
        check_out: date,
    ) -> bool:
        """True when a non-cancelled booking exists for exactly this stay"""
        pass


class ActivityLogRepository(ABC):

    @abstractmethod
    async def create_activity_log(self, data: Dict[str, Any]) -> ActivityLog:
        pass

    @abstractmethod
    async def get_activity_logs(self, limit: int = 50) -> List[ActivityLog]:
        """Most recent entries first"""
        pass


class ReviewRepository(ABC):

    @abstractmethod
    async def get_destination_reviews(self, destination_id: int) -> List[Review]:
        """Reviews with their author loaded, newest first"""
        pass

    @abstractmethod
    async def create_review(self, data: Dict[str, Any]) -> Review:
        pass

    @abstractmethod
    async def get_review_stats(self, destination_id: int) -> ReviewStats:
        """Average rating rounded to one decimal and review count; zeros when none"""
        pass


class AnalyticsRepository(ABC):

    @abstractmethod
    async def get_revenue(
        self,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> RevenueSummary:
        pass

    @abstractmethod
    async def get_booking_stats(self) -> BookingStats:
        pass

    @abstractmethod
    async def get_user_stats(self) -> UserStats:
        pass


class PlaceholderAnalyticsRepository(AnalyticsRepository):
    """Fixed dashboard figures, for demos without booking history"""

    async def get_revenue(self, start_date=None, end_date=None) -> RevenueSummary:
        return RevenueSummary(total="5276000.00", period="+7% from last month")

    async def get_booking_stats(self) -> BookingStats:
        return BookingStats(total=28450, this_month=2550, growth=7)

    async def get_user_stats(self) -> UserStats:
        return UserStats(total=15200, active=8340, growth=12)


class Storage:
    """
    Entry point for route handlers - groups the repositories of one backend
    """

    def __init__(
        self,
        users: UserRepository,
        destinations: DestinationRepository,
        bookings: BookingRepository,
        activity_logs: ActivityLogRepository,
        reviews: ReviewRepository,
        analytics: AnalyticsRepository,
    ):
        self.users = users
        self.destinations = destinations
        self.bookings = bookings
        self.activity_logs = activity_logs
        self.reviews = reviews
        self.analytics = analytics
