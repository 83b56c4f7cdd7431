"""
Repositories package - data access layer.

Repositories handle all database operations.
No business logic - only queries and data transformation.

Usage:
    from repositories import GymsRepository

    repo = GymsRepository(db_client)
    gym = await repo.get_approved(gym_id)
"""

from repositories.base import BaseRepository
from repositories.users_repo import UsersRepository, WishlistRepository, UserMetricsRepository
from repositories.gyms_repo import (
    GymSearchFilters,
    GymsRepository,
    GymServicesRepository,
    TimeSlotsRepository,
)
from repositories.trainers_repo import (
    TrainersRepository,
    TrainerAvailabilityRepository,
    TrainerBookingsRepository,
)
from repositories.bookings_repo import BookingsRepository
from repositories.reviews_repo import ReviewsRepository
from repositories.finance_repo import (
    TransactionsRepository,
    PayoutsRepository,
    FeaturedListingsRepository,
    SubscriptionsRepository,
)
from repositories.content_repo import (
    SettingsRepository,
    NotificationsRepository,
    BannersRepository,
    StaticPagesRepository,
    AdsRepository,
)


class Repositories:
    """One instance of every repository, sharing a database client."""

    def __init__(self, db_client):
        self.db = db_client
        self.users = UsersRepository(db_client)
        self.wishlist = WishlistRepository(db_client)
        self.metrics = UserMetricsRepository(db_client)
        self.gyms = GymsRepository(db_client)
        self.services = GymServicesRepository(db_client)
        self.slots = TimeSlotsRepository(db_client)
        self.trainers = TrainersRepository(db_client)
        self.availability = TrainerAvailabilityRepository(db_client)
        self.trainer_bookings = TrainerBookingsRepository(db_client)
        self.bookings = BookingsRepository(db_client)
        self.reviews = ReviewsRepository(db_client)
        self.transactions = TransactionsRepository(db_client)
        self.payouts = PayoutsRepository(db_client)
        self.featured = FeaturedListingsRepository(db_client)
        self.subscriptions = SubscriptionsRepository(db_client)
        self.settings = SettingsRepository(db_client)
        self.notifications = NotificationsRepository(db_client)
        self.banners = BannersRepository(db_client)
        self.pages = StaticPagesRepository(db_client)
        self.ads = AdsRepository(db_client)


__all__ = [
    'BaseRepository',
    'Repositories',
    'UsersRepository',
    'WishlistRepository',
    'UserMetricsRepository',
    'GymSearchFilters',
    'GymsRepository',
    'GymServicesRepository',
    'TimeSlotsRepository',
    'TrainersRepository',
    'TrainerAvailabilityRepository',
    'TrainerBookingsRepository',
    'BookingsRepository',
    'ReviewsRepository',
    'TransactionsRepository',
    'PayoutsRepository',
    'FeaturedListingsRepository',
    'SubscriptionsRepository',
    'SettingsRepository',
    'NotificationsRepository',
    'BannersRepository',
    'StaticPagesRepository',
    'AdsRepository',
]
