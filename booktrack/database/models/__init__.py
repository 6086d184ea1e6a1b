"""ORM models for every BookTrack table."""

from .bookmark import BookmarkModel
from .catalog import BOOK_AVAILABILITY, BookModel, CategoryModel
from .circulation import BORROWING_STATUSES, RESERVATION_STATUSES, BorrowingModel, ReservationModel
from .notification import NOTIFICATION_PRIORITIES, NOTIFICATION_TYPES, NotificationModel
from .system_log import LOG_LEVELS, SystemLogModel
from .user import SessionModel, UserModel

__all__ = [
    "BOOK_AVAILABILITY",
    "BORROWING_STATUSES",
    "LOG_LEVELS",
    "NOTIFICATION_PRIORITIES",
    "NOTIFICATION_TYPES",
    "RESERVATION_STATUSES",
    "BookModel",
    "BookmarkModel",
    "BorrowingModel",
    "CategoryModel",
    "NotificationModel",
    "ReservationModel",
    "SessionModel",
    "SystemLogModel",
    "UserModel",
]
