from app.models.user import User, UserRole
from app.models.seller_application import SellerApplication, ApplicationStatus
from app.models.seller_subscription import (
    SellerSubscription, SubscriptionPayment, SubscriptionType,
    SubscriptionStatus, PaymentType, PaymentStatus
)
from app.models.category import Category
from app.models.activity_log import ActivityLog

__all__ = [
    "User",
    "UserRole",
    "SellerApplication",
    "ApplicationStatus",
    "SellerSubscription",
    "SubscriptionPayment",
    "SubscriptionType",
    "SubscriptionStatus",
    "PaymentType",
    "PaymentStatus",
    "Category",
    "ActivityLog"
]
