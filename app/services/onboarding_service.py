"""
Seller onboarding progress, derived from the ledger and the application on
every call rather than trusted from the client.
"""
from typing import Optional, Dict, Any
from sqlalchemy.orm import Session
from app.config import settings
from app.models.seller_application import SellerApplication, ApplicationStatus
from app.models.seller_subscription import SellerSubscription, SubscriptionStatus
from app.models.user import User
from app.services import seller_application_service, subscription_service
from app.utils.exceptions import InvalidStateError

REGISTRATION_PAYMENT = "registration_payment"
SUBSCRIPTION_PAYMENT = "subscription_payment"
APPLICATION = "application"
UNDER_REVIEW = "under_review"
CHANGES_REQUIRED = "changes_required"
REJECTED = "rejected"
COMPLETE = "complete"

APPLICATION_STEPS = {
    ApplicationStatus.PENDING: UNDER_REVIEW,
    ApplicationStatus.UNDER_REVIEW: UNDER_REVIEW,
    ApplicationStatus.REQUIRES_CHANGES: CHANGES_REQUIRED,
    ApplicationStatus.REJECTED: REJECTED,
    ApplicationStatus.APPROVED: COMPLETE,
}


def payments_complete(subscription: Optional[SellerSubscription]) -> bool:
    if not settings.SELLER_PAYMENT_REQUIRED:
        return True
    return (
        subscription is not None
        and subscription.registration_paid
        and subscription.status == SubscriptionStatus.ACTIVE
    )


def next_step(subscription: Optional[SellerSubscription], application: Optional[SellerApplication]) -> str:
    if application is not None and application.status != ApplicationStatus.REJECTED:
        # Once submitted, review progress drives the flow
        return APPLICATION_STEPS[application.status]

    if settings.SELLER_PAYMENT_REQUIRED:
        if subscription is None or not subscription.registration_paid:
            return REGISTRATION_PAYMENT
        if subscription.status != SubscriptionStatus.ACTIVE:
            return SUBSCRIPTION_PAYMENT

    if application is not None:
        return REJECTED
    return APPLICATION


def onboarding_state(db: Session, user: User) -> Dict[str, Any]:
    subscription = subscription_service.find_subscription(db, user.id)
    application = seller_application_service.get_application_for_user(db, user.id)
    return {
        "registrationPaid": bool(subscription and subscription.registration_paid),
        "subscriptionStatus": subscription.status.value if subscription else None,
        "applicationStatus": application.status.value if application else None,
        "applicationId": application.application_id if application else None,
        "paymentRequired": settings.SELLER_PAYMENT_REQUIRED,
        "nextStep": next_step(subscription, application),
    }


def ensure_can_apply(db: Session, user: User) -> None:
    """Raise InvalidStateError when the payment steps are still outstanding"""
    subscription = subscription_service.find_subscription(db, user.id)
    if payments_complete(subscription):
        return
    if subscription is None or not subscription.registration_paid:
        raise InvalidStateError("Registration fee must be paid before applying", details={"nextStep": REGISTRATION_PAYMENT})
    raise InvalidStateError("An active subscription is required before applying", details={"nextStep": SUBSCRIPTION_PAYMENT})
