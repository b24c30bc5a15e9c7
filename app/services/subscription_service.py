"""
Seller subscription ledger.

A subscription is created with status pending and fees fixed by its plan.
Every gateway order appends one pending SubscriptionPayment row, which
verification settles as completed or failed. Completed registration
payments mark the registration fee as paid and completed monthly payments
(re)activate the subscription for one calendar month.
"""
import logging
from datetime import datetime, date, timedelta
from decimal import Decimal
from typing import Optional, Dict, Any, List, Union
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from app.config import settings
from app.models.seller_subscription import (
    SellerSubscription,
    SubscriptionPayment,
    SubscriptionType,
    SubscriptionStatus,
    PaymentType,
    PaymentStatus,
)
from app.services.razorpay_service import RazorpayClient, to_paise
from app.utils.dates import add_months
from app.utils.exceptions import (
    ValidationError,
    NotFoundError,
    DuplicateError,
    InvalidStateError,
    ConcurrencyError,
    PaymentVerificationError,
    PaymentGatewayError,
)

logger = logging.getLogger(__name__)

Amount = Union[int, float, str, Decimal]


def current_plan(today: Optional[date] = None) -> SubscriptionType:
    """Plan offered to new sellers on ``today``"""
    today = today or datetime.utcnow().date()
    if today < settings.EARLY_BIRD_CUTOFF:
        return SubscriptionType.EARLY_BIRD
    return SubscriptionType.REGULAR


def monthly_fee_for(subscription_type: SubscriptionType) -> Decimal:
    if subscription_type == SubscriptionType.EARLY_BIRD:
        return Decimal(settings.EARLY_BIRD_MONTHLY_FEE)
    return Decimal(settings.REGULAR_MONTHLY_FEE)


def fee_for(subscription: SellerSubscription, payment_type: PaymentType) -> Decimal:
    if payment_type == PaymentType.REGISTRATION:
        return Decimal(subscription.registration_fee)
    return Decimal(subscription.monthly_fee)


def pricing(today: Optional[date] = None) -> Dict[str, Any]:
    return {
        "registrationFee": settings.REGISTRATION_FEE,
        "currency": settings.PAYMENT_CURRENCY,
        "plans": {
            SubscriptionType.EARLY_BIRD.value: settings.EARLY_BIRD_MONTHLY_FEE,
            SubscriptionType.REGULAR.value: settings.REGULAR_MONTHLY_FEE,
        },
        "earlyBirdCutoff": settings.EARLY_BIRD_CUTOFF.isoformat(),
        "currentPlan": current_plan(today).value,
    }


def find_subscription(db: Session, user_id: str) -> Optional[SellerSubscription]:
    return db.query(SellerSubscription).filter(SellerSubscription.user_id == user_id).first()


def get_subscription(db: Session, user_id: str) -> SellerSubscription:
    subscription = find_subscription(db, user_id)
    if not subscription:
        raise NotFoundError("Subscription not found")
    return subscription


def get_subscription_by_ref(db: Session, ref: str) -> SellerSubscription:
    """Look up by subscription id or owner's user id"""
    subscription = (
        db.query(SellerSubscription)
        .filter(or_(SellerSubscription.id == ref, SellerSubscription.user_id == ref))
        .first()
    )
    if not subscription:
        raise NotFoundError("Subscription not found")
    return subscription


def create_subscription(
    db: Session,
    user_id: str,
    subscription_type: Optional[SubscriptionType] = None,
    now: Optional[datetime] = None
) -> SellerSubscription:
    """Create the user's subscription; fees are fixed here for its lifetime"""
    if find_subscription(db, user_id):
        raise DuplicateError("Subscription already exists for this user")

    now = now or datetime.utcnow()
    subscription_type = subscription_type or current_plan(now.date())
    subscription = SellerSubscription(
        user_id=user_id,
        subscription_type=subscription_type,
        monthly_fee=monthly_fee_for(subscription_type),
        registration_fee=Decimal(settings.REGISTRATION_FEE),
        registration_paid=False,
        status=SubscriptionStatus.PENDING,
        created_at=now,
    )
    db.add(subscription)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race with another request for the same user
        db.rollback()
        raise DuplicateError("Subscription already exists for this user")
    db.refresh(subscription)

    logger.info(f"Created {subscription_type.value} subscription {subscription.id} for user {user_id}")
    return subscription


def get_or_create_subscription(db: Session, user_id: str, now: Optional[datetime] = None) -> SellerSubscription:
    subscription = find_subscription(db, user_id)
    if subscription:
        return subscription
    return create_subscription(db, user_id, now=now)


def activate_subscription(subscription: SellerSubscription, now: Optional[datetime] = None) -> SellerSubscription:
    """
    Mark the subscription active until one calendar month from ``now``.

    The next payment date is always computed from the activation instant,
    never from the previous due date, so late payments do not compound.
    """
    now = now or datetime.utcnow()
    if subscription.status == SubscriptionStatus.CANCELLED:
        raise InvalidStateError("Subscription is cancelled")
    subscription.status = SubscriptionStatus.ACTIVE
    subscription.activated_at = now
    subscription.next_payment_date = add_months(now, 1)
    return subscription


def _ensure_payment_allowed(subscription: SellerSubscription, payment_type: PaymentType) -> None:
    if subscription.status == SubscriptionStatus.CANCELLED:
        raise InvalidStateError("Subscription is cancelled", details={"status": subscription.status.value})
    if payment_type == PaymentType.REGISTRATION and subscription.registration_paid:
        raise InvalidStateError("Registration fee already paid")
    if payment_type == PaymentType.MONTHLY and not subscription.registration_paid:
        raise InvalidStateError("Registration fee must be paid before the monthly subscription")


def _apply_completed(
    subscription: SellerSubscription,
    payment_type: PaymentType,
    payment_id: Optional[str],
    now: datetime
) -> None:
    if payment_type == PaymentType.REGISTRATION:
        subscription.registration_paid = True
        subscription.registration_payment_id = payment_id
    else:
        activate_subscription(subscription, now)


def record_payment(
    db: Session,
    subscription: SellerSubscription,
    payment_type: PaymentType,
    amount: Amount,
    order_id: Optional[str] = None,
    payment_id: Optional[str] = None,
    signature: Optional[str] = None,
    outcome: PaymentStatus = PaymentStatus.COMPLETED,
    now: Optional[datetime] = None
) -> SubscriptionPayment:
    """
    Append exactly one ledger entry and apply its effect.

    Completed registration sets registration_paid; completed monthly
    activates the subscription. Failed and pending outcomes only append.
    """
    _ensure_payment_allowed(subscription, payment_type)

    expected = fee_for(subscription, payment_type)
    if Decimal(str(amount)) != expected:
        raise ValidationError(
            f"Amount must be {expected} for a {payment_type.value} payment",
            details={"expected": float(expected), "received": float(Decimal(str(amount)))}
        )

    now = now or datetime.utcnow()
    payment = SubscriptionPayment(
        sequence=len(subscription.payments) + 1,
        type=payment_type,
        amount=expected,
        razorpay_order_id=order_id,
        razorpay_payment_id=payment_id,
        razorpay_signature=signature,
        status=outcome,
        paid_at=now if outcome == PaymentStatus.COMPLETED else None,
        created_at=now,
    )
    subscription.payments.append(payment)

    if outcome == PaymentStatus.COMPLETED:
        _apply_completed(subscription, payment_type, payment_id, now)

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning(f"Concurrent payment write on subscription {subscription.id}")
        raise ConcurrencyError("Another payment was recorded concurrently; reload and retry")
    db.refresh(subscription)

    logger.info(
        f"Recorded {outcome.value} {payment_type.value} payment #{payment.sequence} "
        f"on subscription {subscription.id} (order {order_id}, payment {payment_id})"
    )
    return payment


def create_payment_order(
    db: Session,
    subscription: SellerSubscription,
    payment_type: PaymentType,
    gateway: RazorpayClient,
    now: Optional[datetime] = None
) -> Dict[str, Any]:
    """
    Open a gateway order for the next payment and append it to the ledger
    as a pending entry. Only that entry can later be settled by verification.
    """
    _ensure_payment_allowed(subscription, payment_type)

    amount = fee_for(subscription, payment_type)
    order = gateway.create_order(
        amount,
        receipt=f"{payment_type.value}_{subscription.id}",
        notes={"subscriptionId": subscription.id, "userId": subscription.user_id, "type": payment_type.value},
    )
    if order.get("amount") != to_paise(amount):
        logger.error(f"Gateway order {order.get('id')} amount {order.get('amount')} does not match fee {amount}")
        raise PaymentGatewayError("Payment gateway returned an order for the wrong amount")

    record_payment(
        db, subscription, payment_type, amount,
        order_id=order["id"], outcome=PaymentStatus.PENDING, now=now
    )
    return {
        "orderId": order["id"],
        "amount": order["amount"],
        "currency": order.get("currency", settings.PAYMENT_CURRENCY),
        "keyId": gateway.key_id,
        "type": payment_type.value,
    }


def _pending_order_entry(
    subscription: SellerSubscription,
    payment_type: PaymentType,
    order_id: str
) -> SubscriptionPayment:
    entry = next((p for p in subscription.payments if p.razorpay_order_id == order_id), None)
    if entry is None or entry.type != payment_type:
        logger.warning(
            f"Order {order_id} is not a {payment_type.value} order of subscription {subscription.id}"
        )
        raise PaymentVerificationError(
            "Order was not opened for this payment",
            details={"orderId": order_id, "type": payment_type.value}
        )
    if entry.status != PaymentStatus.PENDING:
        raise InvalidStateError(
            "Order has already been settled",
            details={"orderId": order_id, "status": entry.status.value}
        )
    if Decimal(entry.amount) != fee_for(subscription, payment_type):
        raise PaymentVerificationError(
            "Order amount does not match the fee",
            details={"orderId": order_id, "amount": float(entry.amount)}
        )
    return entry


def _payment_id_used(db: Session, payment_id: str) -> bool:
    return db.query(SubscriptionPayment.id).filter(
        SubscriptionPayment.razorpay_payment_id == payment_id,
        SubscriptionPayment.status == PaymentStatus.COMPLETED,
    ).first() is not None


def _settle_payment(
    db: Session,
    subscription: SellerSubscription,
    entry: SubscriptionPayment,
    outcome: PaymentStatus,
    payment_id: str,
    signature: str,
    now: Optional[datetime] = None
) -> SubscriptionPayment:
    now = now or datetime.utcnow()
    entry.razorpay_payment_id = payment_id
    entry.razorpay_signature = signature
    entry.status = outcome
    if outcome == PaymentStatus.COMPLETED:
        entry.paid_at = now
        _apply_completed(subscription, entry.type, payment_id, now)

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning(f"Payment {payment_id} was already used to settle another order")
        raise DuplicateError("Payment already recorded", details={"paymentId": payment_id})
    db.refresh(subscription)

    logger.info(
        f"Settled {entry.type.value} payment #{entry.sequence} on subscription {subscription.id} "
        f"as {outcome.value} (order {entry.razorpay_order_id}, payment {payment_id})"
    )
    return entry


def verify_and_record_payment(
    db: Session,
    subscription: SellerSubscription,
    payment_type: PaymentType,
    order_id: str,
    payment_id: str,
    signature: str,
    gateway: RazorpayClient,
    now: Optional[datetime] = None
) -> SubscriptionPayment:
    """
    Settle the pending ledger entry for ``order_id``.

    The order must have been opened by this subscription for ``payment_type``.
    A bad signature marks the entry failed and raises PaymentVerificationError;
    a gateway payment id that already completed any entry is refused.
    """
    _ensure_payment_allowed(subscription, payment_type)
    entry = _pending_order_entry(subscription, payment_type, order_id)

    if _payment_id_used(db, payment_id):
        raise DuplicateError("Payment already recorded", details={"paymentId": payment_id})

    if not gateway.verify_payment_signature(order_id, payment_id, signature):
        _settle_payment(db, subscription, entry, PaymentStatus.FAILED, payment_id, signature, now)
        logger.warning(f"Invalid payment signature for order {order_id} on subscription {subscription.id}")
        raise PaymentVerificationError("Invalid payment signature")

    return _settle_payment(db, subscription, entry, PaymentStatus.COMPLETED, payment_id, signature, now)


def cancel_subscription(db: Session, subscription: SellerSubscription, now: Optional[datetime] = None) -> SellerSubscription:
    if subscription.status == SubscriptionStatus.CANCELLED:
        raise InvalidStateError("Subscription is already cancelled")

    subscription.status = SubscriptionStatus.CANCELLED
    subscription.cancelled_at = now or datetime.utcnow()
    subscription.next_payment_date = None
    db.commit()
    db.refresh(subscription)

    logger.info(f"Cancelled subscription {subscription.id} for user {subscription.user_id}")
    return subscription


def suspend_overdue_subscriptions(
    db: Session,
    now: Optional[datetime] = None,
    grace_days: Optional[int] = None
) -> List[SellerSubscription]:
    """Suspend active subscriptions whose next payment date plus grace has passed"""
    now = now or datetime.utcnow()
    grace_days = settings.SUBSCRIPTION_GRACE_DAYS if grace_days is None else grace_days
    cutoff = now - timedelta(days=grace_days)

    overdue = (
        db.query(SellerSubscription)
        .filter(
            SellerSubscription.status == SubscriptionStatus.ACTIVE,
            SellerSubscription.next_payment_date.isnot(None),
            SellerSubscription.next_payment_date < cutoff,
        )
        .all()
    )
    for subscription in overdue:
        subscription.status = SubscriptionStatus.SUSPENDED
    db.commit()

    if overdue:
        logger.info(f"Suspended {len(overdue)} overdue subscription(s)")
    return overdue
