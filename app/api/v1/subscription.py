"""
Seller subscription endpoints: pricing, registration and monthly payments, status
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session, joinedload
from typing import Optional
from app.database import get_db
from app.schemas.common import ResponseModel
from app.schemas.subscription import SubscriptionCreate, PaymentVerify, subscription_to_dict, payment_to_dict
from app.models.user import User
from app.models.seller_subscription import SellerSubscription, SubscriptionStatus, PaymentType
from app.api.deps import get_current_user, require_admin
from app.services import subscription_service
from app.services.razorpay_service import RazorpayClient, get_gateway
from app.utils.exceptions import AuthorizationError, ValidationError
from app.utils.pagination import paginate, page_offset

router = APIRouter()


@router.get("/pricing", response_model=ResponseModel)
def get_pricing():
    """Public pricing: registration fee, both plans and the plan currently offered"""
    return ResponseModel(success=True, data=subscription_service.pricing())


@router.post("/create", response_model=ResponseModel, status_code=status.HTTP_201_CREATED)
def create_subscription(
    body: Optional[SubscriptionCreate] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    subscription = subscription_service.create_subscription(
        db, current_user.id, body.subscription_type if body else None
    )
    return ResponseModel(
        success=True,
        data=subscription_to_dict(subscription),
        message="Subscription created"
    )


def _create_order(payment_type: PaymentType, user: User, db: Session, gateway: RazorpayClient) -> ResponseModel:
    subscription = subscription_service.get_or_create_subscription(db, user.id)
    order = subscription_service.create_payment_order(db, subscription, payment_type, gateway)
    return ResponseModel(
        success=True,
        data={**order, "subscriptionId": subscription.id},
        message="Payment order created"
    )


def _verify(payment_type: PaymentType, body: PaymentVerify, user: User, db: Session, gateway: RazorpayClient) -> ResponseModel:
    subscription = subscription_service.get_subscription(db, user.id)
    payment = subscription_service.verify_and_record_payment(
        db,
        subscription,
        payment_type,
        order_id=body.order_id,
        payment_id=body.payment_id,
        signature=body.signature,
        gateway=gateway
    )
    return ResponseModel(
        success=True,
        data={
            "payment": payment_to_dict(payment),
            "subscription": subscription_to_dict(subscription, include_payments=False)
        },
        message="Payment verified"
    )


@router.post("/registration/create", response_model=ResponseModel)
def create_registration_order(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    gateway: RazorpayClient = Depends(get_gateway)
):
    """Open a gateway order for the one-time registration fee"""
    return _create_order(PaymentType.REGISTRATION, current_user, db, gateway)


@router.post("/registration/verify", response_model=ResponseModel)
def verify_registration_payment(
    body: PaymentVerify,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    gateway: RazorpayClient = Depends(get_gateway)
):
    return _verify(PaymentType.REGISTRATION, body, current_user, db, gateway)


@router.post("/monthly/create", response_model=ResponseModel)
def create_monthly_order(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    gateway: RazorpayClient = Depends(get_gateway)
):
    return _create_order(PaymentType.MONTHLY, current_user, db, gateway)


@router.post("/monthly/verify", response_model=ResponseModel)
def verify_monthly_payment(
    body: PaymentVerify,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    gateway: RazorpayClient = Depends(get_gateway)
):
    """Verify a monthly payment; activates the subscription for one calendar month"""
    return _verify(PaymentType.MONTHLY, body, current_user, db, gateway)


@router.get("/status", response_model=ResponseModel)
def my_subscription_status(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    subscription = subscription_service.find_subscription(db, current_user.id)
    if not subscription:
        return ResponseModel(
            success=True,
            data={"hasSubscription": False, "subscription": None},
            message="No subscription found"
        )
    return ResponseModel(
        success=True,
        data={"hasSubscription": True, "subscription": subscription_to_dict(subscription)}
    )


@router.post("/cancel", response_model=ResponseModel)
def cancel_subscription(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    subscription = subscription_service.get_subscription(db, current_user.id)
    subscription = subscription_service.cancel_subscription(db, subscription)
    return ResponseModel(
        success=True,
        data=subscription_to_dict(subscription, include_payments=False),
        message="Subscription cancelled"
    )


@router.get("/admin/all", response_model=ResponseModel)
def list_subscriptions(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    status_filter: Optional[str] = Query(None, alias="status"),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    query = db.query(SellerSubscription).options(joinedload(SellerSubscription.user))
    if status_filter:
        try:
            query = query.filter(SellerSubscription.status == SubscriptionStatus(status_filter))
        except ValueError:
            raise ValidationError(f"Invalid status filter: {status_filter}")

    total = query.count()
    subscriptions = (
        query.order_by(SellerSubscription.created_at.desc())
        .offset(page_offset(page, limit))
        .limit(limit)
        .all()
    )

    items = []
    for subscription in subscriptions:
        item = subscription_to_dict(subscription, include_payments=False)
        item["user"] = {
            "id": subscription.user.id,
            "name": subscription.user.name,
            "email": subscription.user.email,
        } if subscription.user else None
        items.append(item)

    return ResponseModel(
        success=True,
        data={"items": items, "pagination": paginate(page, limit, total)}
    )


@router.post("/admin/suspend-overdue", response_model=ResponseModel)
def suspend_overdue(
    grace_days: Optional[int] = Query(None, ge=0, alias="graceDays"),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Suspend active subscriptions past their next payment date"""
    suspended = subscription_service.suspend_overdue_subscriptions(db, grace_days=grace_days)
    return ResponseModel(
        success=True,
        data={
            "suspended": len(suspended),
            "subscriptionIds": [s.id for s in suspended]
        },
        message=f"Suspended {len(suspended)} subscription(s)"
    )


@router.get("/status/{subscription_id}", response_model=ResponseModel)
def subscription_status(
    subscription_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Subscription by id or owner's user id; visible to its owner and admins"""
    subscription = subscription_service.get_subscription_by_ref(db, subscription_id)
    if subscription.user_id != current_user.id and not current_user.is_admin:
        raise AuthorizationError("You can only view your own subscription")
    return ResponseModel(success=True, data=subscription_to_dict(subscription))
