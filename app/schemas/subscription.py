"""
Seller Subscription Schemas
"""
from pydantic import BaseModel, Field
from typing import Optional
from app.models.seller_subscription import SubscriptionType


class SubscriptionCreate(BaseModel):
    subscription_type: Optional[SubscriptionType] = Field(None, alias="subscriptionType")

    class Config:
        populate_by_name = True


class PaymentVerify(BaseModel):
    order_id: str = Field(..., alias="orderId", min_length=1)
    payment_id: str = Field(..., alias="paymentId", min_length=1)
    signature: str = Field(..., min_length=1)

    class Config:
        populate_by_name = True


def payment_to_dict(payment) -> dict:
    return {
        "id": payment.id,
        "sequence": payment.sequence,
        "type": payment.type.value,
        "amount": float(payment.amount),
        "status": payment.status.value,
        "orderId": payment.razorpay_order_id,
        "paymentId": payment.razorpay_payment_id,
        "paidAt": payment.paid_at.isoformat() if payment.paid_at else None,
        "createdAt": payment.created_at.isoformat() if payment.created_at else None,
    }


def subscription_to_dict(subscription, include_payments: bool = True) -> dict:
    data = {
        "id": subscription.id,
        "userId": subscription.user_id,
        "subscriptionType": subscription.subscription_type.value,
        "monthlyFee": float(subscription.monthly_fee),
        "registrationFee": float(subscription.registration_fee),
        "registrationPaid": subscription.registration_paid,
        "registrationPaymentId": subscription.registration_payment_id,
        "status": subscription.status.value,
        "nextPaymentDate": subscription.next_payment_date.isoformat() if subscription.next_payment_date else None,
        "activatedAt": subscription.activated_at.isoformat() if subscription.activated_at else None,
        "cancelledAt": subscription.cancelled_at.isoformat() if subscription.cancelled_at else None,
        "createdAt": subscription.created_at.isoformat() if subscription.created_at else None,
    }
    if include_payments:
        data["payments"] = [payment_to_dict(p) for p in subscription.payments]
    return data
