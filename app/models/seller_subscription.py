from sqlalchemy import Column, String, Integer, Numeric, Boolean, DateTime, ForeignKey, Index, UniqueConstraint, Enum as SQLEnum, text
from sqlalchemy.orm import relationship
import uuid
from datetime import datetime
import enum
from app.database import Base
from app.models.user import enum_values


class SubscriptionType(str, enum.Enum):
    EARLY_BIRD = "early_bird"
    REGULAR = "regular"


class SubscriptionStatus(str, enum.Enum):
    PENDING = "pending"
    ACTIVE = "active"
    SUSPENDED = "suspended"
    CANCELLED = "cancelled"


class PaymentType(str, enum.Enum):
    REGISTRATION = "registration"
    MONTHLY = "monthly"


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class SellerSubscription(Base):
    """Registration fee and monthly billing state; one per user."""
    __tablename__ = "seller_subscriptions"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True, index=True)
    subscription_type = Column(
        SQLEnum(SubscriptionType, values_callable=enum_values, native_enum=False, length=20),
        default=SubscriptionType.REGULAR,
        nullable=False
    )
    monthly_fee = Column(Numeric(10, 2), nullable=False)
    registration_fee = Column(Numeric(10, 2), nullable=False)
    registration_paid = Column(Boolean, default=False, nullable=False)
    registration_payment_id = Column(String(100), nullable=True)
    status = Column(
        SQLEnum(SubscriptionStatus, values_callable=enum_values, native_enum=False, length=20),
        default=SubscriptionStatus.PENDING,
        nullable=False,
        index=True
    )
    next_payment_date = Column(DateTime, nullable=True, index=True)
    activated_at = Column(DateTime, nullable=True)
    cancelled_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    user = relationship("User", back_populates="subscription")
    payments = relationship(
        "SubscriptionPayment",
        back_populates="subscription",
        cascade="all, delete-orphan",
        order_by="SubscriptionPayment.sequence"
    )


class SubscriptionPayment(Base):
    """
    Ledger entry: one row per gateway order.

    Rows are appended as pending when the order is opened and settled once
    (completed or failed) when the checkout is verified. A gateway payment id
    can complete at most one row across all subscriptions.
    """
    __tablename__ = "subscription_payments"
    __table_args__ = (
        UniqueConstraint("subscription_id", "sequence", name="uq_subscription_payment_sequence"),
        Index(
            "uq_subscription_payments_completed_payment_id",
            "razorpay_payment_id",
            unique=True,
            sqlite_where=text("status = 'completed'"),
            postgresql_where=text("status = 'completed'"),
        ),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    subscription_id = Column(String(36), ForeignKey("seller_subscriptions.id", ondelete="CASCADE"), nullable=False, index=True)
    sequence = Column(Integer, nullable=False)
    type = Column(
        SQLEnum(PaymentType, values_callable=enum_values, native_enum=False, length=20),
        nullable=False
    )
    amount = Column(Numeric(10, 2), nullable=False)
    razorpay_order_id = Column(String(100), nullable=True, index=True)
    razorpay_payment_id = Column(String(100), nullable=True)
    razorpay_signature = Column(String(255), nullable=True)
    status = Column(
        SQLEnum(PaymentStatus, values_callable=enum_values, native_enum=False, length=20),
        default=PaymentStatus.PENDING,
        nullable=False
    )
    paid_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    subscription = relationship("SellerSubscription", back_populates="payments")
