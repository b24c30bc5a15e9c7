from sqlalchemy import Column, String, Integer, Boolean, DateTime, Text, ForeignKey, Enum as SQLEnum, JSON
from sqlalchemy.orm import relationship
import uuid
from datetime import datetime
import enum
from app.database import Base
from app.models.user import enum_values


class ApplicationStatus(str, enum.Enum):
    PENDING = "pending"
    UNDER_REVIEW = "under_review"
    APPROVED = "approved"
    REJECTED = "rejected"
    REQUIRES_CHANGES = "requires_changes"


class SellerApplication(Base):
    """
    A prospective seller's application, one per user.

    Review fields (reviewed_at, reviewed_by) are written together by the
    review transitions in app.services.seller_application_service.
    """
    __tablename__ = "seller_applications"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True, index=True)
    application_id = Column(String(20), unique=True, nullable=False, index=True)
    status = Column(
        SQLEnum(ApplicationStatus, values_callable=enum_values, native_enum=False, length=30),
        default=ApplicationStatus.PENDING,
        nullable=False,
        index=True
    )

    # Business profile
    business_name = Column(String(100), nullable=False, index=True)
    business_type = Column(String(50), nullable=False)
    business_category = Column(String(50), nullable=False)
    business_description = Column(Text, nullable=False)
    established_year = Column(Integer, nullable=True)
    business_email = Column(String(255), nullable=False, index=True)
    business_phone = Column(String(20), nullable=False)
    business_address = Column(String(500), nullable=False)
    city = Column(String(50), nullable=False)
    state = Column(String(50), nullable=False)
    pincode = Column(String(6), nullable=False)
    has_physical_store = Column(Boolean, default=False, nullable=False)
    store_address = Column(String(500), nullable=True)
    expected_monthly_revenue = Column(String(50), nullable=True)
    product_categories = Column(JSON, nullable=True)

    # Legal identifiers
    pan_number = Column(String(10), nullable=True)
    gst_number = Column(String(15), nullable=True)

    # Payout identity (write-once at submission)
    bank_account_number = Column(String(25), nullable=False)
    bank_name = Column(String(100), nullable=False)
    bank_ifsc = Column(String(11), nullable=True)
    account_holder_name = Column(String(100), nullable=False)

    agree_to_terms = Column(Boolean, default=False, nullable=False)

    # Review
    reviewed_by = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    reviewed_at = Column(DateTime, nullable=True)
    review_notes = Column(String(1000), nullable=True)
    rejection_reason = Column(String(500), nullable=True)

    submitted_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    last_updated = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
    version = Column(Integer, nullable=False, default=1)

    # Relationships
    user = relationship("User", back_populates="seller_application", foreign_keys=[user_id])
    reviewer = relationship("User", foreign_keys=[reviewed_by])

    __mapper_args__ = {"version_id_col": version}
