from sqlalchemy import Column, String, Boolean, DateTime, Enum as SQLEnum
from sqlalchemy.orm import relationship
import uuid
from datetime import datetime
import enum
from app.database import Base


class UserRole(str, enum.Enum):
    CUSTOMER = "customer"
    SELLER = "seller"
    ADMIN = "admin"


def enum_values(enum_cls):
    """Persist enum values (e.g. "under_review") rather than member names"""
    return [member.value for member in enum_cls]


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    phone = Column(String(20), nullable=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(
        SQLEnum(UserRole, values_callable=enum_values, native_enum=False, length=20),
        default=UserRole.CUSTOMER,
        nullable=False,
        index=True
    )
    is_active = Column(Boolean, default=True, nullable=False)
    last_login = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    seller_application = relationship(
        "SellerApplication",
        back_populates="user",
        uselist=False,
        foreign_keys="SellerApplication.user_id"
    )
    subscription = relationship("SellerSubscription", back_populates="user", uselist=False)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def is_seller(self) -> bool:
        return self.role in (UserRole.SELLER, UserRole.ADMIN)
