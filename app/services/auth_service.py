import logging
from datetime import datetime
from sqlalchemy.orm import Session
from app.models.user import User, UserRole
from app.schemas.user import UserCreate
from app.utils.security import get_password_hash, verify_password, create_access_token, create_refresh_token
from app.utils.exceptions import AuthenticationError, AuthorizationError, DuplicateError, ValidationError

logger = logging.getLogger(__name__)


def register_user(db: Session, user_data: UserCreate, role: UserRole = UserRole.CUSTOMER) -> User:
    """Register a new user"""
    email = user_data.email.lower()
    if db.query(User).filter(User.email == email).first():
        raise DuplicateError("Email already registered")

    if user_data.password != user_data.confirm_password:
        raise ValidationError("Passwords do not match")

    user = User(
        name=user_data.name,
        email=email,
        phone=user_data.phone,
        password_hash=get_password_hash(user_data.password),
        role=role
    )

    db.add(user)
    db.commit()
    db.refresh(user)

    logger.info(f"Registered user {user.id} ({user.role.value})")
    return user


def authenticate_user(db: Session, email: str, password: str) -> User:
    """Authenticate user and return user object"""
    user = db.query(User).filter(User.email == email.lower()).first()
    if not user or not verify_password(password, user.password_hash):
        raise AuthenticationError("Invalid email or password")

    if not user.is_active:
        raise AuthorizationError("User account is inactive")

    user.last_login = datetime.utcnow()
    db.commit()
    return user


def create_tokens(user: User) -> dict:
    """Create access and refresh tokens for user"""
    claims = {"sub": str(user.id), "email": user.email, "role": user.role.value}
    return {
        "token": create_access_token(data=claims),
        "refresh_token": create_refresh_token(data=claims)
    }
