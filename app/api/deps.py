"""
Authentication and role dependencies
"""
import logging
from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from app.database import get_db
from app.models.user import User
from app.utils.exceptions import AuthenticationError, AuthorizationError
from app.utils.security import verify_token

logger = logging.getLogger(__name__)

# auto_error=False so a missing header yields our 401 envelope instead of FastAPI's 403
http_bearer = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(http_bearer),
    db: Session = Depends(get_db)
) -> User:
    """Get current authenticated user"""
    if not credentials or not credentials.credentials:
        raise AuthenticationError("No token provided")

    user_id = verify_token(credentials.credentials)
    if user_id is None:
        logger.debug("Token decode failed - invalid or expired token")
        raise AuthenticationError("Invalid or expired token")

    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise AuthenticationError("User not found")

    if not user.is_active:
        raise AuthorizationError("User account is inactive")

    return user


async def require_admin(
    current_user: User = Depends(get_current_user)
) -> User:
    """Require admin role"""
    if not current_user.is_admin:
        raise AuthorizationError("Access denied. Admin role required.")
    return current_user


async def require_seller_or_admin(
    current_user: User = Depends(get_current_user)
) -> User:
    """Require seller or admin role"""
    if not current_user.is_seller:
        raise AuthorizationError("Access denied. Seller or admin role required.")
    return current_user
