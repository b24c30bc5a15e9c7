from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from app.database import get_db
from app.schemas.user import UserCreate, UserLogin, RefreshTokenRequest, user_to_dict
from app.schemas.common import ResponseModel
from app.services.auth_service import register_user, authenticate_user, create_tokens
from app.models.user import User
from app.utils.security import verify_token
from app.utils.exceptions import AuthenticationError
from app.api.deps import get_current_user

router = APIRouter()


@router.post("/register", response_model=ResponseModel, status_code=status.HTTP_201_CREATED)
def register(user_data: UserCreate, db: Session = Depends(get_db)):
    """Register a new customer account"""
    user = register_user(db, user_data)
    tokens = create_tokens(user)

    return ResponseModel(
        success=True,
        data={
            "user": user_to_dict(user),
            "token": tokens["token"],
            "refresh_token": tokens["refresh_token"]
        },
        message="Registration successful"
    )


@router.post("/login", response_model=ResponseModel)
def login(credentials: UserLogin, db: Session = Depends(get_db)):
    user = authenticate_user(db, email=credentials.email, password=credentials.password)
    tokens = create_tokens(user)

    return ResponseModel(
        success=True,
        data={
            "user": user_to_dict(user),
            "token": tokens["token"],
            "refresh_token": tokens["refresh_token"]
        },
        message="Login successful"
    )


@router.post("/refresh", response_model=ResponseModel)
def refresh_token(request: RefreshTokenRequest, db: Session = Depends(get_db)):
    """Exchange a refresh token for a new token pair"""
    user_id = verify_token(request.refresh_token, token_type="refresh")
    if user_id is None:
        raise AuthenticationError("Invalid or expired refresh token")

    user = db.query(User).filter(User.id == user_id, User.is_active == True).first()
    if not user:
        raise AuthenticationError("User not found")

    tokens = create_tokens(user)
    return ResponseModel(
        success=True,
        data={
            "token": tokens["token"],
            "refresh_token": tokens["refresh_token"]
        }
    )


@router.get("/me", response_model=ResponseModel)
def me(current_user: User = Depends(get_current_user)):
    return ResponseModel(success=True, data=user_to_dict(current_user))
