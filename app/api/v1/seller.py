"""
Seller onboarding endpoints: apply, track status, and (admin) browse applications
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional
from app.database import get_db
from app.schemas.common import ResponseModel
from app.schemas.seller_application import SellerApplicationCreate, application_to_dict
from app.models.user import User
from app.api.deps import get_current_user, require_admin
from app.services import seller_application_service, onboarding_service
from app.utils.pagination import paginate

router = APIRouter()


@router.post("/apply", response_model=ResponseModel, status_code=status.HTTP_201_CREATED)
def apply(
    application_data: SellerApplicationCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Submit a seller application, or resubmit one that needs changes"""
    onboarding_service.ensure_can_apply(db, current_user)
    application = seller_application_service.submit(db, current_user, application_data.model_dump())

    return ResponseModel(
        success=True,
        data=application_to_dict(application),
        message="Seller application submitted successfully"
    )


@router.get("/application/status", response_model=ResponseModel)
def application_status(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    application = seller_application_service.get_application_for_user(db, current_user.id)
    if not application:
        return ResponseModel(
            success=True,
            data={"hasApplication": False, "application": None},
            message="No seller application found"
        )

    return ResponseModel(
        success=True,
        data={"hasApplication": True, "application": application_to_dict(application)}
    )


@router.get("/onboarding", response_model=ResponseModel)
def onboarding(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Current onboarding step, computed from payments and the application"""
    return ResponseModel(success=True, data=onboarding_service.onboarding_state(db, current_user))


@router.get("/applications", response_model=ResponseModel)
def list_applications(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status_filter: Optional[str] = Query(None, alias="status"),
    search: Optional[str] = None,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    applications, total = seller_application_service.list_applications(
        db, status=status_filter, search=search, page=page, limit=limit
    )
    return ResponseModel(
        success=True,
        data={
            "items": [application_to_dict(a) for a in applications],
            "pagination": paginate(page, limit, total)
        }
    )


@router.get("/applications/stats", response_model=ResponseModel)
def application_stats(
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return ResponseModel(success=True, data=seller_application_service.application_stats(db))


@router.get("/applications/{application_id}", response_model=ResponseModel)
def get_application(
    application_id: str,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    application = seller_application_service.get_application(db, application_id)
    return ResponseModel(success=True, data=application_to_dict(application, include_bank_details=True))
