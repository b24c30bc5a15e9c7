"""
Admin Seller Moderation Endpoints
Admins review seller applications and approve, reject, or send them back for changes.
``{application_id}`` accepts the application's id, its SA... reference, or the owner's user id.
"""
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session
from typing import Optional
from app.database import get_db
from app.schemas.common import ResponseModel
from app.schemas.seller_application import ApproveRequest, RejectRequest, ReviewRequest, application_to_dict
from app.models.user import User
from app.api.deps import require_admin
from app.services import seller_application_service
from app.utils.pagination import paginate

router = APIRouter()


@router.get("", response_model=ResponseModel)
def list_seller_applications(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
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
        },
        message="Seller applications retrieved successfully"
    )


@router.get("/stats", response_model=ResponseModel)
def seller_application_stats(
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return ResponseModel(success=True, data=seller_application_service.application_stats(db))


@router.get("/{application_id}", response_model=ResponseModel)
def get_seller_application(
    application_id: str,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    application = seller_application_service.get_application(db, application_id)
    return ResponseModel(success=True, data=application_to_dict(application, include_bank_details=True))


@router.put("/{application_id}/review", response_model=ResponseModel)
def start_review(
    application_id: str,
    request: Request,
    body: Optional[ReviewRequest] = None,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Move a pending application to under_review"""
    application = seller_application_service.start_review(
        db,
        application_id,
        reviewer_id=admin.id,
        expected_version=body.expected_version if body else None,
        request=request
    )
    return ResponseModel(
        success=True,
        data=application_to_dict(application, include_bank_details=True),
        message="Application moved to review"
    )


@router.put("/{application_id}/approve", response_model=ResponseModel)
def approve_seller(
    application_id: str,
    request: Request,
    body: Optional[ApproveRequest] = None,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    body = body or ApproveRequest()
    application = seller_application_service.approve(
        db,
        application_id,
        reviewer_id=admin.id,
        notes=body.notes,
        expected_version=body.expected_version,
        request=request
    )
    return ResponseModel(
        success=True,
        data=application_to_dict(application, include_bank_details=True),
        message="Seller application approved successfully"
    )


@router.put("/{application_id}/reject", response_model=ResponseModel)
def reject_seller(
    application_id: str,
    body: RejectRequest,
    request: Request,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    application = seller_application_service.reject(
        db,
        application_id,
        reviewer_id=admin.id,
        reason=body.reason,
        notes=body.notes,
        expected_version=body.expected_version,
        request=request
    )
    return ResponseModel(
        success=True,
        data=application_to_dict(application, include_bank_details=True),
        message="Seller application rejected"
    )


@router.put("/{application_id}/request-changes", response_model=ResponseModel)
def request_changes(
    application_id: str,
    body: RejectRequest,
    request: Request,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """Send the application back to the applicant with the changes required"""
    application = seller_application_service.request_changes(
        db,
        application_id,
        reviewer_id=admin.id,
        reason=body.reason,
        notes=body.notes,
        expected_version=body.expected_version,
        request=request
    )
    return ResponseModel(
        success=True,
        data=application_to_dict(application, include_bank_details=True),
        message="Changes requested from applicant"
    )
