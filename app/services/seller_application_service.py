"""
Seller application lifecycle.

    pending ──► under_review ──► approved | rejected
       │             │
       └──────┬──────┴──► requires_changes ──(resubmit)──► pending

approved and rejected are terminal for review. A rejected applicant may
apply again, which replaces the rejected record.
"""
import logging
import random
import string
from datetime import datetime
from typing import Optional, Dict, Any, List, Tuple
from fastapi import Request
from sqlalchemy import or_, func
from sqlalchemy.orm import Session, joinedload
from sqlalchemy.orm.exc import StaleDataError
from app.models.seller_application import SellerApplication, ApplicationStatus
from app.models.user import User, UserRole
from app.utils.activity import log_activity
from app.utils.exceptions import ValidationError, NotFoundError, InvalidStateError, ConcurrencyError
from app.utils.pagination import page_offset
from app.utils import email as email_utils

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS = {
    ApplicationStatus.PENDING: {
        ApplicationStatus.UNDER_REVIEW,
        ApplicationStatus.APPROVED,
        ApplicationStatus.REJECTED,
        ApplicationStatus.REQUIRES_CHANGES,
    },
    ApplicationStatus.UNDER_REVIEW: {
        ApplicationStatus.APPROVED,
        ApplicationStatus.REJECTED,
        ApplicationStatus.REQUIRES_CHANGES,
    },
    ApplicationStatus.REQUIRES_CHANGES: {
        ApplicationStatus.REQUIRES_CHANGES,
        ApplicationStatus.PENDING,
    },
    ApplicationStatus.APPROVED: set(),
    ApplicationStatus.REJECTED: set(),
}

REQUIRED_FIELDS = [
    "business_name",
    "business_type",
    "business_category",
    "business_description",
    "business_address",
    "business_email",
    "business_phone",
    "city",
    "state",
    "pincode",
    "bank_account_number",
    "bank_name",
    "account_holder_name",
]

OPTIONAL_FIELDS = [
    "established_year",
    "has_physical_store",
    "store_address",
    "expected_monthly_revenue",
    "product_categories",
    "pan_number",
    "gst_number",
    "bank_ifsc",
    "agree_to_terms",
]

REVIEW_ACTIONS = {
    ApplicationStatus.UNDER_REVIEW: "seller_application_review_started",
    ApplicationStatus.APPROVED: "seller_application_approved",
    ApplicationStatus.REJECTED: "seller_application_rejected",
    ApplicationStatus.REQUIRES_CHANGES: "seller_application_changes_requested",
}


def can_transition(current: ApplicationStatus, target: ApplicationStatus) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, set())


def generate_application_id() -> str:
    """SA + last six digits of the millisecond clock + four random characters"""
    timestamp = str(int(datetime.utcnow().timestamp() * 1000))[-6:]
    suffix = "".join(random.choices(string.ascii_uppercase + string.digits, k=4))
    return f"SA{timestamp}{suffix}"


def _unique_application_id(db: Session) -> str:
    application_id = generate_application_id()
    while db.query(SellerApplication.id).filter(SellerApplication.application_id == application_id).first():
        application_id = generate_application_id()
    return application_id


def _missing_fields(data: Dict[str, Any]) -> List[str]:
    missing = []
    for field in REQUIRED_FIELDS:
        value = data.get(field)
        if value is None or (isinstance(value, str) and not value.strip()):
            missing.append(field)
    return missing


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def get_application_for_user(db: Session, user_id: str) -> Optional[SellerApplication]:
    return db.query(SellerApplication).filter(SellerApplication.user_id == user_id).first()


def get_application(db: Session, application_ref: str) -> SellerApplication:
    """Look up by primary key, owner's user id, or human-readable application id"""
    application = (
        db.query(SellerApplication)
        .options(joinedload(SellerApplication.user))
        .filter(or_(
            SellerApplication.id == application_ref,
            SellerApplication.user_id == application_ref,
            SellerApplication.application_id == application_ref,
        ))
        .first()
    )
    if not application:
        raise NotFoundError("Seller application not found")
    return application


def submit(
    db: Session,
    user: User,
    data: Dict[str, Any],
    now: Optional[datetime] = None
) -> SellerApplication:
    """
    Submit (or resubmit) a seller application for ``user``.

    Payment preconditions are checked by the caller; see
    app.services.onboarding_service.
    """
    missing = _missing_fields(data)
    if missing:
        raise ValidationError("Missing required fields", details=missing)

    now = now or datetime.utcnow()
    fields = {key: data[key] for key in REQUIRED_FIELDS + OPTIONAL_FIELDS if key in data}

    existing = get_application_for_user(db, user.id)
    if existing is not None:
        if existing.status == ApplicationStatus.REQUIRES_CHANGES:
            return _resubmit(db, user, existing, fields, now)
        if existing.status == ApplicationStatus.REJECTED:
            logger.info(f"Replacing rejected application {existing.application_id} for user {user.id}")
            db.delete(existing)
            db.flush()
        else:
            logger.warning(f"User {user.id} already has application {existing.application_id} ({existing.status.value})")
            raise InvalidStateError(
                "You have already submitted a seller application",
                details={"applicationId": existing.application_id, "status": existing.status.value}
            )
    elif user.role == UserRole.SELLER:
        raise InvalidStateError("You are already a seller")

    application = SellerApplication(
        user_id=user.id,
        application_id=_unique_application_id(db),
        status=ApplicationStatus.PENDING,
        submitted_at=now,
        last_updated=now,
        **fields
    )
    db.add(application)
    db.flush()
    log_activity(
        db,
        actor_id=user.id,
        action="seller_application_submitted",
        entity_type="seller_application",
        entity_id=application.id,
        details={"applicationId": application.application_id},
    )
    db.commit()
    db.refresh(application)

    logger.info(f"Seller application {application.application_id} submitted by user {user.id}")
    email_utils.send_application_received_email(user.email, user.name, application.business_name, application.application_id)
    return application


def _resubmit(
    db: Session,
    user: User,
    application: SellerApplication,
    fields: Dict[str, Any],
    now: datetime
) -> SellerApplication:
    for key, value in fields.items():
        setattr(application, key, value)
    application.status = ApplicationStatus.PENDING
    application.submitted_at = now
    application.reviewed_at = None
    application.reviewed_by = None
    application.rejection_reason = None
    application.review_notes = None
    application.last_updated = now

    log_activity(
        db,
        actor_id=user.id,
        action="seller_application_resubmitted",
        entity_type="seller_application",
        entity_id=application.id,
        details={"from": ApplicationStatus.REQUIRES_CHANGES.value, "to": ApplicationStatus.PENDING.value},
    )

    try:
        db.commit()
    except StaleDataError:
        db.rollback()
        logger.warning(f"Concurrent update detected on application {application.application_id}")
        raise ConcurrencyError()
    db.refresh(application)

    logger.info(f"Seller application {application.application_id} resubmitted after requested changes")
    email_utils.send_application_received_email(user.email, user.name, application.business_name, application.application_id)
    return application


def _transition(
    db: Session,
    application: SellerApplication,
    target: ApplicationStatus,
    reviewer_id: str,
    notes: Optional[str] = None,
    reason: Optional[str] = None,
    expected_version: Optional[int] = None,
    now: Optional[datetime] = None,
    request: Optional[Request] = None
) -> SellerApplication:
    if not can_transition(application.status, target):
        logger.warning(
            f"Rejected transition {application.status.value} -> {target.value} "
            f"for application {application.application_id}"
        )
        raise InvalidStateError(
            f"Application is already {application.status.value}",
            details={"status": application.status.value, "requested": target.value}
        )

    if expected_version is not None and expected_version != application.version:
        raise ConcurrencyError(details={"expectedVersion": expected_version, "currentVersion": application.version})

    now = now or datetime.utcnow()
    previous = application.status
    application.status = target
    application.reviewed_at = now
    application.reviewed_by = reviewer_id
    if target != ApplicationStatus.UNDER_REVIEW:
        application.review_notes = notes
    application.rejection_reason = reason if target in (ApplicationStatus.REJECTED, ApplicationStatus.REQUIRES_CHANGES) else None

    if target == ApplicationStatus.APPROVED:
        owner = application.user or db.query(User).filter(User.id == application.user_id).first()
        if owner is not None and owner.role != UserRole.ADMIN:
            owner.role = UserRole.SELLER

    log_activity(
        db,
        actor_id=reviewer_id,
        action=REVIEW_ACTIONS[target],
        entity_type="seller_application",
        entity_id=application.id,
        details={"from": previous.value, "to": target.value, "reason": reason, "notes": notes},
        request=request
    )

    try:
        db.commit()
    except StaleDataError:
        db.rollback()
        logger.warning(f"Concurrent update detected on application {application.application_id}")
        raise ConcurrencyError()

    db.refresh(application)
    logger.info(f"Seller application {application.application_id}: {previous.value} -> {target.value} by {reviewer_id}")
    return application


def start_review(
    db: Session,
    application_ref: str,
    reviewer_id: str,
    expected_version: Optional[int] = None,
    now: Optional[datetime] = None,
    request: Optional[Request] = None
) -> SellerApplication:
    application = get_application(db, application_ref)
    return _transition(
        db, application, ApplicationStatus.UNDER_REVIEW, reviewer_id,
        expected_version=expected_version, now=now, request=request
    )


def approve(
    db: Session,
    application_ref: str,
    reviewer_id: str,
    notes: Optional[str] = None,
    expected_version: Optional[int] = None,
    now: Optional[datetime] = None,
    request: Optional[Request] = None
) -> SellerApplication:
    """Approve the application and elevate its owner to seller"""
    application = get_application(db, application_ref)
    application = _transition(
        db, application, ApplicationStatus.APPROVED, reviewer_id,
        notes=notes, expected_version=expected_version, now=now, request=request
    )
    if application.user is not None:
        email_utils.send_application_approved_email(application.user.email, application.user.name, application.business_name)
    return application


def reject(
    db: Session,
    application_ref: str,
    reviewer_id: str,
    reason: Optional[str],
    notes: Optional[str] = None,
    expected_version: Optional[int] = None,
    now: Optional[datetime] = None,
    request: Optional[Request] = None
) -> SellerApplication:
    if _is_blank(reason):
        raise ValidationError("Rejection reason is required")

    application = get_application(db, application_ref)
    application = _transition(
        db, application, ApplicationStatus.REJECTED, reviewer_id,
        notes=notes, reason=reason.strip(), expected_version=expected_version, now=now, request=request
    )
    if application.user is not None:
        email_utils.send_application_rejected_email(
            application.user.email, application.user.name, application.business_name, application.rejection_reason
        )
    return application


def request_changes(
    db: Session,
    application_ref: str,
    reviewer_id: str,
    reason: Optional[str],
    notes: Optional[str] = None,
    expected_version: Optional[int] = None,
    now: Optional[datetime] = None,
    request: Optional[Request] = None
) -> SellerApplication:
    if _is_blank(reason):
        raise ValidationError("Reason for changes is required")

    application = get_application(db, application_ref)
    application = _transition(
        db, application, ApplicationStatus.REQUIRES_CHANGES, reviewer_id,
        notes=notes, reason=reason.strip(), expected_version=expected_version, now=now, request=request
    )
    if application.user is not None:
        email_utils.send_changes_requested_email(
            application.user.email, application.user.name, application.business_name,
            application.rejection_reason, notes
        )
    return application


def list_applications(
    db: Session,
    status: Optional[str] = None,
    search: Optional[str] = None,
    page: int = 1,
    limit: int = 10
) -> Tuple[List[SellerApplication], int]:
    query = db.query(SellerApplication).options(joinedload(SellerApplication.user))

    if status and status != "all":
        try:
            query = query.filter(SellerApplication.status == ApplicationStatus(status))
        except ValueError:
            raise ValidationError(f"Invalid status filter: {status}")

    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(
            SellerApplication.business_name.ilike(pattern),
            SellerApplication.business_email.ilike(pattern),
            SellerApplication.application_id.ilike(pattern),
        ))

    total = query.count()
    applications = (
        query.order_by(SellerApplication.submitted_at.desc())
        .offset(page_offset(page, limit))
        .limit(limit)
        .all()
    )
    return applications, total


def application_stats(db: Session) -> Dict[str, int]:
    """Counts per status plus a total"""
    stats = {status.value: 0 for status in ApplicationStatus}
    rows = db.query(SellerApplication.status, func.count(SellerApplication.id)).group_by(SellerApplication.status).all()
    for status, count in rows:
        stats[status.value] = count
    stats["total"] = sum(stats.values())
    return stats
