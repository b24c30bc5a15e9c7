"""
Activity logging for moderation and catalog changes
"""
from typing import Optional, Dict, Any
from sqlalchemy.orm import Session
from fastapi import Request
from app.models.activity_log import ActivityLog


def log_activity(
    db: Session,
    actor_id: Optional[str],
    action: str,
    entity_type: Optional[str] = None,
    entity_id: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
    request: Optional[Request] = None
) -> ActivityLog:
    """
    Add an activity row to the session. The caller commits, so the log
    entry lands in the same transaction as the change it describes.

    Args:
        actor_id: ID of the user performing the action
        action: Action name (e.g. 'seller_application_approved')
        entity_type: Type of entity (e.g. 'seller_application', 'category')
        entity_id: ID of the entity being acted upon
        details: Additional details as JSON
        request: Request object to extract IP and user agent
    """
    ip_address = None
    user_agent = None

    if request is not None:
        if request.client:
            ip_address = request.client.host
        user_agent = request.headers.get("user-agent")

    entry = ActivityLog(
        actor_id=actor_id,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        details=details,
        ip_address=ip_address,
        user_agent=user_agent
    )
    db.add(entry)
    return entry
