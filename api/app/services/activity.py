"""
Activity Logging - audit entries written by route handlers
"""
from typing import Any, Dict, Optional
from fastapi import Request

from app.models import ActivityLog
from app.storage import Storage


async def log_activity(
    storage: Storage,
    action: str,
    user_id: Optional[str] = None,
    entity_type: Optional[str] = None,
    entity_id: Any = None,
    details: Optional[Dict[str, Any]] = None,
    request: Optional[Request] = None,
) -> ActivityLog:
    return await storage.activity_logs.create_activity_log({
        "user_id": user_id,
        "action": action,
        "entity_type": entity_type,
        "entity_id": str(entity_id) if entity_id is not None else None,
        "details": details or {},
        "ip_address": request.client.host if request and request.client else None,
    })
