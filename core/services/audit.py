"""
Audit trail of logins and writes.

Rows are append-only; failed logins are recorded without a user.
"""
import logging
from typing import Any, Dict, Optional

from core.models import AuditEvent

logger = logging.getLogger(__name__)


def log_action(*, user, action: str, object_type: Optional[str] = None,
               object_id: Optional[int] = None, detail: Optional[Dict[str, Any]] = None) -> AuditEvent:
    event = AuditEvent.objects.create(
        user=user if getattr(user, 'pk', None) else None,
        action=action,
        object_type=object_type,
        object_id=object_id,
        detail=detail or {},
    )
    logger.debug('audit %s %s:%s by %s', action, object_type, object_id, event.user_id)
    return event
