from __future__ import annotations

import logging
import uuid
from collections import deque
from datetime import datetime, timezone
from typing import Any

from portal.context import get_correlation_id

logger = logging.getLogger("portal.audit")

# Recent entries kept in-process; the log line is the durable record.
audit_entries: deque[dict[str, Any]] = deque(maxlen=1000)


def record(
    action: str,
    *,
    actor_user_id: int | None,
    login_id: str | None = None,
    role_type: str | None = None,
    company_id: int | None = None,
    details: dict[str, Any] | None = None,
    correlation_id: str | None = None,
) -> None:
    """Emit an audit line for a session event. Nothing is written to the store."""
    resolved_correlation_id = correlation_id or get_correlation_id()
    entry = {
        "id": str(uuid.uuid4()),
        "action": action,
        "actor_user_id": actor_user_id,
        "login_id": login_id,
        "role_type": role_type,
        "company_id": company_id,
        "details": details or {},
        "correlation_id": resolved_correlation_id,
        "occurred_at": datetime.now(timezone.utc).isoformat(),
    }
    audit_entries.append(entry)
    logger.info(
        action,
        extra={
            "user_id": actor_user_id,
            "login_id": login_id,
            "role_type": role_type,
            "company_id": company_id,
            "details": entry["details"],
        },
    )
