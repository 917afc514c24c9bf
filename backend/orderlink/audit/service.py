"""Audit logging service.

Provides a centralized interface for creating immutable audit log entries.

Audit Events:
- CUSTOM_ORDER_CREATED, TEMPLATE_CREATED
- ORDER_BLOCK_CREATED, ORDER_BLOCK_DELETED, ORDER_BLOCK_SYNCED
- ORDER_PURCHASED
"""

from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from ..models.audit_log import AuditLog


def log_audit_event(
    db: Session,
    shop: str,
    action: str,
    entity_type: Optional[str] = None,
    entity_id: Optional[Any] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> AuditLog:
    """Create an audit log entry.

    The entry is added to the caller's transaction; the caller commits.

    Args:
        db: Database session
        shop: Shop domain the event belongs to
        action: Event action (e.g., "ORDER_BLOCK_CREATED")
        entity_type: Type of entity affected (e.g., "order_block", "draft_order")
        entity_id: ID of affected entity (stored as text)
        metadata: Additional context as JSON

    Returns:
        AuditLog: The created audit log entry
    """
    entry = AuditLog(
        shop=shop,
        action=action,
        entity_type=entity_type,
        entity_id=str(entity_id) if entity_id is not None else None,
        metadata_json=metadata,
    )
    db.add(entry)
    db.flush()
    return entry
