import json

from models import db
from models.audit_log import AuditLog
from utils.request_meta import client_ip, user_agent


def log_event(action: str, user_id=None, entity=None, entity_id=None, metadata=None):
    """Append a row to the console audit trail for a completed action."""
    row = AuditLog(
        user_id=user_id,
        action=action,
        entity=entity,
        entity_id=str(entity_id) if entity_id is not None else None,
        ip=client_ip(),
        user_agent=user_agent() or None,
        metadata_json=json.dumps(metadata, default=str) if metadata else None,
    )
    db.session.add(row)
    db.session.commit()
