import logging
from functools import wraps
from typing import Callable
from sqlalchemy.ext.asyncio import AsyncSession
from spontis.core.enums import AuditAction
from spontis.core.metrics import audit_logs_created
from spontis.models.audit import Audit
from spontis.utils.hashing import payload_hash

logger = logging.getLogger(__name__)


def audit_log(action: AuditAction) -> Callable:
    """Record who called an endpoint and a hash of what they sent.

    The decorated endpoint must take ``db`` and ``current_user`` as keyword
    dependencies. Audit failures are logged, never raised.
    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(*args, **kwargs):
            result = await func(*args, **kwargs)

            db: AsyncSession = kwargs.get("db")
            current_user = kwargs.get("current_user")

            if not db or not current_user:
                return result

            try:
                payload = None
                for key in ["payload", "pricing_set_id", "mandat_id"]:
                    if key in kwargs:
                        payload = kwargs[key]
                        break

                if hasattr(payload, "model_dump"):
                    payload_dict = payload.model_dump(exclude_unset=True)
                elif isinstance(payload, dict):
                    payload_dict = payload
                elif payload is not None:
                    payload_dict = {"id": payload}
                else:
                    payload_dict = {}

                audit_record = Audit(
                    user_id=current_user.id,
                    endpoint=str(action),
                    payload_hash=payload_hash(payload_dict),
                )
                db.add(audit_record)
                await db.commit()
                audit_logs_created.labels(action=str(action)).inc()

            except Exception as e:
                logger.error(f"Audit logging failed for {action}: {e}")

            return result

        return wrapper
    return decorator
