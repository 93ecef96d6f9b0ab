import json
import logging
from typing import Optional
from spontis.core.redis import get_redis
from spontis.core.config import settings

logger = logging.getLogger(__name__)


def _idempotency_key(user_id: str, key: str) -> str:
    return f"idemp:{user_id}:{key}"


async def get_idempotent(user_id: str, key: Optional[str]):
    redis = get_redis()
    if not key or redis is None:
        return None
    try:
        v = await redis.get(_idempotency_key(user_id, key))
    except Exception as e:
        logger.warning(f"Idempotency lookup failed: {e}")
        return None
    return json.loads(v) if v else None


async def set_idempotent(user_id: str, key: Optional[str], value: dict):
    redis = get_redis()
    if not key or redis is None:
        return
    try:
        await redis.set(_idempotency_key(user_id, key), json.dumps(value, default=str), ex=settings.IDEMPOTENCY_TTL)
    except Exception as e:
        logger.warning(f"Idempotency store failed: {e}")
