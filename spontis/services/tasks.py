import asyncio
import logging
from celery import Celery
from spontis.core.config import settings

logger = logging.getLogger(__name__)

celery_app = Celery(
    "spontis",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_BACKEND,
)
celery_app.conf.update(
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    task_routes={"spontis.services.tasks.requote_mandat": {"queue": "requote"}},
)


@celery_app.task(bind=True, max_retries=3)
def requote_mandat(self, mandat_id: int):
    """Reprice one mandate; the result is the new TTC estimate or None when skipped."""
    from spontis.services.tasks_internal import requote_mandat_async

    try:
        quote = asyncio.run(requote_mandat_async(mandat_id))
    except Exception as e:
        countdown = 2 ** self.request.retries
        logger.warning(f"Requote of mandat {mandat_id} failed, retry in {countdown}s: {e}")
        raise self.retry(exc=e, countdown=countdown)
    return quote.estimate_ttc if quote is not None else None
