# storefront/tasks/promote.py
from storefront.celery_worker import celery_app
from storefront.data.database import SessionLocal
from storefront.services.order_service import OrderService
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@celery_app.task(name="storefront.tasks.promote.promote_pending_orders_task")
def promote_pending_orders_task() -> int:
    logger.info("Promote pending orders task started")

    db = SessionLocal()
    try:
        return OrderService(db).promote_pending_orders()
    finally:
        db.close()
