# storefront/celery_worker.py
from celery import Celery
from celery.signals import setup_logging

from storefront.utils.settings import (
    CELERY_BROKER_URL,
    CELERY_RESULT_BACKEND,
    PENDING_PROMOTION_INTERVAL_SECONDS,
)
from storefront.utils.logging import configure_logging

celery_app = Celery(
    "storefront",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

# tasks are imported explicitly so the worker registers them
celery_app.conf.imports = (
    "storefront.tasks.promote",
)

celery_app.conf.beat_schedule = {
    "promote-pending-orders": {
        "task": "storefront.tasks.promote.promote_pending_orders_task",
        "schedule": PENDING_PROMOTION_INTERVAL_SECONDS,
    },
}

celery_app.conf.timezone = "UTC"


@setup_logging.connect
def _setup_logging(**kwargs):
    # replaces celery's own root logger setup
    configure_logging()
