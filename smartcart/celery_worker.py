# smartcart/celery_worker.py
from celery import Celery

from smartcart.utils.settings import CELERY_BROKER_URL, CELERY_RESULT_BACKEND

celery_app = Celery(
    "smartcart",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

# taski importowane jawnie, zeby worker je zarejestrowal
celery_app.conf.imports = ("smartcart.tasks.abandon",)

celery_app.conf.beat_schedule = {
    "abandon-stale-carts-every-hour": {
        "task": "smartcart.tasks.abandon.abandon_stale_carts_task",
        "schedule": 60.0 * 60,
    },
}

celery_app.conf.timezone = "UTC"
