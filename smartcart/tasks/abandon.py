# smartcart/tasks/abandon.py
from datetime import datetime, timedelta, timezone

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from smartcart.celery_worker import celery_app
from smartcart.data.database import SessionLocal
from smartcart.repos.cart_repo import CartRepo
from smartcart.utils.logging import get_logger
from smartcart.utils.settings import CART_ABANDON_AFTER_SECONDS

logger = get_logger(__name__)


def abandon_stale_carts(db: Session, max_age_seconds: int, now: datetime | None = None) -> int:
    """Active carts not touched for max_age_seconds become abandoned."""
    now = now or datetime.now(timezone.utc)
    cutoff = now - timedelta(seconds=max_age_seconds)

    repo = CartRepo(db)
    try:
        count = repo.abandon_carts_older_than(cutoff)
        repo.commit()
    except SQLAlchemyError:
        repo.rollback()
        raise

    logger.info(f"Abandoned {count} carts not updated since {cutoff.isoformat()}")
    return count


@celery_app.task(name="smartcart.tasks.abandon.abandon_stale_carts_task")
def abandon_stale_carts_task():
    logger.info("Abandon stale carts task started")

    db = SessionLocal()
    try:
        return abandon_stale_carts(db, CART_ABANDON_AFTER_SECONDS)
    finally:
        db.close()
