# smartcart/repos/payment_repo.py
import uuid
from typing import List

from sqlalchemy import select
from sqlalchemy.orm import Session

from smartcart.data.models.payment import PaymentModel


class PaymentRepo:
    def __init__(self, db: Session):
        self.db = db

    def create_payment(self, payment: PaymentModel) -> PaymentModel:
        self.db.add(payment)
        self.db.flush()
        return payment

    def get_payments_for_cart(self, cart_id: uuid.UUID) -> List[PaymentModel]:
        stmt = (
            select(PaymentModel)
            .where(PaymentModel.cart_id == cart_id)
            .order_by(PaymentModel.created_at)
        )
        return list(self.db.execute(stmt).scalars().all())
