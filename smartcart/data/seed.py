# smartcart/data/seed.py
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from smartcart.data.database import Base, SessionLocal, engine
from smartcart.data.models import ProductModel
from smartcart.utils.logging import get_logger

logger = get_logger(__name__)

STARTER_PRODUCTS = [
    ("Apple", "Fresh red apple", "1.49", "APPLE001", "Fruit"),
    ("Green Apple", "Fresh Granny Smith apple", "1.59", "APPLE002", "Fruit"),
    ("Banana", "Ripe yellow banana", "0.99", "BANANA001", "Fruit"),
    ("Orange", "Juicy navel orange", "1.29", "ORANGE001", "Fruit"),
    ("Strawberry", "Sweet red strawberries (pack)", "3.99", "STRAW001", "Fruit"),
    ("Blueberry", "Fresh blueberries (pack)", "4.99", "BLUE001", "Fruit"),
    ("Grapes", "Red seedless grapes (bunch)", "2.99", "GRAPE001", "Fruit"),
    ("Tomato", "Fresh ripe tomato", "1.29", "TOMATO001", "Vegetable"),
    ("Roma Tomato", "Italian Roma tomato", "1.39", "TOMATO002", "Vegetable"),
    ("Carrot", "Crunchy orange carrots (1 lb)", "1.19", "CARROT001", "Vegetable"),
    ("Broccoli", "Green broccoli crown", "2.29", "BROC001", "Vegetable"),
    ("Milk", "Whole milk 1 gallon", "3.49", "345678901", "Dairy"),
    ("Cheese", "Cheddar cheese block", "4.99", "012345678", "Dairy"),
    ("Eggs", "Large eggs, dozen", "3.99", "567890123", "Dairy"),
    ("Bread", "Whole wheat bread", "2.49", "456789012", "Bakery"),
    ("Chicken", "Boneless chicken breast", "5.99", "678901234", "Meat"),
    ("Rice", "White rice, 2 lb bag", "3.29", "789012345", "Grains"),
    ("Pasta", "Spaghetti, 16 oz", "1.79", "890123456", "Grains"),
]


def seed_products(db: Session) -> int:
    # tylko jesli katalog jest pusty
    if db.execute(select(ProductModel.id).limit(1)).first():
        logger.info("Product catalog already seeded, skipping")
        return 0

    for name, description, price, barcode, category in STARTER_PRODUCTS:
        db.add(
            ProductModel(
                name=name,
                description=description,
                price=Decimal(price),
                barcode=barcode,
                category=category,
            )
        )
    db.commit()

    logger.info(f"Seeded {len(STARTER_PRODUCTS)} products")
    return len(STARTER_PRODUCTS)


def seed():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        seed_products(db)
    finally:
        db.close()


if __name__ == "__main__":
    seed()
