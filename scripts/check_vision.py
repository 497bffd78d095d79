# scripts/check_vision.py
"""
Reczne sprawdzenie rozpoznawania: gotowe odpowiedzi vision API (owoce, warzywa, nie-jedzenie)
przechodza przez caly pipeline na katalogu w pamieci, bez sieci.
"""
import base64
import copy

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import smartcart.data.models  # noqa: F401
from smartcart.data.database import Base
from smartcart.data.seed import seed_products
from smartcart.services.catalog_service import CatalogService
from smartcart.services.product_cache import ProductCache
from smartcart.services.recognition_service import MOCK_VISION_RESPONSE, RecognitionService

# tresc obrazka nie ma znaczenia, odpowiedzi sa z gory ustalone
SAMPLE_IMAGE = "data:image/jpeg;base64," + base64.b64encode(b"\xff\xd8\xff\xe0 sample frame").decode()

MOCK_FRUIT_RESPONSE = {
    "responses": [
        {
            "labelAnnotations": [
                {"description": "Fruit", "score": 0.98},
                {"description": "Apple", "score": 0.96},
                {"description": "Natural foods", "score": 0.93},
                {"description": "Red", "score": 0.89},
            ],
            "webDetection": {
                "bestGuessLabels": [{"label": "mcintosh apple"}],
                "webEntities": [{"description": "Apple", "score": 1.2}],
            },
        }
    ]
}

MOCK_NON_FOOD_RESPONSE = {
    "responses": [
        {
            "labelAnnotations": [
                {"description": "Table", "score": 0.95},
                {"description": "Wood", "score": 0.91},
            ],
            "webDetection": {"bestGuessLabels": [{"label": "wooden table"}]},
        }
    ]
}

SCENARIOS = {
    "vegetable (tomato)": MOCK_VISION_RESPONSE,
    "fruit (apple)": MOCK_FRUIT_RESPONSE,
    "non-food (table)": MOCK_NON_FOOD_RESPONSE,
}


class CannedVisionClient:
    def __init__(self, response):
        self.response = response

    def annotate(self, image_b64):
        return copy.deepcopy(self.response)


def main():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    db = sessionmaker(bind=engine)()
    try:
        seed_products(db)
        catalog = CatalogService(db, ProductCache())

        for name, response in SCENARIOS.items():
            print(f"\n=== {name} ===")
            service = RecognitionService(CannedVisionClient(response), catalog, mock_on_failure=False)
            for candidate in service.collect_candidates(response):
                print(f"candidate: {candidate.label} ({candidate.confidence:.2f}, {candidate.source})")

            result = service.recognize(SAMPLE_IMAGE)
            for item in result.items:
                print(f"recognized: {item.name} [{item.category}] ${item.price} (id {item.product_id})")
    finally:
        db.close()


if __name__ == "__main__":
    main()
