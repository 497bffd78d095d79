# smartcart/services/recognition_service.py
import base64
import binascii
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Sequence

from smartcart.domain.errors import VisionApiError
from smartcart.domain.labels import is_food, normalize_label
from smartcart.domain.matcher import find_match
from smartcart.domain.schemas import ProductOut, RecognitionOut, RecognizedItem
from smartcart.services.catalog_service import CatalogService
from smartcart.services.vision_client import VisionClient
from smartcart.utils.logging import get_logger
from smartcart.utils.settings import (
    VISION_LABEL_CANDIDATES,
    VISION_MIN_SCORE,
    VISION_MOCK_ON_FAILURE,
    VISION_WEB_CANDIDATES,
)

logger = get_logger(__name__)

BEST_GUESS_CONFIDENCE = 0.95

_DATA_URI_PREFIX = re.compile(r"^data:image/[a-zA-Z0-9.+-]+;base64,")

# odpowiedz podstawiana gdy vision API nie dziala a VISION_MOCK_ON_FAILURE=true
MOCK_VISION_RESPONSE: Dict[str, Any] = {
    "responses": [
        {
            "labelAnnotations": [
                {"description": "Tomato", "score": 0.94, "topicality": 0.94},
                {"description": "Red", "score": 0.92, "topicality": 0.92},
                {"description": "Vegetable", "score": 0.90, "topicality": 0.90},
                {"description": "Roma", "score": 0.85, "topicality": 0.85},
            ],
            "webDetection": {
                "bestGuessLabels": [{"label": "Tomato"}],
                "webEntities": [{"description": "Tomato", "score": 0.9}],
            },
        }
    ]
}


@dataclass
class Candidate:
    label: str
    confidence: float
    source: str


def clean_image_payload(image: str) -> str:
    """Strip a data URI prefix and check the rest is base64."""
    payload = _DATA_URI_PREFIX.sub("", image.strip())
    if not payload:
        raise ValueError("Image payload is empty")

    try:
        base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError("Image payload is not valid base64") from e

    return payload


def not_in_database_item() -> RecognizedItem:
    return RecognizedItem(
        name="Not in database",
        price=0,
        category="Unknown",
        product_id="unknown",
        description="This item was recognized but not found in the database.",
        confidence=1.0,
    )


def recognized_item(product: ProductOut, confidence: float) -> RecognizedItem:
    return RecognizedItem(
        name=product.name,
        price=product.price,
        category=product.category,
        product_id=str(product.id),
        description=product.description,
        image_url=product.image_url,
        confidence=confidence,
    )


def _first_response(payload: Dict[str, Any]) -> Dict[str, Any]:
    responses = payload.get("responses") if isinstance(payload, dict) else None
    if not isinstance(responses, list) or not responses:
        return {}
    first = responses[0]
    return first if isinstance(first, dict) else {}


def _entries(value: Any) -> List[Dict[str, Any]]:
    # API potrafi zwrocic smieci zamiast obiektow, pomijamy je
    if not isinstance(value, list):
        return []
    return [entry for entry in value if isinstance(entry, dict)]


def _text(entry: Dict[str, Any], key: str) -> str | None:
    value = entry.get(key)
    if isinstance(value, str) and value.strip():
        return value
    return None


def _score(entry: Dict[str, Any]) -> float:
    score = entry.get("score")
    if isinstance(score, bool) or not isinstance(score, (int, float)):
        return 0.0
    return float(score)



class RecognitionService:
    """
    Skan: jedno wywolanie vision API, lista kandydatow w ustalonej kolejnosci,
    pierwszy kandydat dopasowany do katalogu wygrywa.
    """

    def __init__(
        self,
        vision_client: VisionClient,
        catalog: CatalogService,
        matcher: Callable[[str, Sequence[ProductOut]], ProductOut | None] = find_match,
        min_score: float = VISION_MIN_SCORE,
        label_limit: int = VISION_LABEL_CANDIDATES,
        web_limit: int = VISION_WEB_CANDIDATES,
        mock_on_failure: bool = VISION_MOCK_ON_FAILURE,
    ):
        self.vision_client = vision_client
        self.catalog = catalog
        self.matcher = matcher
        self.min_score = min_score
        self.label_limit = label_limit
        self.web_limit = web_limit
        self.mock_on_failure = mock_on_failure

    def collect_candidates(self, payload: Dict[str, Any]) -> List[Candidate]:
        """
        (a) best guess, (b) etykiety wg score malejaco, (c) web entities.
        Etykiety nie bedace jedzeniem odpadaja tutaj, matcher ich nie widzi.
        """
        response = _first_response(payload)
        web = response.get("webDetection")
        if not isinstance(web, dict):
            web = {}
        candidates: List[Candidate] = []

        best_guesses = _entries(web.get("bestGuessLabels"))
        label = _text(best_guesses[0], "label") if best_guesses else None
        if label:
            logger.info(f"Vision API best guess: '{label}'")
            if is_food(label):
                candidates.append(Candidate(label, BEST_GUESS_CONFIDENCE, "best_guess"))

        # brak lub nieliczbowy score liczy sie jako 0
        labels = sorted(
            (a for a in _entries(response.get("labelAnnotations")) if _text(a, "description")),
            key=_score,
            reverse=True,
        )
        food_labels = [a for a in labels if _score(a) > self.min_score and is_food(a["description"])]
        for annotation in food_labels[: self.label_limit]:
            candidates.append(Candidate(annotation["description"], _score(annotation), "label"))

        entities = sorted(
            (e for e in _entries(web.get("webEntities")) if _text(e, "description")),
            key=_score,
            reverse=True,
        )
        food_entities = [e for e in entities if _score(e) > self.min_score and is_food(e["description"])]
        for entity in food_entities[: self.web_limit]:
            candidates.append(Candidate(entity["description"], _score(entity), "web_entity"))

        # ta sama etykieta z kilku zrodel - probujemy raz
        seen = set()
        unique = []
        for candidate in candidates:
            key = normalize_label(candidate.label)
            if key in seen:
                continue
            seen.add(key)
            unique.append(candidate)

        for candidate in unique:
            logger.info(f"Candidate '{candidate.label}' ({candidate.confidence:.2f}) from {candidate.source}")
        return unique

    def recognize(self, image: str) -> RecognitionOut:
        payload = clean_image_payload(image)
        mocked = False

        try:
            response = self.vision_client.annotate(payload)
        except VisionApiError as e:
            if not self.mock_on_failure:
                raise
            logger.warning(f"Vision API failed ({e}), using mock response")
            response = MOCK_VISION_RESPONSE
            mocked = True

        return RecognitionOut(items=self.match_response(response), mocked=mocked)

    def match_response(self, response: Dict[str, Any]) -> List[RecognizedItem]:
        candidates = self.collect_candidates(response)
        if not candidates:
            logger.info("No food labels detected, returning 'not in database'")
            return [not_in_database_item()]

        catalog = self.catalog.snapshot()
        for candidate in candidates:
            product = self.matcher(candidate.label, catalog)
            if product is not None:
                logger.info(f"Matched '{product.name}' from {candidate.source}: '{candidate.label}'")
                return [recognized_item(product, candidate.confidence)]

        logger.info("No candidate matched the catalog, returning 'not in database'")
        return [not_in_database_item()]
