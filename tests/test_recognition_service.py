import pytest

from smartcart.domain.errors import VisionApiError
from smartcart.domain.matcher import find_match
from smartcart.services.recognition_service import RecognitionService, clean_image_payload
from tests.conftest import StaticVisionClient, vision_payload

IMAGE = "data:image/jpeg;base64,aGVsbG8="


def make_service(catalog, vision, **kwargs):
    kwargs.setdefault("mock_on_failure", False)
    return RecognitionService(vision, catalog, **kwargs)


def test_tomato_scan_returns_catalog_product(catalog):
    vision = StaticVisionClient(
        vision_payload(
            labels=[("Tomato", 0.94), ("Red", 0.92), ("Vegetable", 0.90)],
            best_guess="Tomato",
        )
    )
    result = make_service(catalog, vision).recognize(IMAGE)

    assert not result.mocked
    assert len(result.items) == 1
    item = result.items[0]
    assert item.name == "Tomato"
    assert item.category == "Vegetable"
    assert item.product_id != "unknown"
    assert vision.calls == ["aGVsbG8="]


def test_no_food_labels_returns_not_in_database(catalog):
    vision = StaticVisionClient(vision_payload(labels=[("Table", 0.99), ("Hand", 0.95)], best_guess="Table"))
    item = make_service(catalog, vision).recognize(IMAGE).items[0]

    assert item.name == "Not in database"
    assert item.product_id == "unknown"
    assert item.price == 0


def test_non_food_labels_never_reach_the_matcher(catalog):
    seen = []

    def spy(label, products):
        seen.append(label)
        return find_match(label, products)

    vision = StaticVisionClient(
        vision_payload(
            labels=[("Red", 0.99), ("Banana", 0.9), ("Yellow", 0.88)],
            best_guess="Plastic",
            web_entities=[("Kitchen", 0.95)],
        )
    )
    make_service(catalog, vision, matcher=spy).recognize(IMAGE)

    assert seen == ["Banana"]


def test_low_score_labels_are_dropped(catalog):
    service = make_service(catalog, StaticVisionClient())
    candidates = service.collect_candidates(vision_payload(labels=[("Apple", 0.6), ("Banana", 0.71)]))
    assert [c.label for c in candidates] == ["Banana"]


def test_candidate_order_best_guess_labels_then_web(catalog):
    service = make_service(catalog, StaticVisionClient())
    payload = vision_payload(
        labels=[("Fruit", 0.8), ("Apple", 0.95)],
        best_guess="granny smith apple",
        web_entities=[("Orange", 0.9)],
    )
    candidates = service.collect_candidates(payload)

    assert [c.label for c in candidates] == ["granny smith apple", "Apple", "Fruit", "Orange"]
    assert candidates[0].confidence == 0.95
    assert [c.source for c in candidates] == ["best_guess", "label", "label", "web_entity"]


def test_first_matching_candidate_wins(catalog):
    vision = StaticVisionClient(
        vision_payload(labels=[("Dragon fruit", 0.97), ("Banana", 0.9)], best_guess="exotic produce")
    )
    item = make_service(catalog, vision).recognize(IMAGE).items[0]
    # "Dragon fruit" trafia przez kategorie wczesniej niz "Banana"
    assert item.category == "Fruit"
    assert item.confidence == 0.97


def test_vision_failure_is_raised_without_mock(catalog, failing_vision):
    with pytest.raises(VisionApiError):
        make_service(catalog, failing_vision).recognize(IMAGE)


def test_vision_failure_uses_mock_when_enabled(catalog, failing_vision):
    result = make_service(catalog, failing_vision, mock_on_failure=True).recognize(IMAGE)

    assert result.mocked
    assert result.items[0].name == "Tomato"


def test_invalid_image_payload():
    with pytest.raises(ValueError):
        clean_image_payload("data:image/png;base64,")
    with pytest.raises(ValueError):
        clean_image_payload("not base64 at all!")
    assert clean_image_payload(" aGVsbG8= ") == "aGVsbG8="


def test_malformed_vision_entries_are_skipped(catalog):
    payload = {
        "responses": [
            {
                "webDetection": {
                    "bestGuessLabels": ["Tomato"],
                    "webEntities": [{"description": "Tomato", "score": None}, "junk"],
                },
                "labelAnnotations": [
                    {"description": "Tomato", "score": None},
                    "junk",
                    {"description": None, "score": 0.99},
                    {"description": "Banana", "score": 0.9},
                ],
            }
        ]
    }
    service = make_service(catalog, StaticVisionClient(payload))

    assert [c.label for c in service.collect_candidates(payload)] == ["Banana"]
    assert service.recognize(IMAGE).items[0].name == "Banana"


def test_response_without_objects_is_not_in_database(catalog):
    service = make_service(catalog, StaticVisionClient({"responses": ["oops"]}))

    assert service.collect_candidates({"responses": ["oops"]}) == []
    assert service.recognize(IMAGE).items[0].name == "Not in database"
