# smartcart/services/vision_client.py
from typing import Any, Dict

import requests

from smartcart.domain.errors import VisionApiError
from smartcart.utils.logging import get_logger
from smartcart.utils.retry import http_retry
from smartcart.utils.settings import (
    GOOGLE_CLOUD_VISION_API_KEY,
    HTTP_TIMEOUT_SECONDS,
    VISION_API_URL,
    VISION_LABEL_MAX_RESULTS,
    VISION_WEB_MAX_RESULTS,
)

logger = get_logger(__name__)


class VisionClient:
    """Label + web detection on a single image via the cloud vision REST API."""

    def __init__(
        self,
        api_key: str | None = None,
        url: str | None = None,
        timeout: float = HTTP_TIMEOUT_SECONDS,
        label_max_results: int = VISION_LABEL_MAX_RESULTS,
        web_max_results: int = VISION_WEB_MAX_RESULTS,
        session: requests.Session | None = None,
    ):
        self.api_key = (api_key if api_key is not None else GOOGLE_CLOUD_VISION_API_KEY).strip("\"' ")
        self.url = url or VISION_API_URL
        self.timeout = timeout
        self.label_max_results = label_max_results
        self.web_max_results = web_max_results
        self.session = session or requests.Session()

        if not self.api_key:
            logger.warning("No vision API key configured, scans will fail")
        else:
            # nie logujemy calego klucza
            logger.info(f"Vision API key loaded, starts with {self.api_key[:4]}... ({len(self.api_key)} chars)")
            if not self.api_key.startswith("AIza"):
                logger.warning("Vision API key does not look like a Google Cloud API key")

    def build_request(self, image_b64: str) -> Dict[str, Any]:
        return {
            "requests": [
                {
                    "image": {"content": image_b64},
                    "features": [
                        {"type": "LABEL_DETECTION", "maxResults": self.label_max_results},
                        {"type": "WEB_DETECTION", "maxResults": self.web_max_results},
                    ],
                }
            ]
        }

    @http_retry()
    def _post(self, body: Dict[str, Any]) -> requests.Response:
        logger.info(f"VisionClient POST {self.url}")
        resp = self.session.post(
            self.url,
            params={"key": self.api_key},
            json=body,
            timeout=self.timeout,
        )
        resp.raise_for_status()
        return resp

    def annotate(self, image_b64: str) -> Dict[str, Any]:
        if not self.api_key:
            raise VisionApiError("Vision API key is not configured")

        try:
            resp = self._post(self.build_request(image_b64))
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else "?"
            body = e.response.text if e.response is not None else ""
            logger.error(f"Vision API error: {status} {body[:200]}")
            raise VisionApiError(f"Vision API error: {status}") from e
        except requests.RequestException as e:
            logger.error(f"Vision API request failed: {e}")
            raise VisionApiError(f"Vision API request failed: {e}") from e

        try:
            data = resp.json()
        except ValueError as e:
            raise VisionApiError("Vision API returned a non-JSON body") from e

        if not isinstance(data, dict) or not isinstance(data.get("responses"), list):
            raise VisionApiError("Vision API response has no 'responses' list")

        return data
