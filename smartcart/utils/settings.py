# smartcart/utils/settings.py
import os
from dotenv import load_dotenv

load_dotenv()


def _flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./smartcart.db")
REDIS_URL = os.getenv("REDIS_URL", "redis://redis:6379/0")
SECURE_REDIS_URL = os.getenv("SECURE_REDIS_URL", REDIS_URL)
CELERY_BROKER_URL = os.getenv("CELERY_BROKER_URL", "redis://redis:6379/1")
CELERY_RESULT_BACKEND = os.getenv("CELERY_RESULT_BACKEND", "redis://redis:6379/2")

SUPABASE_URL = os.getenv("SUPABASE_URL", "")
SUPABASE_ANON_KEY = os.getenv("SUPABASE_ANON_KEY", "")

# klucze wklejone z cudzyslowami w .env
GOOGLE_CLOUD_VISION_API_KEY = os.getenv("GOOGLE_CLOUD_VISION_API_KEY", "").replace('"', "").replace("'", "")
VISION_API_URL = os.getenv("VISION_API_URL", "https://vision.googleapis.com/v1/images:annotate")
VISION_LABEL_MAX_RESULTS = int(os.getenv("VISION_LABEL_MAX_RESULTS", 15))
VISION_WEB_MAX_RESULTS = int(os.getenv("VISION_WEB_MAX_RESULTS", 10))
VISION_MIN_SCORE = float(os.getenv("VISION_MIN_SCORE", 0.7))
VISION_LABEL_CANDIDATES = int(os.getenv("VISION_LABEL_CANDIDATES", 5))
VISION_WEB_CANDIDATES = int(os.getenv("VISION_WEB_CANDIDATES", 3))
VISION_MOCK_ON_FAILURE = _flag("VISION_MOCK_ON_FAILURE")

HTTP_TIMEOUT_SECONDS = float(os.getenv("HTTP_TIMEOUT_SECONDS", 10))

PRODUCT_CACHE_SIZE = int(os.getenv("PRODUCT_CACHE_SIZE", 256))
PRODUCT_CACHE_TTL_SECONDS = int(os.getenv("PRODUCT_CACHE_TTL_SECONDS", 5 * 60))

CART_CACHE_MAX_AGE_SECONDS = int(os.getenv("CART_CACHE_MAX_AGE_SECONDS", 30 * 60))
CART_MUTATION_MIN_INTERVAL_MS = int(os.getenv("CART_MUTATION_MIN_INTERVAL_MS", 500))
CART_ABANDON_AFTER_SECONDS = int(os.getenv("CART_ABANDON_AFTER_SECONDS", 7 * 24 * 60 * 60))
TAX_RATE = os.getenv("TAX_RATE", "0.08")

DEMO_USER_ID = os.getenv("DEMO_USER_ID", "550e8400-e29b-41d4-a716-446655440000")
SECURE_STORE_MAX_SIZE = int(os.getenv("SECURE_STORE_MAX_SIZE", 2000))
DEFAULT_PAYMENT_METHOD = os.getenv("DEFAULT_PAYMENT_METHOD", "credit_card")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
