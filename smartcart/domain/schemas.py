# smartcart/domain/schemas.py
import uuid
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field

from smartcart.utils.settings import DEFAULT_PAYMENT_METHOD


class ProductOut(BaseModel):
    """Schema dla produktu z katalogu."""

    id: uuid.UUID
    name: str
    description: str | None = None
    price: Decimal
    image_url: str | None = None
    barcode: str | None = None
    category: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class ProductSearchParams(BaseModel):
    id: uuid.UUID | None = None
    barcode: str | None = None
    name: str | None = None
    category: str | None = None


class CartSyncState(str, Enum):
    IDLE = "idle"
    MUTATING = "mutating"
    RECONCILING = "reconciling"


class CartItemOut(BaseModel):
    id: uuid.UUID
    cart_id: uuid.UUID
    product_id: uuid.UUID
    quantity: int
    product: ProductOut | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class CartOut(BaseModel):
    """
    Koszyk widziany przez klienta.
    local - koszyk tylko w lokalnym lustrze, nigdy nie synchronizowany z backendem
    stale - ostatni zapis/odczyt z backendu nie powiodl sie, dane moga byc nieaktualne
    """

    id: uuid.UUID
    user_id: uuid.UUID
    status: str
    items: List[CartItemOut] = Field(default_factory=list)
    payment_method: str | None = None
    checkout_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    local: bool = False
    stale: bool = False
    sync_state: CartSyncState = CartSyncState.IDLE


class CartSnapshot(BaseModel):
    """Blob zapisywany w lokalnym magazynie: koszyk + czas ostatniej synchronizacji."""

    cart: CartOut
    last_sync: datetime


class CartTotals(BaseModel):
    subtotal: Decimal
    tax: Decimal
    total: Decimal
    item_count: int


class ItemIn(BaseModel):
    """Schema dla dodawania produktu do koszyka."""

    product_id: uuid.UUID
    quantity: int = Field(1, gt=0, description="Ilosc produktu (musi byc > 0)")


class QuantityIn(BaseModel):
    # <= 0 usuwa pozycje
    quantity: int


class CheckoutIn(BaseModel):
    cart_id: uuid.UUID
    payment_method: str = Field(DEFAULT_PAYMENT_METHOD, min_length=1, max_length=50)


class PaymentOut(BaseModel):
    id: uuid.UUID
    cart_id: uuid.UUID
    amount: Decimal
    status: str
    payment_method: str | None = None
    transaction_id: str | None = None
    created_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class CheckoutOut(BaseModel):
    cart: CartOut
    payment: PaymentOut | None = None


class ScanIn(BaseModel):
    image: str = Field(..., min_length=1, description="Zdjecie zakodowane w base64")


class RecognizedItem(BaseModel):
    name: str
    price: Decimal
    category: str | None = None
    product_id: str
    description: str | None = None
    image_url: str | None = None
    # tylko do uzytku wewnetrznego, nie trafia do odpowiedzi
    confidence: float | None = Field(default=None, exclude=True)


class RecognitionOut(BaseModel):
    items: List[RecognizedItem]
    mocked: bool = False


class RegisterIn(BaseModel):
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=6, max_length=128)
    username: str | None = Field(None, max_length=100)


class LoginIn(BaseModel):
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=1, max_length=128)


class UserOut(BaseModel):
    id: uuid.UUID
    email: str
    username: str
    created_at: str | None = None
    updated_at: str | None = None


class SessionOut(BaseModel):
    access_token: str
    refresh_token: str | None = None
    expires_in: int | None = None
    token_type: str = "bearer"
    user: UserOut
