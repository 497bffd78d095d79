# smartcart/api/routers/carts.py
import uuid
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query

from smartcart.api.routers.deps import get_cart_service
from smartcart.domain.errors import AccessDeniedError, BackendError, DuplicateMutationError, NotFoundError
from smartcart.domain.schemas import CartOut, CartTotals, CheckoutIn, CheckoutOut, ItemIn, QuantityIn
from smartcart.services.cart_service import CartService

router = APIRouter(prefix="/cart", tags=["cart"])


def _http_error(e: Exception) -> HTTPException:
    if isinstance(e, NotFoundError):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, AccessDeniedError):
        return HTTPException(status_code=403, detail=str(e))
    if isinstance(e, DuplicateMutationError):
        return HTTPException(status_code=429, detail=str(e))
    if isinstance(e, BackendError):
        return HTTPException(status_code=503, detail=str(e))
    if isinstance(e, ValueError):
        return HTTPException(status_code=400, detail=str(e))
    # RuntimeError: koszyk zmieniony w miedzyczasie
    return HTTPException(status_code=409, detail=str(e))


_CART_ERRORS = (NotFoundError, AccessDeniedError, DuplicateMutationError, BackendError, ValueError, RuntimeError)


@router.get("", response_model=CartOut)
def get_cart(refresh: bool = Query(False), svc: CartService = Depends(get_cart_service)):
    try:
        return svc.get_active_cart(refresh=refresh)
    except BackendError as e:
        raise _http_error(e)


@router.get("/totals", response_model=CartTotals)
def get_totals(svc: CartService = Depends(get_cart_service)):
    try:
        return svc.totals()
    except BackendError as e:
        raise _http_error(e)


@router.get("/history", response_model=List[CartOut])
def order_history(svc: CartService = Depends(get_cart_service)):
    return svc.order_history()


@router.post("/items", response_model=CartOut)
def add_item(payload: ItemIn, svc: CartService = Depends(get_cart_service)):
    try:
        return svc.add_item(payload.product_id, payload.quantity)
    except _CART_ERRORS as e:
        raise _http_error(e)


@router.patch("/items/{item_id}", response_model=CartOut)
def update_item(item_id: uuid.UUID, payload: QuantityIn, svc: CartService = Depends(get_cart_service)):
    try:
        return svc.update_quantity(item_id, payload.quantity)
    except _CART_ERRORS as e:
        raise _http_error(e)


@router.delete("/items/{item_id}", response_model=CartOut)
def remove_item(item_id: uuid.UUID, svc: CartService = Depends(get_cart_service)):
    try:
        return svc.remove_item(item_id)
    except _CART_ERRORS as e:
        raise _http_error(e)


@router.post("/checkout", response_model=CheckoutOut)
def checkout(payload: CheckoutIn, svc: CartService = Depends(get_cart_service)):
    try:
        return svc.checkout(payload.cart_id, payload.payment_method)
    except _CART_ERRORS as e:
        raise _http_error(e)
