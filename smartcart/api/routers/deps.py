# smartcart/api/routers/deps.py
from fastapi import Depends, Header, HTTPException, Request
from sqlalchemy.orm import Session

from smartcart.data.database import get_db
from smartcart.domain.errors import AuthError, BackendError
from smartcart.services.auth_service import AuthService
from smartcart.services.cart_service import CartService
from smartcart.services.catalog_service import CatalogService
from smartcart.services.identity import Identity, select_resolver
from smartcart.services.recognition_service import RecognitionService


def get_identity(
    request: Request,
    authorization: str | None = Header(None),
    x_device_id: str | None = Header(None),
) -> Identity:
    resolver = select_resolver(authorization, x_device_id, request.app.state.auth_client)
    try:
        return resolver.resolve()
    except AuthError as e:
        raise HTTPException(status_code=401, detail=str(e))
    except BackendError as e:
        raise HTTPException(status_code=503, detail=str(e))


def get_catalog(request: Request, db: Session = Depends(get_db)) -> CatalogService:
    return CatalogService(db, request.app.state.product_cache)


def get_cart_service(
    request: Request,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_identity),
) -> CartService:
    state = request.app.state
    return CartService(
        db=db,
        identity=identity,
        catalog=CatalogService(db, state.product_cache),
        local_store=state.local_cart_store,
        guard=state.mutation_guard,
    )


def get_recognition_service(
    request: Request,
    catalog: CatalogService = Depends(get_catalog),
) -> RecognitionService:
    return RecognitionService(request.app.state.vision_client, catalog)


def get_auth_service(request: Request) -> AuthService:
    return AuthService(request.app.state.auth_client, request.app.state.session_store)
