# smartcart/api/routers/auth.py
from fastapi import APIRouter, Depends, HTTPException

from smartcart.api.routers.deps import get_auth_service, get_identity
from smartcart.domain.errors import AuthError, BackendError
from smartcart.domain.schemas import LoginIn, RegisterIn, SessionOut, UserOut
from smartcart.services.auth_service import AuthService
from smartcart.services.identity import Identity

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=UserOut, status_code=201)
def register(payload: RegisterIn, svc: AuthService = Depends(get_auth_service)):
    try:
        return svc.register(payload)
    except AuthError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except BackendError as e:
        raise HTTPException(status_code=503, detail=str(e))


@router.post("/login", response_model=SessionOut)
def login(payload: LoginIn, svc: AuthService = Depends(get_auth_service)):
    try:
        return svc.login(payload)
    except AuthError as e:
        raise HTTPException(status_code=401, detail=str(e))
    except BackendError as e:
        raise HTTPException(status_code=503, detail=str(e))


@router.post("/logout", status_code=204)
def logout(
    identity: Identity = Depends(get_identity),
    svc: AuthService = Depends(get_auth_service),
):
    if identity.anonymous:
        raise HTTPException(status_code=401, detail="Not signed in")
    try:
        svc.logout(identity.access_token, identity.user_id)
    except AuthError as e:
        raise HTTPException(status_code=401, detail=str(e))
    except BackendError as e:
        raise HTTPException(status_code=503, detail=str(e))


@router.get("/me", response_model=UserOut)
def me(
    identity: Identity = Depends(get_identity),
    svc: AuthService = Depends(get_auth_service),
):
    if identity.anonymous:
        raise HTTPException(status_code=401, detail="Not signed in")
    try:
        user = svc.current_user(identity.access_token)
    except BackendError as e:
        raise HTTPException(status_code=503, detail=str(e))
    if user is None:
        raise HTTPException(status_code=401, detail="Session expired")
    return user
