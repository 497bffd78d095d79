# smartcart/api/routers/scan.py
from fastapi import APIRouter, Depends, HTTPException

from smartcart.api.routers.deps import get_recognition_service
from smartcart.domain.errors import VisionApiError
from smartcart.domain.schemas import RecognitionOut, ScanIn
from smartcart.services.recognition_service import RecognitionService

router = APIRouter(prefix="/scan", tags=["scan"])


@router.post("", response_model=RecognitionOut)
def scan(payload: ScanIn, svc: RecognitionService = Depends(get_recognition_service)):
    try:
        return svc.recognize(payload.image)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except VisionApiError as e:
        raise HTTPException(status_code=502, detail=str(e))
