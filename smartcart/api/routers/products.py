# smartcart/api/routers/products.py
import uuid
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query

from smartcart.api.routers.deps import get_catalog
from smartcart.domain.schemas import ProductOut
from smartcart.services.catalog_service import CatalogService

router = APIRouter(prefix="/products", tags=["products"])


@router.get("", response_model=List[ProductOut])
def list_products(
    category: str | None = Query(None),
    catalog: CatalogService = Depends(get_catalog),
):
    return catalog.list_products(category)


#statyczne sciezki przed /{product_id}
@router.get("/search", response_model=List[ProductOut])
def search_products(
    q: str = Query(..., min_length=1),
    limit: int = Query(5, ge=1, le=50),
    catalog: CatalogService = Depends(get_catalog),
):
    return catalog.search(q, limit)


@router.get("/categories", response_model=List[str])
def list_categories(catalog: CatalogService = Depends(get_catalog)):
    return catalog.categories()


@router.get("/barcode/{barcode}", response_model=ProductOut)
def get_by_barcode(barcode: str, catalog: CatalogService = Depends(get_catalog)):
    product = catalog.get_by_barcode(barcode)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


@router.get("/{product_id}", response_model=ProductOut)
def get_product(product_id: uuid.UUID, catalog: CatalogService = Depends(get_catalog)):
    product = catalog.get_product(product_id)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return product
