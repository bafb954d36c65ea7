"""
Product endpoints. Every route requires a bearer token and only ever
touches the caller's own products.
"""
from fastapi import APIRouter, Depends, status

from ..dependencies import get_catalog_service
from ..schemas import MessageResponse, ProductIn, ProductListResponse, ProductOut, ProductResponse
from ..services.catalog import CatalogService

router = APIRouter(prefix="/api/products", tags=["products"])


@router.get("", response_model=ProductListResponse)
def list_products(catalog: CatalogService = Depends(get_catalog_service)):
    return ProductListResponse(data=[ProductOut.model_validate(p) for p in catalog.list()])


@router.post("", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
def create_product(payload: ProductIn, catalog: CatalogService = Depends(get_catalog_service)):
    product = catalog.create(payload)
    return ProductResponse(message="Product created successfully", data=ProductOut.model_validate(product))


@router.get("/{product_id}", response_model=ProductResponse, response_model_exclude_none=True)
def get_product(product_id: int, catalog: CatalogService = Depends(get_catalog_service)):
    return ProductResponse(data=ProductOut.model_validate(catalog.get(product_id)))


@router.put("/{product_id}", response_model=ProductResponse)
def update_product(product_id: int, payload: ProductIn, catalog: CatalogService = Depends(get_catalog_service)):
    product = catalog.update(product_id, payload)
    return ProductResponse(message="Product updated successfully", data=ProductOut.model_validate(product))


@router.delete("/{product_id}", response_model=MessageResponse)
def delete_product(product_id: int, catalog: CatalogService = Depends(get_catalog_service)):
    catalog.delete(product_id)
    return MessageResponse(message="Product deleted successfully")
