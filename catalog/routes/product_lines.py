"""
API routes for product line filters and brands, and data sheet values.
"""
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query

from catalog.core.exceptions import StoreUnavailableError, ValidationError
from catalog.dependencies import get_brand_service, get_filter_service, get_product_service
from catalog.schemas.data_sheet import DataSheetValueInput, ProductLineFilter
from catalog.schemas.product import ProductLineBrand
from catalog.services.product_line_brands import ProductLineBrandService
from catalog.services.product_line_filters import ProductLineFilterService
from catalog.services.product_service import ProductService

router = APIRouter(tags=["product-lines"])


@router.get("/product-lines/{product_line_id}/filters", response_model=List[ProductLineFilter])
async def get_product_line_filters(
    product_line_id: int,
    filter_service: ProductLineFilterService = Depends(get_filter_service),
):
    try:
        return await filter_service.get_filters(product_line_id)
    except StoreUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))


@router.get("/product-lines/{product_line_id}/brands", response_model=List[ProductLineBrand])
async def get_product_line_brands(
    product_line_id: int,
    brand_service: ProductLineBrandService = Depends(get_brand_service),
):
    """Brands with active products in the line, ordered by name."""
    try:
        return await brand_service.get_brands(product_line_id)
    except StoreUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))


@router.put("/data-sheets/{data_sheet_id}/values")
async def upsert_data_sheet_values(
    data_sheet_id: int,
    values: List[DataSheetValueInput],
    product_service: ProductService = Depends(get_product_service),
):
    try:
        written = await product_service.upsert_data_sheet_values(data_sheet_id, values)
        return {"data_sheet_id": data_sheet_id, "written": written}
    except ValidationError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except StoreUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))


@router.delete("/data-sheet-values")
async def delete_data_sheet_values(
    field_ids: List[int] = Query(...),
    product_service: ProductService = Depends(get_product_service),
):
    """Delete every value of the given data sheet fields."""
    try:
        return {"deleted": await product_service.delete_data_sheet_values(field_ids)}
    except StoreUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))
