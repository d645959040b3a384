"""
API routes for product prices, stock and cached product info.
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from catalog.core.exceptions import (
    FileNotLinkedError,
    InsufficientStockError,
    InvalidPriceError,
    ProductNotFoundError,
    StoreUnavailableError,
    ValidationError,
)
from catalog.dependencies import (
    get_info_assembler,
    get_invalidation,
    get_product_service,
    get_resolver,
    get_search_service,
)
from catalog.schemas.price import CreatePriceRecord, PriceHistoryPage, PriceHistoryRead, PriceStats
from catalog.schemas.product import BulkStateUpdate, ProductInfo, ProductRead, ProductSearchResult, ProductUpdate
from catalog.schemas.stock import AdjustStock, StockMovementRead
from catalog.services.cache_invalidation import CacheInvalidationService
from catalog.services.computed_values import ComputedValueResolver
from catalog.services.product_info import ProductInfoAssembler
from catalog.services.product_search import ProductSearchService
from catalog.services.product_service import ProductService

router = APIRouter(prefix="/products", tags=["products"])


@router.get("/search", response_model=ProductSearchResult)
async def search_products(
    q: Optional[str] = None,
    brand_id: Optional[int] = None,
    product_line_id: Optional[int] = None,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    search_service: ProductSearchService = Depends(get_search_service),
):
    try:
        return await search_service.search(
            query=q, brand_id=brand_id, product_line_id=product_line_id, limit=limit, offset=offset
        )
    except StoreUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))


@router.patch("/state")
async def bulk_update_state(
    data: BulkStateUpdate,
    product_service: ProductService = Depends(get_product_service),
):
    """Activate or deactivate several products at once."""
    try:
        updated = await product_service.bulk_update_state(data)
        return {"updated": updated, "ids": data.ids}
    except StoreUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))


@router.post("/prices", response_model=PriceHistoryRead, status_code=201)
async def record_price(
    data: CreatePriceRecord,
    product_service: ProductService = Depends(get_product_service),
):
    try:
        return await product_service.record_price(data)
    except ProductNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidPriceError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StoreUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))


@router.post("/stock-movements", response_model=StockMovementRead, status_code=201)
async def adjust_stock(
    data: AdjustStock,
    product_service: ProductService = Depends(get_product_service),
):
    try:
        return await product_service.adjust_stock(data)
    except ProductNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except (InsufficientStockError, ValidationError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StoreUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))


@router.get("/{product_id}/info", response_model=ProductInfo)
async def get_product_info(
    product_id: int,
    assembler: ProductInfoAssembler = Depends(get_info_assembler),
):
    try:
        return await assembler.get_info(product_id)
    except ProductNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except StoreUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))


@router.get("/{product_id}/price")
async def get_current_price(
    product_id: int,
    resolver: ComputedValueResolver = Depends(get_resolver),
):
    try:
        return {"product_id": product_id, "current_price": await resolver.get_current_price(product_id)}
    except StoreUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))


@router.get("/{product_id}/stock")
async def get_current_stock(
    product_id: int,
    resolver: ComputedValueResolver = Depends(get_resolver),
):
    try:
        stock = await resolver.get_current_stock(product_id)
        agencies = await resolver.get_stock_by_agency(product_id)
    except StoreUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return {
        "product_id": product_id,
        "stock": stock,
        "agencies": [
            {
                "agency_id": agency.agency_id,
                "agency_name": agency.agency_name,
                "current_stock": agency.current_stock,
                "active": agency.active,
            }
            for agency in agencies
        ],
    }


@router.get("/{product_id}/price-history", response_model=PriceHistoryPage)
async def get_price_history(
    product_id: int,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    product_service: ProductService = Depends(get_product_service),
):
    try:
        return await product_service.get_price_history(product_id, limit=limit, offset=offset)
    except StoreUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))


@router.get("/{product_id}/price-stats", response_model=PriceStats)
async def get_price_stats(
    product_id: int,
    product_service: ProductService = Depends(get_product_service),
):
    try:
        return await product_service.get_price_stats(product_id)
    except StoreUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))


@router.patch("/{product_id}", response_model=ProductRead)
async def update_product(
    product_id: int,
    data: ProductUpdate,
    product_service: ProductService = Depends(get_product_service),
):
    try:
        return await product_service.update_product(product_id, data)
    except ProductNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StoreUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))


@router.put("/{product_id}/files/{file_id}/principal", status_code=204)
async def set_principal_image(
    product_id: int,
    file_id: int,
    product_service: ProductService = Depends(get_product_service),
):
    try:
        await product_service.set_principal_image(product_id, file_id)
    except FileNotLinkedError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except StoreUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))


@router.delete("/{product_id}/files/{file_id}", status_code=204)
async def remove_product_file(
    product_id: int,
    file_id: int,
    product_service: ProductService = Depends(get_product_service),
):
    try:
        await product_service.remove_product_file(product_id, file_id)
    except FileNotLinkedError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except StoreUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))


@router.post("/{product_id}/invalidate")
async def invalidate_product_cache(
    product_id: int,
    invalidation: CacheInvalidationService = Depends(get_invalidation),
):
    """Manually drop every cached value of one product."""
    return {"product_id": product_id, "invalidated": await invalidation.invalidate(product_id)}
