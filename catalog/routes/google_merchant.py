"""
Google Merchant Center sync for single products.
"""
from fastapi import APIRouter, Depends, HTTPException

from catalog.core.exceptions import GoogleMerchantError, ProductNotFoundError, StoreUnavailableError
from catalog.dependencies import get_google_merchant
from catalog.services.google_merchant import GoogleMerchantService

router = APIRouter(prefix="/google-merchant", tags=["google-merchant"])


@router.post("/products/{product_id}")
async def upload_product(
    product_id: int,
    service: GoogleMerchantService = Depends(get_google_merchant),
):
    try:
        result = await service.upload_product(product_id)
        return {"status": "success", "product_id": product_id, "result": result}
    except ProductNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except GoogleMerchantError as e:
        raise HTTPException(status_code=502, detail=str(e))
    except StoreUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))


@router.put("/products/{product_id}")
async def update_product(
    product_id: int,
    service: GoogleMerchantService = Depends(get_google_merchant),
):
    try:
        result = await service.update_product(product_id)
        return {"status": "success", "product_id": product_id, "result": result}
    except ProductNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except GoogleMerchantError as e:
        raise HTTPException(status_code=502, detail=str(e))
    except StoreUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))


@router.delete("/products/{product_id}")
async def delete_product(
    product_id: int,
    service: GoogleMerchantService = Depends(get_google_merchant),
):
    try:
        await service.delete_product(product_id)
        return {"status": "success", "product_id": product_id}
    except GoogleMerchantError as e:
        raise HTTPException(status_code=502, detail=str(e))
