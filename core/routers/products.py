"""
Products Router

Catalog pass-through to the product store plus image upload. No auth gate:
the catalog has no owner beyond the storefront itself.
"""
from typing import Optional

from fastapi import APIRouter, File, UploadFile
from fastapi.responses import JSONResponse

from core.errors import ERROR_NO_FILE, ERROR_PRODUCT_NOT_FOUND
from core.logging import get_logger, sanitize_string_for_logging
from core.routers.deps import get_image_store, get_product_store
from core.services.models import Product
from .models import AddProductRequest, RemoveProductRequest

logger = get_logger(__name__)

router = APIRouter(tags=["products"])

NEW_COLLECTION_SIZE = 8
POPULAR_SIZE = 4


@router.post("/addproduct")
async def add_product(request: AddProductRequest):
    """Add a product; ids are sequential (last id + 1)."""
    product = await get_product_store().add(**request.model_dump())
    logger.info("Added product %d: %s", product.id, sanitize_string_for_logging(product.name))
    return {"success": True, "name": product.name}


@router.post("/removeproduct")
async def remove_product(request: RemoveProductRequest):
    removed = await get_product_store().delete(request.id)
    if removed is None:
        return JSONResponse(
            status_code=404, content={"success": False, "message": ERROR_PRODUCT_NOT_FOUND}
        )
    return {"success": True, "id": request.id}


@router.get("/allproducts", response_model=list[Product])
async def all_products():
    return await get_product_store().list_all()


@router.get("/newcollections", response_model=list[Product])
async def new_collections():
    """Most recently added products."""
    products = await get_product_store().list_all()
    return products[-NEW_COLLECTION_SIZE:]


@router.get("/popularinwomen", response_model=list[Product])
async def popular_in_women():
    products = await get_product_store().by_category("women")
    return products[:POPULAR_SIZE]


@router.post("/upload")
async def upload_image(product: Optional[UploadFile] = File(None)):
    """Store a product image (multipart field ``product``) and return its URL."""
    if product is None or not product.filename:
        return JSONResponse(status_code=400, content={"success": False, "message": ERROR_NO_FILE})

    content = await product.read()
    image_url = get_image_store().save(content, product.filename, field_name="product")
    return {"success": True, "image_url": image_url}
