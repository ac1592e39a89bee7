"""
Product endpoints: shopper browsing plus admin catalog management.

Photos travel as base64 in the JSON body on write and are served as raw
bytes by /product/product-photo/{pid}.
"""

import logging

from fastapi import APIRouter, Depends, Path
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from db_models import User
from deps import page_param, require_admin
from domain.constants import PRODUCT_PAGE_SIZE
from domain.responses import paginated_response, success_response
from models import ProductFilterRequest, ProductRequest
from services import product_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/product", tags=["product"])


def _fields(request: ProductRequest) -> dict:
    return {
        "name": request.name,
        "description": request.description,
        "price": request.price,
        "category_id": request.category_id,
        "quantity": request.quantity,
        "shipping": request.shipping,
        "photo": request.photo,
        "photo_content_type": request.photo_content_type,
    }


@router.post("/create-product", status_code=201)
async def create_product(
    request: ProductRequest,
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    product = await product_service.create_product(db, **_fields(request))
    await db.commit()
    return success_response(data=product_service.serialize_product(product))


@router.put("/update-product/{pid}")
async def update_product(
    request: ProductRequest,
    pid: int = Path(..., ge=1),
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    product = await product_service.update_product(db, product_id=pid, **_fields(request))
    await db.commit()
    return success_response(data=product_service.serialize_product(product))


@router.delete("/delete-product/{pid}")
async def delete_product(
    pid: int = Path(..., ge=1),
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    await product_service.delete_product(db, product_id=pid)
    await db.commit()
    return {"success": True, "message": "Product deleted successfully"}


@router.get("/get-product")
async def list_products(db: AsyncSession = Depends(get_db)):
    products = await product_service.list_products(db)
    return success_response(
        data=[product_service.serialize_product(p) for p in products],
        meta={"count": len(products)},
    )


@router.get("/get-product/{slug}")
async def get_product(slug: str, db: AsyncSession = Depends(get_db)):
    product = await product_service.get_by_slug(db, slug)
    return success_response(data=product_service.serialize_product(product))


@router.get("/product-photo/{pid}")
async def product_photo(pid: int = Path(..., ge=1), db: AsyncSession = Depends(get_db)):
    data, content_type = await product_service.get_photo(db, pid)
    return Response(content=data, media_type=content_type)


@router.post("/product-filters")
async def filter_products(request: ProductFilterRequest, db: AsyncSession = Depends(get_db)):
    products = await product_service.filter_products(
        db,
        category_ids=request.checked,
        price_range=request.radio,
    )
    return success_response(data=[product_service.serialize_product(p) for p in products])


@router.get("/product-count")
async def product_count(db: AsyncSession = Depends(get_db)):
    total = await product_service.count_products(db)
    return {"success": True, "total": total}


@router.get("/product-list/{page}")
async def product_page(page: int = Depends(page_param), db: AsyncSession = Depends(get_db)):
    products = await product_service.list_page(db, page=page)
    total = await product_service.count_products(db)
    return paginated_response(
        items=[product_service.serialize_product(p) for p in products],
        limit=PRODUCT_PAGE_SIZE,
        page=page,
        total=total,
    )


@router.get("/search/{keyword}")
async def search_products(keyword: str, db: AsyncSession = Depends(get_db)):
    products = await product_service.search(db, keyword)
    return success_response(data=[product_service.serialize_product(p) for p in products])


@router.get("/related-product/{pid}/{cid}")
async def related_products(
    pid: int = Path(..., ge=1),
    cid: int = Path(..., ge=1),
    db: AsyncSession = Depends(get_db),
):
    products = await product_service.related(db, product_id=pid, category_id=cid)
    return success_response(data=[product_service.serialize_product(p) for p in products])


@router.get("/product-category/{slug}")
async def products_by_category(slug: str, db: AsyncSession = Depends(get_db)):
    category, products = await product_service.list_by_category_slug(db, slug)
    return success_response(
        data={
            "category": {"id": category.id, "name": category.name, "slug": category.slug},
            "products": [product_service.serialize_product(p) for p in products],
        }
    )
