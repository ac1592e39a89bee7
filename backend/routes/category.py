"""
Category endpoints: public listing, admin management.
"""

import logging

from fastapi import APIRouter, Depends, Path
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from db_models import User
from deps import require_admin
from domain.errors import NotFoundError
from domain.responses import success_response
from models import CategoryRequest
from services import category_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/category", tags=["category"])


@router.post("/create-category", status_code=201)
async def create_category(
    request: CategoryRequest,
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    category = await category_service.create_category(db, name=request.name)
    if category is None:
        return JSONResponse(status_code=200, content={"success": False, "message": "Category already exists"})
    await db.commit()
    return success_response(data=category_service.serialize_category(category))


@router.put("/update-category/{category_id}")
async def update_category(
    request: CategoryRequest,
    category_id: int = Path(..., ge=1),
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    category = await category_service.update_category(db, category_id=category_id, name=request.name)
    await db.commit()
    return success_response(data=category_service.serialize_category(category))


@router.get("/get-category")
async def list_categories(db: AsyncSession = Depends(get_db)):
    categories = await category_service.list_categories(db)
    return success_response(data=[category_service.serialize_category(c) for c in categories])


@router.get("/single-category/{slug}")
async def get_category(slug: str, db: AsyncSession = Depends(get_db)):
    category = await category_service.get_by_slug(db, slug)
    if not category:
        raise NotFoundError("Category", slug)
    return success_response(data=category_service.serialize_category(category))


@router.delete("/delete-category/{category_id}")
async def delete_category(
    category_id: int = Path(..., ge=1),
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    await category_service.delete_category(db, category_id=category_id)
    await db.commit()
    return {"success": True, "message": "Category deleted successfully"}
