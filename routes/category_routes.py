from fastapi import APIRouter, HTTPException
from typing import List, Optional
from schemas.category import Category
from schemas.event import Event
from crud import category_crud

router = APIRouter(
    prefix="/categories",
    tags=["categories"]
)


@router.get("", response_model=List[Category])
async def get_all_categories():
    return await category_crud.get_all_categories()


@router.get("/{category_id}", response_model=Category)
async def get_category(category_id: str):
    category = await category_crud.get_category(category_id)
    if not category:
        raise HTTPException(status_code=404, detail="Categoria nu a fost găsită")
    return category


@router.get("/{category_id}/events", response_model=List[Event])
async def get_category_events(category_id: str, subcategory: Optional[str] = None):
    if not await category_crud.category_exists(category_id):
        raise HTTPException(status_code=404, detail="Categoria nu a fost găsită")
    return await category_crud.get_category_events(category_id, subcategory)
