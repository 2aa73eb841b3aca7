from typing import List

from fastapi import APIRouter, status

from ..articles.schemas import ArticleOut
from ..auth.dependencies import AdminUser
from ..auth.schema import Identity
from ..database import StoreDep
from ..schemas import MessageResponse
from . import service
from .schemas import CategoryCreate, CategoryOut, CategoryUpdate

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("", response_model=List[CategoryOut])
async def list_categories(store: StoreDep):
    return service.list_categories(store)


@router.get("/{category_id}", response_model=CategoryOut)
async def get_category(category_id: str, store: StoreDep):
    return service.get_or_404(store, category_id)


@router.get("/{category_id}/articles", response_model=List[ArticleOut])
async def list_category_articles(category_id: str, store: StoreDep):
    return service.list_category_articles(store, category_id)


@router.post("", response_model=CategoryOut, status_code=status.HTTP_201_CREATED)
async def create_category(body: CategoryCreate, store: StoreDep, admin: Identity = AdminUser):
    return await service.create_category(store, body)


@router.put("/{category_id}", response_model=CategoryOut)
async def update_category(category_id: str, body: CategoryUpdate, store: StoreDep, admin: Identity = AdminUser):
    return await service.update_category(store, category_id, body)


@router.delete("/{category_id}", response_model=MessageResponse)
async def delete_category(category_id: str, store: StoreDep, admin: Identity = AdminUser):
    await service.delete_category(store, category_id)
    return {"message": "Category deleted successfully"}
