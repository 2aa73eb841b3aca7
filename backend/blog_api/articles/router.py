# backend/blog_api/articles/router.py
from typing import List, Optional

from fastapi import APIRouter, File, Form, Query, UploadFile, status

from ..auth.dependencies import AdminUser
from ..auth.schema import Identity
from ..comments.schemas import CommentOut
from ..database import StoreDep
from ..errors import ValidationError
from ..schemas import MessageResponse
from . import service
from .schemas import ArticleCreate, ArticleOut, ArticleUpdate, ImageUploadResponse
from .uploads import store_image

router = APIRouter(prefix="/articles", tags=["articles"])


def _filled(upload: Optional[UploadFile]) -> Optional[UploadFile]:
    # browsers send an empty part when no file was chosen
    if upload is None or not upload.filename:
        return None
    return upload


@router.get("", response_model=List[ArticleOut])
async def list_articles(store: StoreDep, category_id: Optional[str] = Query(None, alias="categoryId")):
    return service.list_articles(store, category_id=category_id)


@router.get("/{article_id}", response_model=ArticleOut)
async def get_article(article_id: str, store: StoreDep):
    return service.get_or_404(store, article_id)


@router.get("/{article_id}/comments", response_model=List[CommentOut])
async def list_article_comments(article_id: str, store: StoreDep):
    return service.list_article_comments(store, article_id)


@router.post("", response_model=ArticleOut, status_code=status.HTTP_201_CREATED)
async def create_article(body: ArticleCreate, store: StoreDep, admin: Identity = AdminUser):
    return await service.create_article(store, body, default_author=admin.username)


@router.post("/upload", response_model=ImageUploadResponse)
async def upload_image(image: Optional[UploadFile] = File(None), admin: Identity = AdminUser):
    upload = _filled(image)
    if upload is None:
        raise ValidationError("No image file was provided")
    stored = await store_image(upload)
    return {"message": "Image uploaded successfully", "image_path": stored.path}


@router.post("/with-image", response_model=ArticleOut, status_code=status.HTTP_201_CREATED)
async def create_article_with_image(
    store: StoreDep,
    title: str = Form(..., min_length=1),
    content: str = Form(..., min_length=1),
    category_id: Optional[str] = Form(None, alias="categoryId"),
    author: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    admin: Identity = AdminUser,
):
    body = ArticleCreate(title=title, content=content, category_id=category_id, author=author)
    return await service.create_article(store, body, default_author=admin.username, image=_filled(image))


@router.put("/{article_id}", response_model=ArticleOut)
async def update_article(article_id: str, body: ArticleUpdate, store: StoreDep, admin: Identity = AdminUser):
    return await service.update_article(store, article_id, body)


@router.put("/{article_id}/with-image", response_model=ArticleOut)
async def update_article_with_image(
    article_id: str,
    store: StoreDep,
    title: Optional[str] = Form(None, min_length=1),
    content: Optional[str] = Form(None, min_length=1),
    category_id: Optional[str] = Form(None, alias="categoryId"),
    author: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    admin: Identity = AdminUser,
):
    fields = {"title": title, "content": content, "category_id": category_id, "author": author}
    # multipart forms cannot express null, so only submitted fields are applied
    body = ArticleUpdate(**{key: value for key, value in fields.items() if value is not None})
    return await service.update_article(store, article_id, body, image=_filled(image))


@router.delete("/{article_id}", response_model=MessageResponse)
async def delete_article(article_id: str, store: StoreDep, admin: Identity = AdminUser):
    await service.delete_article(store, article_id)
    return {"message": "Article and its comments deleted successfully"}
