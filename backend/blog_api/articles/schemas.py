from datetime import datetime
from typing import Optional

from pydantic import Field

from ..models import CustomModel


class ArticleCreate(CustomModel):
    title: str = Field(..., min_length=1, json_schema_extra={"example": "Hello world"})
    content: str = Field(..., min_length=1)
    image: Optional[str] = Field(None, description="Path returned by POST /api/articles/upload")
    category_id: Optional[str] = None
    author: Optional[str] = Field(None, description="Defaults to the authenticated admin's username")


class ArticleUpdate(CustomModel):
    """Partial update. Omitted fields keep their value; ``categoryId: null`` detaches the category."""
    title: Optional[str] = Field(None, min_length=1)
    content: Optional[str] = Field(None, min_length=1)
    image: Optional[str] = None
    category_id: Optional[str] = None
    author: Optional[str] = None


class ArticleOut(CustomModel):
    id: str
    title: str
    content: str
    image: Optional[str] = None
    category_id: Optional[str] = None
    author: str
    created_at: datetime


class ImageUploadResponse(CustomModel):
    message: str
    image_path: str
