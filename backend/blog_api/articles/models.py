# backend/blog_api/articles/models.py
from datetime import datetime
from typing import Optional

from pydantic import Field

from ..models import CustomModel, utcnow

ARTICLES = "articles"


class Article(CustomModel):
    id: str
    title: str
    content: str
    image: Optional[str] = None  # public path of the uploaded image
    category_id: Optional[str] = None
    author: str
    created_at: datetime = Field(default_factory=utcnow)
