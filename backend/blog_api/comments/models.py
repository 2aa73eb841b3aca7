# backend/blog_api/comments/models.py
from datetime import datetime
from typing import Optional

from pydantic import Field

from ..models import CustomModel, utcnow

COMMENTS = "comments"


class Comment(CustomModel):
    id: str
    content: str
    article_id: str
    author: str
    user_id: Optional[str] = None  # owner; absent on comments created before authentication was required
    created_at: datetime = Field(default_factory=utcnow)
