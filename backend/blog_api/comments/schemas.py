from datetime import datetime
from typing import Optional

from pydantic import Field

from ..models import CustomModel


class CommentCreate(CustomModel):
    content: str = Field(..., min_length=1, json_schema_extra={"example": "Great article!"})
    article_id: str = Field(..., min_length=1)


class CommentUpdate(CustomModel):
    content: Optional[str] = Field(None, min_length=1)


class CommentOut(CustomModel):
    id: str
    content: str
    article_id: str
    author: str
    user_id: Optional[str] = None
    created_at: datetime
