from typing import Optional

from pydantic import Field

from ..models import CustomModel


class CategoryCreate(CustomModel):
    title: str = Field(..., min_length=1, max_length=200, json_schema_extra={"example": "Technology"})
    description: Optional[str] = Field(None, json_schema_extra={"example": "Articles about technology"})


class CategoryUpdate(CustomModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None


class CategoryOut(CustomModel):
    id: str
    title: str
    description: str = ""
