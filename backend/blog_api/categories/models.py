# backend/blog_api/categories/models.py
from ..models import CustomModel

CATEGORIES = "categories"


class Category(CustomModel):
    id: str
    title: str
    description: str = ""
