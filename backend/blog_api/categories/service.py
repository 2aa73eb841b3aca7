import logging
from typing import List, Optional

from ..articles.models import ARTICLES, Article
from ..database import DuplicateRecordError, RecordStore, Table, create_id
from ..errors import ConflictError, NotFoundError
from .models import CATEGORIES, Category
from .schemas import CategoryCreate, CategoryUpdate

logger = logging.getLogger(__name__)


def categories_table(store: RecordStore) -> Table[Category]:
    return store.table(CATEGORIES, Category)


def list_categories(store: RecordStore) -> List[Category]:
    return categories_table(store).all()


def get_by_id(store: RecordStore, category_id: str) -> Optional[Category]:
    return categories_table(store).find_one(id=category_id)


def get_or_404(store: RecordStore, category_id: str) -> Category:
    category = get_by_id(store, category_id)
    if category is None:
        raise NotFoundError("Category not found")
    return category


def list_category_articles(store: RecordStore, category_id: str) -> List[Article]:
    get_or_404(store, category_id)
    return store.table(ARTICLES, Article).filter(category_id=category_id)


async def create_category(store: RecordStore, data: CategoryCreate) -> Category:
    category = Category(id=create_id(), title=data.title, description=data.description or "")
    try:
        category = await categories_table(store).insert(category, unique_on=("title",))
    except DuplicateRecordError as e:
        raise ConflictError("A category with this title already exists") from e
    logger.info(f"Created category {category.title!r} (id={category.id})")
    return category


async def update_category(store: RecordStore, category_id: str, data: CategoryUpdate) -> Category:
    get_or_404(store, category_id)

    update_data = data.model_dump(exclude_unset=True)
    # explicit nulls leave the stored value untouched
    update_data = {field: value for field, value in update_data.items() if value is not None}

    try:
        updated = await categories_table(store).update(update_data, unique_on=("title",), id=category_id)
    except DuplicateRecordError as e:
        raise ConflictError("A category with this title already exists") from e
    if updated is None:
        raise NotFoundError("Category not found")
    logger.info(f"Updated category {category_id}: {sorted(update_data)}")
    return updated


async def delete_category(store: RecordStore, category_id: str) -> None:
    """Delete a category. Refused while any article still references it."""
    async with store.transaction():
        get_or_404(store, category_id)

        articles_count = store.table(ARTICLES, Article).count(category_id=category_id)
        if articles_count > 0:
            raise ConflictError(
                "This category cannot be deleted because articles depend on it",
                extra={"articlesCount": articles_count},
            )

        categories_table(store).delete(id=category_id)
    logger.info(f"Deleted category {category_id}")
