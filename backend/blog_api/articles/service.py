import logging
from typing import List, Optional

from fastapi import UploadFile

from ..categories import service as category_service
from ..comments.models import COMMENTS, Comment
from ..config import settings
from ..database import RecordStore, Table, create_id
from ..errors import NotFoundError, ValidationError
from .models import ARTICLES, Article
from .schemas import ArticleCreate, ArticleUpdate
from .uploads import store_image

logger = logging.getLogger(__name__)


def articles_table(store: RecordStore) -> Table[Article]:
    return store.table(ARTICLES, Article)


def list_articles(store: RecordStore, *, category_id: Optional[str] = None) -> List[Article]:
    table = articles_table(store)
    if category_id:
        return table.filter(category_id=category_id)
    return table.all()


def get_by_id(store: RecordStore, article_id: str) -> Optional[Article]:
    return articles_table(store).find_one(id=article_id)


def get_or_404(store: RecordStore, article_id: str) -> Article:
    article = get_by_id(store, article_id)
    if article is None:
        raise NotFoundError("Article not found")
    return article


def list_article_comments(store: RecordStore, article_id: str) -> List[Comment]:
    get_or_404(store, article_id)
    return store.table(COMMENTS, Comment).filter(article_id=article_id)


def _ensure_category_exists(store: RecordStore, category_id: str) -> None:
    if category_service.get_by_id(store, category_id) is None:
        raise ValidationError("Category not found")


async def create_article(
    store: RecordStore,
    data: ArticleCreate,
    *,
    default_author: Optional[str] = None,
    image: Optional[UploadFile] = None,
) -> Article:
    """
    Create an article after checking its category reference.

    When ``image`` is given it is stored only once validation has passed and
    its public path replaces ``data.image``. The category is checked again
    under the store lock, so a concurrent category delete cannot leave the
    article pointing at nothing.
    """
    category_id = data.category_id or None
    if category_id:
        _ensure_category_exists(store, category_id)

    image_path = data.image or None
    if image is not None:
        image_path = (await store_image(image)).path

    article = Article(
        id=create_id(),
        title=data.title,
        content=data.content,
        image=image_path,
        category_id=category_id,
        author=data.author or default_author or settings.DEFAULT_ARTICLE_AUTHOR,
    )
    async with store.transaction():
        if category_id:
            _ensure_category_exists(store, category_id)
        article = articles_table(store).add(article)
    logger.info(f"Created article {article.id} ({article.title!r})")
    return article


async def update_article(
    store: RecordStore,
    article_id: str,
    data: ArticleUpdate,
    *,
    image: Optional[UploadFile] = None,
) -> Article:
    article = get_or_404(store, article_id)

    update_data = data.model_dump(exclude_unset=True)
    # required text fields cannot be cleared
    for field in ("title", "content", "author"):
        if field in update_data and update_data[field] is None:
            del update_data[field]

    new_category = None
    if "category_id" in update_data:
        update_data["category_id"] = update_data["category_id"] or None
        if update_data["category_id"] != article.category_id:
            new_category = update_data["category_id"]
        if new_category:
            _ensure_category_exists(store, new_category)

    if image is not None:
        update_data["image"] = (await store_image(image)).path

    if not update_data:
        return article

    async with store.transaction():
        if new_category:
            _ensure_category_exists(store, new_category)
        updated = articles_table(store).patch(update_data, id=article_id)
        if updated is None:
            raise NotFoundError("Article not found")
    logger.info(f"Updated article {article_id}: {sorted(update_data)}")
    return updated


async def delete_article(store: RecordStore, article_id: str) -> int:
    """Delete an article and every comment attached to it. Returns the number of comments removed."""
    async with store.transaction():
        get_or_404(store, article_id)
        removed_comments = store.table(COMMENTS, Comment).delete(article_id=article_id)
        articles_table(store).delete(id=article_id)
    logger.info(f"Deleted article {article_id} with {removed_comments} comment(s)")
    return removed_comments
