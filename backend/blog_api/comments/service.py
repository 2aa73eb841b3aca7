import logging
from typing import List, Optional

from ..articles import service as article_service
from ..auth.dependencies import ensure_owner_or_admin
from ..auth.schema import Identity
from ..database import RecordStore, Table, create_id
from ..errors import NotFoundError, ValidationError
from .models import COMMENTS, Comment
from .schemas import CommentCreate, CommentUpdate

logger = logging.getLogger(__name__)


def comments_table(store: RecordStore) -> Table[Comment]:
    return store.table(COMMENTS, Comment)


def list_comments(store: RecordStore, *, article_id: Optional[str] = None) -> List[Comment]:
    table = comments_table(store)
    if article_id:
        return table.filter(article_id=article_id)
    return table.all()


def get_or_404(store: RecordStore, comment_id: str) -> Comment:
    comment = comments_table(store).find_one(id=comment_id)
    if comment is None:
        raise NotFoundError("Comment not found")
    return comment


async def create_comment(store: RecordStore, data: CommentCreate, author: Identity) -> Comment:
    comment = Comment(
        id=create_id(),
        content=data.content,
        article_id=data.article_id,
        author=author.username,
        user_id=author.id,
    )
    # the article check and the insert share the lock with delete_article's cascade
    async with store.transaction():
        if article_service.get_by_id(store, data.article_id) is None:
            raise ValidationError("Article not found")
        comment = comments_table(store).add(comment)
    logger.info(f"User {author.id} commented on article {data.article_id} (comment {comment.id})")
    return comment


async def update_comment(store: RecordStore, comment_id: str, data: CommentUpdate, actor: Identity) -> Comment:
    comment = get_or_404(store, comment_id)
    ensure_owner_or_admin(comment.user_id, actor)

    update_data = {field: value for field, value in data.model_dump(exclude_unset=True).items() if value is not None}
    if not update_data:
        return comment

    updated = await comments_table(store).update(update_data, id=comment_id)
    if updated is None:
        raise NotFoundError("Comment not found")
    logger.info(f"Comment {comment_id} updated by {actor.id}")
    return updated


async def delete_comment(store: RecordStore, comment_id: str, actor: Identity) -> None:
    comment = get_or_404(store, comment_id)
    ensure_owner_or_admin(comment.user_id, actor)

    await comments_table(store).remove(id=comment_id)
    logger.info(f"Comment {comment_id} deleted by {actor.id}")
