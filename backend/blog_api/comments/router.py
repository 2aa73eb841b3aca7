from typing import List, Optional

from fastapi import APIRouter, Query, status

from ..auth.dependencies import CurrentUser
from ..auth.schema import Identity
from ..database import StoreDep
from ..schemas import MessageResponse
from . import service
from .schemas import CommentCreate, CommentOut, CommentUpdate

router = APIRouter(prefix="/comments", tags=["comments"])


@router.get("", response_model=List[CommentOut])
async def list_comments(store: StoreDep, article_id: Optional[str] = Query(None, alias="articleId")):
    return service.list_comments(store, article_id=article_id)


@router.get("/{comment_id}", response_model=CommentOut)
async def get_comment(comment_id: str, store: StoreDep):
    return service.get_or_404(store, comment_id)


@router.post("", response_model=CommentOut, status_code=status.HTTP_201_CREATED)
async def create_comment(body: CommentCreate, store: StoreDep, current_user: Identity = CurrentUser):
    return await service.create_comment(store, body, current_user)


@router.put("/{comment_id}", response_model=CommentOut)
async def update_comment(
    comment_id: str,
    body: CommentUpdate,
    store: StoreDep,
    current_user: Identity = CurrentUser,
):
    return await service.update_comment(store, comment_id, body, current_user)


@router.delete("/{comment_id}", response_model=MessageResponse)
async def delete_comment(comment_id: str, store: StoreDep, current_user: Identity = CurrentUser):
    await service.delete_comment(store, comment_id, current_user)
    return {"message": "Comment deleted successfully"}
