import anyio
import pytest

from blog_api import database
from blog_api.articles import service as article_service
from blog_api.articles.models import Article
from blog_api.articles.schemas import ArticleCreate, ArticleUpdate
from blog_api.auth.schema import Identity
from blog_api.categories import service as category_service
from blog_api.categories.models import Category
from blog_api.categories.schemas import CategoryCreate, CategoryUpdate
from blog_api.comments import service as comment_service
from blog_api.comments.models import Comment
from blog_api.comments.schemas import CommentCreate
from blog_api.errors import BlogError, ConflictError, StorageError, ValidationError

pytestmark = pytest.mark.anyio

ALICE = Identity(id="u1", username="alice", role="user")


async def _run_while_locked(store, *calls):
    """
    Start every call while another writer holds the store lock.

    Each call gets past whatever it does before taking the lock, then they
    all queue up and run in the given order once the lock is released.
    Returns each call's result or the BlogError it raised.
    """
    results = [None] * len(calls)

    async def run(index, func, *args):
        try:
            results[index] = await func(*args)
        except BlogError as e:
            results[index] = e

    async with anyio.create_task_group() as tg:
        async with store.transaction():
            for index, (func, *args) in enumerate(calls):
                tg.start_soon(run, index, func, *args)
            await anyio.sleep(0.05)
    return results


@pytest.fixture()
async def article(store):
    return await article_service.articles_table(store).insert(
        Article(id="a1", title="Post", content="Body", author="admin")
    )


async def test_comment_racing_article_delete_leaves_no_orphan(store, article):
    await comment_service.comments_table(store).insert(
        Comment(id="m1", content="old", article_id="a1", author="alice", user_id="u1")
    )

    removed, comment = await _run_while_locked(
        store,
        (article_service.delete_article, store, "a1"),
        (comment_service.create_comment, store, CommentCreate(content="late", article_id="a1"), ALICE),
    )

    assert removed == 1
    assert isinstance(comment, ValidationError)
    assert comment_service.comments_table(store).all() == []
    assert article_service.get_by_id(store, "a1") is None


async def test_article_racing_category_delete_keeps_reference_valid(store):
    await category_service.categories_table(store).insert(Category(id="c1", title="News"))

    created, deleted = await _run_while_locked(
        store,
        (article_service.create_article, store, ArticleCreate(title="Post", content="Body", category_id="c1")),
        (category_service.delete_category, store, "c1"),
    )

    assert created.category_id == "c1"
    assert isinstance(deleted, ConflictError)
    assert deleted.extra == {"articlesCount": 1}
    assert category_service.get_by_id(store, "c1") is not None


async def test_category_delete_before_article_create_rejects_the_article(store):
    await category_service.categories_table(store).insert(Category(id="c1", title="News"))

    deleted, created = await _run_while_locked(
        store,
        (category_service.delete_category, store, "c1"),
        (article_service.create_article, store, ArticleCreate(title="Post", content="Body", category_id="c1")),
    )

    assert deleted is None
    assert isinstance(created, ValidationError)
    assert article_service.articles_table(store).all() == []


async def test_article_moved_to_category_being_deleted(store, article):
    await category_service.categories_table(store).insert(Category(id="c1", title="News"))

    deleted, updated = await _run_while_locked(
        store,
        (category_service.delete_category, store, "c1"),
        (article_service.update_article, store, "a1", ArticleUpdate(category_id="c1")),
    )

    assert deleted is None
    assert isinstance(updated, ValidationError)
    assert article_service.get_by_id(store, "a1").category_id is None


async def test_rename_racing_create_keeps_titles_unique(store):
    await category_service.categories_table(store).insert(Category(id="c1", title="News"))

    created, renamed = await _run_while_locked(
        store,
        (category_service.create_category, store, CategoryCreate(title="Tech")),
        (category_service.update_category, store, "c1", CategoryUpdate(title="Tech")),
    )

    assert created.title == "Tech"
    assert isinstance(renamed, ConflictError)
    titles = [c.title for c in category_service.list_categories(store)]
    assert sorted(titles) == ["News", "Tech"]


async def test_article_delete_is_all_or_nothing(store, article, monkeypatch):
    await comment_service.comments_table(store).insert(
        Comment(id="m1", content="c", article_id="a1", author="alice", user_id="u1")
    )

    def broken_write(path, text):
        raise OSError("disk full")

    monkeypatch.setattr(database, "_atomic_write", broken_write)
    with pytest.raises(StorageError):
        await article_service.delete_article(store, "a1")

    assert article_service.get_by_id(store, "a1") is not None
    assert [c.id for c in comment_service.comments_table(store).all()] == ["m1"]
