"""JSON-file record store.

The whole database is one JSON document holding four collections. It is
loaded once at startup, kept in memory, and rewritten in full after every
mutation. Mutations from all tables are serialized by a single lock so two
concurrent writers can never lose each other's updates.

Operations that must check and write atomically (referential checks,
cascades) run inside ``store.transaction()``; the ``add``/``patch``/``delete``
table methods stage changes there and one flush commits them on exit.
"""

import asyncio
import json
import logging
import os
import tempfile
import uuid
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Annotated, Any, AsyncIterator, Generic, Iterable, Optional, TypeVar

from fastapi import Depends, Request
from fastapi.concurrency import run_in_threadpool

from .errors import StorageError
from .models import CustomModel

logger = logging.getLogger(__name__)

COLLECTIONS = ("users", "categories", "articles", "comments")

RecordT = TypeVar("RecordT", bound=CustomModel)


def create_id() -> str:
    """Short random identifier used for every record."""
    return uuid.uuid4().hex[:10]


class DuplicateRecordError(Exception):
    def __init__(self, collection: str, field: str, value: Any):
        super().__init__(f"{collection}.{field} already contains {value!r}")
        self.collection = collection
        self.field = field
        self.value = value


class RecordStore:
    def __init__(self, path: str | os.PathLike):
        self.path = Path(path)
        self._data: dict[str, list[dict[str, Any]]] = {name: [] for name in COLLECTIONS}
        self._lock = asyncio.Lock()
        self._dirty = False

    async def load(self) -> "RecordStore":
        """Read the document from disk, creating it when absent."""
        if not self.path.exists():
            logger.info(f"Database file {self.path} not found, creating an empty one")
            async with self._lock:
                await self._flush()
            return self
        try:
            raw = await run_in_threadpool(self.path.read_text, encoding="utf-8")
            payload = json.loads(raw) if raw.strip() else {}
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError("Failed to read database", extra={"error": str(e)}) from e
        if not isinstance(payload, dict):
            raise StorageError("Failed to read database", extra={"error": "top-level value is not an object"})
        for name in COLLECTIONS:
            items = payload.get(name)
            self._data[name] = list(items) if isinstance(items, list) else []
        logger.info(
            "Loaded %s: %s",
            self.path,
            ", ".join(f"{name}={len(self._data[name])}" for name in COLLECTIONS),
        )
        return self

    def table(self, name: str, model: type[RecordT]) -> "Table[RecordT]":
        if name not in self._data:
            raise KeyError(f"Unknown collection: {name}")
        return Table(self, name, model)

    def snapshot(self) -> dict[str, list[dict[str, Any]]]:
        return {name: [dict(item) for item in items] for name, items in self._data.items()}

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator["RecordStore"]:
        """
        Hold the store lock for a group of reads and writes.

        Staged changes are flushed once when the block exits. If the block
        raises, or the flush fails, the in-memory collections are restored.
        """
        async with self._lock:
            # records are replaced, never mutated in place, so shallow list copies suffice
            previous = {name: list(items) for name, items in self._data.items()}
            self._dirty = False
            try:
                yield self
                if self._dirty:
                    await self._flush()
            except BaseException:
                self._data = previous
                raise
            finally:
                self._dirty = False

    def _require_transaction(self) -> None:
        if not self._lock.locked():
            raise RuntimeError("Record changes must be made inside store.transaction()")
        self._dirty = True

    async def _flush(self) -> None:
        """Write the whole document atomically. Caller must hold the lock."""
        document = json.dumps(self._data, ensure_ascii=False, indent=2)
        try:
            await run_in_threadpool(_atomic_write, self.path, document)
        except OSError as e:
            logger.exception(f"Failed to write {self.path}")
            raise StorageError("Failed to write database", extra={"error": str(e)}) from e


def _atomic_write(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(text)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp, path)
    except BaseException:
        if os.path.exists(tmp):
            os.unlink(tmp)
        raise


def _matches(item: dict[str, Any], criteria: dict[str, Any]) -> bool:
    return all(item.get(key) == value for key, value in criteria.items())


class Table(Generic[RecordT]):
    """Typed view over one collection of a ``RecordStore``.

    Filters are given as keyword arguments using the model's attribute names
    (``category_id=...``); they are matched exactly against the stored
    camelCase fields.
    """

    def __init__(self, store: RecordStore, name: str, model: type[RecordT]):
        self.store = store
        self.name = name
        self.model = model

    @property
    def _items(self) -> list[dict[str, Any]]:
        return self.store._data[self.name]

    def _criteria(self, fields: dict[str, Any]) -> dict[str, Any]:
        return {self._alias(key): value for key, value in fields.items()}

    def _alias(self, field: str) -> str:
        info = self.model.model_fields.get(field)
        if info is None:
            raise KeyError(f"{self.model.__name__} has no field {field!r}")
        return info.alias or field

    def _to_record(self, item: dict[str, Any]) -> RecordT:
        return self.model.model_validate(item)

    def _to_item(self, record: RecordT) -> dict[str, Any]:
        return record.model_dump(mode="json", by_alias=True)

    def _check_unique(self, item: dict[str, Any], fields: Iterable[str], *, skip_id: Optional[str] = None) -> None:
        for field in fields:
            key = self._alias(field)
            for existing in self._items:
                if existing["id"] != skip_id and existing.get(key) == item[key]:
                    raise DuplicateRecordError(self.name, key, item[key])

    def all(self) -> list[RecordT]:
        return [self._to_record(item) for item in self._items]

    def find_one(self, **fields: Any) -> Optional[RecordT]:
        criteria = self._criteria(fields)
        for item in self._items:
            if _matches(item, criteria):
                return self._to_record(item)
        return None

    def filter(self, **fields: Any) -> list[RecordT]:
        criteria = self._criteria(fields)
        return [self._to_record(item) for item in self._items if _matches(item, criteria)]

    def count(self, **fields: Any) -> int:
        criteria = self._criteria(fields)
        return sum(1 for item in self._items if _matches(item, criteria))

    # staged writes: only valid inside store.transaction()

    def add(self, record: RecordT, *, unique_on: Iterable[str] = ()) -> RecordT:
        self.store._require_transaction()
        item = self._to_item(record)
        self._check_unique(item, ("id", *unique_on))
        self._items.append(item)
        logger.debug(f"Inserted {self.name}/{item['id']}")
        return self._to_record(item)

    def patch(self, patch: dict[str, Any], *, unique_on: Iterable[str] = (), **fields: Any) -> Optional[RecordT]:
        self.store._require_transaction()
        criteria = self._criteria(fields)
        for index, item in enumerate(self._items):
            if not _matches(item, criteria):
                continue
            merged = self._to_item(self._to_record(item).model_copy(update=patch))
            merged["id"] = item["id"]
            self._check_unique(merged, unique_on, skip_id=item["id"])
            self._items[index] = merged
            logger.debug(f"Updated {self.name}/{item['id']}")
            return self._to_record(merged)
        return None

    def delete(self, **fields: Any) -> int:
        self.store._require_transaction()
        criteria = self._criteria(fields)
        kept = [item for item in self._items if not _matches(item, criteria)]
        removed = len(self._items) - len(kept)
        if removed:
            self.store._data[self.name] = kept
            logger.debug(f"Removed {removed} record(s) from {self.name}")
        return removed

    # single-statement writes, each in its own transaction

    async def insert(self, record: RecordT, *, unique_on: Iterable[str] = ()) -> RecordT:
        async with self.store.transaction():
            return self.add(record, unique_on=unique_on)

    async def update(self, patch: dict[str, Any], *, unique_on: Iterable[str] = (), **fields: Any) -> Optional[RecordT]:
        """Merge ``patch`` into the first matching record; ``None`` if nothing matches."""
        async with self.store.transaction():
            return self.patch(patch, unique_on=unique_on, **fields)

    async def remove(self, **fields: Any) -> int:
        """Delete every matching record and return how many were removed."""
        async with self.store.transaction():
            return self.delete(**fields)


def get_store(request: Request) -> RecordStore:
    return request.app.state.store


# Annotated alias: routes declare `store: StoreDep` to receive the record store.
StoreDep = Annotated[RecordStore, Depends(get_store)]
