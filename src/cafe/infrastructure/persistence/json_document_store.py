"""JSON-file-backed implementation of DocumentStore.

One file per collection under ``<data_dir>/<db_name>/``::

    {"sequence": 12, "indexes": ["name", "category", "quantity"], "records": [...]}

``sequence`` is the last id handed out, so ids are never reused after a
delete. Every write replaces the whole file through a temporary sibling,
which makes each single-record operation all-or-nothing.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from cafe.domain.exceptions import NotFoundError, StoreError
from cafe.domain.repository.document_store import (
    COLLECTION_INDEXES,
    PROTECTED_FIELDS,
    DocumentStore,
)

logger = logging.getLogger(__name__)


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class JsonDocumentStore(DocumentStore):

    def __init__(
        self,
        data_dir: Path,
        db_name: str = "cafe_parisien_db",
        collections: dict[str, tuple[str, ...]] | None = None,
    ) -> None:
        self._root = Path(data_dir) / db_name
        self._collections = dict(collections or COLLECTION_INDEXES)
        self._initialized = False

    @property
    def root(self) -> Path:
        return self._root

    @property
    def is_open(self) -> bool:
        return self._initialized

    # --- Lifecycle ------------------------------------------------------------

    def init(self) -> None:
        if self._initialized:
            return
        try:
            self._root.mkdir(parents=True, exist_ok=True)
            for name, indexes in self._collections.items():
                path = self._path(name)
                if not path.exists():
                    self._write(path, {"sequence": 0, "indexes": list(indexes), "records": []})
                    logger.info("Created collection '%s' in %s", name, self._root)
        except OSError as exc:
            logger.error("Cannot open store at %s: %s", self._root, exc)
            raise StoreError(f"Cannot open store at {self._root}: {exc}") from exc
        self._initialized = True
        logger.debug("Store opened at %s", self._root)

    def close(self) -> None:
        if self._initialized:
            self._initialized = False
            logger.debug("Store closed at %s", self._root)

    # --- DocumentStore interface ----------------------------------------------

    def insert(self, collection: str, record: dict[str, Any]) -> int:
        data = self._load(collection)
        new_id = data["sequence"] + 1
        now = utc_now()
        stored = {**record, "id": new_id, "created_at": now, "updated_at": now}
        data["sequence"] = new_id
        data["records"].append(stored)
        self._persist(collection, data)
        return new_id

    def update(self, collection: str, record_id: int, fields: dict[str, Any]) -> dict[str, Any]:
        data = self._load(collection)
        for i, raw in enumerate(data["records"]):
            if raw["id"] == record_id:
                changes = {k: v for k, v in fields.items() if k not in PROTECTED_FIELDS}
                merged = {**raw, **changes, "updated_at": utc_now()}
                data["records"][i] = merged
                self._persist(collection, data)
                return merged
        raise NotFoundError(f"Record #{record_id} not found in '{collection}'")

    def delete(self, collection: str, record_id: int) -> bool:
        data = self._load(collection)
        remaining = [raw for raw in data["records"] if raw["id"] != record_id]
        if len(remaining) == len(data["records"]):
            logger.debug("Delete of missing record #%s in '%s' ignored", record_id, collection)
            return True
        data["records"] = remaining
        self._persist(collection, data)
        return True

    def get_by_id(self, collection: str, record_id: int) -> dict[str, Any] | None:
        for raw in self._load(collection)["records"]:
            if raw["id"] == record_id:
                return raw
        return None

    def get_all(self, collection: str) -> list[dict[str, Any]]:
        return self._load(collection)["records"]

    def clear(self, collection: str) -> bool:
        data = self._load(collection)
        data["records"] = []
        self._persist(collection, data)
        return True

    def indexes(self, collection: str) -> tuple[str, ...]:
        return tuple(self._load(collection).get("indexes", ()))

    # --- File helpers ---------------------------------------------------------

    def _path(self, collection: str) -> Path:
        return self._root / f"{collection}.json"

    def _load(self, collection: str) -> dict[str, Any]:
        self.init()
        if collection not in self._collections:
            raise StoreError(f"Unknown collection '{collection}'")
        path = self._path(collection)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            # Removed behind our back; recreate it empty like init() would.
            data = {"sequence": 0, "indexes": list(self._collections[collection]), "records": []}
        except (OSError, ValueError) as exc:
            logger.error("Cannot read collection '%s' from %s: %s", collection, path, exc)
            raise StoreError(f"Cannot read collection '{collection}': {exc}") from exc
        if not isinstance(data, dict) or not isinstance(data.get("records"), list):
            raise StoreError(f"Collection file {path} is corrupt")
        if not all(isinstance(r, dict) and "id" in r for r in data["records"]):
            raise StoreError(f"Collection file {path} holds a record without an id")
        data.setdefault("sequence", max((r["id"] for r in data["records"]), default=0))
        return data

    def _persist(self, collection: str, data: dict[str, Any]) -> None:
        try:
            self._write(self._path(collection), data)
        except (OSError, TypeError, ValueError) as exc:
            logger.error("Write to collection '%s' aborted: %s", collection, exc)
            raise StoreError(f"Write to collection '{collection}' aborted: {exc}") from exc

    @staticmethod
    def _write(path: Path, data: dict[str, Any]) -> None:
        payload = json.dumps(data, indent=2, ensure_ascii=False) + "\n"
        tmp_path = path.with_name(path.name + ".tmp")
        tmp_path.write_text(payload, encoding="utf-8")
        tmp_path.replace(path)
