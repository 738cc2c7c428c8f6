"""TinyDB document store"""

import copy
import logging
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from tinydb import TinyDB, Query
from tinydb.storages import MemoryStorage

from yamlrg.errors import DownstreamFailure, NotFound, PortalError

logger = logging.getLogger(__name__)

# Query helper
Q = Query()


def timestamp() -> str:
    """Current UTC time as an ISO-8601 string"""
    return datetime.now(timezone.utc).isoformat()


class DocumentStore:
    """Keyed document store over named TinyDB tables.

    Every document carries its key in an ``id`` field. Reads return deep
    copies so callers can never mutate the stored document in place.
    """

    USERS = "users"
    JOIN_REQUESTS = "joinRequests"
    WORKSHOPS = "workshops"
    PRESENTATION_REQUESTS = "presentationRequests"
    IDENTITIES = "identities"

    COLLECTIONS = (USERS, JOIN_REQUESTS, WORKSHOPS, PRESENTATION_REQUESTS, IDENTITIES)

    def __init__(self, db_path: Optional[str] = None, in_memory: bool = False):
        if db_path is None and not in_memory:
            raise ValueError("db_path is required unless in_memory is set")
        self.db: Optional[TinyDB] = None
        self._db_path = Path(db_path) if db_path else None
        self._in_memory = in_memory

    def _ensure_db(self):
        """Open the database on first use"""
        if self.db is None:
            if self._in_memory:
                self.db = TinyDB(storage=MemoryStorage)
                logger.info("Database connected: in-memory")
            else:
                self._db_path.parent.mkdir(parents=True, exist_ok=True)
                self.db = TinyDB(str(self._db_path))
                logger.info(f"Database connected: {self._db_path}")

    def close(self):
        if self.db is not None:
            self.db.close()
            self.db = None

    def table(self, collection: str):
        if collection not in self.COLLECTIONS:
            raise ValueError(f"Unknown collection: {collection}")
        self._ensure_db()
        return self.db.table(collection)

    @contextmanager
    def _guard(self, operation: str, collection: str, doc_id: Optional[str] = None):
        try:
            yield
        except PortalError:
            raise
        except Exception as e:
            logger.error(
                f"Document store {operation} failed on {collection}/{doc_id}: {e}",
                exc_info=True,
            )
            raise DownstreamFailure(
                operation=f"store.{operation}",
                target=f"{collection}/{doc_id}" if doc_id else collection,
            ) from e

    @staticmethod
    def generate_id() -> str:
        return str(uuid.uuid4())

    @staticmethod
    def _copy(doc) -> Dict[str, Any]:
        return copy.deepcopy(dict(doc))

    # =========================================================================
    # Document operations
    # =========================================================================

    def get(self, collection: str, doc_id: str) -> Optional[dict]:
        """Get a document by id"""
        with self._guard("get", collection, doc_id):
            doc = self.table(collection).get(Q.id == doc_id)
            return self._copy(doc) if doc is not None else None

    def put(self, collection: str, doc_id: str, fields: dict, merge: bool = False) -> dict:
        """Create or overwrite a document, or merge fields into it"""
        with self._guard("put", collection, doc_id):
            table = self.table(collection)
            data = {**fields, "id": doc_id}
            if table.contains(Q.id == doc_id):
                if merge:
                    table.update(data, Q.id == doc_id)
                else:
                    table.remove(Q.id == doc_id)
                    table.insert(data)
            else:
                table.insert(data)
            return self._copy(table.get(Q.id == doc_id))

    def update(self, collection: str, doc_id: str, fields: dict) -> dict:
        """Update fields of an existing document; fails if the id is absent"""
        with self._guard("update", collection, doc_id):
            table = self.table(collection)
            if not table.contains(Q.id == doc_id):
                raise NotFound(
                    f"{collection} document not found",
                    operation="store.update",
                    target=f"{collection}/{doc_id}",
                )
            fields = {k: v for k, v in fields.items() if k != "id"}
            table.update(fields, Q.id == doc_id)
            return self._copy(table.get(Q.id == doc_id))

    def add(self, collection: str, fields: dict) -> str:
        """Insert a new document and return its generated id"""
        doc_id = self.generate_id()
        with self._guard("add", collection, doc_id):
            self.table(collection).insert({**fields, "id": doc_id})
        return doc_id

    def delete(self, collection: str, doc_id: str) -> bool:
        """Delete a document. Returns False if it did not exist."""
        with self._guard("delete", collection, doc_id):
            removed = self.table(collection).remove(Q.id == doc_id)
            return bool(removed)

    def query(
        self,
        collection: str,
        field_equals: Optional[dict] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> List[dict]:
        """Query documents by field equality, optionally ordered by a field"""
        with self._guard("query", collection):
            table = self.table(collection)
            if field_equals:
                condition = None
                for field, value in field_equals.items():
                    clause = Q[field] == value
                    condition = clause if condition is None else condition & clause
                docs = table.search(condition)
            else:
                docs = table.all()
            return self._order([self._copy(d) for d in docs], order_by, descending)

    def query_in(self, collection: str, field: str, values: Iterable[Any]) -> List[dict]:
        """Documents whose field value is one of the given values"""
        values = list(values)
        if not values:
            return []
        with self._guard("query_in", collection):
            docs = self.table(collection).search(Q[field].one_of(values))
            return [self._copy(d) for d in docs]

    def all(self, collection: str) -> List[dict]:
        return self.query(collection)

    @staticmethod
    def _order(docs: List[dict], order_by: Optional[str], descending: bool) -> List[dict]:
        if not order_by:
            return docs
        present = [d for d in docs if d.get(order_by) is not None]
        missing = [d for d in docs if d.get(order_by) is None]
        present.sort(key=lambda d: d[order_by], reverse=descending)
        # Documents without the field always sort last
        return present + missing
