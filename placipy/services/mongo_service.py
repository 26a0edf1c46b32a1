"""
MongoDB Service - key-value table operations over a document collection.

Every table is addressed by a composite key (PK, SK). The operations mirror
what the rest of the platform needs from a key-value store:
- put:       unconditional write of a whole record
- get:       one record by full key
- query:     all records of one partition
- scan:      prefix/attribute filtered walk over the whole table, paginated
- update:    overwrite top-level attributes of an existing record
- increment: atomic counter
- delete:    remove one record

Driver failures are raised as StoreError carrying the driver message.
"""

import re
from typing import Optional, List, Dict, Any, Tuple
from pymongo import ASCENDING, ReturnDocument
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from placipy.core.errors import StoreError


# ============================================================
# HELPER: Strip driver-internal fields before returning records
# ============================================================

def serialize_doc(doc: Optional[dict]) -> Optional[dict]:
    """Convert MongoDB document to a plain record (no _id)."""
    if doc is None:
        return None
    doc.pop("_id", None)
    return doc


def serialize_docs(docs) -> list:
    """Convert MongoDB documents to plain records."""
    return [serialize_doc(doc) for doc in docs]


def prefix_pattern(prefix: str) -> dict:
    """Mongo condition equivalent to begins_with(attr, prefix)."""
    return {"$regex": "^" + re.escape(prefix)}


# ============================================================
# DOCUMENT TABLE
# ============================================================

class DocumentTable:
    """
    A PK/SK keyed table backed by one collection.
    """

    def __init__(self, collection: Collection):
        self.collection = collection

    @property
    def name(self) -> str:
        return self.collection.name

    def put(self, item: dict) -> dict:
        """Write a whole record, replacing any record with the same key."""
        try:
            self.collection.replace_one(
                {"PK": item["PK"], "SK": item["SK"]},
                dict(item),
                upsert=True
            )
        except PyMongoError as e:
            raise StoreError(str(e)) from e
        return item

    def get(self, pk: str, sk: str) -> Optional[dict]:
        """Fetch one record by its full key."""
        try:
            doc = self.collection.find_one({"PK": pk, "SK": sk})
        except PyMongoError as e:
            raise StoreError(str(e)) from e
        return serialize_doc(doc)

    def query(
        self,
        pk: str,
        sk_prefix: Optional[str] = None,
        filters: Optional[Dict[str, Any]] = None
    ) -> List[dict]:
        """Fetch all records in one partition, optionally narrowed by SK prefix."""
        criteria: Dict[str, Any] = {"PK": pk}
        if sk_prefix:
            criteria["SK"] = prefix_pattern(sk_prefix)
        if filters:
            criteria.update(filters)
        try:
            cursor = self.collection.find(criteria).sort("SK", ASCENDING)
            return serialize_docs(cursor)
        except PyMongoError as e:
            raise StoreError(str(e)) from e

    def scan(
        self,
        pk_prefix: Optional[str] = None,
        sk_prefix: Optional[str] = None,
        sk: Optional[str] = None,
        filters: Optional[Dict[str, Any]] = None,
        limit: Optional[int] = None,
        start_key: Optional[Dict[str, str]] = None
    ) -> Tuple[List[dict], Optional[Dict[str, str]]]:
        """
        Walk the table in (PK, SK) order.

        Args:
            pk_prefix: keep records whose PK begins with this
            sk_prefix: keep records whose SK begins with this
            sk: keep records whose SK equals this (wins over sk_prefix)
            filters: extra exact-match attribute conditions
            limit: page size; None returns everything
            start_key: continuation key from a previous page

        Returns:
            (items, last_key) - last_key is {"PK", "SK"} of the last item
            when more records remain, else None.
        """
        criteria: Dict[str, Any] = {}
        if pk_prefix:
            criteria["PK"] = prefix_pattern(pk_prefix)
        if sk is not None:
            criteria["SK"] = sk
        elif sk_prefix:
            criteria["SK"] = prefix_pattern(sk_prefix)
        if filters:
            criteria.update(filters)

        if start_key:
            after = {"$or": [
                {"PK": {"$gt": start_key["PK"]}},
                {"PK": start_key["PK"], "SK": {"$gt": start_key["SK"]}},
            ]}
            criteria = {"$and": [criteria, after]} if criteria else after

        try:
            cursor = self.collection.find(criteria).sort([("PK", ASCENDING), ("SK", ASCENDING)])
            if limit:
                # One extra record tells us whether another page exists
                cursor = cursor.limit(limit + 1)
            items = serialize_docs(cursor)
        except PyMongoError as e:
            raise StoreError(str(e)) from e

        last_key = None
        if limit and len(items) > limit:
            items = items[:limit]
            last_key = {"PK": items[-1]["PK"], "SK": items[-1]["SK"]}
        return items, last_key

    def update(self, pk: str, sk: str, fields: Dict[str, Any]) -> Optional[dict]:
        """
        Overwrite top-level attributes of an existing record.
        Returns the updated record, or None if no record has this key.
        """
        try:
            doc = self.collection.find_one_and_update(
                {"PK": pk, "SK": sk},
                {"$set": fields},
                return_document=ReturnDocument.AFTER
            )
        except PyMongoError as e:
            raise StoreError(str(e)) from e
        return serialize_doc(doc)

    def increment(self, pk: str, sk: str, attribute: str = "value", floor: int = 0) -> int:
        """
        Atomically raise a counter to at least `floor`, then add one.
        Both steps are single-document atomic operations, so concurrent
        callers always receive distinct values.
        """
        try:
            self.collection.update_one(
                {"PK": pk, "SK": sk},
                {"$max": {attribute: floor}},
                upsert=True
            )
            doc = self.collection.find_one_and_update(
                {"PK": pk, "SK": sk},
                {"$inc": {attribute: 1}},
                return_document=ReturnDocument.AFTER
            )
        except PyMongoError as e:
            raise StoreError(str(e)) from e
        return int(doc[attribute])

    def delete(self, pk: str, sk: str) -> bool:
        """Delete one record. Returns True if something was removed."""
        try:
            result = self.collection.delete_one({"PK": pk, "SK": sk})
        except PyMongoError as e:
            raise StoreError(str(e)) from e
        return result.deleted_count > 0
