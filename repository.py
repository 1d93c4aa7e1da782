"""
Data access for the ``product`` and ``user`` collections.

Handlers never touch pymongo directly; driver failures surface here as
``UpstreamError``.
"""

from datetime import datetime, timezone
from functools import wraps
from typing import Any, Dict, List

from bson import ObjectId
from pymongo.database import Database
from pymongo.errors import PyMongoError

from errors import NotFound, UpstreamError
from schemas import Product as ProductSchema


def serialize_doc(doc: Dict[str, Any]) -> Dict[str, Any]:
    if not doc:
        return doc
    doc = dict(doc)
    # ObjectIds keep their key but go out as strings
    for k, v in list(doc.items()):
        if isinstance(v, ObjectId):
            doc[k] = str(v)
    return doc


def _database_call(func):
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except PyMongoError as e:
            raise UpstreamError(f"Database error: {e}") from e
    return wrapper


def now_millis() -> int:
    return int(datetime.now(timezone.utc).timestamp() * 1000)


class ProductRepository:
    def __init__(self, db: Database):
        self.collection = db["product"]

    @_database_call
    def create(self, product: ProductSchema) -> Dict[str, Any]:
        doc = product.model_dump()
        res = self.collection.insert_one(doc)
        created = self.collection.find_one({"_id": res.inserted_id})
        return serialize_doc(created)

    @_database_call
    def list_all(self) -> List[Dict[str, Any]]:
        return [serialize_doc(d) for d in self.collection.find({})]

    @_database_call
    def list_by_owner(self, user_id: str) -> List[Dict[str, Any]]:
        return [serialize_doc(d) for d in self.collection.find({"userId": user_id})]


class CartRepository:
    def __init__(self, db: Database):
        self.users = db["user"]

    @_database_call
    def get_user(self, user_id: str) -> Dict[str, Any]:
        user = self.users.find_one({"_id": user_id})
        if not user:
            raise NotFound("User not found")
        return serialize_doc(user)

    def get_cart(self, user_id: str) -> Dict[str, int]:
        return self.get_user(user_id).get("cartItems") or {}

    @_database_call
    def set_quantity(self, user_id: str, item_id: str, quantity: int) -> None:
        """Set ``item_id`` to ``quantity``; zero removes it from the cart."""
        field = f"cartItems.{item_id}"
        if quantity == 0:
            update = {"$unset": {field: ""}}
        else:
            update = {"$set": {field: quantity}}
        res = self.users.update_one({"_id": user_id}, update)
        if res.matched_count == 0:
            raise NotFound("User not found")

