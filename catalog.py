"""
Catalog data access.

Thin wrappers over the document store for products, best sellers and the
featured offer. Every call fails soft: backend errors are logged and come
back as an empty list, None or False, never as an exception. Updates
return a WriteResult so a missing document is told apart from a failed
write.
"""
import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError
from pymongo import ASCENDING

import database
from schemas import (
    BestSeller,
    BestSellerOut,
    BestSellerUpdate,
    FeaturedOffer,
    FeaturedOfferOut,
    Product,
    ProductOut,
    ProductUpdate,
    TaggedUpdate,
)

logger = logging.getLogger(__name__)

PRODUCTS = "products"
BEST_SELLERS = "best_sellers"
SETTINGS = "settings"
FEATURED_OFFER_ID = "featured-offer"

Record = Union[BaseModel, Dict[str, Any]]
M = TypeVar("M", bound=BaseModel)


def _parse(model: Type[M], docs: List[Dict[str, Any]]) -> List[M]:
    out: List[M] = []
    for doc in docs:
        try:
            out.append(model.model_validate(database.to_str_id(doc)))
        except ValidationError:
            logger.warning("Skipping malformed %s document %s", model.__name__, doc.get("_id"))
    return out


def _created_key(item: BaseModel) -> datetime:
    created = getattr(item, "created_at", None)
    if created is None:
        # Documents without a timestamp count as just created
        return datetime.now(timezone.utc)
    if created.tzinfo is None:
        return created.replace(tzinfo=timezone.utc)
    return created


def _add(collection: str, record: Record) -> Optional[str]:
    try:
        new_id = database.create_document(collection, record)
    except Exception:
        logger.exception("Error adding document to %s", collection)
        return None
    logger.info("Added %s document %s", collection, new_id)
    return new_id


class WriteResult(Enum):
    """Outcome of an in-place update. Truthy only when the write happened."""

    OK = "ok"
    NOT_FOUND = "not_found"
    FAILED = "failed"

    def __bool__(self) -> bool:
        return self is WriteResult.OK


def _update(collection: str, doc_id: str, update: TaggedUpdate) -> WriteResult:
    values, unset = update.changes()
    try:
        if update.is_empty():
            matched = database.get_document(collection, doc_id) is not None
        else:
            matched = database.update_document(collection, doc_id, values, unset=unset)
    except Exception:
        logger.exception("Error updating %s document %s", collection, doc_id)
        return WriteResult.FAILED
    if not matched:
        logger.warning("Cannot update %s document %s: not found", collection, doc_id)
        return WriteResult.NOT_FOUND
    logger.info("Updated %s document %s", collection, doc_id)
    return WriteResult.OK


def _delete(collection: str, doc_id: str) -> bool:
    try:
        database.delete_document(collection, doc_id)
    except Exception:
        logger.exception("Error deleting %s document %s", collection, doc_id)
        return False
    logger.info("Deleted %s document %s", collection, doc_id)
    return True


# Products

def list_products_by_category(category: str) -> List[ProductOut]:
    """Products of one category, newest first."""
    try:
        docs = database.get_documents(PRODUCTS, {"category": category})
    except Exception:
        logger.exception("Error getting products for %s", category)
        return []
    products = _parse(ProductOut, docs)
    # The query filters on category only; ordering happens here
    products.sort(key=_created_key, reverse=True)
    return products


def distinct_subcategories(products: List[ProductOut]) -> List[str]:
    """Subcategory labels in order of first appearance."""
    return list(dict.fromkeys(p.subcategory for p in products))


def list_subcategories(category: str) -> List[str]:
    return distinct_subcategories(list_products_by_category(category))


def add_product(product: Union[Product, Dict[str, Any]]) -> Optional[str]:
    return _add(PRODUCTS, product)


def update_product(product_id: str, update: ProductUpdate) -> WriteResult:
    return _update(PRODUCTS, product_id, update)


def delete_product(product_id: str) -> bool:
    return _delete(PRODUCTS, product_id)


# Best sellers

def list_best_sellers() -> List[BestSellerOut]:
    """Active best sellers by ascending rank. Equal ranks keep store order."""
    try:
        docs = database.get_documents(BEST_SELLERS, {"is_active": True}, sort=[("order", ASCENDING)])
    except Exception:
        logger.exception("Error getting best sellers")
        return []
    return _parse(BestSellerOut, docs)


def add_best_seller(product: Union[BestSeller, Dict[str, Any]]) -> Optional[str]:
    return _add(BEST_SELLERS, product)


def update_best_seller(product_id: str, update: BestSellerUpdate) -> WriteResult:
    return _update(BEST_SELLERS, product_id, update)


def delete_best_seller(product_id: str) -> bool:
    return _delete(BEST_SELLERS, product_id)


# Featured offer

def get_featured_offer() -> Optional[FeaturedOfferOut]:
    try:
        doc = database.get_document(SETTINGS, FEATURED_OFFER_ID)
    except Exception:
        logger.exception("Error getting featured offer")
        return None
    if doc is None:
        return None
    offers = _parse(FeaturedOfferOut, [doc])
    return offers[0] if offers else None


def set_featured_offer(offer: Union[FeaturedOffer, Dict[str, Any]]) -> bool:
    """Replace the featured offer wholesale."""
    try:
        database.replace_document(SETTINGS, FEATURED_OFFER_ID, offer)
    except Exception:
        logger.exception("Error saving featured offer")
        return False
    logger.info("Featured offer saved")
    return True


def remove_featured_offer() -> bool:
    return _delete(SETTINGS, FEATURED_OFFER_ID)
