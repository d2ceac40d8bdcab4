"""
Database Schemas for the shop catalog

Each collection gets a form model (what an editor submits), an output
model (what is read back, with id and timestamps) and, where documents
are edited in place, an update model.

Update models carry a tagged payload: a field left out of the request
is unchanged, a field sent with a value is set to it. Optional fields
sent as null are cleared; required fields can never be cleared.
"""
from datetime import datetime
from typing import Annotated, Any, Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, Field, StringConstraints, field_validator

# Trimmed, non-empty text
RequiredText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
OptionalText = Annotated[str, StringConstraints(strip_whitespace=True)]

Category = Literal[
    "puertas",
    "portones",
    "gondolas",
    "estanterias",
    "rejas",
    "escaleras",
    "muebles",
    "accesorios",
]


class TaggedUpdate(BaseModel):
    """Base for partial updates."""

    def changes(self) -> Tuple[Dict[str, Any], List[str]]:
        """Split the explicitly sent fields into values to set and fields to unset."""
        sent = self.model_dump(exclude_unset=True)
        values = {k: v for k, v in sent.items() if v is not None}
        unset = [k for k, v in sent.items() if v is None]
        return values, unset

    def is_empty(self) -> bool:
        return not self.model_fields_set


# Collection: products
class Product(BaseModel):
    name: RequiredText = Field(..., description="Product name")
    image: RequiredText = Field(..., description="Image URL")
    category: Category = Field(..., description="Category slug")
    subcategory: RequiredText = Field(..., description="Free-text subcategory label")
    price: Optional[OptionalText] = Field(None, description="Display price, e.g. '$850'")
    description: Optional[OptionalText] = Field(None, description="Product description")


class ProductOut(BaseModel):
    id: str
    name: str
    image: str
    category: str
    subcategory: str
    price: Optional[str] = None
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProductUpdate(TaggedUpdate):
    name: Optional[RequiredText] = None
    image: Optional[RequiredText] = None
    category: Optional[Category] = None
    subcategory: Optional[RequiredText] = None
    price: Optional[OptionalText] = None
    description: Optional[OptionalText] = None

    @field_validator("name", "image", "category", "subcategory")
    @classmethod
    def required_not_null(cls, v):
        if v is None:
            raise ValueError("required field cannot be cleared")
        return v


# Collection: best_sellers
class BestSeller(BaseModel):
    name: RequiredText = Field(..., description="Product name")
    image: RequiredText = Field(..., description="Image URL")
    price: RequiredText = Field(..., description="Display price")
    rating: int = Field(5, ge=1, le=5, description="Star rating, 1 to 5")
    category: RequiredText = Field(..., description="Category label shown on the card")
    is_active: bool = Field(True, description="Whether the entry is shown publicly")
    order: int = Field(1, ge=1, description="Display rank, ascending")


class BestSellerOut(BaseModel):
    id: str
    name: str
    image: str
    price: str
    rating: int
    category: str
    is_active: bool
    order: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class BestSellerUpdate(TaggedUpdate):
    name: Optional[RequiredText] = None
    image: Optional[RequiredText] = None
    price: Optional[RequiredText] = None
    rating: Optional[int] = Field(None, ge=1, le=5)
    category: Optional[RequiredText] = None
    is_active: Optional[bool] = None
    order: Optional[int] = Field(None, ge=1)

    @field_validator("name", "image", "price", "rating", "category", "is_active", "order")
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("field cannot be cleared")
        return v


# Singleton document: settings/featured-offer
class FeaturedOffer(BaseModel):
    title: RequiredText = Field(..., description="Offer headline")
    description: RequiredText = Field(..., description="Offer details")
    image: RequiredText = Field(..., description="Image URL")
    original_price: Optional[OptionalText] = Field(None, description="Price before discount")
    discounted_price: RequiredText = Field(..., description="Offer price")
    discount: Optional[OptionalText] = Field(None, description="Discount label, e.g. '20% OFF'")
    valid_until: Optional[OptionalText] = Field(None, description="Validity date as shown")
    is_active: bool = Field(True, description="Whether the offer is shown publicly")


class FeaturedOfferOut(BaseModel):
    id: str
    title: str
    description: str
    image: str
    original_price: Optional[str] = None
    discounted_price: str
    discount: Optional[str] = None
    valid_until: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None
