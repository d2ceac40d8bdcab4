import logging
import os
import secrets
from typing import Any, Dict, Optional

from fastapi import Depends, FastAPI, Header, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ValidationError

import catalog
import content
import database
from catalog import WriteResult
from schemas import BestSeller, BestSellerUpdate, FeaturedOffer, Product, ProductUpdate
from views import (
    NOT_FOUND,
    REQUIRED_FIELDS,
    UNKNOWN_CATEGORY,
    BestSellersView,
    CategoryView,
    FeaturedOfferView,
)


app = FastAPI(title="Herrería Catalog API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Auth

def is_authenticated(x_admin_token: Optional[str] = Header(None)) -> bool:
    expected = os.getenv("ADMIN_TOKEN")
    if not expected or not x_admin_token:
        return False
    return secrets.compare_digest(x_admin_token, expected)


def require_auth(authenticated: bool = Depends(is_authenticated)) -> bool:
    if not authenticated:
        raise HTTPException(401, "Not authenticated")
    return True


# Utilities
class NewProductRequest(BaseModel):
    name: str
    image: str
    subcategory: str
    price: Optional[str] = None
    description: Optional[str] = None


class MutationResponse(BaseModel):
    message: str
    id: Optional[str] = None


def created(new_id: Optional[str], failure: str, success: str) -> MutationResponse:
    if new_id is None:
        raise HTTPException(500, failure)
    return MutationResponse(message=success, id=new_id)


def updated(outcome: WriteResult, success: str) -> MutationResponse:
    if outcome is WriteResult.NOT_FOUND:
        raise HTTPException(404, NOT_FOUND)
    if not outcome:
        raise HTTPException(500, "Error al actualizar el producto")
    return MutationResponse(message=success)


def done(ok: bool, failure: str, success: str) -> MutationResponse:
    if not ok:
        raise HTTPException(500, failure)
    return MutationResponse(message=success)


def product_card(product) -> Dict[str, Any]:
    d = product.model_dump()
    d["inquiry_url"] = content.inquiry_link(product.name)
    return d


@app.get("/")
def root():
    return {"message": "Herrería catalog backend is running"}


@app.get("/test")
def test_database():
    response = {
        "backend": "✅ Running",
        "database": "❌ Not Available",
        "database_url": "✅ Set" if os.getenv("DATABASE_URL") else "❌ Not Set",
        "database_name": "✅ Set" if os.getenv("DATABASE_NAME") else "❌ Not Set",
        "connection_status": "Not Connected",
        "collections": []
    }
    try:
        if database.db is not None:
            response["database"] = "✅ Available"
            response["connection_status"] = "Connected"
            try:
                collections = database.db.list_collection_names()
                response["collections"] = collections[:10]
                response["database"] = "✅ Connected & Working"
            except Exception as e:
                response["database"] = f"⚠️ Connected but Error: {str(e)[:50]}"
        else:
            response["database"] = "⚠️ Available but not initialized"
    except Exception as e:
        response["database"] = f"❌ Error: {str(e)[:50]}"
    return response


# Catalog pages
@app.get("/api/categories")
def list_categories():
    return [content.category_info(slug) for slug in content.CATEGORIES]


@app.get("/api/categories/{category}")
async def category_page(category: str):
    view = CategoryView(category)
    await view.load()
    page = view.info
    page["subcategories"] = view.subcategories
    page["sections"] = [
        {"subcategory": sub, "products": [product_card(p) for p in products]}
        for sub, products in view.sections()
    ]
    return page


@app.post("/api/categories/{category}/products", response_model=MutationResponse, status_code=201)
def add_product(category: str, payload: NewProductRequest, _: bool = Depends(require_auth)):
    if category not in content.CATEGORIES:
        raise HTTPException(404, UNKNOWN_CATEGORY)
    try:
        product = Product.model_validate(dict(payload.model_dump(), category=category))
    except ValidationError:
        raise HTTPException(400, REQUIRED_FIELDS)
    return created(catalog.add_product(product), "Error al agregar el producto", "Producto agregado exitosamente")


@app.patch("/api/products/{product_id}", response_model=MutationResponse)
def edit_product(product_id: str, payload: ProductUpdate, _: bool = Depends(require_auth)):
    return updated(catalog.update_product(product_id, payload), "Producto actualizado exitosamente")


@app.delete("/api/products/{product_id}", response_model=MutationResponse)
def delete_product(product_id: str, _: bool = Depends(require_auth)):
    return done(catalog.delete_product(product_id), "Error al eliminar el producto", "Producto eliminado exitosamente")


# Best sellers
@app.get("/api/best-sellers")
async def best_sellers():
    view = BestSellersView()
    await view.load()
    return [product_card(p) for p in view.products]


@app.post("/api/best-sellers", response_model=MutationResponse, status_code=201)
def add_best_seller(payload: BestSeller, _: bool = Depends(require_auth)):
    return created(catalog.add_best_seller(payload), "Error al agregar el producto",
                   "Producto más vendido agregado exitosamente")


@app.patch("/api/best-sellers/{product_id}", response_model=MutationResponse)
def edit_best_seller(product_id: str, payload: BestSellerUpdate, _: bool = Depends(require_auth)):
    return updated(catalog.update_best_seller(product_id, payload), "Producto actualizado exitosamente")


@app.delete("/api/best-sellers/{product_id}", response_model=MutationResponse)
def delete_best_seller(product_id: str, _: bool = Depends(require_auth)):
    return done(catalog.delete_best_seller(product_id), "Error al eliminar el producto", "Producto eliminado exitosamente")


# Featured offer
@app.get("/api/featured-offer")
async def featured_offer(authenticated: bool = Depends(is_authenticated)):
    view = FeaturedOfferView(authenticated=authenticated)
    await view.load()
    return view.visible_offer


@app.put("/api/featured-offer", response_model=MutationResponse)
def set_featured_offer(payload: FeaturedOffer, _: bool = Depends(require_auth)):
    return done(catalog.set_featured_offer(payload), "Error al guardar la oferta", "Oferta guardada exitosamente")


@app.delete("/api/featured-offer", response_model=MutationResponse)
def remove_featured_offer(_: bool = Depends(require_auth)):
    return done(catalog.remove_featured_offer(), "Error al eliminar la oferta", "Oferta eliminada exitosamente")


# Home and location
@app.get("/api/home")
async def home(authenticated: bool = Depends(is_authenticated)):
    offer_view = FeaturedOfferView(authenticated=authenticated)
    sellers_view = BestSellersView(authenticated=authenticated)
    await offer_view.load()
    await sellers_view.load()
    return {
        "featured_offer": offer_view.visible_offer,
        "best_sellers": [product_card(p) for p in sellers_view.products],
        "categories": list_categories(),
        "contact_url": content.inquiry_link(),
    }


@app.get("/api/location")
def location():
    return content.LOCATION


if __name__ == "__main__":
    import uvicorn
    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"))
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
