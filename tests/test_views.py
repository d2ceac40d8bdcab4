import asyncio
from datetime import datetime, timedelta

import pytest

import catalog
from views import (
    BUSY,
    NOT_FOUND,
    REQUIRED_FIELDS,
    UNAUTHORIZED,
    UNKNOWN_CATEGORY,
    BestSellersView,
    CategoryView,
    FeaturedOfferView,
    ViewState,
)

pytestmark = pytest.mark.anyio


def door(name="Puerta Colonial", subcategory="Puertas Clásicas", **extra):
    return dict({"name": name, "image": "https://x/y.jpg", "subcategory": subcategory, "price": "$850"}, **extra)


def best_seller(name="Portón", order=1, **extra):
    return dict({"name": name, "image": "https://x/p.jpg", "price": "$1200", "category": "Portones", "order": order}, **extra)


class CountingCalls:
    def __init__(self, monkeypatch, name):
        self.calls = 0
        real = getattr(catalog, name)

        def counted(*args):
            self.calls += 1
            return real(*args)

        monkeypatch.setattr(catalog, name, counted)


# Category view

async def test_load_moves_from_loading_to_ready(db):
    view = CategoryView("puertas")
    assert view.state is ViewState.LOADING

    await view.load()

    assert view.state is ViewState.READY
    assert view.products == []
    assert view.sections() == []


async def test_added_product_appears_under_its_subcategory(db):
    view = CategoryView("puertas", authenticated=True)
    await view.load()

    result = await view.add_product(door())

    assert result.ok
    assert result.id
    assert view.subcategories == ["Puertas Clásicas"]
    (subcategory, products), = view.sections()
    assert subcategory == "Puertas Clásicas"
    assert [p.name for p in products] == ["Puerta Colonial"]
    assert products[0].category == "puertas"
    assert products[0].price == "$850"


async def test_sections_group_products_by_subcategory(db):
    base = datetime(2024, 1, 1)
    for i, (name, sub) in enumerate([("a", "Clásicas"), ("b", "Modernas"), ("c", "Clásicas")]):
        db["products"].insert_one({
            "name": name, "image": "i", "category": "puertas", "subcategory": sub,
            "created_at": base + timedelta(days=i),
        })
    view = CategoryView("puertas")
    await view.load()

    sections = {sub: [p.name for p in products] for sub, products in view.sections()}

    assert view.subcategories == ["Clásicas", "Modernas"]
    assert sections == {"Clásicas": ["c", "a"], "Modernas": ["b"]}


async def test_navigate_reloads_for_new_category(db):
    db["products"].insert_one({"name": "g", "image": "i", "category": "portones", "subcategory": "Corredizos"})
    view = CategoryView("puertas")
    await view.load()
    assert view.products == []

    await view.navigate("portones")

    assert view.category == "portones"
    assert [p.name for p in view.products] == ["g"]
    assert view.info["title"] == "Portones"


async def test_unknown_category_uses_fallback_text(db):
    view = CategoryView("ventanas", authenticated=True)
    await view.load()

    assert view.info["title"] == "Categoría"
    result = await view.add_product(door())
    assert not result.ok
    assert result.message == UNKNOWN_CATEGORY


async def test_invalid_form_makes_no_backend_call(db, monkeypatch):
    adds = CountingCalls(monkeypatch, "add_product")
    view = CategoryView("puertas", authenticated=True)

    result = await view.add_product(door(name="   "))

    assert not result.ok
    assert result.message == REQUIRED_FIELDS
    assert adds.calls == 0


async def test_price_and_description_are_optional(db):
    view = CategoryView("puertas", authenticated=True)

    result = await view.add_product({"name": "Puerta", "image": "https://x/y.jpg", "subcategory": "Simples"})

    assert result.ok
    assert view.products[0].price is None


async def test_unauthenticated_view_cannot_mutate(db, monkeypatch):
    adds = CountingCalls(monkeypatch, "add_product")
    view = CategoryView("puertas")

    result = await view.add_product(door())

    assert result.message == UNAUTHORIZED
    assert adds.calls == 0


async def test_second_mutation_while_saving_is_ignored(db, monkeypatch):
    adds = CountingCalls(monkeypatch, "add_product")
    view = CategoryView("puertas", authenticated=True)

    first, second = await asyncio.gather(
        view.add_product(door(name="Primera")),
        view.add_product(door(name="Segunda")),
    )

    assert first.ok
    assert not second.ok
    assert second.message == BUSY
    assert adds.calls == 1
    assert [p.name for p in view.products] == ["Primera"]
    assert view.saving is False


async def test_edit_and_delete_reload_the_category(db):
    view = CategoryView("puertas", authenticated=True)
    added = await view.add_product(door())

    edited = await view.edit_product(added.id, {"subcategory": "Puertas Modernas", "price": "$900"})

    assert edited.ok
    assert view.subcategories == ["Puertas Modernas"]
    assert view.products[0].price == "$900"

    deleted = await view.delete_product(added.id)

    assert deleted.ok
    assert view.products == []


async def test_edit_and_delete_in_flight_together_write_once(db, monkeypatch):
    view = CategoryView("puertas", authenticated=True)
    added = await view.add_product(door())
    edits = CountingCalls(monkeypatch, "update_product")
    deletes = CountingCalls(monkeypatch, "delete_product")

    edited, deleted = await asyncio.gather(
        view.edit_product(added.id, {"price": "$900"}),
        view.delete_product(added.id),
    )

    assert edited.ok
    assert deleted.message == BUSY
    assert (edits.calls, deletes.calls) == (1, 0)
    assert view.products[0].price == "$900"


async def test_editing_missing_product_reports_not_found(db):
    view = CategoryView("puertas", authenticated=True)

    result = await view.edit_product("0123456789abcdef01234567", {"price": "$1"})

    assert not result.ok
    assert result.message == NOT_FOUND


async def test_failed_mutation_reports_error(no_db):
    view = CategoryView("puertas", authenticated=True)

    result = await view.add_product(door())

    assert not result.ok
    assert result.message == "Error al agregar el producto"
    assert view.saving is False


async def test_fetch_resolving_after_unmount_is_discarded(db, monkeypatch):
    db["products"].insert_one({"name": "late", "image": "i", "category": "puertas", "subcategory": "A"})
    view = CategoryView("puertas")
    real = catalog.list_products_by_category

    def fetch_then_unmount(category):
        products = real(category)
        view.unmount()
        return products

    monkeypatch.setattr(catalog, "list_products_by_category", fetch_then_unmount)

    await view.load()

    assert view.products == []
    assert view.state is ViewState.LOADING


# Best sellers view

async def test_duplicate_ranks_both_render(db):
    view = BestSellersView(authenticated=True)

    assert (await view.add_product(best_seller(name="uno", order=1))).ok
    assert (await view.add_product(best_seller(name="otro", order=1))).ok

    assert len(view.products) == 2
    assert {p.name for p in view.products} == {"uno", "otro"}


async def test_best_seller_form_requires_price_and_valid_rating(db, monkeypatch):
    adds = CountingCalls(monkeypatch, "add_best_seller")
    view = BestSellersView(authenticated=True)

    missing_price = await view.add_product(best_seller(price=""))
    bad_rating = await view.add_product(best_seller(rating=7))

    assert missing_price.message == REQUIRED_FIELDS
    assert bad_rating.message == REQUIRED_FIELDS
    assert adds.calls == 0


async def test_deactivated_best_seller_disappears(db):
    view = BestSellersView(authenticated=True)
    added = await view.add_product(best_seller())

    result = await view.edit_product(added.id, {"is_active": False})

    assert result.ok
    assert view.products == []


async def test_best_seller_delete(db):
    view = BestSellersView(authenticated=True)
    added = await view.add_product(best_seller())

    assert (await view.delete_product(added.id)).ok
    assert view.products == []


async def test_best_seller_delete_blocks_concurrent_edit(db, monkeypatch):
    view = BestSellersView(authenticated=True)
    added = await view.add_product(best_seller())
    edits = CountingCalls(monkeypatch, "update_best_seller")
    deletes = CountingCalls(monkeypatch, "delete_best_seller")

    deleted, edited = await asyncio.gather(
        view.delete_product(added.id),
        view.edit_product(added.id, {"order": 3}),
    )

    assert deleted.ok
    assert edited.message == BUSY
    assert (deletes.calls, edits.calls) == (1, 0)
    assert view.products == []


# Featured offer view

OFFER = {
    "title": "Oferta",
    "description": "Reja a medida",
    "image": "https://x/o.jpg",
    "discounted_price": "$500",
}


async def test_set_then_remove_offer_leaves_no_offer(db):
    view = FeaturedOfferView(authenticated=True)

    assert (await view.set_offer(OFFER)).ok
    assert view.offer.title == "Oferta"

    assert (await view.remove_offer()).ok
    assert view.offer is None
    assert catalog.get_featured_offer() is None


async def test_inactive_offer_hidden_from_public(db):
    editor = FeaturedOfferView(authenticated=True)
    await editor.set_offer(dict(OFFER, is_active=False))

    public = FeaturedOfferView()
    await public.load()

    assert public.offer is not None
    assert public.visible_offer is None
    assert editor.visible_offer is not None


async def test_offer_form_requires_discounted_price(db):
    view = FeaturedOfferView(authenticated=True)

    result = await view.set_offer(dict(OFFER, discounted_price=" "))

    assert result.message == REQUIRED_FIELDS


async def test_offer_removal_ignored_while_saving(db, monkeypatch):
    sets = CountingCalls(monkeypatch, "set_featured_offer")
    removes = CountingCalls(monkeypatch, "remove_featured_offer")
    view = FeaturedOfferView(authenticated=True)

    saved, removed = await asyncio.gather(view.set_offer(OFFER), view.remove_offer())

    assert saved.ok
    assert removed.message == BUSY
    assert (sets.calls, removes.calls) == (1, 0)
    assert view.offer.title == "Oferta"
