"""
Page view-models.

Each view mirrors one page instance: it loads its data (LOADING -> READY),
and while a mutation is in flight its `saving` flag is set and further
add/edit/delete requests are ignored. Every successful mutation is
followed by a full reload; nothing is patched locally.

Blocking store calls run in the threadpool so the event loop is never
held while waiting on the database.
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

from fastapi.concurrency import run_in_threadpool
from pydantic import ValidationError

import catalog
import content
from schemas import (
    BestSeller,
    BestSellerOut,
    BestSellerUpdate,
    FeaturedOffer,
    FeaturedOfferOut,
    Product,
    ProductOut,
    ProductUpdate,
)

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = "Por favor completa todos los campos obligatorios"
BUSY = "Hay una operación en curso, espera a que termine"
UNAUTHORIZED = "Debes iniciar sesión para editar el catálogo"
UNKNOWN_CATEGORY = "Categoría desconocida"
NOT_FOUND = "Producto no encontrado"


class ViewState(str, Enum):
    LOADING = "loading"
    READY = "ready"


@dataclass
class ActionResult:
    ok: bool
    message: str
    id: Optional[str] = None


class EditableView(ABC):
    """Load/reload bookkeeping and the single-mutation guard shared by all pages."""

    def __init__(self, authenticated: bool = False):
        self.authenticated = authenticated
        self.state = ViewState.LOADING
        self.saving = False
        self.mounted = True
        self._generation = 0

    @abstractmethod
    def _fetch(self) -> Any:
        """Blocking store read for this page."""

    @abstractmethod
    def _apply(self, data: Any) -> None:
        """Install freshly fetched data."""

    async def load(self) -> None:
        self._generation += 1
        generation = self._generation
        self.state = ViewState.LOADING
        data = await run_in_threadpool(self._fetch)
        # A newer load or an unmount makes this result stale
        if not self.mounted or generation != self._generation:
            logger.debug("Discarding stale fetch for %s", type(self).__name__)
            return
        self._apply(data)
        self.state = ViewState.READY

    def unmount(self) -> None:
        self.mounted = False

    def _refusal(self) -> Optional[ActionResult]:
        if not self.authenticated:
            return ActionResult(False, UNAUTHORIZED)
        if self.saving:
            return ActionResult(False, BUSY)
        return None

    async def _mutate(self, call: Callable[..., Any], *args: Any, success: str, failure: str) -> ActionResult:
        refusal = self._refusal()
        if refusal:
            return refusal
        self.saving = True
        try:
            outcome = await run_in_threadpool(call, *args)
            if outcome is catalog.WriteResult.NOT_FOUND:
                return ActionResult(False, NOT_FOUND)
            if not outcome:
                return ActionResult(False, failure)
            await self.load()
            return ActionResult(True, success, id=outcome if isinstance(outcome, str) else None)
        finally:
            self.saving = False


class CategoryView(EditableView):
    """Products of one category, grouped into subcategory sections."""

    def __init__(self, category: str, authenticated: bool = False):
        super().__init__(authenticated)
        self.category = category
        self.products: List[ProductOut] = []
        self.subcategories: List[str] = []

    @property
    def info(self) -> Dict[str, str]:
        return content.category_info(self.category)

    def _fetch(self) -> List[ProductOut]:
        return catalog.list_products_by_category(self.category)

    def _apply(self, products: List[ProductOut]) -> None:
        self.products = products
        self.subcategories = catalog.distinct_subcategories(products)

    async def navigate(self, category: str) -> None:
        self.category = category
        await self.load()

    def sections(self) -> List[Tuple[str, List[ProductOut]]]:
        return [
            (sub, [p for p in self.products if p.subcategory == sub])
            for sub in self.subcategories
        ]

    async def add_product(self, form: Dict[str, Any]) -> ActionResult:
        refusal = self._refusal()
        if refusal:
            return refusal
        if self.category not in content.CATEGORIES:
            return ActionResult(False, UNKNOWN_CATEGORY)
        try:
            product = Product.model_validate(dict(form, category=self.category))
        except ValidationError:
            return ActionResult(False, REQUIRED_FIELDS)
        return await self._mutate(
            catalog.add_product, product,
            success="Producto agregado exitosamente",
            failure="Error al agregar el producto",
        )

    async def edit_product(self, product_id: str, changes: Dict[str, Any]) -> ActionResult:
        refusal = self._refusal()
        if refusal:
            return refusal
        try:
            update = ProductUpdate.model_validate(changes)
        except ValidationError:
            return ActionResult(False, REQUIRED_FIELDS)
        return await self._mutate(
            catalog.update_product, product_id, update,
            success="Producto actualizado exitosamente",
            failure="Error al actualizar el producto",
        )

    async def delete_product(self, product_id: str) -> ActionResult:
        return await self._mutate(
            catalog.delete_product, product_id,
            success="Producto eliminado exitosamente",
            failure="Error al eliminar el producto",
        )


class BestSellersView(EditableView):
    def __init__(self, authenticated: bool = False):
        super().__init__(authenticated)
        self.products: List[BestSellerOut] = []

    def _fetch(self) -> List[BestSellerOut]:
        return catalog.list_best_sellers()

    def _apply(self, products: List[BestSellerOut]) -> None:
        self.products = products

    async def add_product(self, form: Dict[str, Any]) -> ActionResult:
        refusal = self._refusal()
        if refusal:
            return refusal
        try:
            product = BestSeller.model_validate(form)
        except ValidationError:
            return ActionResult(False, REQUIRED_FIELDS)
        return await self._mutate(
            catalog.add_best_seller, product,
            success="Producto más vendido agregado exitosamente",
            failure="Error al agregar el producto",
        )

    async def edit_product(self, product_id: str, changes: Dict[str, Any]) -> ActionResult:
        refusal = self._refusal()
        if refusal:
            return refusal
        try:
            update = BestSellerUpdate.model_validate(changes)
        except ValidationError:
            return ActionResult(False, REQUIRED_FIELDS)
        return await self._mutate(
            catalog.update_best_seller, product_id, update,
            success="Producto actualizado exitosamente",
            failure="Error al actualizar el producto",
        )

    async def delete_product(self, product_id: str) -> ActionResult:
        return await self._mutate(
            catalog.delete_best_seller, product_id,
            success="Producto eliminado exitosamente",
            failure="Error al eliminar el producto",
        )


class FeaturedOfferView(EditableView):
    def __init__(self, authenticated: bool = False):
        super().__init__(authenticated)
        self.offer: Optional[FeaturedOfferOut] = None

    def _fetch(self) -> Optional[FeaturedOfferOut]:
        return catalog.get_featured_offer()

    def _apply(self, offer: Optional[FeaturedOfferOut]) -> None:
        self.offer = offer

    @property
    def visible_offer(self) -> Optional[FeaturedOfferOut]:
        """The offer as the public sees it; editors also see inactive offers."""
        if self.offer is None:
            return None
        if self.offer.is_active or self.authenticated:
            return self.offer
        return None

    async def set_offer(self, form: Dict[str, Any]) -> ActionResult:
        refusal = self._refusal()
        if refusal:
            return refusal
        try:
            offer = FeaturedOffer.model_validate(form)
        except ValidationError:
            return ActionResult(False, REQUIRED_FIELDS)
        return await self._mutate(
            catalog.set_featured_offer, offer,
            success="Oferta guardada exitosamente",
            failure="Error al guardar la oferta",
        )

    async def remove_offer(self) -> ActionResult:
        return await self._mutate(
            catalog.remove_featured_offer,
            success="Oferta eliminada exitosamente",
            failure="Error al eliminar la oferta",
        )
