from __future__ import annotations
from typing import Any, Dict, List, Optional, Tuple

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from cardapio.app.deps import get_repo, get_restaurant
from cardapio.core.menu.catalog import MenuCatalog
from cardapio.core.menu.models import Extra, Product, Restaurant, VariationGroup
from cardapio.core.pricing import format_product_price
from cardapio.core.selection import SelectionState
from cardapio.infra.catalog_repo import CatalogRepository

router = APIRouter(prefix="/menu", tags=["menu"])


# -------- saída --------

def restaurant_out(r: Restaurant) -> Dict[str, Any]:
    return {
        "id": r.id, "name": r.name, "slug": r.slug, "address": r.address,
        "is_open": r.is_open, "allows_delivery": r.allows_delivery,
        "min_order_value": r.min_order_value, "description": r.description,
    }


def product_out(p: Product) -> Dict[str, Any]:
    return {
        "id": p.id, "category_id": p.category_id, "name": p.name,
        "description": p.description, "image": p.image, "price": p.price,
        "price_label": format_product_price(p), "is_promotion": p.is_promotion,
        "has_variations": p.has_variations, "allows_observations": p.allows_observations,
    }


def group_out(g: VariationGroup) -> Dict[str, Any]:
    return {
        "id": g.id, "name": g.name, "is_required": g.is_required,
        "allow_multiple": g.allow_multiple, "max_selections": g.limit,
        "source": g.source.value,
        "options": [
            {"id": o.id, "name": o.name, "price_adjustment": o.price_adjustment, "is_default": o.is_default}
            for o in g.available_options()
        ],
    }


def extra_out(e: Extra) -> Dict[str, Any]:
    return {"id": e.id, "name": e.name, "price": e.price}


def selection_out(state: SelectionState, product: Product, quantity: int) -> Dict[str, Any]:
    return {
        "selection": state.snapshot(),
        "selected_extras": sorted(state.selected_extra_ids),
        "quantity": quantity,
        "total": state.compute_total(product.price, quantity),
        "can_submit": state.can_submit(),
        "missing_groups": state.missing_groups(),
    }


class SelectionIn(BaseModel):
    options: Dict[str, List[str]] = Field(default_factory=dict)  # group_id -> option ids
    extras: List[str] = Field(default_factory=list)
    quantity: int = 1
    observations: str = ""


def open_product(
    repo: CatalogRepository, restaurant: Restaurant, product_id: str
) -> Tuple[Product, SelectionState]:
    """Carrega produto + variações + adicionais; 404 se não pertence ao restaurante."""
    product = repo.get_product(product_id)
    if product is None or product.restaurant_id != restaurant.id or not product.is_available:
        raise HTTPException(status_code=404, detail="produto não encontrado")
    groups = repo.load_variation_groups(product.id)
    extras = repo.list_extras(product.id)
    return product, SelectionState(groups, extras)


# -------- routes --------

@router.get("/{slug}")
def get_menu(
    q: str = "",
    category: Optional[str] = None,
    restaurant: Restaurant = Depends(get_restaurant),
    repo: CatalogRepository = Depends(get_repo),
):
    menu = repo.get_menu(restaurant)
    catalog = MenuCatalog(menu)
    return {
        "restaurant": restaurant_out(restaurant),
        "categories": [{"id": c.id, "name": c.name, "order": c.order} for c in menu.categories],
        "products": [product_out(p) for p in catalog.visible_products(q, category)],
    }


@router.get("/{slug}/products/{product_id}")
def get_product_configuration(
    product_id: str,
    restaurant: Restaurant = Depends(get_restaurant),
    repo: CatalogRepository = Depends(get_repo),
):
    product, state = open_product(repo, restaurant, product_id)
    return {
        "product": product_out(product),
        "variation_groups": [group_out(state.groups[gid]) for gid in state.snapshot()],
        "extras": [extra_out(e) for e in state.extras.values()],
        **selection_out(state, product, 1),
    }


@router.post("/{slug}/products/{product_id}/quote")
def quote_product(
    product_id: str,
    payload: SelectionIn,
    restaurant: Restaurant = Depends(get_restaurant),
    repo: CatalogRepository = Depends(get_repo),
):
    product, state = open_product(repo, restaurant, product_id)
    notices = state.replay(payload.options, payload.extras)
    out = selection_out(state, product, max(1, payload.quantity))
    out["notices"] = [{"group_id": getattr(n, "group_id", None), "message": n.message} for n in notices]
    return out
