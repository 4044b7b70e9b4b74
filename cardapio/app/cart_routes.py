from __future__ import annotations
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from cardapio.app.deps import get_carts, get_channel, get_repo, get_restaurant
from cardapio.app.menu_routes import SelectionIn, extra_out, open_product
from cardapio.core.cart import Cart, CartRegistry
from cardapio.core.menu.models import Restaurant
from cardapio.core.pricing import brl
from cardapio.infra.catalog_repo import CatalogRepository
from cardapio.ports.order_channel import OrderChannelPort
from cardapio.workflows.checkout import CheckoutForm, OrderReceipt, shortfall, submit_order

router = APIRouter(prefix="/menu/{slug}/cart/{cart_id}", tags=["cart"])


def cart_out(cart: Cart, restaurant: Restaurant) -> Dict[str, Any]:
    gap = shortfall(cart, restaurant)
    return {
        "lines": [
            {
                "index": i,
                "product_id": l.product.id,
                "product_name": l.product.name,
                "quantity": l.quantity,
                "variations": [
                    {"group": v.group_name, "option": v.option_name, "price_adjustment": v.price_adjustment}
                    for v in l.selected_variations
                ],
                "extras": [extra_out(e) for e in l.selected_extras],
                "observations": l.observations,
                "total_price": l.total_price,
            }
            for i, l in enumerate(cart.lines)
        ],
        "item_count": cart.item_count(),
        "total": cart.total(),
        "total_label": brl(cart.total()),
        "below_min_order": gap > 0,
        "min_order_shortfall": gap,
    }


class LineIn(SelectionIn):
    product_id: str


class QuantityIn(BaseModel):
    quantity: int


class CheckoutIn(BaseModel):
    customer_name: str = ""
    payment_method: Optional[str] = None
    address: str = ""


@router.get("")
def get_cart(
    cart_id: str,
    restaurant: Restaurant = Depends(get_restaurant),
    carts: CartRegistry = Depends(get_carts),
):
    return cart_out(carts.find(restaurant.slug, cart_id) or Cart(), restaurant)


@router.post("/lines", status_code=201)
def add_line(
    cart_id: str,
    payload: LineIn,
    restaurant: Restaurant = Depends(get_restaurant),
    repo: CatalogRepository = Depends(get_repo),
    carts: CartRegistry = Depends(get_carts),
):
    if not restaurant.is_open:
        raise HTTPException(status_code=409, detail="restaurante fechado")
    product, state = open_product(repo, restaurant, payload.product_id)
    notices = state.replay(payload.options, payload.extras)
    if notices:
        # qualquer aviso significa seleção diferente da enviada
        raise HTTPException(status_code=422, detail={
            "message": "Seleção recusada.",
            "missing_groups": state.missing_groups(),
            "notices": [n.message for n in notices],
        })
    if not state.can_submit():
        raise HTTPException(status_code=422, detail={
            "message": "Selecione todas as opções obrigatórias.",
            "missing_groups": state.missing_groups(),
            "notices": [],
        })
    cart = carts.get(restaurant.slug, cart_id)
    cart.add_line(
        product,
        max(1, payload.quantity),
        state.selected_extras(),
        state.selected_variations(),
        payload.observations if product.allows_observations else "",
    )
    return cart_out(cart, restaurant)


@router.patch("/lines/{index}")
def update_line(
    cart_id: str,
    index: int,
    payload: QuantityIn,
    restaurant: Restaurant = Depends(get_restaurant),
    carts: CartRegistry = Depends(get_carts),
):
    cart = carts.find(restaurant.slug, cart_id)
    if cart is None or not cart.update_quantity(index, payload.quantity):
        raise HTTPException(status_code=404, detail="linha não encontrada")
    return cart_out(cart, restaurant)


@router.delete("/lines/{index}")
def delete_line(
    cart_id: str,
    index: int,
    restaurant: Restaurant = Depends(get_restaurant),
    carts: CartRegistry = Depends(get_carts),
):
    cart = carts.find(restaurant.slug, cart_id)
    if cart is None or not cart.remove_line(index):
        raise HTTPException(status_code=404, detail="linha não encontrada")
    return cart_out(cart, restaurant)


@router.post("/checkout")
def checkout(
    cart_id: str,
    payload: CheckoutIn,
    restaurant: Restaurant = Depends(get_restaurant),
    carts: CartRegistry = Depends(get_carts),
    channel: OrderChannelPort = Depends(get_channel),
):
    cart = carts.find(restaurant.slug, cart_id) or Cart()
    form = CheckoutForm(payload.customer_name, payload.payment_method, payload.address)
    result = submit_order(cart, form, restaurant, channel)
    if not isinstance(result, OrderReceipt):
        raise HTTPException(status_code=400, detail={"problems": result.problems})
    carts.drop(restaurant.slug, cart_id)
    return {
        "url": result.url,
        "message": result.message,
        "total": result.total,
        "reference": result.reference,
    }
