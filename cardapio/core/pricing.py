"""Preços: soma de linhas, faixa de preço de vitrine e formatação em reais."""
from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Iterable, Optional

from .menu.models import Product, VariationGroup

CENTS = Decimal("0.01")


def money(value: Any) -> Decimal:
    """Normaliza int/float/str/Decimal para Decimal com 2 casas."""
    if value is None:
        return Decimal("0.00")
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def brl(value: Any) -> str:
    return f"R$ {money(value):.2f}"


def unit_price(base_price: Any, adjustments: Iterable[Any] = (), extras: Iterable[Any] = ()) -> Decimal:
    total = money(base_price)
    for a in adjustments:
        total += money(a)
    for e in extras:
        total += money(e)
    return total


def line_total(base_price: Any, adjustments: Iterable[Any], extras: Iterable[Any], quantity: int) -> Decimal:
    """quantidade × (base + Σ ajustes + Σ adicionais); quantidade mínima 1."""
    qty = max(1, int(quantity))
    return money(unit_price(base_price, adjustments, extras) * qty)


@dataclass(frozen=True)
class PriceRange:
    min: Optional[Decimal]
    max: Optional[Decimal]
    has_variations: bool


NO_RANGE = PriceRange(min=None, max=None, has_variations=False)


def compute_price_range(base_price: Any, groups: Iterable[VariationGroup]) -> PriceRange:
    """Faixa "de X a Y" da vitrine.

    Os ajustes de todas as opções disponíveis de todos os grupos entram num
    único conjunto (não é o mínimo/máximo combinatório por grupo).
    """
    adjustments = [money(o.price_adjustment) for g in groups for o in g.options if o.is_available]
    if not adjustments:
        return NO_RANGE
    base = money(base_price)
    return PriceRange(min=base + min(adjustments), max=base + max(adjustments), has_variations=True)


def format_product_price(product: Product) -> str:
    lo, hi = product.price_display_min, product.price_display_max
    if product.has_variations and lo is not None and hi is not None:
        if money(lo) == money(hi):
            return brl(lo)
        return f"{brl(lo)} – {brl(hi)}"
    return brl(product.price)
