from __future__ import annotations
from dataclasses import dataclass, field, replace
from decimal import Decimal
import threading
import time
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from .menu.models import Extra, Product, SelectedVariation
from .pricing import line_total, money


@dataclass
class CartLine:
    product: Product
    quantity: int
    selected_extras: List[Extra] = field(default_factory=list)
    selected_variations: List[SelectedVariation] = field(default_factory=list)
    observations: str = ""
    total_price: Decimal = Decimal("0.00")

    @property
    def unit_price(self) -> Decimal:
        return self.total_price / self.quantity


class Cart:
    """Linhas do carrinho de uma sessão. Nunca persistido."""

    def __init__(self) -> None:
        self.lines: List[CartLine] = []

    def add_line(
        self,
        product: Product,
        quantity: int,
        selected_extras: Sequence[Extra] = (),
        selected_variations: Sequence[SelectedVariation] = (),
        observations: str = "",
    ) -> CartLine:
        # sem merge: duas adições iguais viram duas linhas
        qty = max(1, int(quantity))
        total = line_total(
            product.price,
            [v.price_adjustment for v in selected_variations],
            [e.price for e in selected_extras],
            qty,
        )
        line = CartLine(
            product=replace(product),  # cópia: a linha não acompanha o catálogo
            quantity=qty,
            selected_extras=[replace(e) for e in selected_extras],
            selected_variations=list(selected_variations),
            observations=(observations or "").strip(),
            total_price=total,
        )
        self.lines.append(line)
        return line

    def _line(self, index: int) -> Optional[CartLine]:
        if 0 <= index < len(self.lines):
            return self.lines[index]
        return None

    def update_quantity(self, index: int, new_quantity: int) -> bool:
        """Escala o preço unitário travado na hora da adição; < 1 remove a linha."""
        line = self._line(index)
        if line is None:
            return False
        if new_quantity < 1:
            return self.remove_line(index)
        line.total_price = money(line.unit_price * new_quantity)
        line.quantity = int(new_quantity)
        return True

    def remove_line(self, index: int) -> bool:
        if self._line(index) is None:
            return False
        del self.lines[index]
        return True

    def total(self) -> Decimal:
        return money(sum((l.total_price for l in self.lines), Decimal("0")))

    def item_count(self) -> int:
        return sum(l.quantity for l in self.lines)

    def clear(self) -> None:
        self.lines = []

    def is_empty(self) -> bool:
        return not self.lines


class CartRegistry:
    """Um carrinho por (restaurante, id de carrinho) enquanto a sessão vive.

    Carrinhos sem uso por mais de `ttl` segundos são descartados na próxima
    operação do registro. Leitura (`find`) nunca cria carrinho.
    """

    def __init__(self, ttl: float = 6 * 3600, clock: Callable[[], float] = time.monotonic) -> None:
        self.ttl = ttl
        self._clock = clock
        self._carts: Dict[Tuple[str, str], Cart] = {}
        self._touched: Dict[Tuple[str, str], float] = {}
        self._lock = threading.Lock()

    def _sweep(self, now: float) -> None:
        for key in [k for k, t in self._touched.items() if now - t > self.ttl]:
            del self._carts[key]
            del self._touched[key]

    def get(self, restaurant_slug: str, cart_id: str) -> Cart:
        """Carrinho existente ou um novo; use só para escrita."""
        with self._lock:
            now = self._clock()
            self._sweep(now)
            key = (restaurant_slug, cart_id)
            if key not in self._carts:
                self._carts[key] = Cart()
            self._touched[key] = now
            return self._carts[key]

    def find(self, restaurant_slug: str, cart_id: str) -> Optional[Cart]:
        with self._lock:
            now = self._clock()
            self._sweep(now)
            key = (restaurant_slug, cart_id)
            cart = self._carts.get(key)
            if cart is not None:
                self._touched[key] = now
            return cart

    def drop(self, restaurant_slug: str, cart_id: str) -> None:
        with self._lock:
            self._carts.pop((restaurant_slug, cart_id), None)
            self._touched.pop((restaurant_slug, cart_id), None)

    def __len__(self) -> int:
        return len(self._carts)
