from __future__ import annotations
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import List, Optional

class GroupSource(str, Enum):
    PRIVATE = "private"    # grupo próprio do produto
    TEMPLATE = "template"  # template do restaurante atribuído ao produto

@dataclass
class VariationOption:
    id: str
    group_id: str
    name: str
    price_adjustment: Decimal = Decimal("0")
    is_default: bool = False
    is_available: bool = True
    display_order: int = 0

@dataclass
class VariationGroup:
    id: str
    name: str
    is_required: bool = False
    allow_multiple: bool = False
    max_selections: int = 1  # quantidade EXATA quando allow_multiple
    display_order: int = 0
    options: List[VariationOption] = field(default_factory=list)
    source: GroupSource = GroupSource.PRIVATE

    @property
    def limit(self) -> int:
        """Quantas opções cabem no grupo (1 quando não é múltipla escolha)."""
        if not self.allow_multiple:
            return 1
        return max(1, int(self.max_selections or 1))

    def available_options(self) -> List[VariationOption]:
        return [o for o in self.options if o.is_available]

    def option(self, option_id: str) -> Optional[VariationOption]:
        for o in self.options:
            if o.id == option_id:
                return o
        return None

@dataclass
class Extra:
    id: str
    product_id: str
    name: str
    price: Decimal = Decimal("0")
    is_available: bool = True

@dataclass(frozen=True)
class SelectedVariation:
    group_id: str
    group_name: str
    option_id: str
    option_name: str
    price_adjustment: Decimal

@dataclass
class Product:
    id: str
    restaurant_id: str
    category_id: Optional[str]
    name: str
    price: Decimal
    description: str = ""
    image: str = ""
    is_available: bool = True
    is_promotion: bool = False
    allows_observations: bool = True
    price_display_min: Optional[Decimal] = None
    price_display_max: Optional[Decimal] = None
    has_variations: bool = False

@dataclass
class Category:
    id: str
    restaurant_id: str
    name: str
    order: int = 0

@dataclass
class Restaurant:
    id: str
    name: str
    slug: str
    whatsapp: str = ""
    address: str = ""
    is_open: bool = True
    min_order_value: Decimal = Decimal("0")
    allows_delivery: bool = False
    description: str = ""
    contact_phone: str = ""

@dataclass
class Menu:
    restaurant: Restaurant
    categories: List[Category]
    products: List[Product]
