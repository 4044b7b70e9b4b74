from __future__ import annotations
from dataclasses import replace
from typing import Iterable, List, Optional
import unicodedata
import re
from .models import GroupSource, Menu, Product, VariationGroup

def _norm(s: str) -> str:
    s = unicodedata.normalize("NFKD", s or "").encode("ascii", "ignore").decode("ascii")
    s = re.sub(r"[^a-z0-9]+", " ", s.lower()).strip()
    return s

def merge_variation_groups(
    private_groups: Iterable[VariationGroup],
    template_groups: Iterable[VariationGroup],
) -> List[VariationGroup]:
    """Junta grupos próprios e templates atribuídos numa única lista.

    A origem fica só como etiqueta (`source`); a ordem final segue
    `display_order` e, em empate, grupos próprios vêm antes dos templates.
    """
    merged: List[VariationGroup] = []
    for g in private_groups:
        merged.append(replace(g, source=GroupSource.PRIVATE))
    for g in template_groups:
        merged.append(replace(g, source=GroupSource.TEMPLATE))
    for g in merged:
        g.options.sort(key=lambda o: (o.display_order, o.name))
    merged.sort(key=lambda g: (g.display_order, g.source != GroupSource.PRIVATE))
    return merged

class MenuCatalog:
    def __init__(self, menu: Menu):
        self.menu = menu

    def visible_products(self, term: str = "", category_id: Optional[str] = None) -> List[Product]:
        """Produtos disponíveis filtrados por busca e categoria; promoções primeiro."""
        key = _norm(term)
        out: List[Product] = []
        for p in self.menu.products:
            if not p.is_available:
                continue
            if category_id and category_id != "all" and p.category_id != category_id:
                continue
            if key and key not in _norm(p.name) and key not in _norm(p.description):
                continue
            out.append(p)
        # sort estável: mantém a ordem original dentro de cada bloco
        return sorted(out, key=lambda p: not p.is_promotion)
