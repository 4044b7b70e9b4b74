from __future__ import annotations
from decimal import Decimal, InvalidOperation
from typing import Dict, Any, List, Set

def _is_money(v: Any) -> bool:
    if isinstance(v, bool):
        return False
    if isinstance(v, (int, float, Decimal)):
        return True
    if isinstance(v, str):
        try:
            Decimal(v)
        except InvalidOperation:
            return False
        return True
    return False

def validate_group(g: Dict[str, Any], where: str) -> List[str]:
    errors: List[str] = []
    if not g.get("name"):
        errors.append(f"{where}: group missing name")
    max_sel = g.get("max_selections", 1)
    if not isinstance(max_sel, int) or isinstance(max_sel, bool) or max_sel < 1:
        errors.append(f"{where}: max_selections must be integer >= 1")
    defaults = 0
    for o in g.get("options", []):
        if not o.get("name"):
            errors.append(f"{where}: option missing name")
        if not _is_money(o.get("price_adjustment", 0)):
            errors.append(f"{where}: option {o.get('name')} price_adjustment must be number")
        if o.get("is_default"):
            defaults += 1
    if defaults > 1:
        errors.append(f"{where}: more than one default option")
    return errors

def validate(data: Dict[str, Any]) -> List[str]:
    errors: List[str] = []
    rest = data.get("restaurant") or {}
    if not rest.get("name"):
        errors.append("restaurant missing name")
    if not rest.get("slug"):
        errors.append("restaurant missing slug")

    cats: Set[str] = {c.get("name") for c in data.get("categories", [])}
    templates: Set[str] = set()
    for t in data.get("templates", []):
        templates.add(t.get("name"))
        errors.extend(validate_group(t, f"template '{t.get('name')}'"))

    seen: Set[str] = set()
    for idx, p in enumerate(data.get("products", []), start=1):
        name = p.get("name")
        if not name:
            errors.append(f"product[{idx}] missing name")
            continue
        if name in seen:
            errors.append(f"duplicate product: {name}")
        seen.add(name)

        cat = p.get("category")
        if cat is not None and cat not in cats:
            errors.append(f"{name}: unknown category '{cat}'")
        if not _is_money(p.get("price")):
            errors.append(f"{name}: price must be number")

        for e in p.get("extras", []):
            if not _is_money(e.get("price")) or Decimal(str(e.get("price"))) < 0:
                errors.append(f"{name}: extra {e.get('name')} price must be number >= 0")
        for g in p.get("variation_groups", []):
            errors.extend(validate_group(g, name))
        for t in p.get("templates", []):
            if t not in templates:
                errors.append(f"{name}: unknown template '{t}'")

    return errors
