"""Leitura e escrita do catálogo (restaurantes, produtos, adicionais, variações).

Tudo via SQLAlchemy `text()`; cada chamada abre a própria conexão, exceto a
semente, que grava o cardápio inteiro numa transação só. Os métodos de
variação devolvem o id do produto afetado para que quem chama dispare
`refresh_price_range`.
"""
from __future__ import annotations
import logging
from typing import Any, Dict, Iterable, List, Optional
from uuid import uuid4

from sqlalchemy import text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

from cardapio.core.menu.catalog import merge_variation_groups
from cardapio.core.menu.models import (
    Category, Extra, GroupSource, Menu, Product, Restaurant, VariationGroup, VariationOption,
)
from cardapio.core.pricing import PriceRange, compute_price_range, money
from .db import engine as default_engine

log = logging.getLogger("cardapio.catalog")

RESTAURANT_FIELDS = {
    "name", "slug", "whatsapp", "address", "is_open", "min_order_value",
    "allows_delivery", "description", "contact_phone",
}
PRODUCT_FIELDS = {
    "category_id", "name", "description", "price", "image", "is_available",
    "is_promotion", "allows_observations",
}


def new_id() -> str:
    return uuid4().hex


def _opt_money(v: Any):
    return None if v is None else money(v)


# ---------- model -> row ----------

def _restaurant_row(name: str, slug: str, fields: Dict[str, Any]) -> Dict[str, Any]:
    data = {k: v for k, v in fields.items() if k in RESTAURANT_FIELDS}
    data.update({"id": new_id(), "name": name, "slug": slug})
    data.setdefault("whatsapp", "")
    data.setdefault("address", "")
    data.setdefault("is_open", True)
    data["min_order_value"] = float(money(data.get("min_order_value", 0)))
    data.setdefault("allows_delivery", False)
    data.setdefault("description", "")
    data.setdefault("contact_phone", "")
    return data


def _product_row(restaurant_id: str, name: str, price: Any, fields: Dict[str, Any]) -> Dict[str, Any]:
    data = {k: v for k, v in fields.items() if k in PRODUCT_FIELDS}
    data.update({"id": new_id(), "restaurant_id": restaurant_id, "name": name, "price": float(money(price))})
    data.setdefault("category_id", None)
    data.setdefault("description", "")
    data.setdefault("image", "")
    data.setdefault("is_available", True)
    data.setdefault("is_promotion", False)
    data.setdefault("allows_observations", True)
    data["has_variations"] = False
    return data


def _group_row(owner: str, owner_id: str, name: str, is_required: bool, allow_multiple: bool,
               max_selections: int, display_order: int) -> Dict[str, Any]:
    if max_selections < 1:
        raise ValueError("max_selections must be >= 1")
    # grupo de escolha única sempre tem limite 1
    return {
        "id": new_id(), owner: owner_id, "name": name, "is_required": is_required,
        "allow_multiple": allow_multiple, "max_selections": max_selections if allow_multiple else 1,
        "display_order": display_order,
    }


def _extra_row(product_id: str, name: str, price: Any, is_available: bool) -> Dict[str, Any]:
    if money(price) < 0:
        raise ValueError("extra price must be >= 0")
    return {"id": new_id(), "product_id": product_id, "name": name,
            "price": float(money(price)), "is_available": is_available}


# ---------- row -> model ----------

def _restaurant(r) -> Restaurant:
    return Restaurant(
        id=r["id"], name=r["name"], slug=r["slug"],
        whatsapp=r["whatsapp"] or "", address=r["address"] or "",
        is_open=bool(r["is_open"]), min_order_value=money(r["min_order_value"]),
        allows_delivery=bool(r["allows_delivery"]),
        description=r["description"] or "", contact_phone=r["contact_phone"] or "",
    )


def _product(r) -> Product:
    return Product(
        id=r["id"], restaurant_id=r["restaurant_id"], category_id=r["category_id"],
        name=r["name"], price=money(r["price"]), description=r["description"] or "",
        image=r["image"] or "", is_available=bool(r["is_available"]),
        is_promotion=bool(r["is_promotion"]), allows_observations=bool(r["allows_observations"]),
        price_display_min=_opt_money(r["price_display_min"]),
        price_display_max=_opt_money(r["price_display_max"]),
        has_variations=bool(r["has_variations"]),
    )


def _extra(r) -> Extra:
    return Extra(id=r["id"], product_id=r["product_id"], name=r["name"],
                 price=money(r["price"]), is_available=bool(r["is_available"]))


def _group(r, options: List[VariationOption], source: GroupSource) -> VariationGroup:
    return VariationGroup(
        id=r["id"], name=r["name"], is_required=bool(r["is_required"]),
        allow_multiple=bool(r["allow_multiple"]), max_selections=int(r["max_selections"] or 1),
        display_order=int(r["display_order"] or 0), options=options, source=source,
    )


def _option(r, group_id: str) -> VariationOption:
    return VariationOption(
        id=r["id"], group_id=group_id, name=r["name"],
        price_adjustment=money(r["price_adjustment"]), is_default=bool(r["is_default"]),
        is_available=bool(r["is_available"]), display_order=int(r["display_order"] or 0),
    )


class CatalogRepository:
    def __init__(self, bind: Optional[Engine] = None):
        self.engine = bind or default_engine

    # ---------- restaurante / categorias / produtos ----------

    def get_restaurant_by_slug(self, slug: str) -> Optional[Restaurant]:
        with self.engine.connect() as conn:
            r = conn.execute(text("SELECT * FROM restaurants WHERE slug = :s"), {"s": slug}).mappings().first()
        return _restaurant(r) if r else None

    def get_restaurant(self, restaurant_id: str) -> Optional[Restaurant]:
        with self.engine.connect() as conn:
            r = conn.execute(text("SELECT * FROM restaurants WHERE id = :id"), {"id": restaurant_id}).mappings().first()
        return _restaurant(r) if r else None

    def list_categories(self, restaurant_id: str) -> List[Category]:
        with self.engine.connect() as conn:
            rows = conn.execute(text("""
                SELECT id, restaurant_id, name, display_order FROM categories
                WHERE restaurant_id = :rid ORDER BY display_order, name
            """), {"rid": restaurant_id}).mappings().all()
        return [Category(id=r["id"], restaurant_id=r["restaurant_id"], name=r["name"],
                         order=int(r["display_order"] or 0)) for r in rows]

    def list_products(self, restaurant_id: str) -> List[Product]:
        with self.engine.connect() as conn:
            rows = conn.execute(text("""
                SELECT * FROM products WHERE restaurant_id = :rid ORDER BY created_at, name
            """), {"rid": restaurant_id}).mappings().all()
        return [_product(r) for r in rows]

    def get_product(self, product_id: str) -> Optional[Product]:
        with self.engine.connect() as conn:
            r = conn.execute(text("SELECT * FROM products WHERE id = :id"), {"id": product_id}).mappings().first()
        return _product(r) if r else None

    def get_menu(self, restaurant: Restaurant) -> Menu:
        return Menu(restaurant=restaurant, categories=self.list_categories(restaurant.id),
                    products=self.list_products(restaurant.id))

    # ---------- adicionais ----------

    def list_extras(self, product_id: str, only_available: bool = True) -> List[Extra]:
        sql = "SELECT * FROM product_extras WHERE product_id = :pid"
        if only_available:
            sql += " AND is_available = :yes"
        sql += " ORDER BY name"
        with self.engine.connect() as conn:
            rows = conn.execute(text(sql), {"pid": product_id, "yes": True}).mappings().all()
        return [_extra(r) for r in rows]

    # ---------- grupos de variação ----------

    def _options(self, conn: Connection, table: str, fk: str, group_ids: List[str]) -> Dict[str, List[VariationOption]]:
        out: Dict[str, List[VariationOption]] = {gid: [] for gid in group_ids}
        for gid in group_ids:
            rows = conn.execute(text(f"""
                SELECT * FROM {table} WHERE {fk} = :gid ORDER BY display_order, name
            """), {"gid": gid}).mappings().all()
            out[gid] = [_option(r, gid) for r in rows]
        return out

    def private_groups(self, conn: Connection, product_id: str) -> List[VariationGroup]:
        rows = conn.execute(text("""
            SELECT * FROM product_variation_groups WHERE product_id = :pid ORDER BY display_order, name
        """), {"pid": product_id}).mappings().all()
        opts = self._options(conn, "product_variation_options", "variation_group_id", [r["id"] for r in rows])
        return [_group(r, opts[r["id"]], GroupSource.PRIVATE) for r in rows]

    def assigned_template_groups(self, conn: Connection, product_id: str) -> List[VariationGroup]:
        rows = conn.execute(text("""
            SELECT t.id, t.name, t.is_required, t.allow_multiple, t.max_selections,
                   a.display_order AS display_order
              FROM product_variation_assignments a
              JOIN variation_group_templates t ON t.id = a.template_group_id
             WHERE a.product_id = :pid
             ORDER BY a.display_order, t.name
        """), {"pid": product_id}).mappings().all()
        opts = self._options(conn, "variation_option_templates", "template_group_id", [r["id"] for r in rows])
        return [_group(r, opts[r["id"]], GroupSource.TEMPLATE) for r in rows]

    def load_variation_groups(self, product_id: str) -> List[VariationGroup]:
        """Grupos próprios + templates atribuídos, já numa lista só."""
        with self.engine.connect() as conn:
            private = self.private_groups(conn, product_id)
            templates = self.assigned_template_groups(conn, product_id)
        return merge_variation_groups(private, templates)

    def list_templates(self, restaurant_id: str) -> List[VariationGroup]:
        with self.engine.connect() as conn:
            rows = conn.execute(text("""
                SELECT * FROM variation_group_templates WHERE restaurant_id = :rid ORDER BY display_order, name
            """), {"rid": restaurant_id}).mappings().all()
            opts = self._options(conn, "variation_option_templates", "template_group_id", [r["id"] for r in rows])
        return [_group(r, opts[r["id"]], GroupSource.TEMPLATE) for r in rows]

    # ---------- escrita: restaurante / categoria / produto ----------

    def create_restaurant(self, name: str, slug: str, **fields: Any) -> Restaurant:
        data = _restaurant_row(name, slug, fields)
        self._insert("restaurants", data)
        return self.get_restaurant(data["id"])

    def update_restaurant(self, restaurant_id: str, **fields: Any) -> Optional[Restaurant]:
        data = {k: v for k, v in fields.items() if k in RESTAURANT_FIELDS and v is not None}
        if "min_order_value" in data:
            data["min_order_value"] = float(money(data["min_order_value"]))
        self._update("restaurants", restaurant_id, data)
        return self.get_restaurant(restaurant_id)

    def create_category(self, restaurant_id: str, name: str, order: int = 0) -> Category:
        cid = new_id()
        self._insert("categories", {"id": cid, "restaurant_id": restaurant_id, "name": name, "display_order": order})
        return Category(id=cid, restaurant_id=restaurant_id, name=name, order=order)

    def get_category(self, category_id: str) -> Optional[Category]:
        with self.engine.connect() as conn:
            r = conn.execute(text("SELECT * FROM categories WHERE id = :id"), {"id": category_id}).mappings().first()
        if r is None:
            return None
        return Category(id=r["id"], restaurant_id=r["restaurant_id"], name=r["name"],
                        order=int(r["display_order"] or 0))

    def update_category(self, category_id: str, name: Optional[str] = None,
                        order: Optional[int] = None) -> Optional[Category]:
        data: Dict[str, Any] = {}
        if name is not None:
            data["name"] = name
        if order is not None:
            data["display_order"] = order
        self._update("categories", category_id, data)
        return self.get_category(category_id)

    def delete_category(self, category_id: str) -> bool:
        with self.engine.begin() as conn:
            conn.execute(text("UPDATE products SET category_id = NULL WHERE category_id = :id"), {"id": category_id})
            res = conn.execute(text("DELETE FROM categories WHERE id = :id"), {"id": category_id})
        return res.rowcount > 0

    def create_product(self, restaurant_id: str, name: str, price: Any, **fields: Any) -> Product:
        data = _product_row(restaurant_id, name, price, fields)
        self._insert("products", data)
        return self.get_product(data["id"])

    def update_product(self, product_id: str, **fields: Any) -> Optional[Product]:
        data = {k: v for k, v in fields.items() if k in PRODUCT_FIELDS and v is not None}
        if "price" in data:
            data["price"] = float(money(data["price"]))
        self._update("products", product_id, data)
        if "price" in data:
            self.refresh_price_range(product_id)
        return self.get_product(product_id)

    def delete_product(self, product_id: str) -> bool:
        with self.engine.begin() as conn:
            gids = [r[0] for r in conn.execute(
                text("SELECT id FROM product_variation_groups WHERE product_id = :pid"), {"pid": product_id})]
            for gid in gids:
                conn.execute(text("DELETE FROM product_variation_options WHERE variation_group_id = :g"), {"g": gid})
            conn.execute(text("DELETE FROM product_variation_groups WHERE product_id = :pid"), {"pid": product_id})
            conn.execute(text("DELETE FROM product_variation_assignments WHERE product_id = :pid"), {"pid": product_id})
            conn.execute(text("DELETE FROM product_extras WHERE product_id = :pid"), {"pid": product_id})
            res = conn.execute(text("DELETE FROM products WHERE id = :pid"), {"pid": product_id})
        return res.rowcount > 0

    # ---------- escrita: adicionais ----------

    def add_extra(self, product_id: str, name: str, price: Any, is_available: bool = True) -> Extra:
        data = _extra_row(product_id, name, price, is_available)
        self._insert("product_extras", data)
        return Extra(id=data["id"], product_id=product_id, name=name, price=money(price),
                     is_available=is_available)

    def delete_extra(self, extra_id: str) -> bool:
        with self.engine.begin() as conn:
            res = conn.execute(text("DELETE FROM product_extras WHERE id = :id"), {"id": extra_id})
        return res.rowcount > 0

    # ---------- escrita: grupos próprios ----------

    def add_group(self, product_id: str, name: str, is_required: bool = False, allow_multiple: bool = False,
                  max_selections: int = 1, display_order: int = 0) -> VariationGroup:
        data = _group_row("product_id", product_id, name, is_required, allow_multiple,
                          max_selections, display_order)
        self._insert("product_variation_groups", data)
        return VariationGroup(id=data["id"], name=name, is_required=is_required, allow_multiple=allow_multiple,
                              max_selections=data["max_selections"], display_order=display_order)

    def delete_group(self, group_id: str) -> Optional[str]:
        with self.engine.begin() as conn:
            pid = conn.execute(text("SELECT product_id FROM product_variation_groups WHERE id = :g"),
                               {"g": group_id}).scalar()
            conn.execute(text("DELETE FROM product_variation_options WHERE variation_group_id = :g"), {"g": group_id})
            conn.execute(text("DELETE FROM product_variation_groups WHERE id = :g"), {"g": group_id})
        return pid

    def add_option(self, group_id: str, name: str, price_adjustment: Any = 0, is_default: bool = False,
                   is_available: bool = True, display_order: int = 0) -> Optional[str]:
        """Cria a opção; devolve o id do produto dono (None se o grupo não existe)."""
        with self.engine.begin() as conn:
            pid = conn.execute(text("SELECT product_id FROM product_variation_groups WHERE id = :g"),
                               {"g": group_id}).scalar()
            if pid is None:
                return None
            self._insert_option(conn, "product_variation_options", "variation_group_id", group_id,
                                name, price_adjustment, is_default, is_available, display_order)
        return pid

    def delete_option(self, option_id: str) -> Optional[str]:
        with self.engine.begin() as conn:
            pid = conn.execute(text("""
                SELECT g.product_id FROM product_variation_options o
                JOIN product_variation_groups g ON g.id = o.variation_group_id
                WHERE o.id = :o
            """), {"o": option_id}).scalar()
            conn.execute(text("DELETE FROM product_variation_options WHERE id = :o"), {"o": option_id})
        return pid

    # ---------- escrita: templates ----------

    def create_template(self, restaurant_id: str, name: str, is_required: bool = False,
                        allow_multiple: bool = False, max_selections: int = 1,
                        display_order: int = 0) -> VariationGroup:
        data = _group_row("restaurant_id", restaurant_id, name, is_required, allow_multiple,
                          max_selections, display_order)
        self._insert("variation_group_templates", data)
        return VariationGroup(id=data["id"], name=name, is_required=is_required, allow_multiple=allow_multiple,
                              max_selections=data["max_selections"], display_order=display_order,
                              source=GroupSource.TEMPLATE)

    def products_using_template(self, template_id: str) -> List[str]:
        with self.engine.connect() as conn:
            rows = conn.execute(text("""
                SELECT product_id FROM product_variation_assignments WHERE template_group_id = :t
            """), {"t": template_id}).all()
        return [r[0] for r in rows]

    def delete_template(self, template_id: str) -> Optional[List[str]]:
        """Apaga o template; devolve os produtos que o usavam (None se não existe)."""
        affected = self.products_using_template(template_id)
        with self.engine.begin() as conn:
            exists = conn.execute(text("SELECT 1 FROM variation_group_templates WHERE id = :t"),
                                  {"t": template_id}).scalar()
            if not exists:
                return None
            conn.execute(text("DELETE FROM product_variation_assignments WHERE template_group_id = :t"), {"t": template_id})
            conn.execute(text("DELETE FROM variation_option_templates WHERE template_group_id = :t"), {"t": template_id})
            conn.execute(text("DELETE FROM variation_group_templates WHERE id = :t"), {"t": template_id})
        return affected

    def add_template_option(self, template_id: str, name: str, price_adjustment: Any = 0,
                            is_default: bool = False, is_available: bool = True,
                            display_order: int = 0) -> List[str]:
        with self.engine.begin() as conn:
            exists = conn.execute(text("SELECT 1 FROM variation_group_templates WHERE id = :t"),
                                  {"t": template_id}).scalar()
            if not exists:
                raise KeyError(template_id)
            self._insert_option(conn, "variation_option_templates", "template_group_id", template_id,
                                name, price_adjustment, is_default, is_available, display_order)
        return self.products_using_template(template_id)

    def delete_template_option(self, option_id: str) -> Optional[List[str]]:
        with self.engine.begin() as conn:
            tid = conn.execute(text("SELECT template_group_id FROM variation_option_templates WHERE id = :o"),
                               {"o": option_id}).scalar()
            if tid is None:
                return None
            conn.execute(text("DELETE FROM variation_option_templates WHERE id = :o"), {"o": option_id})
        return self.products_using_template(tid)

    def assign_template(self, product_id: str, template_id: str, display_order: int = 0) -> bool:
        with self.engine.begin() as conn:
            dup = conn.execute(text("""
                SELECT 1 FROM product_variation_assignments
                WHERE product_id = :p AND template_group_id = :t
            """), {"p": product_id, "t": template_id}).scalar()
            if dup:
                return False
        self._insert("product_variation_assignments", {
            "id": new_id(), "product_id": product_id, "template_group_id": template_id,
            "display_order": display_order,
        })
        return True

    def unassign_template(self, product_id: str, template_id: str) -> bool:
        with self.engine.begin() as conn:
            res = conn.execute(text("""
                DELETE FROM product_variation_assignments WHERE product_id = :p AND template_group_id = :t
            """), {"p": product_id, "t": template_id})
        return res.rowcount > 0

    # ---------- faixa de preço ----------

    def refresh_price_range(self, product_id: str) -> bool:
        """Recalcula e grava price_display_min/max e has_variations."""
        try:
            product = self.get_product(product_id)
            if product is None:
                log.warning(f"price range: product {product_id} not found")
                return False
            with self.engine.begin() as conn:
                rng = self._write_price_range(conn, product_id, product.price)
        except SQLAlchemyError:
            log.exception(f"price range update failed for product {product_id}")
            return False
        if rng.has_variations:
            log.info(f"price range {product_id}: R$ {rng.min:.2f} - R$ {rng.max:.2f}")
        return True

    def refresh_many(self, product_ids: Iterable[Optional[str]]) -> None:
        for pid in {p for p in product_ids if p}:
            self.refresh_price_range(pid)

    def _write_price_range(self, conn: Connection, product_id: str, base_price: Any) -> PriceRange:
        groups = merge_variation_groups(self.private_groups(conn, product_id),
                                        self.assigned_template_groups(conn, product_id))
        rng = compute_price_range(base_price, groups)
        conn.execute(text("""
            UPDATE products
               SET price_display_min = :lo, price_display_max = :hi, has_variations = :hv
             WHERE id = :id
        """), {
            "id": product_id,
            "lo": None if rng.min is None else float(rng.min),
            "hi": None if rng.max is None else float(rng.max),
            "hv": rng.has_variations,
        })
        return rng

    # ---------- semente ----------

    def seed_menu(self, data: Dict[str, Any]) -> Restaurant:
        """Grava um cardápio já validado (ver core.menu.loader).

        Tudo numa transação só: se qualquer linha falhar nada fica gravado.
        """
        rd = dict(data["restaurant"])
        rest = _restaurant_row(rd.pop("name"), rd.pop("slug"), rd)
        with self.engine.begin() as conn:
            self._write(conn, "restaurants", rest)
            cat_ids: Dict[str, str] = {}
            for i, c in enumerate(data.get("categories", [])):
                cid = new_id()
                self._write(conn, "categories", {"id": cid, "restaurant_id": rest["id"], "name": c["name"],
                                                 "display_order": c.get("order", i)})
                cat_ids[c["name"]] = cid
            tpl_ids: Dict[str, str] = {}
            for t in data.get("templates", []):
                tpl = _group_row("restaurant_id", rest["id"], t["name"], t.get("is_required", False),
                                 t.get("allow_multiple", False), t.get("max_selections", 1),
                                 t.get("display_order", 0))
                self._write(conn, "variation_group_templates", tpl)
                tpl_ids[t["name"]] = tpl["id"]
                for j, o in enumerate(t.get("options", [])):
                    self._insert_option(conn, "variation_option_templates", "template_group_id", tpl["id"],
                                        o["name"], o.get("price_adjustment", 0), o.get("is_default", False),
                                        o.get("is_available", True), o.get("display_order", j))
            for p in data.get("products", []):
                fields = {k: v for k, v in p.items() if k in PRODUCT_FIELDS - {"name", "price", "category_id"}}
                fields["category_id"] = cat_ids.get(p.get("category"))
                prod = _product_row(rest["id"], p["name"], p["price"], fields)
                self._write(conn, "products", prod)
                for e in p.get("extras", []):
                    self._write(conn, "product_extras",
                                _extra_row(prod["id"], e["name"], e["price"], e.get("is_available", True)))
                for g in p.get("variation_groups", []):
                    grp = _group_row("product_id", prod["id"], g["name"], g.get("is_required", False),
                                     g.get("allow_multiple", False), g.get("max_selections", 1),
                                     g.get("display_order", 0))
                    self._write(conn, "product_variation_groups", grp)
                    for j, o in enumerate(g.get("options", [])):
                        self._insert_option(conn, "product_variation_options", "variation_group_id", grp["id"],
                                            o["name"], o.get("price_adjustment", 0), o.get("is_default", False),
                                            o.get("is_available", True), o.get("display_order", j))
                for k, name in enumerate(p.get("templates", [])):
                    self._write(conn, "product_variation_assignments", {
                        "id": new_id(), "product_id": prod["id"], "template_group_id": tpl_ids[name],
                        "display_order": 100 + k,
                    })
                self._write_price_range(conn, prod["id"], p["price"])
        log.info(f"seeded menu for {rest['slug']}")
        return self.get_restaurant(rest["id"])

    # ---------- helpers ----------

    def _insert_option(self, conn: Connection, table: str, fk: str, group_id: str, name: str,
                       price_adjustment: Any, is_default: bool, is_available: bool, display_order: int) -> str:
        if is_default:
            # no máximo uma opção padrão por grupo
            conn.execute(text(f"UPDATE {table} SET is_default = :no WHERE {fk} = :g"), {"no": False, "g": group_id})
        oid = new_id()
        conn.execute(text(f"""
            INSERT INTO {table} (id, {fk}, name, price_adjustment, is_default, is_available, display_order)
            VALUES (:id, :g, :name, :adj, :dflt, :avail, :ord)
        """), {"id": oid, "g": group_id, "name": name, "adj": float(money(price_adjustment)),
               "dflt": is_default, "avail": is_available, "ord": display_order})
        return oid

    def _insert(self, table: str, data: Dict[str, Any]) -> None:
        with self.engine.begin() as conn:
            self._write(conn, table, data)

    def _write(self, conn: Connection, table: str, data: Dict[str, Any]) -> None:
        cols = ", ".join(data)
        vals = ", ".join(f":{k}" for k in data)
        conn.execute(text(f"INSERT INTO {table} ({cols}) VALUES ({vals})"), data)

    def _update(self, table: str, row_id: str, data: Dict[str, Any]) -> None:
        if not data:
            return
        sets = ", ".join(f"{k} = :{k}" for k in data)
        with self.engine.begin() as conn:
            conn.execute(text(f"UPDATE {table} SET {sets} WHERE id = :_id"), {**data, "_id": row_id})
