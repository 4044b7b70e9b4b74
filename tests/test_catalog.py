"""
Tests for catalog helpers: group merging, storefront filtering and menu validation.
"""
import json
from decimal import Decimal

import pytest

from cardapio.core.menu.catalog import MenuCatalog, merge_variation_groups
from cardapio.core.menu.loader import check_menu, load_menu
from cardapio.core.menu.models import (
    Category, GroupSource, Menu, Product, Restaurant, VariationGroup, VariationOption,
)
from cardapio.core.menu.validator import validate, validate_group


def make_product(pid, name, category_id="c1", **kw):
    return Product(id=pid, restaurant_id="r", category_id=category_id, name=name, price=Decimal("10"), **kw)


@pytest.fixture
def catalog():
    menu = Menu(
        restaurant=Restaurant(id="r", name="Bella", slug="bella"),
        categories=[Category("c1", "r", "Pizzas"), Category("c2", "r", "Bebidas", order=1)],
        products=[
            make_product("p1", "Pizza Calabresa", description="Com cebola"),
            make_product("p2", "Pão de Alho", is_promotion=True),
            make_product("p3", "Água com Gás", category_id="c2"),
            make_product("p4", "Pizza Doce", is_available=False),
            make_product("p5", "Pizza Portuguesa", is_promotion=True),
        ],
    )
    return MenuCatalog(menu)


class TestMergeVariationGroups:

    def test_sources_are_tagged_and_ordered(self):
        private = [VariationGroup(id="g1", name="Tamanho", display_order=1),
                   VariationGroup(id="g2", name="Massa", display_order=0)]
        templates = [VariationGroup(id="t1", name="Borda", display_order=1, source=GroupSource.PRIVATE)]

        merged = merge_variation_groups(private, templates)

        assert [g.id for g in merged] == ["g2", "g1", "t1"]
        assert [g.source for g in merged] == [GroupSource.PRIVATE, GroupSource.PRIVATE, GroupSource.TEMPLATE]

    def test_options_sorted_by_display_order_then_name(self):
        g = VariationGroup(id="g", name="Sabor", options=[
            VariationOption(id="b", group_id="g", name="Banana", display_order=1),
            VariationOption(id="c", group_id="g", name="Chocolate", display_order=0),
            VariationOption(id="a", group_id="g", name="Abacaxi", display_order=1),
        ])
        [merged] = merge_variation_groups([g], [])
        assert [o.id for o in merged.options] == ["c", "a", "b"]


class TestVisibleProducts:

    def test_promotions_first_and_unavailable_hidden(self, catalog):
        ids = [p.id for p in catalog.visible_products()]
        assert ids == ["p2", "p5", "p1", "p3"]

    def test_search_ignores_case_and_accents(self, catalog):
        assert [p.id for p in catalog.visible_products("agua")] == ["p3"]
        assert [p.id for p in catalog.visible_products("CEBOLA")] == ["p1"]

    def test_category_filter(self, catalog):
        assert [p.id for p in catalog.visible_products(category_id="c2")] == ["p3"]
        assert len(catalog.visible_products(category_id="all")) == 4


class TestValidator:

    def test_seed_menu_is_valid(self, menu):
        assert validate(menu) == []

    def test_group_rules(self):
        errors = validate_group({
            "name": "Sabores", "max_selections": 0,
            "options": [{"name": "A", "is_default": True}, {"name": "B", "is_default": True},
                        {"name": "", "price_adjustment": "abc"}],
        }, "pizza")
        assert "pizza: max_selections must be integer >= 1" in errors
        assert "pizza: more than one default option" in errors
        assert "pizza: option missing name" in errors
        assert "pizza: option  price_adjustment must be number" in errors

    def test_product_errors(self, menu):
        menu["products"].append({"name": "Refrigerante", "price": 6})
        menu["products"].append({"name": "Esfiha", "price": "dez", "category": "Salgados",
                                 "extras": [{"name": "Limão", "price": -1}], "templates": ["Molho"]})
        errors = validate(menu)
        assert "duplicate product: Refrigerante" in errors
        assert "Esfiha: price must be number" in errors
        assert "Esfiha: unknown category 'Salgados'" in errors
        assert "Esfiha: extra Limão price must be number >= 0" in errors
        assert "Esfiha: unknown template 'Molho'" in errors

    def test_restaurant_required(self):
        assert validate({}) == ["restaurant missing name", "restaurant missing slug"]


class TestLoader:

    def test_check_menu_raises(self):
        with pytest.raises(ValueError, match="Menu validation failed"):
            check_menu({"restaurant": {"name": "Sem slug"}})

    def test_load_menu_from_file(self, tmp_path, menu):
        path = tmp_path / "menu.json"
        path.write_text(json.dumps(menu, ensure_ascii=False), encoding="utf-8")
        data = load_menu(path)
        assert data["restaurant"]["slug"] == "bella"
