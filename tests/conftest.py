"""
Fixtures compartilhadas: banco SQLite em memória, cardápio-semente e
TestClient com dependências trocadas.
"""
import copy
from decimal import Decimal
from typing import List

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from cardapio.app.app import app
from cardapio.app.deps import get_channel, get_describer, get_repo
from cardapio.core.cart import CartRegistry
from cardapio.core.menu.models import (
    Extra, Product, Restaurant, VariationGroup, VariationOption,
)
from cardapio.infra.catalog_repo import CatalogRepository
from cardapio.infra.db import init_db
from cardapio.infra.settings import settings
from cardapio.ports.description import DescriptionPort
from cardapio.ports.order_channel import OrderChannelError, OrderChannelPort


MENU = {
    "restaurant": {
        "name": "Pizzaria Bella",
        "slug": "bella",
        "whatsapp": "+55 (11) 99999-0000",
        "address": "Rua das Flores, 10",
        "is_open": True,
        "min_order_value": 30,
        "allows_delivery": False,
    },
    "categories": [{"name": "Pizzas"}, {"name": "Bebidas"}],
    "templates": [
        {
            "name": "Borda",
            "options": [
                {"name": "Catupiry", "price_adjustment": 5},
                {"name": "Cheddar", "price_adjustment": 6},
            ],
        }
    ],
    "products": [
        {
            "name": "Pizza Grande",
            "category": "Pizzas",
            "price": 40,
            "description": "Oito fatias",
            "extras": [
                {"name": "Bacon", "price": 4},
                {"name": "Azeitona", "price": 2, "is_available": False},
            ],
            "variation_groups": [
                {
                    "name": "Sabores",
                    "is_required": True,
                    "allow_multiple": True,
                    "max_selections": 2,
                    "options": [
                        {"name": "Calabresa", "price_adjustment": 0},
                        {"name": "Margherita", "price_adjustment": 0},
                        {"name": "Portuguesa", "price_adjustment": 4},
                        {"name": "Quatro Queijos", "price_adjustment": 6, "is_available": False},
                    ],
                },
                {
                    "name": "Massa",
                    "is_required": True,
                    "display_order": 1,
                    "options": [
                        {"name": "Tradicional", "price_adjustment": 0, "is_default": True},
                        {"name": "Integral", "price_adjustment": 3},
                    ],
                },
            ],
            "templates": ["Borda"],
        },
        {"name": "Pizza Broto", "category": "Pizzas", "price": 25,
         "description": "Promoção de terça", "is_promotion": True},
        {"name": "Refrigerante", "category": "Bebidas", "price": 6},
        {"name": "Suco do Dia", "category": "Bebidas", "price": 8, "is_available": False},
    ],
}


def menu_data():
    return copy.deepcopy(MENU)


class FakeChannel(OrderChannelPort):
    def __init__(self):
        self.sent: List[str] = []
        self.fail = False

    def send(self, restaurant, message):
        if self.fail:
            raise OrderChannelError("canal fora do ar")
        self.sent.append(message)
        return f"ref-{len(self.sent)}"


class FakeDescriber(DescriptionPort):
    def generate(self, product_name, cuisine="Culinária"):
        return f"{product_name} ({cuisine})"


# -------- domínio puro --------

def option(oid, group_id, name, adj="0", **kw):
    return VariationOption(id=oid, group_id=group_id, name=name, price_adjustment=Decimal(adj), **kw)


@pytest.fixture
def size_group():
    """Escolha única obrigatória com padrão."""
    return VariationGroup(
        id="tam", name="Tamanho", is_required=True,
        options=[
            option("p", "tam", "Pequeno", "0", is_default=True),
            option("g", "tam", "Grande", "8.00", display_order=1),
        ],
    )


@pytest.fixture
def flavor_group():
    """Pizza meio a meio: exatamente dois sabores."""
    return VariationGroup(
        id="sab", name="Sabores", is_required=True, allow_multiple=True, max_selections=2,
        options=[
            option("cal", "sab", "Calabresa"),
            option("mar", "sab", "Margherita"),
            option("por", "sab", "Portuguesa", "4"),
            option("qq", "sab", "Quatro Queijos", "6", is_available=False),
        ],
    )


@pytest.fixture
def bacon():
    return Extra(id="bac", product_id="x", name="Bacon", price=Decimal("3.50"))


@pytest.fixture
def product():
    return Product(id="x", restaurant_id="r", category_id=None, name="X-Burger", price=Decimal("24.90"))


@pytest.fixture
def shop():
    return Restaurant(id="r", name="Lanchonete Boa", slug="boa", whatsapp="+55 11 98888-7777",
                      address="Av. Central, 100", min_order_value=Decimal("0"))


# -------- banco / API --------

@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    init_db(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def repo(engine):
    return CatalogRepository(engine)


@pytest.fixture
def restaurant(repo):
    return repo.seed_menu(menu_data())


@pytest.fixture
def products(repo, restaurant):
    return {p.name: p for p in repo.list_products(restaurant.id)}


@pytest.fixture
def channel():
    return FakeChannel()


@pytest.fixture
def client(repo, channel, monkeypatch):
    monkeypatch.setattr(settings, "ADMIN_USER", "admin")
    monkeypatch.setattr(settings, "ADMIN_PASS", "segredo")
    app.dependency_overrides[get_repo] = lambda: repo
    app.dependency_overrides[get_channel] = lambda: channel
    app.dependency_overrides[get_describer] = lambda: FakeDescriber()
    app.state.carts = CartRegistry()
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def menu():
    """Cópia editável do cardápio-semente."""
    return menu_data()
