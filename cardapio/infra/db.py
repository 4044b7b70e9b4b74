from typing import Optional
from sqlalchemy import (
    Boolean, Column, DateTime, ForeignKey, Integer, MetaData, Numeric, String,
    Table, Text, UniqueConstraint, create_engine, func,
)
from sqlalchemy.engine import Engine
from cardapio.infra.settings import settings

# Postgres em produção, SQLite local; SQLAlchemy v2 lê sslmode da URL
engine = create_engine(settings.DATABASE_URL, pool_pre_ping=True, future=True)

metadata = MetaData()

MONEY = Numeric(10, 2)

restaurants = Table(
    "restaurants", metadata,
    Column("id", String(32), primary_key=True),
    Column("name", Text, nullable=False),
    Column("slug", String(120), nullable=False, unique=True),
    Column("whatsapp", String(32), nullable=False, default=""),
    Column("address", Text, nullable=False, default=""),
    Column("is_open", Boolean, nullable=False, default=True),
    Column("min_order_value", MONEY, nullable=False, default=0),
    Column("allows_delivery", Boolean, nullable=False, default=False),
    Column("description", Text, nullable=False, default=""),
    Column("contact_phone", String(32), nullable=False, default=""),
    Column("created_at", DateTime(timezone=True), server_default=func.now()),
)

categories = Table(
    "categories", metadata,
    Column("id", String(32), primary_key=True),
    Column("restaurant_id", String(32), ForeignKey("restaurants.id", ondelete="CASCADE"), nullable=False, index=True),
    Column("name", Text, nullable=False),
    Column("display_order", Integer, nullable=False, default=0),
)

products = Table(
    "products", metadata,
    Column("id", String(32), primary_key=True),
    Column("restaurant_id", String(32), ForeignKey("restaurants.id", ondelete="CASCADE"), nullable=False, index=True),
    Column("category_id", String(32), ForeignKey("categories.id", ondelete="SET NULL"), nullable=True),
    Column("name", Text, nullable=False),
    Column("description", Text, nullable=False, default=""),
    Column("price", MONEY, nullable=False),
    Column("image", Text, nullable=False, default=""),
    Column("is_available", Boolean, nullable=False, default=True),
    Column("is_promotion", Boolean, nullable=False, default=False),
    Column("allows_observations", Boolean, nullable=False, default=True),
    # cache da faixa de preço (recalculado a cada mudança de variação)
    Column("price_display_min", MONEY, nullable=True),
    Column("price_display_max", MONEY, nullable=True),
    Column("has_variations", Boolean, nullable=False, default=False),
    Column("created_at", DateTime(timezone=True), server_default=func.now()),
)

product_extras = Table(
    "product_extras", metadata,
    Column("id", String(32), primary_key=True),
    Column("product_id", String(32), ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True),
    Column("name", Text, nullable=False),
    Column("price", MONEY, nullable=False, default=0),
    Column("is_available", Boolean, nullable=False, default=True),
)

def _group_columns():
    return [
        Column("name", Text, nullable=False),
        Column("is_required", Boolean, nullable=False, default=False),
        Column("allow_multiple", Boolean, nullable=False, default=False),
        Column("max_selections", Integer, nullable=False, default=1),
        Column("display_order", Integer, nullable=False, default=0),
    ]

def _option_columns():
    return [
        Column("name", Text, nullable=False),
        Column("price_adjustment", MONEY, nullable=False, default=0),
        Column("is_default", Boolean, nullable=False, default=False),
        Column("is_available", Boolean, nullable=False, default=True),
        Column("display_order", Integer, nullable=False, default=0),
    ]

variation_groups = Table(
    "product_variation_groups", metadata,
    Column("id", String(32), primary_key=True),
    Column("product_id", String(32), ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True),
    *_group_columns(),
)

variation_options = Table(
    "product_variation_options", metadata,
    Column("id", String(32), primary_key=True),
    Column("variation_group_id", String(32), ForeignKey("product_variation_groups.id", ondelete="CASCADE"), nullable=False, index=True),
    *_option_columns(),
)

group_templates = Table(
    "variation_group_templates", metadata,
    Column("id", String(32), primary_key=True),
    Column("restaurant_id", String(32), ForeignKey("restaurants.id", ondelete="CASCADE"), nullable=False, index=True),
    *_group_columns(),
)

option_templates = Table(
    "variation_option_templates", metadata,
    Column("id", String(32), primary_key=True),
    Column("template_group_id", String(32), ForeignKey("variation_group_templates.id", ondelete="CASCADE"), nullable=False, index=True),
    *_option_columns(),
)

assignments = Table(
    "product_variation_assignments", metadata,
    Column("id", String(32), primary_key=True),
    Column("product_id", String(32), ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True),
    Column("template_group_id", String(32), ForeignKey("variation_group_templates.id", ondelete="CASCADE"), nullable=False),
    Column("display_order", Integer, nullable=False, default=0),
    UniqueConstraint("product_id", "template_group_id"),
)

logs = Table(
    "logs", metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("ts", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Column("level", String(10), nullable=False),
    Column("msg", Text, nullable=False),
)

def init_db(bind: Optional[Engine] = None) -> None:
    """Cria as tabelas que ainda não existem."""
    metadata.create_all(bind or engine)
