"""Table definitions shared by the services, migrations and tests."""

from __future__ import annotations

from sqlalchemy import Column, Date, DateTime, ForeignKey, Index, MetaData, Numeric, String, Table, Text

metadata = MetaData()

PRICE_TYPE = Numeric(12, 2)

# Owned by the identity provider; referenced only.
users = Table(
    "users",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("name", Text),
    Column("email", Text, unique=True),
    Column("image", Text),
)

categories = Table(
    "categories",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("name", Text, nullable=False, unique=True),
)

products = Table(
    "products",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("name", Text, nullable=False, unique=True),
    Column("category_id", String(36), ForeignKey("categories.id"), nullable=False),
)

commerces = Table(
    "commerces",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("name", Text, nullable=False),
    Column("address", Text),
)

posts = Table(
    "posts",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("product_id", String(36), ForeignKey("products.id"), nullable=False),
    Column("commerce_id", String(36), ForeignKey("commerces.id"), nullable=False),
    Column("author_id", String(64), ForeignKey("users.id"), nullable=False),
    Column("image", Text, nullable=False),
    Column("price", PRICE_TYPE, nullable=False),
    Column("publish_date", DateTime, nullable=False),
    # Set only by the publish workflow; NULL rows are never constrained.
    Column("dedup_day", Date),
)

Index(
    "uq_posts_daily_offer",
    posts.c.product_id,
    posts.c.commerce_id,
    posts.c.price,
    posts.c.dedup_day,
    unique=True,
)

collaborations = Table(
    "collaborations",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("post_id", String(36), ForeignKey("posts.id", ondelete="CASCADE"), nullable=False),
    Column("user_id", String(64), ForeignKey("users.id"), nullable=False),
    Column("created_at", DateTime, nullable=False),
)
