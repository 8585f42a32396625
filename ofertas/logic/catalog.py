"""Products, categories and commerces."""

from __future__ import annotations

import logging
import uuid
from typing import Any

from sqlalchemy import insert, select, update
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import IntegrityError

from ofertas.db.tables import categories, commerces, products
from ofertas.errors import Conflict, NotFound
from ofertas.schemas import CategoryInput, ProductInput

logger = logging.getLogger(__name__)

PRODUCT_CONFLICT = "Ya existe un producto con ese nombre"
CATEGORY_CONFLICT = "Ya existe una categoría con ese nombre"


def create_product(engine: Engine, payload: ProductInput) -> dict[str, Any]:
    product = {"id": str(uuid.uuid4()), "name": payload.name, "category_id": payload.category_id}
    try:
        with engine.begin() as conn:
            _ensure_category(conn, payload.category_id)
            conn.execute(insert(products).values(**product))
    except IntegrityError as exc:
        raise Conflict(PRODUCT_CONFLICT) from exc
    return product


def update_product(engine: Engine, product_id: str, payload: ProductInput) -> dict[str, Any]:
    values = {"name": payload.name, "category_id": payload.category_id}
    try:
        with engine.begin() as conn:
            _ensure_category(conn, payload.category_id)
            result = conn.execute(update(products).where(products.c.id == product_id).values(**values))
            if result.rowcount == 0:
                raise NotFound("Producto inexistente")
    except IntegrityError as exc:
        raise Conflict(PRODUCT_CONFLICT) from exc
    return {"id": product_id, **values}


def list_products(engine: Engine) -> list[dict[str, Any]]:
    query = (
        select(
            products.c.id,
            products.c.name,
            categories.c.id.label("category_id"),
            categories.c.name.label("category_name"),
        )
        .select_from(products.join(categories, categories.c.id == products.c.category_id))
        .order_by(products.c.name)
    )
    with engine.connect() as conn:
        rows = conn.execute(query).mappings().all()
    return [
        {
            "id": row["id"],
            "name": row["name"],
            "category": {"id": row["category_id"], "name": row["category_name"]},
        }
        for row in rows
    ]


def create_category(engine: Engine, payload: CategoryInput) -> dict[str, Any]:
    category = {"id": str(uuid.uuid4()), "name": payload.name}
    try:
        with engine.begin() as conn:
            conn.execute(insert(categories).values(**category))
    except IntegrityError as exc:
        raise Conflict(CATEGORY_CONFLICT) from exc
    logger.info("Category %s created", payload.name)
    return category


def list_categories(engine: Engine) -> list[dict[str, Any]]:
    with engine.connect() as conn:
        rows = conn.execute(select(categories).order_by(categories.c.name)).mappings()
        return [dict(row) for row in rows]


def list_commerces(engine: Engine) -> list[dict[str, Any]]:
    with engine.connect() as conn:
        rows = conn.execute(select(commerces).order_by(commerces.c.name)).mappings()
        return [dict(row) for row in rows]


def _ensure_category(conn: Connection, category_id: str) -> None:
    found = conn.execute(select(categories.c.id).where(categories.c.id == category_id)).first()
    if found is None:
        raise NotFound("Categoría inexistente")
