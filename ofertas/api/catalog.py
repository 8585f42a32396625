"""Product, category and commerce endpoints."""

from __future__ import annotations

import uuid
from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.engine import Engine

from ofertas.api.deps import get_engine, get_post_service, require_identity
from ofertas.logic import catalog
from ofertas.logic.models import Identity
from ofertas.logic.posts import PostService
from ofertas.schemas import CategoryInput, ProductInput

router = APIRouter(prefix="/products", tags=["products"])
commerce_router = APIRouter(prefix="/commerces", tags=["commerces"])


@router.get("/categories")
async def list_categories(engine: Engine = Depends(get_engine)) -> list[dict[str, Any]]:
    return catalog.list_categories(engine)


@router.post("/categories", status_code=201)
async def create_category(
    payload: CategoryInput,
    identity: Identity = Depends(require_identity),
    engine: Engine = Depends(get_engine),
) -> dict[str, Any]:
    return catalog.create_category(engine, payload)


@router.get("")
async def list_products(engine: Engine = Depends(get_engine)) -> list[dict[str, Any]]:
    return catalog.list_products(engine)


@router.post("", status_code=201)
async def create_product(
    payload: ProductInput,
    identity: Identity = Depends(require_identity),
    engine: Engine = Depends(get_engine),
) -> dict[str, Any]:
    return catalog.create_product(engine, payload)


@router.put("/{product_id}")
async def update_product(
    product_id: uuid.UUID,
    payload: ProductInput,
    identity: Identity = Depends(require_identity),
    engine: Engine = Depends(get_engine),
) -> dict[str, Any]:
    return catalog.update_product(engine, str(product_id), payload)


@router.get("/{product_id}/posts")
async def posts_by_product(
    product_id: uuid.UUID,
    identity: Identity = Depends(require_identity),
    service: PostService = Depends(get_post_service),
) -> dict[str, Any]:
    return service.get_by_product(str(product_id))


@commerce_router.get("")
async def list_commerces(engine: Engine = Depends(get_engine)) -> list[dict[str, Any]]:
    return catalog.list_commerces(engine)
