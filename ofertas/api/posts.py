"""Offer endpoints."""

from __future__ import annotations

import uuid
from typing import Any

from fastapi import APIRouter, Depends, Query

from ofertas.api.deps import get_post_service, require_identity
from ofertas.logic.models import Identity, Post, PublishResult
from ofertas.logic.posts import PostService
from ofertas.schemas import ImageUploadRequest, PostInput
from ofertas.storage import UploadTicket

router = APIRouter(prefix="/posts", tags=["posts"])


@router.get("/image-upload-url")
async def image_upload_url(
    mimetype: str = Query(...),
    length: int = Query(...),
    identity: Identity = Depends(require_identity),
    service: PostService = Depends(get_post_service),
) -> UploadTicket:
    request = ImageUploadRequest(mimetype=mimetype, length=length)
    return service.image_upload_url(request, identity)


@router.post("/publish")
async def publish(
    payload: PostInput,
    identity: Identity = Depends(require_identity),
    service: PostService = Depends(get_post_service),
) -> PublishResult:
    return service.publish(payload, identity)


@router.post("", status_code=201)
async def create(
    payload: PostInput,
    identity: Identity = Depends(require_identity),
    service: PostService = Depends(get_post_service),
) -> Post:
    return service.create(payload, identity)


@router.get("/count")
async def count(
    service: PostService = Depends(get_post_service),
) -> dict[str, int]:
    return {"count": service.count()}


@router.get("")
async def list_all(
    identity: Identity = Depends(require_identity),
    service: PostService = Depends(get_post_service),
) -> list[dict[str, Any]]:
    return service.list_all()


@router.get("/best-offers")
async def daily_best_offers(
    identity: Identity = Depends(require_identity),
    service: PostService = Depends(get_post_service),
) -> list[dict[str, Any]]:
    return service.daily_best_offers()


@router.get("/mine")
async def own_posts(
    identity: Identity = Depends(require_identity),
    service: PostService = Depends(get_post_service),
) -> list[dict[str, Any]]:
    return service.list_own(identity)


@router.get("/{post_id}")
async def get_by_id(
    post_id: uuid.UUID,
    identity: Identity = Depends(require_identity),
    service: PostService = Depends(get_post_service),
) -> dict[str, Any]:
    return service.get_by_id(str(post_id))


@router.delete("/{post_id}")
async def delete_own_post(
    post_id: uuid.UUID,
    identity: Identity = Depends(require_identity),
    service: PostService = Depends(get_post_service),
) -> Post:
    return service.delete_own(str(post_id), identity)
