"""Request dependencies: storage backends, clock and identity gates."""

from __future__ import annotations

import os
from collections.abc import Callable
from datetime import datetime
from functools import lru_cache

from fastapi import Depends, Header, HTTPException
from sqlalchemy.engine import Engine

from ofertas.db.session import create_engine_from_env
from ofertas.logic.models import Identity
from ofertas.logic.posts import PostService
from ofertas.storage import ImageStorage, image_storage_from_env
from ofertas.utils.dates import now_in_tz
from ofertas.utils.tokens import load_session_token


@lru_cache
def get_engine() -> Engine:
    return create_engine_from_env()


@lru_cache
def get_image_storage() -> ImageStorage:
    return image_storage_from_env()


def get_clock() -> Callable[[], datetime]:
    return now_in_tz


def discard_duplicate_uploads() -> bool:
    return os.environ.get("DISCARD_DUPLICATE_UPLOADS", "false").lower() in {"1", "true", "yes"}


def get_post_service(
    engine: Engine = Depends(get_engine),
    images: ImageStorage = Depends(get_image_storage),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> PostService:
    return PostService(engine, images, clock=clock, discard_duplicate_uploads=discard_duplicate_uploads())


def optional_identity(authorization: str | None = Header(default=None)) -> Identity | None:
    """Identity for public routes; anonymous callers get None."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None
    user_id = load_session_token(token.strip())
    return Identity(user_id=user_id) if user_id else None


def require_identity(identity: Identity | None = Depends(optional_identity)) -> Identity:
    if identity is None:
        raise HTTPException(status_code=401, detail="Not authenticated", headers={"WWW-Authenticate": "Bearer"})
    return identity
