"""Offer publishing, deduplication and feeds."""

from __future__ import annotations

import logging
import uuid
from collections import defaultdict
from collections.abc import Callable
from dataclasses import asdict
from datetime import date, datetime
from typing import Any, Mapping

import pendulum
from sqlalchemy import delete, func, insert, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ofertas.db.tables import categories, collaborations, commerces, posts, products, users
from ofertas.errors import ClockError, Forbidden, NotFound
from ofertas.logic.models import (
    COLLABORATED,
    CREATED,
    IGNORED,
    Collaboration,
    Identity,
    Post,
    PublishResult,
)
from ofertas.logic.ranking import best_offer_per_product
from ofertas.schemas import ImageUploadRequest, PostInput
from ofertas.storage.images import ImageStorage, UploadTicket
from ofertas.utils.dates import day_key, day_start_utc, now_in_tz, to_utc_naive

logger = logging.getLogger(__name__)


def _detail_query():
    return select(
        posts.c.id,
        posts.c.product_id,
        posts.c.commerce_id,
        posts.c.author_id,
        posts.c.image,
        posts.c.price,
        posts.c.publish_date,
        products.c.name.label("product_name"),
        products.c.category_id,
        categories.c.name.label("category_name"),
        commerces.c.name.label("commerce_name"),
        commerces.c.address.label("commerce_address"),
        users.c.name.label("author_name"),
        users.c.image.label("author_image"),
    ).select_from(
        posts.join(products, products.c.id == posts.c.product_id)
        .join(categories, categories.c.id == products.c.category_id)
        .join(commerces, commerces.c.id == posts.c.commerce_id)
        .outerjoin(users, users.c.id == posts.c.author_id)
    )


def _product_view(row: Mapping[str, Any]) -> dict[str, Any]:
    return {
        "id": row["product_id"],
        "name": row["product_name"],
        "category_id": row["category_id"],
        "category": {"id": row["category_id"], "name": row["category_name"]},
    }


def _commerce_view(row: Mapping[str, Any]) -> dict[str, Any]:
    return {"id": row["commerce_id"], "name": row["commerce_name"], "address": row["commerce_address"]}


def _summary_view(row: Mapping[str, Any]) -> dict[str, Any]:
    return {
        "id": row["id"],
        "product": _product_view(row),
        "commerce": _commerce_view(row),
        "price": row["price"],
        "publish_date": row["publish_date"],
    }


def _detail_view(row: Mapping[str, Any]) -> dict[str, Any]:
    view = _summary_view(row)
    view["image"] = row["image"]
    view["author"] = {"id": row["author_id"], "name": row["author_name"], "image": row["author_image"]}
    return view


class PostService:
    """Offer workflows for one request.

    ``clock`` returns the current time; it is injected so the day window can be
    pinned in tests.
    """

    def __init__(
        self,
        engine: Engine,
        images: ImageStorage,
        *,
        clock: Callable[[], datetime] = now_in_tz,
        discard_duplicate_uploads: bool = False,
    ) -> None:
        self.engine = engine
        self.images = images
        self.clock = clock
        self.discard_duplicate_uploads = discard_duplicate_uploads

    def image_upload_url(self, request: ImageUploadRequest, identity: Identity) -> UploadTicket:
        return self.images.presign_upload(request.mimetype, request.length, identity.user_id)

    def publish(self, payload: PostInput, identity: Identity) -> PublishResult:
        """Publish an offer, or corroborate the identical offer already published today."""
        now = self._now()
        day_start = day_start_utc(now)
        existing = self._find_same_day_offer(payload, day_start)
        if existing is not None:
            if self.discard_duplicate_uploads:
                self.images.discard_temporary(payload.image_key)
            return self._settle_duplicate(existing, identity)

        self._ensure_references(payload)
        image_url = self.images.promote(payload.image_key)
        try:
            post = self._insert_post(payload, identity, image_url, now, dedup_day=day_key(now))
        except IntegrityError:
            existing = self._find_same_day_offer(payload, day_start)
            self._discard_unreferenced(payload.image_key, image_url)
            if existing is None:
                raise
            logger.info("Offer %s was published concurrently", existing["id"])
            return self._settle_duplicate(existing, identity)
        except SQLAlchemyError:
            self._discard_unreferenced(payload.image_key, image_url)
            raise
        logger.info("Offer %s created by %s", post.id, identity.user_id)
        return PublishResult(outcome=CREATED, post=post)

    def create(self, payload: PostInput, identity: Identity) -> Post:
        self._ensure_references(payload)
        image_url = self.images.promote(payload.image_key)
        try:
            post = self._insert_post(payload, identity, image_url, self._now(), dedup_day=None)
        except SQLAlchemyError:
            self._discard_unreferenced(payload.image_key, image_url)
            raise
        logger.info("Offer %s created by %s", post.id, identity.user_id)
        return post

    def count(self) -> int:
        with self.engine.connect() as conn:
            return int(conn.execute(select(func.count()).select_from(posts)).scalar_one())

    def list_all(self) -> list[dict[str, Any]]:
        with self.engine.connect() as conn:
            rows = conn.execute(_detail_query()).mappings().all()
        return [_summary_view(row) for row in rows]

    def daily_best_offers(self) -> list[dict[str, Any]]:
        day_start = day_start_utc(self._now())
        query = _detail_query().where(posts.c.publish_date >= day_start)
        with self.engine.connect() as conn:
            rows = conn.execute(query).mappings().all()
            best = best_offer_per_product(rows)
            counts = self._collaboration_counts(conn, [row["id"] for row in best])
        feed = []
        for row in best:
            view = _detail_view(row)
            view["collaborations"] = counts.get(row["id"], 0)
            feed.append(view)
        return feed

    def get_by_id(self, post_id: str) -> dict[str, Any]:
        with self.engine.connect() as conn:
            row = conn.execute(_detail_query().where(posts.c.id == post_id)).mappings().first()
            if row is None:
                raise NotFound("Publicación inexistente")
            view = _detail_view(row)
            view["collaborations"] = self._collaboration_lists(conn, [post_id]).get(post_id, [])
        return view

    def get_by_product(self, product_id: str) -> dict[str, Any]:
        product_query = (
            select(products.c.id, products.c.name, products.c.category_id, categories.c.name.label("category_name"))
            .select_from(products.join(categories, categories.c.id == products.c.category_id))
            .where(products.c.id == product_id)
        )
        with self.engine.connect() as conn:
            product = conn.execute(product_query).mappings().first()
            if product is None:
                raise NotFound("Producto inexistente")
            rows = conn.execute(_detail_query().where(posts.c.product_id == product_id)).mappings().all()
        return {
            "id": product["id"],
            "name": product["name"],
            "category_id": product["category_id"],
            "category": {"id": product["category_id"], "name": product["category_name"]},
            "posts": [
                {
                    "id": row["id"],
                    "commerce": _commerce_view(row),
                    "price": row["price"],
                    "publish_date": row["publish_date"],
                }
                for row in rows
            ],
        }

    def list_own(self, identity: Identity) -> list[dict[str, Any]]:
        query = (
            _detail_query()
            .where(posts.c.author_id == identity.user_id)
            .order_by(posts.c.publish_date.desc())
        )
        with self.engine.connect() as conn:
            rows = conn.execute(query).mappings().all()
            lists = self._collaboration_lists(conn, [row["id"] for row in rows])
        own = []
        for row in rows:
            view = _detail_view(row)
            view["collaborations"] = lists.get(row["id"], [])
            own.append(view)
        return own

    def delete_own(self, post_id: str, identity: Identity) -> Post:
        with self.engine.begin() as conn:
            row = conn.execute(select(posts).where(posts.c.id == post_id)).mappings().first()
            if row is None:
                raise NotFound("Publicación inexistente")
            if row["author_id"] != identity.user_id:
                raise Forbidden("No eres el autor de la publicación")
            conn.execute(delete(collaborations).where(collaborations.c.post_id == post_id))
            conn.execute(delete(posts).where(posts.c.id == post_id))
        logger.info("Offer %s deleted by its author", post_id)
        return Post.from_row(row)

    def _now(self) -> pendulum.DateTime:
        try:
            return pendulum.instance(self.clock())
        except (ValueError, OverflowError, OSError, TypeError) as exc:
            raise ClockError(f"Clock unavailable: {exc}") from exc

    def _find_same_day_offer(self, payload: PostInput, day_start: datetime) -> Mapping[str, Any] | None:
        query = select(posts).where(
            posts.c.publish_date >= day_start,
            posts.c.product_id == payload.product_id,
            posts.c.commerce_id == payload.commerce_id,
            posts.c.price == payload.price,
        )
        with self.engine.connect() as conn:
            return conn.execute(query).mappings().first()

    def _settle_duplicate(self, existing: Mapping[str, Any], identity: Identity) -> PublishResult:
        if existing["author_id"] == identity.user_id:
            logger.info("Offer %s republished by its author; ignoring", existing["id"])
            return PublishResult(outcome=IGNORED)
        collaboration = Collaboration(
            id=str(uuid.uuid4()),
            post_id=existing["id"],
            user_id=identity.user_id,
            created_at=to_utc_naive(self._now()),
        )
        with self.engine.begin() as conn:
            conn.execute(insert(collaborations).values(**asdict(collaboration)))
        logger.info("User %s collaborated on offer %s", identity.user_id, existing["id"])
        return PublishResult(outcome=COLLABORATED, collaboration=collaboration)

    def _ensure_references(self, payload: PostInput) -> None:
        with self.engine.connect() as conn:
            product = conn.execute(select(products.c.id).where(products.c.id == payload.product_id)).first()
            commerce = conn.execute(select(commerces.c.id).where(commerces.c.id == payload.commerce_id)).first()
        if product is None:
            raise NotFound("Producto inexistente")
        if commerce is None:
            raise NotFound("Comercio inexistente")

    def _insert_post(self, payload: PostInput, identity: Identity, image_url: str, now: datetime, *, dedup_day: date | None) -> Post:
        post = Post(
            id=str(uuid.uuid4()),
            product_id=payload.product_id,
            commerce_id=payload.commerce_id,
            author_id=identity.user_id,
            image=image_url,
            price=payload.price,
            publish_date=to_utc_naive(now),
        )
        with self.engine.begin() as conn:
            conn.execute(insert(posts).values(**asdict(post), dedup_day=dedup_day))
        return post

    def _discard_unreferenced(self, image_key: str, image_url: str) -> None:
        """Delete a promoted image unless a stored offer already points at it."""
        with self.engine.connect() as conn:
            in_use = conn.execute(select(posts.c.id).where(posts.c.image == image_url).limit(1)).first()
        if in_use is not None:
            return
        logger.info("Discarding unused image %s", image_key)
        self.images.discard_permanent(image_key)

    @staticmethod
    def _collaboration_counts(conn, post_ids: list[str]) -> dict[str, int]:
        if not post_ids:
            return {}
        query = (
            select(collaborations.c.post_id, func.count(collaborations.c.id))
            .where(collaborations.c.post_id.in_(post_ids))
            .group_by(collaborations.c.post_id)
        )
        return {post_id: int(total) for post_id, total in conn.execute(query)}

    @staticmethod
    def _collaboration_lists(conn, post_ids: list[str]) -> dict[str, list[dict[str, Any]]]:
        if not post_ids:
            return {}
        query = (
            select(collaborations)
            .where(collaborations.c.post_id.in_(post_ids))
            .order_by(collaborations.c.created_at)
        )
        grouped: dict[str, list[dict[str, Any]]] = defaultdict(list)
        for row in conn.execute(query).mappings():
            grouped[row["post_id"]].append(dict(row))
        return grouped
