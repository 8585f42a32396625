"""Domain records returned by the services."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Mapping


@dataclass(slots=True, frozen=True)
class Identity:
    user_id: str


@dataclass(slots=True)
class Post:
    id: str
    product_id: str
    commerce_id: str
    author_id: str
    image: str
    price: Decimal
    publish_date: datetime

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Post":
        return cls(
            id=row["id"],
            product_id=row["product_id"],
            commerce_id=row["commerce_id"],
            author_id=row["author_id"],
            image=row["image"],
            price=row["price"],
            publish_date=row["publish_date"],
        )


@dataclass(slots=True)
class Collaboration:
    id: str
    post_id: str
    user_id: str
    created_at: datetime


@dataclass(slots=True)
class PublishResult:
    outcome: str
    post: Post | None = None
    collaboration: Collaboration | None = None


CREATED = "created"
COLLABORATED = "collaborated"
IGNORED = "ignored"
