"""Ranking of the daily offers feed."""

from __future__ import annotations

from typing import Any, Iterable, Mapping, TypeVar

OfferT = TypeVar("OfferT", bound=Mapping[str, Any])


def feed_order(offers: Iterable[OfferT]) -> list[OfferT]:
    """Sort by price ascending, then by publish date descending."""
    newest_first = sorted(offers, key=lambda offer: offer["publish_date"], reverse=True)
    return sorted(newest_first, key=lambda offer: offer["price"])


def best_offer_per_product(offers: Iterable[OfferT]) -> list[OfferT]:
    """Keep the cheapest offer of every product.

    Ties on price go to the most recently published offer. The result stays in
    feed order.
    """
    seen: set[str] = set()
    best: list[OfferT] = []
    for offer in feed_order(offers):
        if offer["product_id"] in seen:
            continue
        seen.add(offer["product_id"])
        best.append(offer)
    return best
