"""
Mock review data source.
- Static catalog of sources and the reviews each one returns
- fetch() simulates a network round trip before answering
"""
from __future__ import annotations
import asyncio
import logging
from typing import Dict, List, Optional

from .config import Settings
from .schemas import Review, SourceCatalogEntry

logger = logging.getLogger(__name__)

# product hint that matches every review of a source
GENERIC_PRODUCT = "GenericProduct"
DEFAULT_FETCH_DELAY = 0.75

MOCK_DATA_SOURCES: List[SourceCatalogEntry] = [
    SourceCatalogEntry(value="google_play_awesomeapp", label="Google Play - AwesomeApp"),
    SourceCatalogEntry(value="twitter_genericproduct", label="Twitter - GenericProduct"),
    SourceCatalogEntry(value="app_store_anotherapp", label="App Store - AnotherApp"),
]

_DEFAULT_PRODUCTS = {"google_play_awesomeapp": "AwesomeApp"}


def _reviews(source: str, product: str, rows: List[tuple]) -> List[Review]:
    return [
        Review(id=rid, text=text, sentiment=sentiment, source=source, product=product)
        for rid, sentiment, text in rows
    ]


MOCK_REVIEWS: Dict[str, List[Review]] = {
    "google_play_awesomeapp": _reviews("Google Play", "AwesomeApp", [
        ("gp_aa_1", "positive",
         "Great product! Highly recommended. The new UI is fantastic and much more intuitive."),
        ("gp_aa_2", "negative",
         "The app crashes frequently after the last update, especially when I try to upload a photo. Needs improvement."),
        ("gp_aa_3", "neutral",
         "It's an okay app. Does what it says, but the design feels a bit outdated. Could use a refresh."),
        ("gp_aa_4", "positive",
         "I love the customer support! They are very responsive and helpful. Solved my issue in minutes."),
        ("gp_aa_5", "negative",
         "Too many ads! It's very distracting and makes the user experience poor. I would pay for an ad-free version."),
    ]),
    "twitter_genericproduct": _reviews("Twitter", "GenericProduct", [
        ("tw_gp_1", "positive",
         "@GenericProduct your new feature is a game changer! #innovation #awesome"),
        ("tw_gp_2", "negative",
         "Seriously @GenericProduct, why is it so slow? Fix your performance issues! #fail #slowapp"),
        ("tw_gp_3", "neutral",
         "Just tried @GenericProduct. It's... fine. Nothing special but gets the job done. #meh"),
        ("tw_gp_4", "neutral",
         "I wish @GenericProduct had a dark mode. My eyes would thank you! #featurerequest"),
    ]),
    "app_store_anotherapp": _reviews("App Store", "AnotherApp", [
        ("as_an_1", "positive",
         "AnotherApp is incredible! Smooth performance and beautiful design. Worth every penny."),
        ("as_an_2", "negative",
         "Subscription is too expensive for what it offers. Many free alternatives are better."),
        ("as_an_3", "negative",
         "This app has potential but there are still some bugs with the notification system. Sometimes they don't appear."),
        ("as_an_4", "positive",
         "I use AnotherApp daily. It has simplified my workflow significantly. The integration with other services is seamless."),
    ]),
}


def list_sources() -> List[SourceCatalogEntry]:
    return list(MOCK_DATA_SOURCES)


def source_label(source_id: str) -> Optional[str]:
    for entry in MOCK_DATA_SOURCES:
        if entry.value == source_id:
            return entry.label
    return None


def default_product_for(source_id: str) -> str:
    """Product hint the dashboard sends for a source."""
    return _DEFAULT_PRODUCTS.get(source_id, GENERIC_PRODUCT)


def _filter_by_product(reviews: List[Review], product: str) -> List[Review]:
    # exact match, or everything for the generic hint; any other hint yields []
    return [r for r in reviews if r.product == product or product == GENERIC_PRODUCT]


async def fetch_user_reviews(source: str, product: str, *, delay: float = DEFAULT_FETCH_DELAY) -> List[Review]:
    """
    Return the mock reviews for `source`, filtered by `product`.
    Unknown sources give an empty list (logged, never raised).
    """
    if delay > 0:
        await asyncio.sleep(delay)

    reviews = MOCK_REVIEWS.get(source)
    if reviews is None:
        logger.warning(
            "No mock data found for source: %s and product: %s. Returning empty list.",
            source, product,
        )
        return []
    return _filter_by_product(reviews, product)


class ReviewDataProvider:
    """Review source backed by the static catalog, with configurable latency."""

    def __init__(self, settings: Settings | None = None):
        self.delay = settings.fetch_delay_seconds if settings else DEFAULT_FETCH_DELAY

    async def fetch(self, source_id: str, product_hint: str) -> List[Review]:
        reviews = await fetch_user_reviews(source_id, product_hint, delay=self.delay)
        logger.debug("fetched %d reviews from %s", len(reviews), source_id)
        return reviews
