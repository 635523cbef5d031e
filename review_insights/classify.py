"""Keyword and sentiment helpers used when displaying reviews."""
from __future__ import annotations
from collections import Counter
from enum import Enum
from typing import Dict, Iterable

from .schemas import Review, Sentiment


class FeedbackCategory(str, Enum):
    BUG = "bug"
    FEATURE_REQUEST = "feature_request"
    UI_UX = "ui_ux"
    GENERAL = "general"


# checked in order; substring match on lowercased text
_CATEGORY_KEYWORDS = (
    (FeedbackCategory.BUG, ("bug", "crash", "error")),
    (FeedbackCategory.FEATURE_REQUEST, ("feature", "request", "idea")),
    (FeedbackCategory.UI_UX, ("ui", "ux", "usability", "design")),
)

_ALLOWED = {s.value: s for s in Sentiment}


def normalize_sentiment(value: str | None) -> Sentiment:
    """Map a free-form sentiment string to Sentiment; anything unknown is neutral."""
    return _ALLOWED.get((value or "").strip().lower(), Sentiment.NEUTRAL)


def categorize_feedback(text: str) -> FeedbackCategory:
    lower = (text or "").lower()
    for category, keywords in _CATEGORY_KEYWORDS:
        if any(k in lower for k in keywords):
            return category
    return FeedbackCategory.GENERAL


def sentiment_breakdown(reviews: Iterable[Review]) -> Dict[Sentiment, int]:
    counts = Counter(normalize_sentiment(r.sentiment) for r in reviews)
    return {s: counts.get(s, 0) for s in Sentiment}
