from enum import Enum
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Sentiment(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class Review(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = Field(min_length=1)  # unique within a source
    text: str
    sentiment: str  # positive|negative|neutral, not enforced
    source: str     # display name, e.g. "Google Play"
    product: str

    @field_validator("text")
    @classmethod
    def _text_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("review text must not be empty")
        return v


class SourceCatalogEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    value: str
    label: str


class SummarizeRequest(BaseModel):
    reviews: List[Review]


class SummarizeResponse(BaseModel):
    summary: str


class PromptPayload(BaseModel):
    model_config = ConfigDict(frozen=True)

    prompt: str
    output_schema: Dict[str, Any]


class ReviewsResponse(BaseModel):
    source: str
    label: str | None = None
    reviews: List[Review]
    sentiment_counts: Dict[str, int] = Field(default_factory=dict)
    categories: Dict[str, str] = Field(default_factory=dict)  # review id -> feedback category
