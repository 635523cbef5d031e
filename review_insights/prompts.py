from __future__ import annotations
from typing import Any, Iterable, List, Mapping, Union

from pydantic import ValidationError as PydanticValidationError

from .errors import ValidationError
from .schemas import PromptPayload, Review

SUMMARY_PREAMBLE = (
    "You are a product manager summarizing user reviews for a product.\n\n"
    "Here are the reviews:\n\n"
)

REVIEW_BLOCK = (
    "Review (ID: {id}, Source: {source}, Sentiment: {sentiment}):\n"
    "{text}\n\n"
)

SUMMARY_INSTRUCTION = (
    "\nBased on these reviews, provide a concise summary of the key pain points, "
    "feature requests, and positive feedback. Focus on actionable insights for the product team. "
    "Reply ONLY with JSON containing a single key 'summary' whose value is the summary text."
)

SUMMARY_OUTPUT_SCHEMA = {
    "type": "object",
    "properties": {
        "summary": {
            "type": "string",
            "description": "A summary of the key themes and sentiments from the user reviews.",
        },
    },
    "required": ["summary"],
}

ReviewLike = Union[Review, Mapping[str, Any]]


def _coerce(index: int, item: ReviewLike) -> Review:
    if isinstance(item, Review):
        return item
    try:
        return Review.model_validate(item)
    except PydanticValidationError as e:
        fields = sorted({".".join(str(p) for p in err["loc"]) for err in e.errors()})
        raise ValidationError(f"review #{index} is malformed: invalid or missing {', '.join(fields)}") from e


def render_review(review: Review) -> str:
    return REVIEW_BLOCK.format(
        id=review.id, source=review.source, sentiment=review.sentiment, text=review.text,
    )


def build_prompt(reviews: Iterable[ReviewLike]) -> PromptPayload:
    """
    Render reviews (in the given order) into the summary prompt.
    Raises ValidationError for an empty list or a malformed review.
    """
    validated: List[Review] = [_coerce(i, r) for i, r in enumerate(reviews)]
    if not validated:
        raise ValidationError("at least one review is required")

    body = "".join(render_review(r) for r in validated)
    return PromptPayload(
        prompt=SUMMARY_PREAMBLE + body + SUMMARY_INSTRUCTION,
        output_schema=SUMMARY_OUTPUT_SCHEMA,
    )
