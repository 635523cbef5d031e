"""
Summarization flow: reviews -> prompt -> model -> summary.

Each request walks IDLE -> BUILDING -> EXECUTING -> SUCCEEDED | FAILED.
Failures are logged here with full detail and replaced by
SummarizationFailedError, whose message is fixed.
"""
from __future__ import annotations
import logging
from enum import Enum
from typing import Iterable, Optional

from .errors import EmptyOutputError, SummarizationFailedError
from .llm_client import LLMClient
from .prompts import ReviewLike, build_prompt
from .schemas import SummarizeRequest, SummarizeResponse

logger = logging.getLogger(__name__)


class RunState(str, Enum):
    IDLE = "idle"
    BUILDING = "building"
    EXECUTING = "executing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


TERMINAL_STATES = {RunState.SUCCEEDED, RunState.FAILED}


class SummarizationRun:
    """State of a single summarization request. Not reusable."""

    def __init__(self, client: LLMClient):
        self.client = client
        self.state = RunState.IDLE
        self.response: Optional[SummarizeResponse] = None
        self.error: Optional[SummarizationFailedError] = None

    def _advance(self, state: RunState) -> None:
        logger.debug("summarization run %s -> %s", self.state.value, state.value)
        self.state = state

    async def execute(self, reviews: Iterable[ReviewLike]) -> SummarizeResponse:
        if self.state in TERMINAL_STATES:
            raise RuntimeError(f"summarization run already {self.state.value}")
        if self.state is not RunState.IDLE:
            raise RuntimeError("summarization run is in progress")

        response = None
        try:
            self._advance(RunState.BUILDING)
            payload = build_prompt(reviews)
            self._advance(RunState.EXECUTING)
            response = await self.client.execute(payload)
            if response is None or not (response.summary or "").strip():
                raise EmptyOutputError("model output has no summary")
        except Exception:
            logger.exception("summarization failed while %s", self.state.value)
            self._advance(RunState.FAILED)
            self.error = SummarizationFailedError()

        # raised outside the except block so the cause is not chained
        if self.error is not None:
            raise self.error

        self.response = response
        self._advance(RunState.SUCCEEDED)
        return response


class ReviewSummarizer:
    """Stateless entry point; safe to share across concurrent requests."""

    def __init__(self, client: LLMClient):
        self.client = client

    def new_run(self) -> SummarizationRun:
        return SummarizationRun(self.client)

    async def summarize(self, reviews: Iterable[ReviewLike]) -> SummarizeResponse:
        return await self.new_run().execute(reviews)


async def summarize_reviews(request: SummarizeRequest, client: LLMClient) -> SummarizeResponse:
    return await ReviewSummarizer(client).summarize(request.reviews)
