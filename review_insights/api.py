from __future__ import annotations
import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import APIRouter, FastAPI, HTTPException, Request

from .classify import categorize_feedback, sentiment_breakdown
from .config import Settings, load_settings
from .data_fetcher import ReviewDataProvider, default_product_for, list_sources, source_label
from .errors import SummarizationFailedError
from .llm_client import LLMClient
from .logging_config import setup_logging
from .orchestration import ReviewSummarizer
from .schemas import ReviewsResponse, SourceCatalogEntry, SummarizeRequest, SummarizeResponse

logger = logging.getLogger(__name__)

NO_REVIEWS_MESSAGE = "Please fetch reviews before summarizing."

router = APIRouter()


@router.get("/sources", response_model=List[SourceCatalogEntry])
async def get_sources():
    return list_sources()


@router.get("/reviews", response_model=ReviewsResponse)
async def get_reviews(request: Request, source: str, product: Optional[str] = None):
    provider: ReviewDataProvider = request.app.state.provider
    hint = product or default_product_for(source)
    reviews = await provider.fetch(source, hint)
    return ReviewsResponse(
        source=source,
        label=source_label(source),
        reviews=reviews,
        sentiment_counts={s.value: n for s, n in sentiment_breakdown(reviews).items()},
        categories={r.id: categorize_feedback(r.text).value for r in reviews},
    )


@router.post("/summarize", response_model=SummarizeResponse)
async def summarize_route(request: Request, body: SummarizeRequest):
    if not body.reviews:
        raise HTTPException(status_code=400, detail=NO_REVIEWS_MESSAGE)
    summarizer: ReviewSummarizer = request.app.state.summarizer
    try:
        return await summarizer.summarize(body.reviews)
    except SummarizationFailedError as e:
        raise HTTPException(status_code=502, detail=e.message)


def create_app(
    settings: Optional[Settings] = None,
    *,
    client: Optional[LLMClient] = None,
    provider: Optional[ReviewDataProvider] = None,
) -> FastAPI:
    """
    Build the API. Without an injected client one is created at startup,
    so a missing GOOGLE_API_KEY stops the app from starting.
    """
    settings = settings or load_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        llm = client or LLMClient(settings)
        app.state.provider = provider or ReviewDataProvider(settings)
        app.state.summarizer = ReviewSummarizer(llm)
        logger.info("review insights API ready (model=%s)", llm.model)
        try:
            yield
        finally:
            if client is None:
                await llm.aclose()

    app = FastAPI(title="Review Insights API", lifespan=lifespan)
    app.include_router(router)
    return app


def main() -> None:
    import uvicorn

    settings = load_settings()
    setup_logging(settings.log_level)
    uvicorn.run(create_app(settings), host="0.0.0.0", port=8000)
