import httpx
import pytest

from review_insights.config import Settings
from review_insights.llm_client import LLMClient


@pytest.fixture
def settings():
    return Settings(google_api_key="test-key", fetch_delay_seconds=0)


@pytest.fixture
def make_client(settings):
    """Build an LLMClient whose HTTP calls go to `handler` and record each request."""
    def _make(handler):
        seen = []

        def _record(request: httpx.Request):
            seen.append(request)
            return handler(request)

        http = httpx.AsyncClient(transport=httpx.MockTransport(_record))
        client = LLMClient(settings, http_client=http)
        client.requests = seen
        return client
    return _make
