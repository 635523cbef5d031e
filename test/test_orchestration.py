import asyncio
import json
import logging

import httpx
import pytest

from review_insights.data_fetcher import GENERIC_PRODUCT, MOCK_REVIEWS, fetch_user_reviews
from review_insights.errors import (
    GENERIC_FAILURE_MESSAGE,
    EmptyOutputError,
    SummarizationFailedError,
    TransportError,
)
from review_insights.orchestration import ReviewSummarizer, RunState, summarize_reviews
from review_insights.schemas import SummarizeRequest, SummarizeResponse


class FakeClient:
    model = "fake"

    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.payloads = []

    async def execute(self, payload):
        self.payloads.append(payload)
        if self.error is not None:
            raise self.error
        return self.result


def _reviews():
    return MOCK_REVIEWS["google_play_awesomeapp"]


def test_five_awesomeapp_reviews_summarize_to_text(make_client):
    def reply(request):
        prompt = json.loads(request.content)["contents"][0]["parts"][0]["text"]
        found = [f"gp_aa_{i}" for i in range(1, 6) if f"gp_aa_{i}" in prompt]
        text = json.dumps({"summary": f"Pain points: crashes and ads.\nCovered: {', '.join(found)}"})
        return httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": text}]}}]})

    reviews = asyncio.run(fetch_user_reviews("google_play_awesomeapp", "AwesomeApp", delay=0))
    assert [r.id for r in reviews] == [f"gp_aa_{i}" for i in range(1, 6)]

    resp = asyncio.run(ReviewSummarizer(make_client(reply)).summarize(reviews))
    assert isinstance(resp, SummarizeResponse)
    assert isinstance(resp.summary, str) and resp.summary
    assert "gp_aa_5" in resp.summary


def test_run_walks_states_to_succeeded():
    client = FakeClient(result=SummarizeResponse(summary="Users love support."))
    run = ReviewSummarizer(client).new_run()
    assert run.state is RunState.IDLE

    resp = asyncio.run(run.execute(_reviews()))
    assert resp.summary == "Users love support."
    assert run.state is RunState.SUCCEEDED
    assert run.response is resp
    assert len(client.payloads) == 1


def test_finished_run_cannot_be_reused():
    run = ReviewSummarizer(FakeClient(result=SummarizeResponse(summary="x"))).new_run()
    asyncio.run(run.execute(_reviews()))
    with pytest.raises(RuntimeError):
        asyncio.run(run.execute(_reviews()))


@pytest.mark.parametrize("result", [SummarizeResponse(summary=""), SummarizeResponse(summary="  \n"), None])
def test_empty_summary_fails(result):
    run = ReviewSummarizer(FakeClient(result=result)).new_run()
    with pytest.raises(SummarizationFailedError):
        asyncio.run(run.execute(_reviews()))
    assert run.state is RunState.FAILED
    assert run.response is None


def test_empty_output_error_is_replaced():
    client = FakeClient(error=EmptyOutputError("no summary field"))
    with pytest.raises(SummarizationFailedError) as exc:
        asyncio.run(ReviewSummarizer(client).summarize(_reviews()))
    assert str(exc.value) == GENERIC_FAILURE_MESSAGE


def test_transport_error_is_hidden_but_logged(caplog):
    client = FakeClient(error=TransportError("secret upstream detail"))
    with caplog.at_level(logging.ERROR, logger="review_insights.orchestration"):
        with pytest.raises(SummarizationFailedError) as exc:
            asyncio.run(ReviewSummarizer(client).summarize(_reviews()))

    err = exc.value
    assert err.message == GENERIC_FAILURE_MESSAGE
    assert "secret" not in str(err)
    assert err.__cause__ is None
    assert err.__context__ is None
    assert "secret upstream detail" in caplog.text


def test_empty_review_list_fails_without_calling_model():
    client = FakeClient(result=SummarizeResponse(summary="x"))
    run = ReviewSummarizer(client).new_run()
    with pytest.raises(SummarizationFailedError):
        asyncio.run(run.execute([]))
    assert run.state is RunState.FAILED
    assert client.payloads == []


def test_malformed_review_fails_without_calling_model():
    client = FakeClient(result=SummarizeResponse(summary="x"))
    with pytest.raises(SummarizationFailedError):
        asyncio.run(ReviewSummarizer(client).summarize([{"id": "a", "sentiment": "positive"}]))
    assert client.payloads == []


def test_unexpected_exception_is_also_replaced():
    client = FakeClient(error=KeyError("boom"))
    with pytest.raises(SummarizationFailedError):
        asyncio.run(ReviewSummarizer(client).summarize(_reviews()))


def test_cancellation_propagates():
    client = FakeClient(error=asyncio.CancelledError())
    with pytest.raises(asyncio.CancelledError):
        asyncio.run(ReviewSummarizer(client).summarize(_reviews()))


def test_concurrent_requests_are_independent():
    class EchoClient:
        async def execute(self, payload):
            await asyncio.sleep(0)
            first_id = payload.prompt.split("ID: ", 1)[1].split(",", 1)[0]
            return SummarizeResponse(summary=f"first={first_id}")

    summarizer = ReviewSummarizer(EchoClient())

    async def both():
        return await asyncio.gather(
            summarizer.summarize(MOCK_REVIEWS["twitter_genericproduct"]),
            summarizer.summarize(MOCK_REVIEWS["app_store_anotherapp"]),
        )

    a, b = asyncio.run(both())
    assert a.summary == "first=tw_gp_1"
    assert b.summary == "first=as_an_1"


def test_summarize_reviews_takes_request_shape():
    reviews = asyncio.run(fetch_user_reviews("twitter_genericproduct", GENERIC_PRODUCT, delay=0))
    client = FakeClient(result=SummarizeResponse(summary="Dark mode requested."))
    resp = asyncio.run(summarize_reviews(SummarizeRequest(reviews=reviews), client))
    assert resp.summary == "Dark mode requested."


def test_failed_run_cannot_be_reused():
    run = ReviewSummarizer(FakeClient(error=TransportError("down"))).new_run()
    with pytest.raises(SummarizationFailedError):
        asyncio.run(run.execute(_reviews()))
    with pytest.raises(RuntimeError, match="already failed"):
        asyncio.run(run.execute(_reviews()))


def test_run_in_progress_cannot_be_started_again():
    run = ReviewSummarizer(FakeClient(result=SummarizeResponse(summary="x"))).new_run()
    run.state = RunState.EXECUTING
    with pytest.raises(RuntimeError, match="in progress"):
        asyncio.run(run.execute(_reviews()))
