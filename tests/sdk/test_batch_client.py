"""Tests for ClaudeBatchClient with a fake AsyncAnthropic."""

from types import SimpleNamespace

import anthropic
import httpx
import pytest

from blogforge_sdk.llm import (
    BatchMappingError,
    BatchNotEndedError,
    BatchRequest,
    BatchResultItem,
    ClaudeBatchClient,
    SubmissionError,
    make_custom_id,
)


def _batch(batch_id="msgbatch_01", status="in_progress", succeeded=0, errored=0, processing=1):
    return SimpleNamespace(
        id=batch_id,
        processing_status=status,
        request_counts=SimpleNamespace(
            processing=processing, succeeded=succeeded, errored=errored, canceled=0, expired=0
        ),
        results_url=None,
        created_at=None,
        ended_at=None,
        expires_at=None,
    )


def _succeeded(custom_id: str, text: str):
    message = SimpleNamespace(
        content=[SimpleNamespace(type="text", text=text)],
        usage=SimpleNamespace(input_tokens=120, output_tokens=900),
    )
    return SimpleNamespace(custom_id=custom_id, result=SimpleNamespace(type="succeeded", message=message))


def _errored(custom_id: str):
    error = SimpleNamespace(error=SimpleNamespace(type="overloaded_error", message="Overloaded"))
    return SimpleNamespace(custom_id=custom_id, result=SimpleNamespace(type="errored", error=error))


class AsyncItems:
    def __init__(self, items):
        self._items = list(items)

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for item in self._items:
            yield item


class FakeBatches:
    def __init__(self):
        self.created = []
        self.status = _batch()
        self.entries = []
        self.error = None
        self.listed = [_batch("b1"), _batch("b2"), _batch("b3")]

    async def create(self, requests):
        if self.error is not None:
            raise self.error
        self.created.append(requests)
        return _batch(processing=len(requests))

    async def retrieve(self, batch_id):
        return self.status

    async def results(self, batch_id):
        return AsyncItems(self.entries)

    async def cancel(self, batch_id):
        return _batch(batch_id, status="canceling")

    def list(self, limit=20):
        return AsyncItems(self.listed)


@pytest.fixture
def batches():
    return FakeBatches()


@pytest.fixture
def client(batches):
    fake = SimpleNamespace(messages=SimpleNamespace(batches=batches))
    return ClaudeBatchClient(client=fake, default_model="claude-test", default_max_tokens=1024)


def _request(custom_id="article-1", **kwargs):
    return BatchRequest(custom_id=custom_id, messages=[{"role": "user", "content": "Write"}], **kwargs)


def test_requires_api_key_without_client():
    with pytest.raises(ValueError):
        ClaudeBatchClient(api_key=None)


def test_make_custom_id_is_provider_safe():
    assert make_custom_id("article", "a1b2") == "article-a1b2"
    assert make_custom_id("article", "x y/z") == "article-x-y-z"
    assert len(make_custom_id("analysis-competitors", "9" * 80)) == 64


@pytest.mark.asyncio
async def test_submit_builds_params_with_defaults(client, batches):
    created = await client.submit([_request(system="Be brief", temperature=0.2), _request("article-2", max_tokens=50)])

    assert created.batch_id == "msgbatch_01"
    assert created.request_counts.processing == 2
    first, second = batches.created[0]
    assert first["custom_id"] == "article-1"
    assert first["params"]["model"] == "claude-test"
    assert first["params"]["max_tokens"] == 1024
    assert first["params"]["system"] == "Be brief"
    assert first["params"]["temperature"] == 0.2
    assert second["params"]["max_tokens"] == 50
    assert "system" not in second["params"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "requests",
    [
        [],
        [_request("bad id!")],
        [_request("dup"), _request("dup")],
        [BatchRequest(custom_id="empty", messages=[])],
    ],
)
async def test_submit_rejects_malformed_batches(client, batches, requests):
    with pytest.raises(SubmissionError):
        await client.submit(requests)
    assert batches.created == []


@pytest.mark.asyncio
async def test_submit_wraps_provider_rejection(client, batches):
    response = httpx.Response(400, request=httpx.Request("POST", "https://api.anthropic.com/v1/messages/batches"))
    batches.error = anthropic.BadRequestError("requests: too large", response=response, body=None)

    with pytest.raises(SubmissionError, match="HTTP 400"):
        await client.submit([_request()])


@pytest.mark.asyncio
async def test_get_results_requires_ended_batch(client, batches):
    batches.status = _batch(status="in_progress")

    with pytest.raises(BatchNotEndedError):
        await client.get_results("msgbatch_01")


@pytest.mark.asyncio
async def test_get_results_converts_entries(client, batches):
    batches.status = _batch(status="ended", succeeded=1, errored=1, processing=0)
    batches.entries = [
        _succeeded("article-1", '{"title": "T"}'),
        _errored("article-2"),
        SimpleNamespace(custom_id="article-3", result=SimpleNamespace(type="expired")),
    ]

    items = await client.get_results("msgbatch_01")

    assert items[0].succeeded is True
    assert items[0].content == '{"title": "T"}'
    assert items[0].usage.output_tokens == 900
    assert items[1].succeeded is False
    assert items[1].error.type == "overloaded_error"
    assert items[1].error.message == "Overloaded"
    assert items[2].type == "expired"
    assert items[2].content is None


@pytest.mark.asyncio
async def test_status_cancel_and_list(client, batches):
    batches.status = _batch(status="ended", succeeded=3, processing=0)

    status = await client.get_status("msgbatch_01")
    canceled = await client.cancel("msgbatch_01")
    listed = await client.list_batches(limit=2)

    assert status.is_ended is True
    assert status.request_counts.succeeded == 3
    assert canceled.processing_status == "canceling"
    assert [b.batch_id for b in listed] == ["b1", "b2"]


def test_map_results_to_articles_joins_by_custom_id():
    results = [
        BatchResultItem(custom_id="article-a", type="succeeded", content="A"),
        BatchResultItem(custom_id="article-b", type="errored"),
    ]

    mapped = ClaudeBatchClient.map_results_to_articles(results, {"article-a": "a", "article-b": "b"})

    assert mapped["a"].content == "A"
    assert mapped["b"].type == "errored"


@pytest.mark.parametrize(
    "results, index",
    [
        ([BatchResultItem(custom_id="article-a", type="succeeded", content="A")], {"article-a": "a", "article-b": "b"}),
        ([BatchResultItem(custom_id="article-x", type="succeeded", content="X")], {}),
        (
            [
                BatchResultItem(custom_id="article-a", type="succeeded", content="A"),
                BatchResultItem(custom_id="article-a", type="succeeded", content="A2"),
            ],
            {"article-a": "a"},
        ),
    ],
)
def test_map_results_to_articles_rejects_mismatches(results, index):
    with pytest.raises(BatchMappingError):
        ClaudeBatchClient.map_results_to_articles(results, index)
