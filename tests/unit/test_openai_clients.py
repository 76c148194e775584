"""
Unit tests for the OpenAI-compatible chat and embedding clients

Upstream responses are served by httpx.MockTransport.
"""

import json

import httpx
import pytest

from shopsearch.core.exceptions import DecodeError, EmptyInputError, UpstreamError
from shopsearch.llm.openai import OpenAIChatClient, OpenAIEmbeddingClient
from shopsearch.llm.schemas import ChatMessage, FunctionDefinition


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://llm.test")


def _embedding_handler(requests: list[dict]):
    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        requests.append(body)
        data = [
            {"index": i, "embedding": [float(len(text)), float(i)]}
            for i, text in enumerate(body["input"])
        ]
        # reversed to check index ordering
        return httpx.Response(200, json={"model": body["model"], "data": data[::-1]})

    return handler


@pytest.mark.asyncio
async def test_embeddings_are_batched_with_delay(monkeypatch) -> None:
    sleeps: list[float] = []

    async def fake_sleep(seconds: float) -> None:
        sleeps.append(seconds)

    monkeypatch.setattr("shopsearch.llm.openai.asyncio.sleep", fake_sleep)
    requests: list[dict] = []
    client = OpenAIEmbeddingClient(
        model="embed-test",
        batch_size=2,
        batch_delay_seconds=0.25,
        client=_client(_embedding_handler(requests)),
    )

    vectors = await client.embed(["a", "bb", "ccc", "dddd", "eeeee"])

    assert [r["input"] for r in requests] == [["a", "bb"], ["ccc", "dddd"], ["eeeee"]]
    assert sleeps == [0.25, 0.25]
    assert [v[0] for v in vectors] == [1.0, 2.0, 3.0, 4.0, 5.0]


@pytest.mark.asyncio
async def test_embeddings_empty_input() -> None:
    client = OpenAIEmbeddingClient(client=_client(lambda request: httpx.Response(200, json={})))

    with pytest.raises(EmptyInputError):
        await client.embed([])


@pytest.mark.asyncio
async def test_embeddings_non_success_status_raises_upstream() -> None:
    client = OpenAIEmbeddingClient(
        client=_client(lambda request: httpx.Response(429, json={"error": {"message": "slow down"}}))
    )

    with pytest.raises(UpstreamError) as exc_info:
        await client.embed(["hello"])

    assert not isinstance(exc_info.value, DecodeError)


@pytest.mark.asyncio
async def test_embeddings_malformed_body_raises_decode_error() -> None:
    client = OpenAIEmbeddingClient(
        client=_client(lambda request: httpx.Response(200, content=b"not json"))
    )

    with pytest.raises(DecodeError):
        await client.embed(["hello"])


@pytest.mark.asyncio
async def test_embeddings_error_payload_raises_upstream() -> None:
    client = OpenAIEmbeddingClient(
        client=_client(
            lambda request: httpx.Response(200, json={"error": {"message": "bad model"}})
        )
    )

    with pytest.raises(UpstreamError, match="bad model"):
        await client.embed(["hello"])


@pytest.mark.asyncio
async def test_transport_error_raises_upstream() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = OpenAIEmbeddingClient(client=_client(handler))

    with pytest.raises(UpstreamError):
        await client.embed(["hello"])


@pytest.mark.asyncio
async def test_chat_sends_forced_function_call() -> None:
    captured: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured.update(json.loads(request.content))
        return httpx.Response(
            200,
            json={
                "id": "chatcmpl-1",
                "model": "chat-test",
                "choices": [
                    {
                        "index": 0,
                        "message": {
                            "role": "assistant",
                            "content": None,
                            "function_call": {
                                "name": "parse_product_query",
                                "arguments": '{"product_type": "jeans"}',
                            },
                        },
                        "finish_reason": "function_call",
                    }
                ],
                "usage": {"prompt_tokens": 10, "completion_tokens": 5, "total_tokens": 15},
            },
        )

    client = OpenAIChatClient(model="chat-test", client=_client(handler))
    schema = FunctionDefinition(name="parse_product_query", parameters={"type": "object"})

    completion = await client.chat(
        [ChatMessage(role="user", content="blue jeans")],
        functions=[schema],
        function_call={"name": "parse_product_query"},
        temperature=0.1,
    )

    assert captured["model"] == "chat-test"
    assert captured["function_call"] == {"name": "parse_product_query"}
    assert captured["functions"][0]["name"] == "parse_product_query"
    assert captured["messages"] == [{"role": "user", "content": "blue jeans"}]
    assert completion.choices[0].message.function_call.arguments == '{"product_type": "jeans"}'


@pytest.mark.asyncio
async def test_chat_malformed_completion_raises_decode_error() -> None:
    client = OpenAIChatClient(
        client=_client(lambda request: httpx.Response(200, json={"choices": [{"message": {}}]}))
    )

    with pytest.raises(DecodeError):
        await client.chat([ChatMessage(role="user", content="hi")])
