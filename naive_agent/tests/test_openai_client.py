import json

import pytest

from naive_agent.domain.exceptions import ApiError
from naive_agent.domain.models import ChatMessage, ChatRequest
from naive_agent.providers.openai_client import OpenAIClient
from naive_agent.tools.definitions import ToolCall, ToolDef, ToolParam


class SettingsStub:
    http_timeout = 1.0
    openai_base_url = "http://localhost:8080/v1"
    openai_api_key = None


def _fake_client(monkeypatch, body, captured=None):
    class Resp:
        status_code = 200
        text = "<html>"

        def json(self):
            if isinstance(body, Exception):
                raise body
            return body

    class Client:
        def __init__(self, *a, **kw):
            pass

        def __enter__(self):
            return self

        def __exit__(self, *a):
            return False

        def post(self, url, json=None, headers=None, **_):
            if captured is not None:
                captured["url"] = url
                captured["payload"] = json
                captured["headers"] = headers
            return Resp()

    monkeypatch.setattr("httpx.Client", Client)


def test_openai_client_parse_basic(monkeypatch):
    _fake_client(
        monkeypatch,
        {
            "choices": [{"message": {"role": "assistant", "content": "ok"}, "finish_reason": "stop"}],
            "usage": {"prompt_tokens": 1, "completion_tokens": 1, "total_tokens": 2},
        },
    )
    req = ChatRequest(model="ignored", messages=[ChatMessage(role="user", content="hi")])
    res = OpenAIClient(SettingsStub()).chat(req)
    assert res.message.content == "ok"
    assert res.usage.total_tokens == 2


def test_openai_client_payload(monkeypatch):
    captured = {}
    _fake_client(monkeypatch, {"choices": [{"message": {"role": "assistant", "content": "ok"}}]}, captured)

    class KeyedSettings(SettingsStub):
        openai_api_key = "sk-test"

    tool = ToolDef(
        name="read_file",
        description="read file",
        params={"path": ToolParam(name="path", description="path", required=True, schema={"type": "string"})},
    )
    req = ChatRequest(
        model="qwen2.5:14b",
        messages=[
            ChatMessage(role="user", content="hi"),
            ChatMessage(
                role="assistant",
                content="",
                tool_calls=[ToolCall(id="call_1", name="read_file", arguments={"path": "a.txt"})],
            ),
            ChatMessage(role="tool", content="hello", tool_call_id="call_1"),
        ],
        tools=[tool],
    )
    OpenAIClient(KeyedSettings()).chat(req)

    assert captured["url"] == "http://localhost:8080/v1/chat/completions"
    assert captured["headers"]["Authorization"] == "Bearer sk-test"
    payload = captured["payload"]
    assert payload["tool_choice"] == "auto"
    assert payload["tools"][0]["function"]["name"] == "read_file"
    assert "temperature" not in payload
    call = payload["messages"][1]["tool_calls"][0]
    assert call["id"] == "call_1"
    assert json.loads(call["function"]["arguments"]) == {"path": "a.txt"}
    assert payload["messages"][2] == {"role": "tool", "content": "hello", "tool_call_id": "call_1"}


def test_openai_client_parse_tool_calls(monkeypatch):
    _fake_client(
        monkeypatch,
        {
            "choices": [
                {
                    "message": {
                        "role": "assistant",
                        "content": None,
                        "tool_calls": [
                            {"id": "tool123", "function": {"name": "shell", "arguments": '{"command": "ls"}'}},
                            {"function": {"name": "shell", "arguments": "not json"}},
                        ],
                    },
                }
            ],
        },
    )
    req = ChatRequest(model="m", messages=[ChatMessage(role="user", content="hi")])
    res = OpenAIClient(SettingsStub()).chat(req)

    first, second = res.message.tool_calls
    assert res.message.content == ""
    assert (first.id, first.name, first.arguments) == ("tool123", "shell", {"command": "ls"})
    assert (second.id, second.arguments) == ("tool_call_1", {"_raw": "not json"})


def test_openai_client_empty_choices(monkeypatch):
    _fake_client(monkeypatch, {"choices": []})
    req = ChatRequest(model="m", messages=[ChatMessage(role="user", content="hi")])
    with pytest.raises(ApiError):
        OpenAIClient(SettingsStub()).chat(req)


@pytest.mark.parametrize(
    "body",
    [json.JSONDecodeError("Expecting value", "<html>", 0), "plain string", None],
)
def test_openai_client_invalid_response_body(monkeypatch, body):
    _fake_client(monkeypatch, body)
    req = ChatRequest(model="m", messages=[ChatMessage(role="user", content="hi")])
    with pytest.raises(ApiError) as exc_info:
        OpenAIClient(SettingsStub()).chat(req)
    assert exc_info.value.code == "INVALID_RESPONSE"
