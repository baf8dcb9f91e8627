import json

import pytest
import requests

from pinyin_converter.llm import (
    APIConnectionError,
    APIStatusError,
    MalformedResponseError,
    OpenAIClient,
    SchemaValidationError,
    get_llm_client,
)
from pinyin_converter.schemas import ConversionMode, MathSteps, PlainSteps

from conftest import BASE_URL, FakeResponse

MESSAGES = [{"role": "system", "content": "s"}, {"role": "user", "content": "u"}]


@pytest.fixture
def client(settings):
    return get_llm_client(settings)


def test_payload_matches_chat_completions_contract(client, fake_api):
    fake_api.reply_with("  你好  ")
    assert client.chat(MESSAGES) == "你好"

    call = fake_api.calls[0]
    assert call["url"] == f"{BASE_URL}/chat/completions"
    assert call["headers"]["Authorization"] == "Bearer sk-test"
    assert call["timeout"] is None
    assert call["json"] == {
        "model": "Qwen/Qwen2.5-7B-Instruct",
        "messages": MESSAGES,
        "stream": False,
        "max_tokens": 4096,
        "temperature": 0.5,
        "top_p": 0.7,
    }


def test_missing_content_is_malformed(client, fake_api):
    fake_api.reply = FakeResponse(200, {"choices": []})
    with pytest.raises(MalformedResponseError, match="malformed"):
        client.chat(MESSAGES)


def test_non_json_body_is_malformed(client, fake_api):
    fake_api.reply = FakeResponse(200, None, text="<html>")
    with pytest.raises(MalformedResponseError):
        client.chat(MESSAGES)


def test_http_error_uses_server_message(client, fake_api):
    fake_api.reply = FakeResponse(401, {"error": {"message": "invalid api key"}})
    with pytest.raises(APIStatusError) as info:
        client.chat(MESSAGES)
    assert info.value.status_code == 401
    assert str(info.value) == "invalid api key"


def test_http_error_without_parseable_body(client, fake_api):
    fake_api.reply = FakeResponse(502, None, text="Bad Gateway")
    with pytest.raises(APIStatusError, match=r"request failed \(HTTP 502\)"):
        client.chat(MESSAGES)


def test_unreachable_host_names_base_url(client, fake_api):
    fake_api.reply = requests.ConnectionError("Name or service not known")
    with pytest.raises(APIConnectionError) as info:
        client.chat(MESSAGES)
    assert BASE_URL in str(info.value)


def test_structured_plain_reply(client, fake_api, plain_steps):
    fake_api.reply_with_steps(plain_steps("这个 function 是"))
    result = client.chat_structured(MESSAGES, ConversionMode.PLAIN)
    assert isinstance(result, PlainSteps)
    assert result.final_output == "这个 function 是"
    directive = fake_api.last_payload["response_format"]
    assert directive["json_schema"]["name"] == "pinyin_conversion"


def test_structured_math_reply_in_code_fence(client, fake_api, math_steps):
    fenced = "```json\n" + json.dumps(math_steps("$x^2$"), ensure_ascii=False) + "\n```"
    fake_api.reply_with(fenced)
    result = client.chat_structured(MESSAGES, "math")
    assert isinstance(result, MathSteps)
    assert result.final_output == "$x^2$"


def test_structured_reply_with_wrong_shape(client, fake_api, plain_steps):
    fake_api.reply_with_steps(plain_steps())
    with pytest.raises(SchemaValidationError):
        client.chat_structured(MESSAGES, ConversionMode.MATH)


def test_structured_reply_that_is_not_json(client, fake_api):
    fake_api.reply_with("这个 function 是 $x^2$")
    with pytest.raises(SchemaValidationError):
        client.chat_structured(MESSAGES, ConversionMode.MATH)


def test_missing_api_key():
    with pytest.raises(RuntimeError):
        OpenAIClient(api_key="", model="m")


def test_list_models(client, monkeypatch):
    def fake_get(url, headers=None, timeout=None):
        assert url == f"{BASE_URL}/models"
        return FakeResponse(200, {"data": [{"id": "Qwen/Qwen2.5-7B-Instruct"}, {"id": "deepseek-ai/DeepSeek-V3"}]})

    monkeypatch.setattr(requests, "get", fake_get)
    assert client.list_models() == ["Qwen/Qwen2.5-7B-Instruct", "deepseek-ai/DeepSeek-V3"]


def test_list_models_failure_is_empty(client, monkeypatch):
    monkeypatch.setattr(requests, "get", lambda *a, **kw: FakeResponse(403, {"error": "forbidden"}))
    assert client.list_models() == []
