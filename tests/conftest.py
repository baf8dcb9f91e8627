import json

import pytest
import requests

from pinyin_converter.settings import ConverterSettings

BASE_URL = "https://llm.example.test/v1"


class FakeResponse:
    def __init__(self, status_code=200, body=None, text=None):
        self.status_code = status_code
        self._body = body
        self.text = text if text is not None else json.dumps(body)

    @property
    def ok(self):
        return 200 <= self.status_code < 400

    def json(self):
        if self._body is None:
            raise ValueError("no JSON body")
        return self._body

    def raise_for_status(self):
        if not self.ok:
            raise requests.HTTPError(f"HTTP {self.status_code}", response=self)


class FakeAPI:
    """Stands in for `requests.post`; set `reply` to a FakeResponse or an exception."""

    def __init__(self):
        self.calls = []
        self.reply = FakeResponse(200, completion("ok"))

    def post(self, url, json=None, headers=None, timeout=None):
        self.calls.append({"url": url, "json": json, "headers": headers, "timeout": timeout})
        if isinstance(self.reply, Exception):
            raise self.reply
        return self.reply

    def reply_with(self, content, status_code=200):
        self.reply = FakeResponse(status_code, completion(content))

    def reply_with_steps(self, steps):
        self.reply_with(json.dumps(steps, ensure_ascii=False))

    @property
    def last_payload(self):
        return self.calls[-1]["json"]


def completion(content):
    return {"choices": [{"index": 0, "message": {"role": "assistant", "content": content}}]}


def _common_steps():
    return {
        "step1": {"analysis": "按空格与连写切分", "output": "zhe ge | function | shi"},
        "step2": {"analysis": "zhe4 ge4", "output": "zhe4 ge4 function shi4"},
        "step3": {"output": "这个 function 是"},
        "step4": {"analysis": "语句通顺"},
    }


@pytest.fixture
def plain_steps():
    def build(final="这个 function 是"):
        steps = _common_steps()
        steps["step5"] = {"output": final}
        return steps

    return build


@pytest.fixture
def math_steps():
    def build(final="这个 function 是 $x^2$"):
        steps = _common_steps()
        steps["step5"] = {"output": "这个 function 是 x 的平方"}
        steps["step6"] = {"analysis": "x 的平方 -> x^2", "output": "$x^2$"}
        steps["step7"] = {"output": final}
        return steps

    return build


@pytest.fixture
def fake_api(monkeypatch):
    api = FakeAPI()
    monkeypatch.setattr(requests, "post", api.post)
    return api


@pytest.fixture
def settings():
    return ConverterSettings(api_key="sk-test", base_url=BASE_URL)
