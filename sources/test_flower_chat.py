import pytest
import requests

import flower_chat
from flower_chat import FlowerChat
from models import Reading

READING = Reading(temperature=23.7, humidity=45.2, soil_moisture=18.9, light_level=80.0)


class FakeResponse:
    def __init__(self, status_code=200, payload=None, bad_json=False):
        self.status_code = status_code
        self._payload = payload
        self._bad_json = bad_json

    def json(self):
        if self._bad_json:
            raise ValueError("Expecting value")
        return self._payload


@pytest.fixture
def post(monkeypatch):
    calls = []
    response = {"value": FakeResponse(200, {"choices": [{"message": {"content": "Полей меня!"}}]})}

    def fake_post(url, json=None, headers=None, timeout=None):
        calls.append({"url": url, "json": json, "headers": headers, "timeout": timeout})
        if isinstance(response["value"], Exception):
            raise response["value"]
        return response["value"]

    monkeypatch.setattr(flower_chat.requests, "post", fake_post)
    fake_post.calls = calls
    fake_post.response = response
    return fake_post


def chat():
    return FlowerChat(api_url="https://example.test/v1/chat/completions",
                      model="test-model", token="secret", timeout_s=3)


def test_prompt_carries_name_and_truncated_values():
    prompt = FlowerChat.build_prompt("Фикус", READING)
    assert "\"Фикус\"" in prompt
    assert "23°C" in prompt
    assert "влажности воздуха 45%" in prompt
    assert "освещенности 80%" in prompt
    assert "влажности почвы 18%" in prompt


def test_successful_answer(post):
    assert chat().ask("Фикус", READING) == "Полей меня!"

    call = post.calls[0]
    assert call["url"] == "https://example.test/v1/chat/completions"
    assert call["headers"] == {"Authorization": "Bearer secret"}
    assert call["timeout"] == 3
    assert call["json"]["model"] == "test-model"
    assert call["json"]["stream"] is False
    assert call["json"]["messages"][0]["role"] == "user"


def test_missing_token_skips_request(post):
    answer = FlowerChat(token="").ask("Фикус", READING)
    assert answer == "Нет токена для чата"
    assert post.calls == []


def test_http_error(post):
    post.response["value"] = FakeResponse(503)
    assert chat().ask("Фикус", READING) == "Ошибка HTTP: 503"


def test_transport_error(post):
    post.response["value"] = requests.ConnectionError("no route to host")
    assert chat().ask("Фикус", READING).startswith("Ошибка: ")


def test_undecodable_body(post):
    post.response["value"] = FakeResponse(200, bad_json=True)
    assert chat().ask("Фикус", READING).startswith("Ошибка декодирования")


def test_response_without_choices(post):
    post.response["value"] = FakeResponse(200, {"choices": []})
    assert chat().ask("Фикус", READING) == "Нет сообщений в ответе."


def test_choice_without_message(post):
    post.response["value"] = FakeResponse(200, {"choices": [{"text": "hi"}]})
    assert chat().ask("Фикус", READING).startswith("Ошибка декодирования")
