"""Concept extraction with a stubbed LLM client."""

import json

import pytest
import requests

from conceptmap.inference import chat_completions_client
from conceptmap.inference.chat_completions_client import ChatCompletionsClient
from conceptmap.inference.prompt import build_messages
from conceptmap.pipeline.analyzer import (
    SOURCE_BASIC,
    SOURCE_LLM,
    ConceptExtractor,
    create_basic_concepts,
    detect_language,
    plain_text,
)
from conceptmap.utils.json_extract import parse_concepts

CONCEPTS = [
    {"id": "c1", "text": "Photosynthesis", "type": "main", "definition": "Light\nto sugar",
     "connections": [{"targetId": "c2", "label": "produces"}]},
    {"id": "c2", "text": "Glucose", "type": "sub", "definition": "A sugar", "connections": []},
]


class StubClient:
    def __init__(self, reply=None, error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    def generate(self, messages):
        self.calls.append(messages)
        if self.error:
            raise self.error
        return self.reply


# ============================================================
# LANGUAGE
# ============================================================

def test_detect_spanish():
    assert detect_language("El perro es grande y la casa es bonita") == "es"
    assert detect_language("¿Qué es la fotosíntesis? Es un proceso para las plantas") == "es"


def test_detect_english():
    assert detect_language("Photosynthesis converts light into chemical energy") == "en"
    assert detect_language("") == "en"


# ============================================================
# PARSING
# ============================================================

def test_parse_bare_array():
    assert parse_concepts(json.dumps(CONCEPTS)) == CONCEPTS


def test_parse_fenced_block():
    text = "Sure!\n```json\n" + json.dumps(CONCEPTS) + "\n```\nHope that helps."
    assert parse_concepts(text) == CONCEPTS


def test_parse_wrapped_object():
    assert parse_concepts(json.dumps({"concepts": CONCEPTS})) == CONCEPTS


def test_parse_array_inside_prose():
    assert parse_concepts("Here you go: " + json.dumps(CONCEPTS) + " enjoy") == CONCEPTS


@pytest.mark.parametrize("text", [None, "", "no json here", '{"foo": 1}', "[not, valid json"])
def test_parse_failure_returns_none(text):
    assert parse_concepts(text) is None


# ============================================================
# EXTRACTION
# ============================================================

def test_basic_concepts():
    concepts = create_basic_concepts("short text")
    assert len(concepts) == 1
    assert concepts[0]["id"] == "node-0"
    assert concepts[0]["text"] == "short text"
    assert concepts[0]["type"] == "main"
    assert concepts[0]["connections"] == []


def test_basic_concepts_truncates():
    text = create_basic_concepts("a" * 150)[0]["text"]
    assert text == "a" * 100 + "..."


def test_extract_success():
    client = StubClient(reply=json.dumps(CONCEPTS))
    result = ConceptExtractor(client).extract("Photosynthesis converts light")

    assert result.source == SOURCE_LLM
    assert not result.fallback
    assert result.language == "en"
    assert [c["id"] for c in result.concepts] == ["c1", "c2"]
    # Line breaks become spaces; the original dicts are untouched
    assert result.concepts[0]["definition"] == "Light to sugar"
    assert CONCEPTS[0]["definition"] == "Light\nto sugar"


def test_extract_strips_html_and_line_breaks():
    reply = json.dumps([
        {"id": "a", "text": "Photo<br>synthesis<br/>in <b>plants</b>", "definition": "Uses light &amp; water\r\nto grow"},
    ])
    concept = ConceptExtractor(StubClient(reply=reply)).extract("plants").concepts[0]
    assert concept["text"] == "Photo synthesis in plants"
    assert concept["definition"] == "Uses light & water to grow"


@pytest.mark.parametrize("value, expected", [
    ("Photosynthesis\nconverts light", "Photosynthesis converts light"),
    ("one<BR>two", "one two"),
    ("<div class='x'>text</div>", "text"),
    ("&lt;b&gt; stays literal", "<b> stays literal"),
    ("a < b > c", "a < b > c"),
    ("  spaced \n\n out  ", "spaced out"),
])
def test_plain_text(value, expected):
    assert plain_text(value) == expected


def test_extract_uses_detected_language():
    client = StubClient(reply=json.dumps(CONCEPTS))
    ConceptExtractor(client).extract("El agua es vital para la vida y los animales")
    system = client.calls[0][0]
    assert system["role"] == "system"
    assert "Spanish" in system["content"]


def test_extract_client_failure_falls_back():
    client = StubClient(error=requests.ConnectionError("down"))
    result = ConceptExtractor(client).extract("Some input text")
    assert result.fallback
    assert result.source == SOURCE_BASIC
    assert result.concepts == create_basic_concepts("Some input text")


def test_extract_unparseable_reply_falls_back():
    result = ConceptExtractor(StubClient(reply="I cannot do that")).extract("text")
    assert result.fallback
    assert result.source == SOURCE_BASIC


def test_build_messages():
    messages = build_messages("water cycle", "en")
    assert [m["role"] for m in messages] == ["system", "user"]
    assert "English" in messages[0]["content"]
    assert '"targetId"' in messages[0]["content"]
    assert "water cycle" in messages[1]["content"]


# ============================================================
# HTTP CLIENT
# ============================================================

class FakeResponse:
    def __init__(self, content, status=200):
        self.content = content
        self.status = status

    def raise_for_status(self):
        if self.status >= 400:
            raise requests.HTTPError(f"{self.status} error")

    def json(self):
        return {"choices": [{"message": {"content": self.content}}]}


def test_chat_client_posts_and_strips_fences(monkeypatch):
    captured = {}

    def fake_post(url, json, headers, timeout):
        captured.update(url=url, json=json, headers=headers, timeout=timeout)
        return FakeResponse("```json\n[1, 2]\n```")

    monkeypatch.setattr(chat_completions_client.requests, "post", fake_post)

    client = ChatCompletionsClient("http://llm.local/v1/", "test-model", api_key="secret", timeout=5)
    reply = client.generate([{"role": "user", "content": "hi"}])

    assert reply == "[1, 2]"
    assert captured["url"] == "http://llm.local/v1/chat/completions"
    assert captured["json"]["model"] == "test-model"
    assert captured["headers"]["Authorization"] == "Bearer secret"
    assert captured["timeout"] == 5


def test_chat_client_without_key_sends_no_auth(monkeypatch):
    captured = {}

    def fake_post(url, json, headers, timeout):
        captured["headers"] = headers
        return FakeResponse("[]")

    monkeypatch.setattr(chat_completions_client.requests, "post", fake_post)
    ChatCompletionsClient("http://llm.local/v1", "m").generate([])
    assert "Authorization" not in captured["headers"]


def test_chat_client_raises_on_http_error(monkeypatch):
    monkeypatch.setattr(
        chat_completions_client.requests,
        "post",
        lambda *args, **kwargs: FakeResponse("", status=500),
    )
    with pytest.raises(requests.HTTPError):
        ChatCompletionsClient("http://llm.local/v1", "m").generate([])
