"""
Tests for the text recognizers. Engines are stubbed; no OCR binary or API key
is needed.
"""
from types import SimpleNamespace

import pytest

from pipeline import recognizer as recognizer_module
from pipeline.errors import RecognitionFailure
from pipeline.recognizer import (
    OpenAIVisionRecognizer,
    TesseractRecognizer,
    build_recognizer,
)
from conftest import make_stripes


class FakeCompletions:
    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def fake_client(completions):
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


class TestTesseract:

    def test_returns_engine_text(self, monkeypatch):
        calls = {}

        def image_to_string(img, lang=None, timeout=None):
            calls["size"] = img.size
            calls["lang"] = lang
            return "ABCDE1234F\n"

        monkeypatch.setattr(recognizer_module.pytesseract, "image_to_string", image_to_string)
        text = TesseractRecognizer(lang="eng").recognize(make_stripes().to_jpeg())

        assert text == "ABCDE1234F\n"
        assert calls == {"size": (320, 240), "lang": "eng"}

    def test_engine_error_becomes_recognition_failure(self, monkeypatch):
        def image_to_string(img, lang=None, timeout=None):
            raise RuntimeError("Tesseract process timeout")

        monkeypatch.setattr(recognizer_module.pytesseract, "image_to_string", image_to_string)
        with pytest.raises(RecognitionFailure) as exc_info:
            TesseractRecognizer().recognize(make_stripes().to_jpeg())
        assert exc_info.value.details["reason"] == "Tesseract process timeout"

    def test_unreadable_image_becomes_recognition_failure(self):
        with pytest.raises(RecognitionFailure):
            TesseractRecognizer().recognize(b"garbage")


class TestOpenAIVision:

    def test_sends_image_as_data_url(self):
        completions = FakeCompletions(content="JOHN SMITH\n01/01/1990")
        recognizer = OpenAIVisionRecognizer(client=fake_client(completions), model="test-model")

        assert recognizer.recognize(b"jpeg-bytes") == "JOHN SMITH\n01/01/1990"
        request = completions.calls[0]
        assert request["model"] == "test-model"
        image_part = request["messages"][0]["content"][1]
        assert image_part["image_url"]["url"].startswith("data:image/jpeg;base64,")

    def test_empty_reply(self):
        recognizer = OpenAIVisionRecognizer(client=fake_client(FakeCompletions(content=None)))
        assert recognizer.recognize(b"jpeg-bytes") == ""

    def test_api_error_becomes_recognition_failure(self):
        completions = FakeCompletions(error=ConnectionError("unreachable"))
        recognizer = OpenAIVisionRecognizer(client=fake_client(completions))
        with pytest.raises(RecognitionFailure):
            recognizer.recognize(b"jpeg-bytes")


class TestBuildRecognizer:

    def test_default_engine(self):
        assert isinstance(build_recognizer("tesseract"), TesseractRecognizer)

    def test_unknown_engine(self):
        with pytest.raises(ValueError):
            build_recognizer("abacus")
