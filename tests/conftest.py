"""
Pytest configuration and fixtures for the document scan service tests.
"""
import base64
import io
import os
import sys

import numpy as np
import pytest
from PIL import Image

# Add the project root to the path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import settings  # noqa: E402
from pipeline.frame import Frame  # noqa: E402
from pipeline.recognizer import TextRecognizer  # noqa: E402


def make_stripes(width=320, height=240, stripe=2, low=40, high=220):
    """Vertical stripes: sharp, evenly lit, busy all the way to the borders."""
    cols = (np.arange(width) // stripe) % 2
    row = np.where(cols == 0, low, high).astype(np.uint8)
    gray = np.tile(row, (height, 1))
    return Frame(np.stack([gray] * 3, axis=-1))


def make_flat(width=320, height=240, value=128):
    return Frame(np.full((height, width, 3), value, dtype=np.uint8))


class FakeFrameSource:
    """Returns queued frames, repeating the last one."""

    def __init__(self, *frames):
        self.frames = list(frames)
        self.grabs = 0
        self.released = False

    def get_frame(self):
        self.grabs += 1
        if len(self.frames) > 1:
            return self.frames.pop(0)
        return self.frames[0]

    def release(self):
        self.released = True


class FakeRecognizer(TextRecognizer):
    name = "fake"

    def __init__(self, text="", error=None):
        self.text = text
        self.error = error
        self.calls = []

    def recognize(self, image_bytes):
        self.calls.append(image_bytes)
        if self.error is not None:
            raise self.error
        return self.text


@pytest.fixture
def stripes():
    return make_stripes()


@pytest.fixture
def ready_frame():
    """Full-resolution frame that downsamples to 320-wide 2px stripes."""
    return make_stripes(width=1280, height=960, stripe=8)


@pytest.fixture
def fast_timers(monkeypatch):
    """Shrink throttle, countdown and burst timings for async tests."""
    monkeypatch.setattr(settings, "ANALYSIS_INTERVAL_MS", 0)
    monkeypatch.setattr(settings, "COUNTDOWN_TICK_SECONDS", 0.01)
    monkeypatch.setattr(settings, "BURST_DELAY_MS", 1)


@pytest.fixture
def sample_base64_image():
    """Small PNG, base64 encoded."""
    buffer = io.BytesIO()
    Image.new("RGB", (64, 48), (255, 255, 255)).save(buffer, "PNG")
    return base64.b64encode(buffer.getvalue()).decode("ascii")


@pytest.fixture
def pan_card_text():
    return "\n".join([
        "INCOME TAX DEPARTMENT",
        "JOHN SMITH",
        "ROBERT SMITH",
        "01/01/1990",
        "ABCDE1234F",
    ])
