"""Pytest configuration and shared fixtures."""

import cv2
import numpy as np
import pytest

TEST_SR = 22050


class RecordingCanvas:
    """
    Canvas test double: records every drawing call as (name, args).
    """

    def __init__(self, width=800, height=600):
        self.width = width
        self.height = height
        self.calls = []

    def _record(self, name, *args):
        self.calls.append((name, args))

    def background(self, alpha):
        self._record("background", alpha)

    def push(self):
        self._record("push")

    def pop(self):
        self._record("pop")

    def translate(self, x, y):
        self._record("translate", x, y)

    def rotate(self, degrees):
        self._record("rotate", degrees)

    def fill(self, hue, saturation, brightness, alpha):
        self._record("fill", hue, saturation, brightness, alpha)

    def begin_shape(self):
        self._record("begin_shape")

    def vertex(self, x, y):
        self._record("vertex", x, y)

    def end_shape(self, close=True):
        self._record("end_shape", close)

    def ellipse(self, x, y, w, h):
        self._record("ellipse", x, y, w, h)

    def tint(self, hue, saturation, brightness, alpha):
        self._record("tint", hue, saturation, brightness, alpha)

    def image(self, img, x, y, w, h):
        self._record("image", img, x, y, w, h)

    def text(self, message, x, y):
        self._record("text", message, x, y)

    def resize(self, width, height):
        self.width = width
        self.height = height

    def named(self, name):
        """Arguments of every recorded call with this name."""
        return [args for call, args in self.calls if call == name]

    def clear(self):
        self.calls = []


@pytest.fixture
def canvas() -> RecordingCanvas:
    return RecordingCanvas()


@pytest.fixture
def rng() -> np.random.Generator:
    """Seeded generator so bounce velocities are reproducible."""
    return np.random.default_rng(42)


@pytest.fixture
def png_file(tmp_path):
    """A small opaque PNG written to disk."""
    img = np.full((32, 32, 4), 255, dtype=np.uint8)
    path = tmp_path / "logo.png"
    cv2.imwrite(str(path), img)
    return path


@pytest.fixture
def sample_rate() -> int:
    return TEST_SR


@pytest.fixture
def sine_wav(tmp_path, sample_rate):
    """One second of a 220 Hz sine followed by one second of silence."""
    import soundfile as sf

    t = np.linspace(0, 1.0, sample_rate, endpoint=False)
    tone = 0.5 * np.sin(2 * np.pi * 220.0 * t)
    y = np.concatenate([tone, np.zeros(sample_rate)]).astype(np.float32)
    path = tmp_path / "tone.wav"
    sf.write(path, y, sample_rate)
    return path
