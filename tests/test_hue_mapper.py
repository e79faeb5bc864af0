"""Tests for the hue strategies."""

import numpy as np
import pytest

from heartvis.audio_analyser import SILENCE, AudioFrame
from heartvis.hue_mapper import (
    FrameCounterHue,
    FrequencyBalanceHue,
    balance_hue,
    frame_counter_hue,
)


def _frame_with_bands(low, high):
    """Spectrum with constant energy below 1 kHz and another constant above it."""
    freqs = np.linspace(0, 11025, 1025)
    spectrum = np.where(freqs < 1000, low, high).astype(float)
    return AudioFrame(level=0.0, spectrum=spectrum, freqs=freqs)


class TestFrameCounterHue:
    def test_two_degrees_per_frame(self):
        assert frame_counter_hue(1) == 2
        assert frame_counter_hue(45) == 90

    def test_wraps(self):
        assert frame_counter_hue(180) == 0
        assert frame_counter_hue(181) == 2

    def test_strategy_ignores_audio(self):
        assert FrameCounterHue().hue(10, SILENCE) == 20


class TestBalanceHue:
    def test_silence_is_blue(self):
        assert balance_hue(0, 0) == 240

    def test_bass_only_is_blue(self):
        assert balance_hue(255, 0) == 240

    def test_treble_dominant_approaches_red(self):
        hue = balance_hue(0, 255)
        assert hue == pytest.approx(240 / 256)
        assert hue < 1

    def test_even_balance_is_midway(self):
        assert balance_hue(100, 100) == pytest.approx(240 - 240 * 100 / 201)

    def test_in_hue_range(self):
        for low in (0, 50, 255):
            for high in (0, 50, 255):
                assert 0 <= balance_hue(low, high) <= 240


class TestFrequencyBalanceHue:
    def test_reads_bands_from_frame(self):
        strategy = FrequencyBalanceHue(low_band=(60, 400), high_band=(1500, 10000))
        assert strategy.hue(1, _frame_with_bands(200, 0)) == 240
        assert strategy.hue(1, _frame_with_bands(0, 200)) < 5

    def test_silent_frame_is_blue(self):
        assert FrequencyBalanceHue().hue(99, SILENCE) == 240
