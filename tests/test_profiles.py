"""Tests for the visual profiles."""

import numpy as np
import pytest

from heartvis.audio_analyser import AudioFrame
from heartvis.hue_mapper import FrameCounterHue, FrequencyBalanceHue
from heartvis.profiles import DEFAULT_PROFILE, PROFILES, VisualProfile, get_profile
from heartvis.shapes import HeartShape, ParticleRing


class TestProfiles:
    def test_default_is_heart(self):
        assert DEFAULT_PROFILE == "heart"
        profile = get_profile(DEFAULT_PROFILE)
        assert isinstance(profile.make_hue(), FrameCounterHue)
        assert isinstance(profile.make_shape(), HeartShape)
        assert profile.trail_alpha == 25
        assert profile.level_drives_pulse

    def test_balance(self):
        profile = get_profile("balance")
        assert isinstance(profile.make_hue(), FrequencyBalanceHue)
        assert isinstance(profile.make_shape(), HeartShape)
        assert profile.trail_alpha == 20

    def test_balance_bands_come_from_profile(self):
        hue = get_profile("balance").make_hue()
        assert hue.low_band == (60, 400)
        assert hue.high_band == (1500, 10000)

    def test_custom_bands_reach_the_hue(self):
        profile = VisualProfile(
            name="sub",
            description="Sub-bass against mids",
            hue_strategy=FrequencyBalanceHue,
            hue_options={"low_band": (20, 60), "high_band": (500, 2000)},
        )
        hue = profile.make_hue()
        assert hue.low_band == (20, 60)
        assert hue.high_band == (500, 2000)

        freqs = np.arange(0, 3000, 10, dtype=float)
        spectrum = np.where(freqs < 100, 200.0, 0.0)
        frame = AudioFrame(level=0.1, spectrum=spectrum, freqs=freqs)
        # All energy in the low band: pure bass blue
        assert hue.hue(0, frame) == pytest.approx(240)

    def test_ring(self):
        profile = get_profile("ring")
        assert isinstance(profile.make_shape(), ParticleRing)
        assert not profile.level_drives_pulse

    def test_fresh_shape_per_call(self):
        profile = get_profile("ring")
        assert profile.make_shape() is not profile.make_shape()

    def test_names_match_keys(self):
        for name, profile in PROFILES.items():
            assert profile.name == name

    def test_unknown(self):
        with pytest.raises(KeyError, match="balance, heart, ring"):
            get_profile("disco")
