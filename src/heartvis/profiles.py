"""
Visual profiles.

Each profile bundles one hue strategy with one shape strategy and a trail
strength, so the different sketches run on the same frame loop.
"""

from dataclasses import dataclass, field
from typing import Callable, Mapping

from heartvis.constants import BALANCE_HIGH_BAND, BALANCE_LOW_BAND, TRAIL_ALPHA, TRAIL_ALPHA_SOFT
from heartvis.hue_mapper import FrameCounterHue, FrequencyBalanceHue
from heartvis.shapes import HeartShape, ParticleRing


@dataclass(frozen=True)
class VisualProfile:
    name: str
    description: str
    hue_strategy: Callable = FrameCounterHue
    shape_factory: Callable = HeartShape
    trail_alpha: int = TRAIL_ALPHA
    # When False the pulse stays at 1.0 and only the colour reacts
    level_drives_pulse: bool = True
    # Keyword arguments for the hue strategy, e.g. the balance band ranges
    hue_options: Mapping = field(default_factory=dict)

    def make_hue(self):
        return self.hue_strategy(**self.hue_options)

    def make_shape(self):
        return self.shape_factory()


PROFILES = {
    "heart": VisualProfile(
        name="heart",
        description="Pulsing glow heart, colour cycling with time",
    ),
    "balance": VisualProfile(
        name="balance",
        description="Pulsing glow heart coloured by the bass/treble balance",
        hue_strategy=FrequencyBalanceHue,
        hue_options={"low_band": BALANCE_LOW_BAND, "high_band": BALANCE_HIGH_BAND},
        trail_alpha=TRAIL_ALPHA_SOFT,
    ),
    "ring": VisualProfile(
        name="ring",
        description="Spinning particle ring sized by bass, mid and treble",
        shape_factory=ParticleRing,
        trail_alpha=TRAIL_ALPHA_SOFT,
        level_drives_pulse=False,
    ),
}

DEFAULT_PROFILE = "heart"


def get_profile(name):
    try:
        return PROFILES[name]
    except KeyError:
        raise KeyError(f"Unknown profile {name!r}; choose from {', '.join(sorted(PROFILES))}") from None
