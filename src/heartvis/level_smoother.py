from dataclasses import dataclass

from heartvis.constants import (
    INITIAL_PULSE,
    LEVEL_IN_MAX,
    LEVEL_IN_MIN,
    PULSE_MAX,
    PULSE_MIN,
    PULSE_SMOOTHING,
)


def map_level(level, in_min=LEVEL_IN_MIN, in_max=LEVEL_IN_MAX, out_min=PULSE_MIN, out_max=PULSE_MAX):
    """
    Linearly remap `level` from [in_min, in_max] onto [out_min, out_max],
    clamped to the output range. A zero-width input range maps to `out_min`.
    """
    if in_max == in_min:
        return out_min
    mapped = (level - in_min) / (in_max - in_min) * (out_max - out_min) + out_min
    return max(out_min, min(out_max, mapped))


def smooth(current, target, factor):
    """Move `current` towards `target` by `factor` (exponential moving average)."""
    return current + (target - current) * factor


@dataclass
class SmoothedSignal:
    value: float = INITIAL_PULSE
    in_min: float = LEVEL_IN_MIN
    in_max: float = LEVEL_IN_MAX
    out_min: float = PULSE_MIN
    out_max: float = PULSE_MAX
    factor: float = PULSE_SMOOTHING


class LevelSmoother:
    """
    Turns the raw microphone level into a pulse factor.
    The only state carried between frames is one smoothed scalar.
    """

    def __init__(self, signal=None):
        self.signal = signal or SmoothedSignal()

    @property
    def value(self):
        return self.signal.value

    def update(self, raw_level):
        """Smooth the mapped level of this frame into the signal and return it."""
        s = self.signal
        target = map_level(raw_level, s.in_min, s.in_max, s.out_min, s.out_max)
        s.value = smooth(s.value, target, s.factor)
        return s.value
