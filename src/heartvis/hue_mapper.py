from heartvis.constants import (
    BALANCE_HIGH_BAND,
    BALANCE_LOW_BAND,
    BASS_HUE,
    HUE_FRAME_STEP,
    HUE_MAX,
    TREBLE_HUE,
)
from heartvis.level_smoother import smooth


def frame_counter_hue(frame_count):
    """Hue that cycles with the animation, two degrees per frame."""
    return (frame_count * HUE_FRAME_STEP) % HUE_MAX


def balance_hue(low, high):
    """
    Hue from the balance between low and high band energy:
    blue when the bass dominates, red when the treble does.
    """
    balance = high / (low + high + 1)
    return smooth(BASS_HUE, TREBLE_HUE, balance)


class FrameCounterHue:
    name = "frame"

    def hue(self, frame_count, audio_frame):
        return frame_counter_hue(frame_count)


class FrequencyBalanceHue:
    name = "balance"

    def __init__(self, low_band=BALANCE_LOW_BAND, high_band=BALANCE_HIGH_BAND):
        self.low_band = low_band
        self.high_band = high_band

    def hue(self, frame_count, audio_frame):
        low = audio_frame.energy(*self.low_band)
        high = audio_frame.energy(*self.high_band)
        return balance_hue(low, high)
