import logging
import sys
import threading
from collections import deque
from dataclasses import dataclass
from typing import Optional

import librosa
import numpy as np

from heartvis.constants import (
    FFT_SMOOTHING,
    FREQUENCY_BANDS,
    HOP_LENGTH,
    MAX_DB,
    MIN_DB,
    N_FFT,
    SAMPLE_RATE,
)

logger = logging.getLogger(__name__)


def spectrum_to_bytes(magnitudes, n_fft=N_FFT):
    """
    Scale FFT magnitudes to 0-255 the way a browser analyser node does:
    decibels of the normalised magnitude, with MIN_DB..MAX_DB spread over the byte range.
    """
    db = librosa.amplitude_to_db(np.asarray(magnitudes) / n_fft, ref=1.0, amin=1e-10, top_db=None)
    scaled = (db - MIN_DB) / (MAX_DB - MIN_DB) * 255
    return np.clip(scaled, 0, 255)


@dataclass
class AudioFrame:
    """The latest audio reading handed to the visuals once per frame."""

    level: float = 0.0
    spectrum: Optional[np.ndarray] = None
    freqs: Optional[np.ndarray] = None

    def energy(self, low_hz, high_hz):
        """Mean byte energy (0-255) of the spectrum bins between `low_hz` and `high_hz`."""
        if self.spectrum is None or self.freqs is None or len(self.spectrum) == 0:
            return 0.0
        if low_hz > high_hz:
            low_hz, high_hz = high_hz, low_hz

        mask = (self.freqs >= low_hz) & (self.freqs <= high_hz)
        if not np.any(mask):
            # Range narrower than one bin: use the bin nearest its centre
            index = int(np.argmin(np.abs(self.freqs - (low_hz + high_hz) / 2)))
            return float(self.spectrum[index])
        return float(np.mean(self.spectrum[mask]))

    def band(self, name):
        """Energy of one of the named FREQUENCY_BANDS."""
        return self.energy(*FREQUENCY_BANDS[name])


SILENCE = AudioFrame()


class MicrophoneInput:
    """
    Live microphone capture.

    The sounddevice callback only appends samples to a ring buffer; `read`
    polls the newest window without waiting, so the frame loop never blocks on
    the audio device.
    """

    def __init__(self, sr=SAMPLE_RATE, n_fft=N_FFT, device=None, smoothing=FFT_SMOOTHING):
        self.sr = sr
        self.n_fft = n_fft
        self.device = device
        self.smoothing = smoothing

        self.buffer = deque(maxlen=n_fft)
        self.lock = threading.Lock()
        self.stream = None

        self.window = np.hanning(n_fft)
        self.freqs = np.fft.rfftfreq(n_fft, 1.0 / sr)
        self.prev_magnitudes = np.zeros(len(self.freqs))

    def _callback(self, indata, frames, time_info, status):
        if status:
            logger.debug(f"[i] Audio input status: {status}")
        with self.lock:
            self.buffer.extend(indata[:, 0])

    def start(self):
        """Open the input stream. Raises sounddevice.PortAudioError if no device is usable."""
        # PortAudio is loaded on import, so only live capture needs it
        import sounddevice as sd

        logger.info(f"[+] Opening microphone (device={self.device}, {self.sr} Hz)...")
        self.stream = sd.InputStream(
            samplerate=self.sr,
            device=self.device,
            channels=1,
            dtype="float32",
            blocksize=HOP_LENGTH,
            callback=self._callback,
        )
        self.stream.start()

    def stop(self):
        if self.stream is not None:
            self.stream.stop()
            self.stream.close()
            self.stream = None
            logger.info("[+] Microphone closed")

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.stop()

    def read(self):
        """Return an AudioFrame for the newest samples, or silence until the buffer fills."""
        with self.lock:
            if len(self.buffer) < self.n_fft:
                return SILENCE
            samples = np.array(self.buffer, dtype=np.float32)

        level = float(np.sqrt(np.mean(samples**2)))

        magnitudes = np.abs(np.fft.rfft(samples * self.window))
        # Temporal smoothing of the magnitudes (0.0 = none)
        magnitudes = self.smoothing * self.prev_magnitudes + (1 - self.smoothing) * magnitudes
        self.prev_magnitudes = magnitudes

        return AudioFrame(level=level, spectrum=spectrum_to_bytes(magnitudes, self.n_fft), freqs=self.freqs)


class AudioAnalyser:
    """
    Handles loading audio and extracting the per-frame level and spectrum.
    """

    def __init__(self, filepath):
        logger.info(f"[+] Loading audio: {filepath}...")
        try:
            # Load audio with original sampling rate
            self.y, self.sr = librosa.load(filepath, sr=None, mono=True)
            self.duration = librosa.get_duration(y=self.y, sr=self.sr)
        except Exception as e:
            sys.exit(f"[!] Error loading audio file: {e}")

        # Pre-calculate features
        logger.info("[+] Analyzing audio frequencies and dynamics...")
        self._calculate_spectrogram()
        self._calculate_rms()

    def _calculate_spectrogram(self):
        """
        Compute the byte-scaled magnitude spectrogram, one column per hop.
        """
        magnitudes = np.abs(
            librosa.stft(self.y, n_fft=N_FFT, hop_length=HOP_LENGTH, window="hann")
        )
        self.spectrogram = spectrum_to_bytes(magnitudes, N_FFT)
        self.freqs = librosa.fft_frequencies(sr=self.sr, n_fft=N_FFT)

    def _calculate_rms(self):
        """
        Compute Root Mean Square (Energy/Volume) for the pulsing effect.
        Left unnormalised so it reads like a microphone level.
        """
        self.rms = librosa.feature.rms(y=self.y, frame_length=N_FFT, hop_length=HOP_LENGTH)[0]

    def get_frame_at_time(self, t):
        """
        Returns the AudioFrame for a specific timestamp `t`.
        """
        # Convert time to frame index
        frame_index = int(librosa.time_to_frames(t, sr=self.sr, hop_length=HOP_LENGTH))

        # Boundary checks
        frame_index = max(0, min(frame_index, self.spectrogram.shape[1] - 1))

        level = float(self.rms[frame_index]) if frame_index < len(self.rms) else 0.0
        return AudioFrame(level=level, spectrum=self.spectrogram[:, frame_index], freqs=self.freqs)
