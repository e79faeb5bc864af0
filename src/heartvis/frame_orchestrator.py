import enum
import logging
import mimetypes
from concurrent.futures import ThreadPoolExecutor

import cv2
import numpy as np

from heartvis.audio_analyser import SILENCE
from heartvis.constants import (
    CHANNEL_MAX,
    INSTRUCTIONS,
    INSTRUCTIONS_MARGIN,
    INSTRUCTIONS_OFFSET,
    UPLOAD_WARNING,
    WARNING_FRAMES,
)
from heartvis.level_smoother import LevelSmoother
from heartvis.motion_effects import MotionEffects
from heartvis.shapes import ImageShape

logger = logging.getLogger(__name__)

ENTER_KEYS = (10, 13)
ESCAPE_KEY = 27


class InvalidImageError(ValueError):
    """Raised for uploads that are not PNG images."""


class Command(enum.Enum):
    RESET_HEART = "reset_heart"
    TOGGLE_ROTATION = "toggle_rotation"
    TOGGLE_BOUNCE = "toggle_bounce"
    TOGGLE_INSTRUCTIONS = "toggle_instructions"
    TOGGLE_FULLSCREEN = "toggle_fullscreen"
    UPLOAD_IMAGE = "upload_image"
    QUIT = "quit"


_LETTER_COMMANDS = {
    "r": Command.TOGGLE_ROTATION,
    "b": Command.TOGGLE_BOUNCE,
    "e": Command.TOGGLE_INSTRUCTIONS,
    "u": Command.UPLOAD_IMAGE,
    "q": Command.QUIT,
}


def command_for_key(key):
    """
    Map a key code (as returned by cv2.waitKey) to a Command.
    Returns None when no key was pressed; unmapped keys toggle fullscreen.
    """
    if key is None or key < 0:
        return None
    key &= 0xFF
    if key in ENTER_KEYS:
        return Command.RESET_HEART
    if key == ESCAPE_KEY:
        return Command.QUIT
    return _LETTER_COMMANDS.get(chr(key).lower(), Command.TOGGLE_FULLSCREEN)


def validate_png(path):
    mime_type, _ = mimetypes.guess_type(str(path))
    if mime_type != "image/png":
        raise InvalidImageError(f"{path} is not a PNG image ({mime_type or 'unknown type'})")


def load_png(path):
    """Decode a PNG keeping its alpha channel."""
    img = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
    if img is None:
        raise InvalidImageError(f"Could not decode {path}")
    if img.dtype == np.uint16:
        # The canvas blends 8-bit channels and alpha
        img = cv2.convertScaleAbs(img, alpha=1 / 257)
    return img


class FrameOrchestrator:
    """
    Runs one animation frame at a time.
    Owns the smoothed pulse, the motion state and every display toggle.
    """

    def __init__(self, canvas, profile, rng=None):
        self.canvas = canvas
        self.profile = profile
        self.hue_strategy = profile.make_hue()
        self.shape = profile.make_shape()

        self.smoother = LevelSmoother()
        self.effects = MotionEffects(canvas.width, canvas.height, rng=rng)

        self.frame_count = 0
        self.pulse = self.smoother.value if profile.level_drives_pulse else 1.0
        self.use_heart = True
        self.user_image = None
        self.show_instructions = True

        self.warning = None
        self.warning_frames = 0

        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="image-loader")
        self._pending_image = None

    # --- per-frame ---

    def tick(self, audio_frame=None):
        """Advance one frame and draw it onto the canvas."""
        if audio_frame is None:
            audio_frame = SILENCE
        canvas = self.canvas

        self._resolve_pending_image()
        self.frame_count += 1

        canvas.background(self.profile.trail_alpha)

        shape_size = self.active_shape.get_bounds(self.pulse).width
        self.effects.update_bounce(canvas.width, canvas.height, shape_size)

        canvas.push()
        canvas.translate(*self.effects.position)

        self.effects.update_rotation()
        if self.effects.rotate_enabled:
            canvas.rotate(self.effects.rotation_angle)

        if self.profile.level_drives_pulse:
            self.pulse = self.smoother.update(audio_frame.level)

        base_hue = self.hue_strategy.hue(self.frame_count, audio_frame)
        self.active_shape.draw(canvas, base_hue, self.pulse, audio_frame)
        canvas.pop()

        if self.show_instructions:
            self._draw_instructions()
        self._draw_warning()

        return base_hue

    @property
    def active_shape(self):
        """The image once one is loaded and selected, otherwise the profile shape."""
        if not self.use_heart and self.user_image is not None:
            return self.user_image
        return self.shape

    def _draw_instructions(self):
        self.canvas.fill(0, 0, CHANNEL_MAX, CHANNEL_MAX)
        self.canvas.text(INSTRUCTIONS, INSTRUCTIONS_MARGIN, self.canvas.height - INSTRUCTIONS_OFFSET)

    def _draw_warning(self):
        if self.warning_frames <= 0:
            return
        self.warning_frames -= 1
        self.canvas.fill(0, CHANNEL_MAX, CHANNEL_MAX, CHANNEL_MAX)
        self.canvas.text(self.warning, INSTRUCTIONS_MARGIN, INSTRUCTIONS_MARGIN)

    def _warn(self, message):
        logger.warning(f"[!] {message}")
        self.warning = UPLOAD_WARNING
        self.warning_frames = WARNING_FRAMES

    # --- commands ---

    def apply_command(self, command):
        """
        Apply a command owned by the visuals; window commands are returned for the caller.
        Effects show from the next tick.
        """
        if command is Command.RESET_HEART:
            self.reset_to_heart()
        elif command is Command.TOGGLE_ROTATION:
            enabled = self.effects.toggle_rotation()
            logger.debug(f"[i] Rotation {'on' if enabled else 'off'}")
        elif command is Command.TOGGLE_BOUNCE:
            enabled = self.effects.toggle_bounce()
            logger.debug(f"[i] Bounce {'on' if enabled else 'off'}")
        elif command is Command.TOGGLE_INSTRUCTIONS:
            self.show_instructions = not self.show_instructions
        return command

    def handle_key(self, key):
        command = command_for_key(key)
        if command is None:
            return None
        return self.apply_command(command)

    def reset_to_heart(self):
        self.use_heart = True
        self.user_image = None
        if self._pending_image is not None:
            self._pending_image.cancel()
            self._pending_image = None

    # --- image upload ---

    def request_image(self, path):
        """
        Start loading a PNG to replace the heart.
        Returns the load future, or None if the file was rejected.
        """
        try:
            validate_png(path)
        except InvalidImageError as e:
            self._warn(str(e))
            return None

        logger.info(f"[+] Loading image: {path}...")
        self._pending_image = self._executor.submit(load_png, path)
        return self._pending_image

    def _resolve_pending_image(self):
        future = self._pending_image
        if future is None or not future.done():
            return
        self._pending_image = None
        if future.cancelled():
            return
        try:
            img = future.result()
        except InvalidImageError as e:
            self._warn(str(e))
            return
        self.user_image = ImageShape(img)
        self.use_heart = False
        logger.info("[+] Image loaded, replacing the heart")

    def close(self):
        self._executor.shutdown(wait=False, cancel_futures=True)
