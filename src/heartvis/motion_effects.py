import numpy as np

from heartvis.constants import BOUNCE_SPEED_MAX, BOUNCE_SPEED_MIN, ROTATION_STEP


class MotionEffects:
    """
    Rotation and bounce state for the shape.

    Both effects advance one fixed step per frame, so their speed follows the
    frame rate rather than the wall clock.
    """

    def __init__(self, width, height, rng=None):
        self.rng = rng if rng is not None else np.random.default_rng()

        self.rotation_angle = 0
        self.rotate_enabled = False

        self.bounce_enabled = False
        self.x = 0.0
        self.y = 0.0
        self.vx = 0.0
        self.vy = 0.0
        self.initialize_bounce(width, height)

    @property
    def position(self):
        return self.x, self.y

    @property
    def velocity(self):
        return self.vx, self.vy

    def random_range(self, low, high):
        """Uniform float in [low, high)."""
        return self.rng.uniform(low, high)

    def _random_sign(self):
        return 1 if self.rng.random() > 0.5 else -1

    def initialize_bounce(self, width, height):
        """Centre the shape and pick a fresh down-right velocity."""
        self.x = width / 2
        self.y = height / 2
        self.vx = self.random_range(BOUNCE_SPEED_MIN, BOUNCE_SPEED_MAX)
        self.vy = self.random_range(BOUNCE_SPEED_MIN, BOUNCE_SPEED_MAX)

    def update_bounce(self, width, height, shape_size):
        """
        Advance the bounce by one frame.

        While bouncing is off the shape is pinned to the canvas centre, so a
        resized window re-centres it and switching bounce off never leaves the
        shape stranded where it was.
        """
        if not self.bounce_enabled:
            self.x = width / 2
            self.y = height / 2
            return

        self.x += self.vx
        self.y += self.vy

        half_size = shape_size / 2

        # Axes are independent; a corner hit reflects both
        if self.x + half_size > width or self.x - half_size < 0:
            self.vx *= -1
        if self.y + half_size > height or self.y - half_size < 0:
            self.vy *= -1

    def update_rotation(self):
        if self.rotate_enabled:
            self.rotation_angle += ROTATION_STEP
        return self.rotation_angle

    def toggle_rotation(self):
        self.rotate_enabled = not self.rotate_enabled
        return self.rotate_enabled

    def toggle_bounce(self):
        self.bounce_enabled = not self.bounce_enabled
        if self.bounce_enabled:
            self.vx = self.random_range(BOUNCE_SPEED_MIN, BOUNCE_SPEED_MAX) * self._random_sign()
            self.vy = self.random_range(BOUNCE_SPEED_MIN, BOUNCE_SPEED_MAX) * self._random_sign()
        return self.bounce_enabled
