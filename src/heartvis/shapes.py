import math
from typing import NamedTuple

from heartvis.constants import (
    CHANNEL_MAX,
    GLOW_ALPHA_BASE,
    GLOW_ALPHA_STEP,
    GLOW_HUE_STEP,
    GLOW_LAYERS,
    GLOW_SCALE_BASE,
    GLOW_SCALE_STEP,
    HEART_ANGLE_STEP,
    HEART_SCALE,
    HUE_MAX,
    IMAGE_ALPHA,
    IMAGE_HUE_OFFSET,
    RING_ALPHA,
    RING_PARTICLE_MAX,
    RING_PARTICLE_MIN,
    RING_PARTICLES,
    RING_RADIUS_MAX,
    RING_RADIUS_MIN,
    RING_SPIN,
    RING_WOBBLE,
    RING_WOBBLE_PHASE,
    SHAPE_SIZE,
)


class Bounds(NamedTuple):
    width: float
    height: float


def shape_bounds(pulse):
    """Bounding box used for wall collisions; the same for every shape."""
    size = SHAPE_SIZE * pulse
    return Bounds(size, size)


def heart_point(angle):
    """Point on the classic heart curve at `angle` degrees (y up)."""
    a = math.radians(angle)
    x = 16 * math.sin(a) ** 3
    y = 13 * math.cos(a) - 5 * math.cos(2 * a) - 2 * math.cos(3 * a) - math.cos(4 * a)
    return x, y


def remap(value, in_min, in_max, out_min, out_max):
    """Unclamped linear remap."""
    return (value - in_min) / (in_max - in_min) * (out_max - out_min) + out_min


class HeartShape:
    """
    Heart drawn as stacked glow layers, the largest and faintest first.
    """

    def __init__(self, glow_layers=GLOW_LAYERS, angle_step=HEART_ANGLE_STEP):
        self.glow_layers = glow_layers
        self.angle_step = angle_step

    def layers(self, base_hue):
        """Yield (scale, alpha, hue) for each glow layer in drawing order."""
        for g in range(self.glow_layers - 1, -1, -1):
            glow_scale = GLOW_SCALE_BASE + g * GLOW_SCALE_STEP
            alpha = GLOW_ALPHA_BASE - g * GLOW_ALPHA_STEP
            hue = (base_hue + g * GLOW_HUE_STEP) % HUE_MAX
            yield glow_scale, alpha, hue

    def vertices(self, glow_scale, pulse):
        """Outline of one layer in screen orientation (point down, y grows downwards)."""
        factor = glow_scale * pulse * HEART_SCALE
        points = []
        angle = 0
        while angle < 360:
            x, y = heart_point(angle)
            points.append((x * factor, -y * factor))
            angle += self.angle_step
        return points

    def draw(self, canvas, base_hue, pulse, audio_frame=None):
        for glow_scale, alpha, hue in self.layers(base_hue):
            canvas.fill(hue, CHANNEL_MAX, CHANNEL_MAX, alpha)
            canvas.begin_shape()
            for x, y in self.vertices(glow_scale, pulse):
                canvas.vertex(x, y)
            canvas.end_shape(close=True)

    def get_bounds(self, pulse):
        return shape_bounds(pulse)


class ImageShape:
    """A user supplied image drawn in place of the heart."""

    def __init__(self, img):
        self.img = img

    def draw(self, canvas, base_hue, pulse, audio_frame=None):
        size = SHAPE_SIZE * pulse
        tint_hue = (base_hue + IMAGE_HUE_OFFSET) % HUE_MAX
        canvas.tint(tint_hue, CHANNEL_MAX, CHANNEL_MAX, IMAGE_ALPHA)
        canvas.image(self.img, 0, 0, size, size)

    def get_bounds(self, pulse):
        return shape_bounds(pulse)


class ParticleRing:
    """
    Ring of particles: bass sets the ring radius, mid and treble stretch each
    particle. The ring spins slowly and wobbles with the frame counter.
    """

    def __init__(self, particles=RING_PARTICLES, scaling=1.0):
        self.particles = particles
        self.scaling = scaling
        self.angle_offset = 0.0
        self.frame_count = 0

    def draw(self, canvas, base_hue, pulse, audio_frame=None):
        self.angle_offset += RING_SPIN
        self.frame_count += 1

        bass = audio_frame.band("bass") if audio_frame is not None else 0.0
        mid = audio_frame.band("mid") if audio_frame is not None else 0.0
        treble = audio_frame.band("treble") if audio_frame is not None else 0.0

        radius_base = remap(bass, 0, CHANNEL_MAX, RING_RADIUS_MIN, RING_RADIUS_MAX)
        particle_w = remap(mid, 0, CHANNEL_MAX, RING_PARTICLE_MIN, RING_PARTICLE_MAX) * self.scaling
        particle_h = remap(treble, 0, CHANNEL_MAX, RING_PARTICLE_MIN, RING_PARTICLE_MAX) * self.scaling

        for i in range(self.particles):
            angle = i * (360 / self.particles) + self.angle_offset
            r = radius_base + math.sin(math.radians(self.frame_count + i * RING_WOBBLE_PHASE)) * RING_WOBBLE
            x = r * math.cos(math.radians(angle))
            y = r * math.sin(math.radians(angle))

            hue = (angle + self.frame_count) % HUE_MAX
            canvas.fill(hue, CHANNEL_MAX, CHANNEL_MAX, RING_ALPHA)
            canvas.ellipse(x, y, particle_w, particle_h)

    def get_bounds(self, pulse):
        return shape_bounds(pulse)
