import colorsys
import math
from typing import Protocol

import cv2
import numpy as np

from heartvis.constants import CHANNEL_MAX, HUE_MAX, TEXT_LINE_HEIGHT, TEXT_SCALE


class DrawingCanvas(Protocol):
    """
    Everything the shapes and the orchestrator need from a drawing surface.

    Colours are HSB with ranges (360, 255, 255, 255). `push`/`pop` save and
    restore the current transform, which `translate` and `rotate` (degrees,
    clockwise on screen) compose onto.
    """

    width: int
    height: int

    def background(self, alpha: float) -> None: ...

    def push(self) -> None: ...

    def pop(self) -> None: ...

    def translate(self, x: float, y: float) -> None: ...

    def rotate(self, degrees: float) -> None: ...

    def fill(self, hue: float, saturation: float, brightness: float, alpha: float) -> None: ...

    def begin_shape(self) -> None: ...

    def vertex(self, x: float, y: float) -> None: ...

    def end_shape(self, close: bool = True) -> None: ...

    def ellipse(self, x: float, y: float, w: float, h: float) -> None: ...

    def tint(self, hue: float, saturation: float, brightness: float, alpha: float) -> None: ...

    def image(self, img: np.ndarray, x: float, y: float, w: float, h: float) -> None: ...

    def text(self, message: str, x: float, y: float) -> None: ...

    def resize(self, width: int, height: int) -> None: ...


def hsb_to_bgr(hue, saturation, brightness):
    """Convert an HSB colour (360, 255, 255) to an OpenCV BGR tuple."""
    r, g, b = colorsys.hsv_to_rgb(
        (hue % HUE_MAX) / HUE_MAX,
        saturation / CHANNEL_MAX,
        brightness / CHANNEL_MAX,
    )
    return (int(round(b * 255)), int(round(g * 255)), int(round(r * 255)))


class OpenCVCanvas:
    """
    Draws onto a BGR numpy frame using OpenCV.
    Shapes are alpha blended over what is already there, so the frame
    accumulates trails between `background` washes.
    """

    def __init__(self, width, height):
        self.width = width
        self.height = height
        self.frame = np.zeros((height, width, 3), dtype=np.uint8)

        self._matrix = np.eye(3)
        self._stack = []
        self._fill = ((255, 255, 255), CHANNEL_MAX)
        self._tint = ((255, 255, 255), CHANNEL_MAX)
        self._vertices = []

    def resize(self, width, height):
        if (width, height) == (self.width, self.height):
            return
        self.width = width
        self.height = height
        self.frame = np.zeros((height, width, 3), dtype=np.uint8)

    # --- transform ---

    def push(self):
        self._stack.append(self._matrix.copy())

    def pop(self):
        self._matrix = self._stack.pop() if self._stack else np.eye(3)

    def translate(self, x, y):
        self._matrix = self._matrix @ np.array([[1, 0, x], [0, 1, y], [0, 0, 1]], dtype=float)

    def rotate(self, degrees):
        theta = math.radians(degrees)
        c, s = math.cos(theta), math.sin(theta)
        self._matrix = self._matrix @ np.array([[c, -s, 0], [s, c, 0], [0, 0, 1]], dtype=float)

    def _transform(self, points):
        points = np.asarray(points, dtype=float).reshape(-1, 2)
        return points @ self._matrix[:2, :2].T + self._matrix[:2, 2]

    def _rotation_degrees(self):
        return math.degrees(math.atan2(self._matrix[1, 0], self._matrix[0, 0]))

    # --- colour ---

    def fill(self, hue, saturation, brightness, alpha):
        self._fill = (hsb_to_bgr(hue, saturation, brightness), alpha)

    def tint(self, hue, saturation, brightness, alpha):
        self._tint = (hsb_to_bgr(hue, saturation, brightness), alpha)

    def background(self, alpha):
        """Wash the frame towards black; low alpha leaves motion trails."""
        keep = 1.0 - alpha / CHANNEL_MAX
        self.frame = cv2.convertScaleAbs(self.frame, alpha=keep)
        if alpha > 0:
            # Rounding alone stalls around 5, leaving ghost trails
            self.frame = cv2.subtract(self.frame, (1, 1, 1, 0))

    # --- primitives ---

    def _blend_region(self, bbox, draw, alpha):
        """Run `draw(overlay, x0, y0)` on a copy of the clipped region and blend it back."""
        x, y, w, h = bbox
        x0, y0 = max(x, 0), max(y, 0)
        x1, y1 = min(x + w, self.width), min(y + h, self.height)
        if x1 <= x0 or y1 <= y0 or alpha <= 0:
            return
        roi = self.frame[y0:y1, x0:x1]
        overlay = roi.copy()
        draw(overlay, x0, y0)
        weight = min(alpha, CHANNEL_MAX) / CHANNEL_MAX
        self.frame[y0:y1, x0:x1] = cv2.addWeighted(overlay, weight, roi, 1 - weight, 0)

    def begin_shape(self):
        self._vertices = []

    def vertex(self, x, y):
        self._vertices.append((x, y))

    def end_shape(self, close=True):
        if len(self._vertices) < 3:
            self._vertices = []
            return
        points = np.round(self._transform(self._vertices)).astype(np.int32)
        self._vertices = []
        color, alpha = self._fill

        def draw(overlay, x0, y0):
            shifted = points - np.array([x0, y0], dtype=np.int32)
            if close:
                cv2.fillPoly(overlay, [shifted], color, cv2.LINE_AA)
            else:
                cv2.polylines(overlay, [shifted], False, color, 2, cv2.LINE_AA)

        self._blend_region(cv2.boundingRect(points), draw, alpha)

    def ellipse(self, x, y, w, h):
        (cx, cy), = self._transform([(x, y)])
        axes = (max(int(round(w / 2)), 1), max(int(round(h / 2)), 1))
        reach = max(axes) + 2
        bbox = (int(cx) - reach, int(cy) - reach, 2 * reach + 1, 2 * reach + 1)
        color, alpha = self._fill
        angle = self._rotation_degrees()

        def draw(overlay, x0, y0):
            center = (int(round(cx)) - x0, int(round(cy)) - y0)
            cv2.ellipse(overlay, center, axes, angle, 0, 360, color, -1, cv2.LINE_AA)

        self._blend_region(bbox, draw, alpha)

    def image(self, img, x, y, w, h):
        """Stamp `img` (BGR or BGRA) centred on (x, y), tinted and transformed."""
        w, h = int(round(w)), int(round(h))
        if w < 1 or h < 1:
            return
        if img.ndim == 2:
            img = cv2.cvtColor(img, cv2.COLOR_GRAY2BGRA)
        elif img.shape[2] == 3:
            img = cv2.cvtColor(img, cv2.COLOR_BGR2BGRA)
        stamp = cv2.resize(img, (w, h), interpolation=cv2.INTER_AREA).astype(np.float32)

        tint_color, tint_alpha = self._tint
        stamp[..., :3] *= np.array(tint_color, dtype=np.float32) / 255
        stamp[..., 3] *= tint_alpha / CHANNEL_MAX

        offset = np.array([[1, 0, x - w / 2], [0, 1, y - h / 2], [0, 0, 1]], dtype=float)
        matrix = (self._matrix @ offset)[:2]
        warped = cv2.warpAffine(
            stamp,
            matrix,
            (self.width, self.height),
            flags=cv2.INTER_LINEAR,
            borderMode=cv2.BORDER_CONSTANT,
            borderValue=(0, 0, 0, 0),
        )
        weight = warped[..., 3:4] / 255
        blended = warped[..., :3] * weight + self.frame.astype(np.float32) * (1 - weight)
        self.frame = np.clip(blended, 0, 255).astype(np.uint8)

    def text(self, message, x, y):
        color, _ = self._fill
        (tx, ty), = self._transform([(x, y)])
        for i, line in enumerate(message.split("\n")):
            origin = (int(tx), int(ty) + (i + 1) * TEXT_LINE_HEIGHT)
            cv2.putText(
                self.frame, line, origin, cv2.FONT_HERSHEY_SIMPLEX, TEXT_SCALE, color, 1, cv2.LINE_AA
            )
