"""Freehand signature capture

SignaturePad rasterizes strokes onto a transparent Pillow image as they are
drawn. Pointer input from mouse and touch is reduced to one local
coordinate space (client position minus the capture surface origin) before it
reaches the pad, so both produce identical strokes.

    pad = SignaturePad(400, 256)
    capture = SignatureCapture(pad, SurfaceRect(left=120, top=300, width=400, height=256))
    capture.pointer_down(MousePointer(130, 310))
    capture.pointer_move(MousePointer(180, 340))
    capture.pointer_up()
    data_url = pad.commit()
"""
import base64
import io
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Union

from PIL import Image, ImageDraw

from .config import SIGNATURE_HEIGHT, SIGNATURE_STROKE_WIDTH, SIGNATURE_WIDTH
from .errors import NoSignatureError

INK = (0, 0, 0, 255)
TRANSPARENT = (0, 0, 0, 0)


@dataclass(frozen=True)
class Point:
    x: float
    y: float


# ---------- pointer input ----------

@dataclass(frozen=True)
class MousePointer:
    client_x: float
    client_y: float

    def client_position(self) -> Optional[Point]:
        return Point(self.client_x, self.client_y)


@dataclass(frozen=True)
class TouchPointer:
    touches: tuple[tuple[float, float], ...]

    def client_position(self) -> Optional[Point]:
        # single active pointer: the first touch wins
        if not self.touches:
            return None
        x, y = self.touches[0]
        return Point(x, y)


Pointer = Union[MousePointer, TouchPointer]


@dataclass(frozen=True)
class SurfaceRect:
    """Bounding rectangle of the capture surface in client coordinates"""
    left: float = 0
    top: float = 0
    width: float = SIGNATURE_WIDTH
    height: float = SIGNATURE_HEIGHT

    def to_local(self, pointer: Pointer) -> Optional[Point]:
        position = pointer.client_position()
        if position is None:
            return None
        return Point(position.x - self.left, position.y - self.top)


# ---------- capture engine ----------

class CaptureState(str, Enum):
    IDLE = "idle"
    DRAWING = "drawing"


class SignaturePad:
    """Raster canvas with an Idle -> Drawing -> Idle state machine per stroke"""

    def __init__(
        self,
        width: int = SIGNATURE_WIDTH,
        height: int = SIGNATURE_HEIGHT,
        stroke_width: int = SIGNATURE_STROKE_WIDTH,
    ):
        self.width = int(width)
        self.height = int(height)
        self.stroke_width = max(1, int(stroke_width))
        self.state = CaptureState.IDLE
        self.has_ink = False
        self._last: Optional[Point] = None
        self._strokes: list[list[Point]] = []
        self._image = self._blank()
        self._draw = ImageDraw.Draw(self._image)

    def _blank(self) -> Image.Image:
        return Image.new("RGBA", (self.width, self.height), TRANSPARENT)

    @property
    def strokes(self) -> list[list[Point]]:
        """Recorded strokes, one point list per begin()"""
        return [list(s) for s in self._strokes]

    def begin(self, point: Point) -> None:
        """Open a new segment; nothing is drawn until extend()"""
        self.state = CaptureState.DRAWING
        self._last = point
        self._strokes.append([point])

    def extend(self, point: Point) -> None:
        if self.state is not CaptureState.DRAWING or self._last is None:
            return
        self._stroke(self._last, point)
        self._strokes[-1].append(point)
        self._last = point
        self.has_ink = True

    def end(self) -> None:
        self.state = CaptureState.IDLE
        self._last = None

    def clear(self) -> None:
        self._image = self._blank()
        self._draw = ImageDraw.Draw(self._image)
        self._strokes = []
        self._last = None
        self.state = CaptureState.IDLE
        self.has_ink = False

    def _stroke(self, start: Point, end: Point) -> None:
        segment = [(start.x, start.y), (end.x, end.y)]
        self._draw.line(segment, fill=INK, width=self.stroke_width)
        # round line caps
        if self.stroke_width > 1:
            r = self.stroke_width / 2
            for x, y in segment:
                self._draw.ellipse([x - r, y - r, x + r, y + r], fill=INK)

    def to_png(self) -> bytes:
        buf = io.BytesIO()
        self._image.save(buf, format="PNG")
        return buf.getvalue()

    def commit(self) -> str:
        """Encoded snapshot of the canvas as a PNG data URL; the canvas is kept

        Raises:
            NoSignatureError: nothing has been drawn since the last clear()
        """
        if not self.has_ink:
            raise NoSignatureError("draw a signature before saving")
        encoded = base64.b64encode(self.to_png()).decode("ascii")
        return f"data:image/png;base64,{encoded}"


class SignatureCapture:
    """Routes pointer events from any device to a SignaturePad"""

    def __init__(self, pad: SignaturePad, surface: Optional[SurfaceRect] = None):
        self.pad = pad
        self.surface = surface or SurfaceRect(width=pad.width, height=pad.height)

    def pointer_down(self, pointer: Pointer) -> None:
        point = self.surface.to_local(pointer)
        if point is not None:
            self.pad.begin(point)

    def pointer_move(self, pointer: Pointer) -> None:
        point = self.surface.to_local(pointer)
        if point is not None:
            self.pad.extend(point)

    def pointer_up(self) -> None:
        self.pad.end()

    # leaving the surface ends the stroke like a release
    pointer_leave = pointer_up

    def replay(self, events: Iterable[tuple[str, Optional[Pointer]]]) -> None:
        """Feed recorded ("down"|"move"|"up"|"leave", pointer) events in order"""
        for kind, pointer in events:
            if kind in ("up", "leave"):
                self.pointer_up()
            elif kind not in ("down", "move"):
                raise ValueError(f"unknown pointer event: {kind}")
            elif pointer is None:
                continue
            elif kind == "down":
                self.pointer_down(pointer)
            else:
                self.pointer_move(pointer)
