"""Recording of a single freehand pointer gesture on the drawing canvas."""

from paramsurf.config import MIN_STROKE_SPACING_SQ


class StrokeRecorder:
    """Collects pointer samples for one gesture.

    A new gesture discards the previous samples. Moves are recorded only
    while drawing and only when at least 1 px away from the last sample.
    """

    def __init__(self):
        self._points: list[tuple[float, float]] = []
        self.drawing = False

    @property
    def points(self) -> tuple[tuple[float, float], ...]:
        return tuple(self._points)

    def __len__(self) -> int:
        return len(self._points)

    def begin(self, x: float, y: float):
        self._points = [(float(x), float(y))]
        self.drawing = True

    def extend(self, x: float, y: float) -> bool:
        """Append a sample; returns False when it was skipped."""
        if not self.drawing:
            return False
        last_x, last_y = self._points[-1]
        dx = x - last_x
        dy = y - last_y
        if dx * dx + dy * dy < MIN_STROKE_SPACING_SQ:
            return False
        self._points.append((float(x), float(y)))
        return True

    def finish(self):
        self.drawing = False

    def clear(self):
        self._points = []
        self.drawing = False
