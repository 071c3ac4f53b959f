"""
Zoom / pan coordinate transform for rendering a clustering run.

Points handed out by the driver live in normalized data space ([0, 1] per
axis). A viewport of ``width x height`` pixels maps them to screen space by

    base   = (x * width, y * height)
    screen = (base - center) * zoom + center + pan

where ``center`` is the middle of the viewport. Only the first two
coordinates of n-D points are drawn.

The module-level functions are pure; ``ViewTransform`` holds the mutable
``ViewState`` that user interaction changes.
"""

from dataclasses import dataclass, field
from typing import NamedTuple, Optional, List, Union, Sequence
import torch
from torch import Tensor


# Drawn point radius (4 px) plus a 5 px grab margin
DEFAULT_HIT_RADIUS = 9.0
DEFAULT_MIN_ZOOM = 0.1
DEFAULT_MAX_ZOOM = 5.0
ZOOM_IN_FACTOR = 1.1
ZOOM_OUT_FACTOR = 0.9


class Point2D(NamedTuple):
    x: float
    y: float


@dataclass(frozen=True)
class Viewport:
    """Pixel size of the drawing surface."""

    width: float = 800.0
    height: float = 600.0

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Viewport must have positive size, got {self.width}x{self.height}")

    @property
    def center(self) -> Point2D:
        return Point2D(self.width / 2.0, self.height / 2.0)


@dataclass
class ViewState:
    """Current zoom factor and pan offset (in pixels)."""

    zoom: float = 1.0
    pan: Point2D = field(default_factory=lambda: Point2D(0.0, 0.0))

    def __post_init__(self):
        if not self.zoom > 0:
            raise ValueError(f"zoom must be positive, got {self.zoom}")
        self.pan = Point2D(float(self.pan[0]), float(self.pan[1]))


PointLike = Union[Point2D, Sequence[float], Tensor]


def _xy(point: PointLike) -> Point2D:
    if isinstance(point, Tensor):
        return Point2D(float(point[0].item()), float(point[1].item()))
    return Point2D(float(point[0]), float(point[1]))


def to_screen(point: PointLike, view: ViewState, viewport: Viewport) -> Point2D:
    """Map a normalized data point to screen pixels."""
    x, y = _xy(point)
    cx, cy = viewport.center
    return Point2D(
        (x * viewport.width - cx) * view.zoom + cx + view.pan.x,
        (y * viewport.height - cy) * view.zoom + cy + view.pan.y
    )


def to_data(screen_point: PointLike, view: ViewState, viewport: Viewport) -> Point2D:
    """Exact inverse of ``to_screen``."""
    sx, sy = _xy(screen_point)
    cx, cy = viewport.center
    return Point2D(
        ((sx - cx - view.pan.x) / view.zoom + cx) / viewport.width,
        ((sy - cy - view.pan.y) / view.zoom + cy) / viewport.height
    )


def points_to_screen(points: Tensor, view: ViewState, viewport: Viewport) -> Tensor:
    """Vectorized ``to_screen`` for a (n, d >= 2) point set.

    Returns:
        (n, 2) tensor of screen coordinates
    """
    points = torch.as_tensor(points, dtype=torch.float64)
    if points.dim() != 2 or points.shape[1] < 2:
        raise ValueError(f"Expected (n, d>=2) points, got shape {tuple(points.shape)}")

    size = torch.tensor([viewport.width, viewport.height], dtype=torch.float64)
    center = size / 2.0
    pan = torch.tensor([view.pan.x, view.pan.y], dtype=torch.float64)
    return (points[:, :2] * size - center) * view.zoom + center + pan


def hit_test(screen_point: PointLike, points: Tensor, view: ViewState,
             viewport: Viewport, radius: float = DEFAULT_HIT_RADIUS) -> Optional[int]:
    """Index of the first point drawn within ``radius`` pixels, or None.

    The lowest index wins when several points are in range.
    """
    points = torch.as_tensor(points, dtype=torch.float64)
    if points.shape[0] == 0:
        return None

    sx, sy = _xy(screen_point)
    screen = points_to_screen(points, view, viewport)
    target = torch.tensor([sx, sy], dtype=torch.float64)
    distances = torch.sqrt(torch.sum((screen - target) ** 2, dim=1))

    hits = torch.nonzero(distances <= radius).flatten()
    if len(hits) == 0:
        return None
    return int(hits[0].item())


def points_in_rectangle(start: PointLike, end: PointLike, points: Tensor,
                        view: ViewState, viewport: Viewport) -> List[int]:
    """Indices of points drawn inside the screen rectangle spanned by two corners."""
    points = torch.as_tensor(points, dtype=torch.float64)
    if points.shape[0] == 0:
        return []

    (x0, y0), (x1, y1) = _xy(start), _xy(end)
    screen = points_to_screen(points, view, viewport)
    inside = ((screen[:, 0] >= min(x0, x1)) & (screen[:, 0] <= max(x0, x1)) &
              (screen[:, 1] >= min(y0, y1)) & (screen[:, 1] <= max(y0, y1)))
    return torch.nonzero(inside).flatten().tolist()


class ViewTransform:
    """Interactive zoom / pan state over a fixed viewport.

    Zooming keeps the data point under the anchor (usually the cursor)
    fixed on screen. With the anchor ``a`` measured from the viewport
    center ``c``, the pan becomes

        pan' = (a - c) - ((a - c) - pan) * (zoom' / zoom)
    """

    def __init__(self, viewport: Optional[Viewport] = None,
                 min_zoom: float = DEFAULT_MIN_ZOOM,
                 max_zoom: float = DEFAULT_MAX_ZOOM):
        if not 0 < min_zoom <= 1.0 <= max_zoom:
            raise ValueError(f"Zoom limits must satisfy 0 < min_zoom <= 1 <= max_zoom, "
                             f"got [{min_zoom}, {max_zoom}]")
        self.viewport = viewport if viewport is not None else Viewport()
        self.min_zoom = min_zoom
        self.max_zoom = max_zoom
        self.state = ViewState()

    @property
    def zoom(self) -> float:
        return self.state.zoom

    @property
    def pan_offset(self) -> Point2D:
        return self.state.pan

    def to_screen(self, point: PointLike) -> Point2D:
        return to_screen(point, self.state, self.viewport)

    def to_data(self, screen_point: PointLike) -> Point2D:
        return to_data(screen_point, self.state, self.viewport)

    def points_to_screen(self, points: Tensor) -> Tensor:
        return points_to_screen(points, self.state, self.viewport)

    def hit_test(self, screen_point: PointLike, points: Tensor,
                 radius: float = DEFAULT_HIT_RADIUS) -> Optional[int]:
        return hit_test(screen_point, points, self.state, self.viewport, radius)

    def points_in_rectangle(self, start: PointLike, end: PointLike,
                            points: Tensor) -> List[int]:
        return points_in_rectangle(start, end, points, self.state, self.viewport)

    def set_zoom(self, factor: float, anchor: Optional[PointLike] = None) -> float:
        """Multiply the zoom by ``factor`` around a screen anchor.

        The result is clamped to [min_zoom, max_zoom]. Without an anchor the
        viewport center stays fixed.

        Returns:
            The new zoom
        """
        if not factor > 0:
            raise ValueError(f"Zoom factor must be positive, got {factor}")
        return self.zoom_to(self.state.zoom * factor, anchor)

    def zoom_to(self, zoom: float, anchor: Optional[PointLike] = None) -> float:
        """Set an absolute zoom level around a screen anchor."""
        if not zoom > 0:
            raise ValueError(f"zoom must be positive, got {zoom}")

        new_zoom = max(self.min_zoom, min(self.max_zoom, zoom))
        ratio = new_zoom / self.state.zoom

        cx, cy = self.viewport.center
        ax, ay = _xy(anchor) if anchor is not None else (cx, cy)
        offset_x, offset_y = ax - cx, ay - cy
        pan = self.state.pan

        self.state = ViewState(
            zoom=new_zoom,
            pan=Point2D(offset_x - (offset_x - pan.x) * ratio,
                        offset_y - (offset_y - pan.y) * ratio)
        )
        return new_zoom

    def zoom_in(self, anchor: Optional[PointLike] = None) -> float:
        return self.set_zoom(ZOOM_IN_FACTOR, anchor)

    def zoom_out(self, anchor: Optional[PointLike] = None) -> float:
        return self.set_zoom(ZOOM_OUT_FACTOR, anchor)

    def pan(self, dx: float, dy: float) -> Point2D:
        """Shift the view by (dx, dy) screen pixels."""
        pan = self.state.pan
        self.state = ViewState(zoom=self.state.zoom,
                               pan=Point2D(pan.x + dx, pan.y + dy))
        return self.state.pan

    def reset(self) -> None:
        """Back to zoom 1 and no pan."""
        self.state = ViewState()
