"""
View transform: screen mapping, inverse, hit testing and anchored zoom.
"""

from __future__ import annotations

import pytest

try:
    import torch
except Exception:  # pragma: no cover
    torch = None  # type: ignore

from kstep.view import (
    Point2D,
    Viewport,
    ViewState,
    ViewTransform,
    to_screen,
    to_data,
    hit_test,
    points_in_rectangle,
    points_to_screen,
)


pytestmark = pytest.mark.skipif(torch is None, reason="PyTorch is required for these tests")


def test_identity_view_scales_to_viewport():
    viewport = Viewport(800, 600)
    view = ViewState()
    assert to_screen((0.0, 0.0), view, viewport) == Point2D(0.0, 0.0)
    assert to_screen((1.0, 1.0), view, viewport) == Point2D(800.0, 600.0)
    assert to_screen((0.5, 0.5), view, viewport) == Point2D(400.0, 300.0)


def test_zoom_scales_around_viewport_center():
    viewport = Viewport(800, 600)
    view = ViewState(zoom=2.0, pan=(10.0, -5.0))
    x, y = to_screen((0.75, 0.25), view, viewport)
    # base (600, 150); ((600 - 400) * 2 + 400 + 10, (150 - 300) * 2 + 300 - 5)
    assert x == pytest.approx(810.0)
    assert y == pytest.approx(-5.0)


@pytest.mark.parametrize("zoom", [0.1, 0.37, 1.0, 2.5, 5.0])
@pytest.mark.parametrize("pan", [(0.0, 0.0), (-123.4, 56.7), (1e3, -1e3)])
@pytest.mark.parametrize("size", [(800, 600), (1, 1), (1920, 1080)])
def test_round_trip(rng, zoom, pan, size):
    viewport = Viewport(*size)
    view = ViewState(zoom=zoom, pan=pan)
    for p in rng.uniform(-0.5, 1.5, size=(10, 2)):
        back = to_data(to_screen(p, view, viewport), view, viewport)
        assert back.x == pytest.approx(p[0], abs=1e-9)
        assert back.y == pytest.approx(p[1], abs=1e-9)


def test_vectorized_mapping_matches_scalar(rng):
    viewport = Viewport(640, 480)
    view = ViewState(zoom=1.7, pan=(12.0, 3.0))
    points = torch.tensor(rng.uniform(size=(6, 3)))
    screen = points_to_screen(points, view, viewport)
    assert screen.shape == (6, 2)
    for p, s in zip(points, screen):
        x, y = to_screen(p, view, viewport)
        assert s[0].item() == pytest.approx(x)
        assert s[1].item() == pytest.approx(y)


def test_hit_test_returns_lowest_index():
    viewport = Viewport(100, 100)
    view = ViewState()
    points = torch.tensor([[0.9, 0.9], [0.5, 0.5], [0.52, 0.5], [0.5, 0.5]],
                          dtype=torch.float64)

    assert hit_test((50.0, 50.0), points, view, viewport) == 1
    assert hit_test((52.0, 50.0), points, view, viewport) == 1
    assert hit_test((52.0, 50.0), points, view, viewport, radius=0.5) == 2
    assert hit_test((10.0, 10.0), points, view, viewport) is None


def test_hit_test_boundary_and_empty():
    viewport = Viewport(100, 100)
    points = torch.tensor([[0.0, 0.0]], dtype=torch.float64)
    assert hit_test((9.0, 0.0), points, ViewState(), viewport) == 0
    assert hit_test((9.5, 0.0), points, ViewState(), viewport) is None
    assert hit_test((0.0, 0.0), torch.zeros(0, 2), ViewState(), viewport) is None


def test_points_in_rectangle():
    viewport = Viewport(100, 100)
    points = torch.tensor([[0.1, 0.1], [0.5, 0.5], [0.9, 0.2]], dtype=torch.float64)
    # Corners in either order
    assert points_in_rectangle((60.0, 60.0), (0.0, 0.0), points, ViewState(), viewport) == [0, 1]
    assert points_in_rectangle((0.0, 0.0), (5.0, 5.0), points, ViewState(), viewport) == []


def test_view_state_rejects_non_positive_zoom():
    with pytest.raises(ValueError):
        ViewState(zoom=0.0)
    with pytest.raises(ValueError):
        Viewport(0, 100)


# ----------------------------
# ViewTransform
# ----------------------------

@pytest.mark.parametrize("factor", [1.1, 0.9, 2.0, 0.5, 1.0])
@pytest.mark.parametrize("cursor", [(400.0, 300.0), (0.0, 0.0), (731.0, 12.5), (-40.0, 900.0)])
def test_zoom_keeps_data_under_cursor(factor, cursor):
    view = ViewTransform(Viewport(800, 600))
    view.pan(35.0, -20.0)
    view.set_zoom(1.3, (100.0, 200.0))

    before = view.to_data(cursor)
    view.set_zoom(factor, cursor)
    after = view.to_data(cursor)

    assert after.x == pytest.approx(before.x, abs=1e-12)
    assert after.y == pytest.approx(before.y, abs=1e-12)


def test_zoom_is_clamped():
    view = ViewTransform()
    for _ in range(50):
        view.zoom_in((10.0, 10.0))
    assert view.zoom == pytest.approx(5.0)

    before = view.to_data((10.0, 10.0))
    view.zoom_in((10.0, 10.0))
    assert view.zoom == pytest.approx(5.0)
    assert view.to_data((10.0, 10.0)).x == pytest.approx(before.x)

    for _ in range(100):
        view.zoom_out()
    assert view.zoom == pytest.approx(0.1)


def test_zoom_without_anchor_keeps_center():
    view = ViewTransform(Viewport(800, 600))
    view.pan(50.0, 50.0)
    center_data = view.to_data((400.0, 300.0))
    view.set_zoom(2.0)
    assert view.zoom == pytest.approx(2.0)
    assert view.to_data((400.0, 300.0)).x == pytest.approx(center_data.x)
    assert view.to_data((400.0, 300.0)).y == pytest.approx(center_data.y)


def test_zoom_to_absolute_level():
    view = ViewTransform()
    view.zoom_to(3.0)
    view.zoom_to(2.0)
    assert view.zoom == pytest.approx(2.0)
    with pytest.raises(ValueError):
        view.set_zoom(0.0)


def test_pan_shifts_screen_positions():
    view = ViewTransform(Viewport(800, 600))
    before = view.to_screen((0.25, 0.75))
    view.pan(15.0, -30.0)
    after = view.to_screen((0.25, 0.75))
    assert after.x - before.x == pytest.approx(15.0)
    assert after.y - before.y == pytest.approx(-30.0)
    assert view.pan_offset == Point2D(15.0, -30.0)


def test_reset_restores_identity():
    view = ViewTransform(Viewport(800, 600))
    view.pan(10.0, 10.0)
    view.zoom_in((5.0, 5.0))
    view.reset()
    assert view.zoom == 1.0
    assert view.pan_offset == Point2D(0.0, 0.0)
    assert view.to_screen((1.0, 1.0)) == Point2D(800.0, 600.0)


def test_transform_hit_test_follows_zoom():
    view = ViewTransform(Viewport(100, 100))
    points = torch.tensor([[0.5, 0.5], [0.6, 0.5]], dtype=torch.float64)
    # 10 px apart at zoom 1: the cursor between them hits the first
    assert view.hit_test((55.0, 50.0), points) == 0
    # Zoomed in around the second point, the first moves out of range
    view.zoom_to(4.0, (60.0, 50.0))
    assert view.hit_test((60.0, 50.0), points) == 1
    assert view.points_in_rectangle((55.0, 45.0), (65.0, 55.0), points) == [1]


def test_invalid_zoom_limits():
    with pytest.raises(ValueError):
        ViewTransform(min_zoom=2.0)
