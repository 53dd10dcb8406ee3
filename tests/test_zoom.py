import random

import pytest

from image_browser.app.zoom import ZoomRange, percent_to_factor


def test_zoom_in_and_out_clamp_to_bounds():
    zr = ZoomRange()
    p = zr.baseline
    for _ in range(20):
        p = zr.zoom_in(p)
    assert p == 300
    for _ in range(20):
        p = zr.zoom_out(p)
    assert p == 50


def test_zoom_steps_are_exact_integers():
    zr = ZoomRange()
    assert zr.zoom_in(100) == 120
    assert zr.zoom_in(zr.zoom_in(zr.zoom_in(100))) == 160
    assert zr.zoom_out(100) == 80
    assert zr.zoom_out(60) == 50
    assert zr.zoom_in(290) == 300


def test_random_walk_stays_on_reachable_levels():
    zr = ZoomRange()
    reachable = set(range(50, 301, 20)) | set(range(60, 301, 20)) | {300}
    rng = random.Random(1234)
    p = zr.baseline
    for _ in range(2000):
        p = zr.zoom_in(p) if rng.random() < 0.5 else zr.zoom_out(p)
        assert isinstance(p, int)
        assert 50 <= p <= 300
        assert p in reachable


def test_reset_and_clamp():
    zr = ZoomRange()
    assert zr.reset() == 100
    assert zr.clamp(10) == 50
    assert zr.clamp(1000) == 300
    assert percent_to_factor(160) == pytest.approx(1.6)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"step": 0},
        {"minimum": 0},
        {"minimum": 150},
        {"maximum": 90},
    ],
)
def test_invalid_ranges_are_rejected(kwargs):
    with pytest.raises(ValueError):
        ZoomRange(**kwargs)
