"""
Tests for logical-to-display viewport mapping.
"""

import math

import pytest

from chroma_rush.core.config_loader import load_config
from chroma_rush.core.scheduler import FrameScheduler
from chroma_rush.core.viewport import DeviceClass, ResizeDebouncer, ViewportMapper


class FakeClock:
    def __init__(self):
        self.t = 0.0

    def __call__(self):
        return self.t


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def mapper(config):
    return ViewportMapper(config)


class TestFit:
    """Display sizing."""

    def test_1024_by_768(self, mapper):
        vp = mapper.resolve(1024, 768)
        assert vp.display_width == pytest.approx(1003.52)
        assert vp.display_height == pytest.approx(752.64)
        assert vp.display_width / vp.display_height == pytest.approx(4 / 3)
        assert vp.device_class is DeviceClass.TABLET
        assert vp.player_radius == 28

    def test_tall_container_fits_width(self, mapper):
        w, h = mapper.fit(500, 2000)
        assert w == pytest.approx(490)
        assert h == pytest.approx(490 * 0.75)

    def test_wide_container_fits_height(self, mapper):
        w, h = mapper.fit(2000, 500)
        assert h == pytest.approx(490)
        assert w == pytest.approx(490 * 4 / 3)

    def test_upscale_capped(self, mapper):
        vp = mapper.resolve(4000, 3000)
        assert vp.display_width == pytest.approx(1200)
        assert vp.display_height == pytest.approx(900)
        assert vp.device_class is DeviceClass.DESKTOP

    @pytest.mark.parametrize("w,h", [(0, 0), (-100, 300), (float("nan"), 600), (800, float("inf"))])
    def test_degenerate_container(self, mapper, w, h):
        vp = mapper.resolve(w, h)
        assert vp.display_width == pytest.approx(160)
        assert vp.display_height == pytest.approx(120)
        assert vp.device_class is DeviceClass.SMALL_MOBILE
        assert math.isfinite(vp.scale_x)

    @pytest.mark.parametrize("w,h", [(1000, 50), (50, 1000), (100, 75)])
    def test_small_container_not_overflowed(self, mapper, w, h):
        vp = mapper.resolve(w, h)
        assert 0 < vp.display_width <= w
        assert 0 < vp.display_height <= h
        assert vp.display_width / vp.display_height == pytest.approx(4 / 3)

    def test_subpixel_container_clamped(self, mapper):
        vp = mapper.resolve(5e-324, 5e-324)
        assert vp.display_width == pytest.approx(160)
        assert math.isfinite(vp.scale_x)

    def test_idempotent(self, mapper):
        assert mapper.resolve(1366, 768) == mapper.resolve(1366, 768)

    def test_scale_is_logical_over_display(self, mapper):
        vp = mapper.resolve(408, 306)
        assert vp.display_width == pytest.approx(399.84)
        assert vp.scale_x == pytest.approx(800 / 399.84)
        assert vp.to_display(800, 600) == pytest.approx((vp.display_width, vp.display_height))


class TestDeviceClass:
    """Threshold classification."""

    @pytest.mark.parametrize("width,expected,radius,hud,menu,over,mobile", [
        (1024, DeviceClass.DESKTOP, 30, 40, 60, 60, False),
        (1023.9, DeviceClass.TABLET, 28, 36, 52, 56, False),
        (768, DeviceClass.TABLET, 28, 36, 52, 56, False),
        (480, DeviceClass.LARGE_MOBILE, 26, 32, 48, 52, True),
        (479, DeviceClass.SMALL_MOBILE, 24, 28, 42, 48, True),
    ])
    def test_thresholds(self, mapper, width, expected, radius, hud, menu, over, mobile):
        device = mapper.classify(width)
        assert DeviceClass(device.name) is expected
        assert device.player_radius == radius
        assert (device.hud_font_size, device.menu_font_size, device.game_over_font_size) == (hud, menu, over)
        assert device.mobile is mobile


class TestResizeDebouncer:
    """Resize coalescing."""

    def test_burst_produces_one_recompute(self, mapper):
        clock = FakeClock()
        scheduler = FrameScheduler(now_fn=clock)
        seen = []
        resizer = ResizeDebouncer(mapper, scheduler, seen.append)

        resizer.trigger(500, 400)
        clock.t = 0.05
        resizer.trigger(700, 500)
        clock.t = 0.1
        scheduler.run_due()
        assert seen == []
        assert resizer.pending

        clock.t = 0.2
        scheduler.run_due()
        assert len(seen) == 1
        assert seen[0] == mapper.resolve(700, 500)
        assert not resizer.pending

    def test_cancel(self, mapper):
        clock = FakeClock()
        scheduler = FrameScheduler(now_fn=clock)
        seen = []
        resizer = ResizeDebouncer(mapper, scheduler, seen.append)
        resizer.trigger(500, 400)
        assert resizer.cancel()
        clock.t = 1.0
        scheduler.run_due()
        assert seen == []
