"""Unit tests for the interval module."""

import math

import taichi as ti


class TestIntervalQueries:
    """Tests for containment, size and clamping."""

    def test_contains_is_closed(self):
        """Test interval_contains includes both endpoints."""
        from src.spheretracer.core.interval import interval_contains, make_interval

        result = ti.field(dtype=ti.i32, shape=4)

        @ti.kernel
        def test_kernel():
            interval = make_interval(1.0, 2.0)
            result[0] = interval_contains(interval, 1.0)
            result[1] = interval_contains(interval, 2.0)
            result[2] = interval_contains(interval, 1.5)
            result[3] = interval_contains(interval, 2.5)

        test_kernel()
        assert [result[i] for i in range(4)] == [1, 1, 1, 0]

    def test_surrounds_is_open(self):
        """Test interval_surrounds excludes both endpoints."""
        from src.spheretracer.core.interval import interval_surrounds, make_interval

        result = ti.field(dtype=ti.i32, shape=3)

        @ti.kernel
        def test_kernel():
            interval = make_interval(1.0, 2.0)
            result[0] = interval_surrounds(interval, 1.0)
            result[1] = interval_surrounds(interval, 2.0)
            result[2] = interval_surrounds(interval, 1.5)

        test_kernel()
        assert [result[i] for i in range(3)] == [0, 0, 1]

    def test_size(self):
        """Test interval_size is hi - lo."""
        from src.spheretracer.core.interval import interval_size, make_interval

        result = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = interval_size(make_interval(-1.0, 2.5))

        test_kernel()
        assert abs(result[None] - 3.5) < 1e-6

    def test_clamp(self):
        """Test interval_clamp maps values into [lo, hi]."""
        from src.spheretracer.core.interval import interval_clamp, make_interval

        result = ti.field(dtype=ti.f32, shape=3)

        @ti.kernel
        def test_kernel():
            interval = make_interval(0.0, 0.999)
            result[0] = interval_clamp(interval, -0.5)
            result[1] = interval_clamp(interval, 0.25)
            result[2] = interval_clamp(interval, 3.0)

        test_kernel()
        assert abs(result[0] - 0.0) < 1e-6
        assert abs(result[1] - 0.25) < 1e-6
        assert abs(result[2] - 0.999) < 1e-6


class TestSpecialIntervals:
    """Tests for the empty and universe intervals."""

    def test_empty_contains_nothing(self):
        """Test the empty interval contains no value and has negative size."""
        from src.spheretracer.core.interval import empty_interval, interval_contains, interval_size

        contains = ti.field(dtype=ti.i32, shape=())
        size = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            interval = empty_interval()
            contains[None] = interval_contains(interval, 0.0)
            size[None] = interval_size(interval)

        test_kernel()
        assert contains[None] == 0
        assert math.isinf(size[None]) and size[None] < 0

    def test_universe_contains_everything(self):
        """Test the universe interval surrounds any finite value."""
        from src.spheretracer.core.interval import interval_surrounds, universe_interval

        result = ti.field(dtype=ti.i32, shape=2)

        @ti.kernel
        def test_kernel():
            interval = universe_interval()
            result[0] = interval_surrounds(interval, -1e30)
            result[1] = interval_surrounds(interval, 1e30)

        test_kernel()
        assert result[0] == 1
        assert result[1] == 1
