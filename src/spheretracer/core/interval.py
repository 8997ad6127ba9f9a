"""Closed and open numeric ranges.

An Interval is used both as the search window for ray parameters (where the
open "surrounds" test keeps hits away from t = 0) and for clamping color
channels before quantization.

Example:
    >>> # Inside a Taichi kernel:
    >>> # ray_t = make_interval(0.001, tm.inf)
    >>> # if interval_surrounds(ray_t, t): ...
"""

import taichi as ti
import taichi.math as tm


@ti.dataclass
class Interval:
    """A numeric range [lo, hi].

    Attributes:
        lo: Lower bound.
        hi: Upper bound. lo <= hi in normal use; the empty interval has
            lo = +inf and hi = -inf.
    """

    lo: ti.f32
    hi: ti.f32


@ti.func
def make_interval(lo: ti.f32, hi: ti.f32) -> Interval:
    """Create an interval from its bounds."""
    return Interval(lo=lo, hi=hi)


@ti.func
def empty_interval() -> Interval:
    """Interval containing nothing (+inf, -inf)."""
    return Interval(lo=tm.inf, hi=-tm.inf)


@ti.func
def universe_interval() -> Interval:
    """Interval containing every value (-inf, +inf)."""
    return Interval(lo=-tm.inf, hi=tm.inf)


@ti.func
def interval_size(interval: Interval) -> ti.f32:
    """Width of the interval (negative for the empty interval)."""
    return interval.hi - interval.lo


@ti.func
def interval_contains(interval: Interval, x: ti.f32) -> ti.i32:
    """Closed containment: lo <= x <= hi."""
    return interval.lo <= x and x <= interval.hi


@ti.func
def interval_surrounds(interval: Interval, x: ti.f32) -> ti.i32:
    """Open containment: lo < x < hi."""
    return interval.lo < x and x < interval.hi


@ti.func
def interval_clamp(interval: Interval, x: ti.f32) -> ti.f32:
    """Clamp x into [lo, hi]."""
    result = x
    if x < interval.lo:
        result = interval.lo
    if x > interval.hi:
        result = interval.hi
    return result
